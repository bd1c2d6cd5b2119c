"""Allow ``python -m immich_swipe``."""

import sys

from immich_swipe.cli import main

sys.exit(main())
