"""CLI/bootstrap helpers for the Immich swipe reviewer."""

from __future__ import annotations

import argparse
import logging
import logging.handlers
import sys
from collections.abc import Callable
from pathlib import Path
from typing import Any

from platformdirs import user_config_dir

from immich_swipe.action_messages import build_actionable_error
from immich_swipe.config import (
    CONFIG_APP_NAME,
    clear_credentials,
    load_config,
    save_config,
    set_credentials,
)
from immich_swipe.models import REVIEW_ORDERS, UserConfig
from immich_swipe.services.immich_api_service import ImmichConfigError, ImmichConnection

logger = logging.getLogger(__name__)


def _configure_logging(debug: bool) -> None:
    """Configure logging. When debug=True, logs to file at DEBUG level."""
    if not debug:
        # Default: suppress all logging (TUI captures stderr)
        logging.disable(logging.CRITICAL)
        return

    log_dir = Path(user_config_dir(CONFIG_APP_NAME))
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / "debug.log"

    handler = logging.handlers.RotatingFileHandler(
        log_file,
        maxBytes=5 * 1024 * 1024,
        backupCount=3,
        encoding="utf-8",
    )
    handler.setFormatter(
        logging.Formatter(
            "%(asctime)s %(name)s %(levelname)s %(message)s",
            datefmt="%H:%M:%S",
        )
    )
    logging.root.addHandler(handler)
    logging.root.setLevel(logging.DEBUG)


def _validate_interactive_tty() -> bool:
    """Return True when stdin/stdout are interactive terminals."""
    return bool(sys.stdin.isatty() and sys.stdout.isatty())


def _apply_overrides(args: argparse.Namespace, config: UserConfig) -> bool:
    """Apply command-line overrides to the config. Returns True if anything changed."""
    changed = False
    if args.server is not None or args.api_key is not None:
        set_credentials(
            config,
            args.server if args.server is not None else config.server_url,
            args.api_key if args.api_key is not None else config.api_key,
        )
        changed = True
    if args.order is not None and args.order != config.review_order:
        config.review_order = args.order
        changed = True
    if args.skip_videos is not None and args.skip_videos != config.skip_videos:
        config.skip_videos = args.skip_videos
        changed = True
    return changed


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Review your Immich library one photo at a time: keep, delete, undo"
    )
    parser.add_argument(
        "--server",
        type=str,
        default=None,
        help="Immich server URL, e.g. https://photos.example.com (saved for next time)",
    )
    parser.add_argument(
        "--api-key",
        type=str,
        default=None,
        help="Immich API key (saved for next time)",
    )
    parser.add_argument(
        "--order",
        choices=REVIEW_ORDERS,
        default=None,
        help="Review order: random, chronological-asc or chronological-desc",
    )
    parser.add_argument(
        "--skip-videos",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Skip video assets while reviewing",
    )
    parser.add_argument(
        "--logout",
        action="store_true",
        help="Forget the saved server URL and API key, then exit",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging to file (~/.config/immich-swipe/debug.log)",
    )
    return parser


def main(
    argv: list[str] | None = None,
    *,
    load_config_fn: Callable[[], UserConfig] = load_config,
    save_config_fn: Callable[[UserConfig], bool] = save_config,
    configure_logging_fn: Callable[[bool], None] = _configure_logging,
    validate_interactive_tty_fn: Callable[[], bool] = _validate_interactive_tty,
    app_factory: Callable[..., Any] | None = None,
) -> int:
    """Main entry point. Returns exit code."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging_fn(args.debug)
    logger.debug("immich-swipe starting")

    config = load_config_fn()

    if args.logout:
        clear_credentials(config)
        if not save_config_fn(config):
            print(
                build_actionable_error(
                    "log out",
                    why="the config file could not be written",
                    next_step="check permissions on the immich-swipe config directory",
                ),
                file=sys.stderr,
            )
            return 1
        print("Logged out. Saved server URL and API key were removed.")
        return 0

    if _apply_overrides(args, config) and not save_config_fn(config):
        logger.warning("Could not persist command-line settings")

    connection = ImmichConnection(config.server_url, config.api_key)
    try:
        connection.require()
    except ImmichConfigError as e:
        print(
            build_actionable_error(
                "connect to Immich",
                why=str(e),
                next_step="run immich-swipe --server URL --api-key KEY",
            ),
            file=sys.stderr,
        )
        return 1

    if not validate_interactive_tty_fn():
        print(
            "Error: immich-swipe requires an interactive TTY for the full UI.",
            file=sys.stderr,
        )
        print("Next steps:", file=sys.stderr)
        print("  - Run immich-swipe directly in a terminal session", file=sys.stderr)
        print("  - Use --logout for non-interactive credential cleanup", file=sys.stderr)
        print("  - Use --help for command documentation", file=sys.stderr)
        return 2

    if app_factory is None:
        from immich_swipe.app import ImmichSwipeApp as _ImmichSwipeApp

        app_factory = _ImmichSwipeApp

    app = app_factory(config=config, connection=connection)
    app.run()
    return 0


__all__ = [
    "_apply_overrides",
    "_configure_logging",
    "_validate_interactive_tty",
    "main",
]
