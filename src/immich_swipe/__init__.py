"""Immich swipe: review a remote Immich library one asset at a time."""

__version__ = "0.1.0"
