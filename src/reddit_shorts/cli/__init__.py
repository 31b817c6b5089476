"""Command line interface for Reddit Shorts.

Usage:
    reddit-shorts --help
    reddit-shorts run
    reddit-shorts run --dry-run
    reddit-shorts videos
    reddit-shorts config
"""

from .app import app, main

__all__ = ["app", "main"]
