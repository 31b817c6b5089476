"""Typer app configuration and logging setup."""

from __future__ import annotations

import logging
from pathlib import Path

import typer
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

app = typer.Typer(
    name="reddit-shorts",
    help="Turn Reddit stories into captioned vertical shorts",
    add_completion=False,
)


def register_commands() -> None:
    """Register all commands."""
    from .commands import config, run, videos

    app.command(name="run")(run)
    app.command(name="videos")(videos)
    app.command(name="config")(config)


def setup_logging(log_dir: Path = Path("logs")) -> None:
    """Configure logging for CLI.

    - Suppresses console output from libraries
    - Sends provider API calls to logs/api.log
    """
    log_dir.mkdir(parents=True, exist_ok=True)

    root_logger = logging.getLogger()
    root_logger.handlers = []
    root_logger.setLevel(logging.CRITICAL)

    for logger_name in ["httpx", "httpcore", "asyncio", "asyncprawcore", "openai"]:
        logger = logging.getLogger(logger_name)
        logger.setLevel(logging.WARNING)
        logger.propagate = False

    api_logger = logging.getLogger("reddit_shorts.api")
    api_logger.setLevel(logging.DEBUG)
    api_logger.propagate = False
    api_logger.handlers = []
    api_handler = logging.FileHandler(log_dir / "api.log", encoding="utf-8")
    api_handler.setFormatter(
        logging.Formatter("%(asctime)s | %(levelname)s | %(message)s")
    )
    api_logger.addHandler(api_handler)


register_commands()


def main() -> None:
    """CLI entry point."""
    setup_logging()
    app()
