"""CLI commands - thin wrappers wiring settings, display and the pipeline."""

from __future__ import annotations

import asyncio
import signal
from typing import Optional

import typer
from pydantic import ValidationError
from rich.markup import escape
from rich.table import Table

from ..config import Settings, SourceConfig
from ..pipeline import (
    AssetPoolExhausted,
    ConfigurationError,
    NoEligiblePosts,
    PipelineDisplay,
    PipelineOrchestrator,
    Post,
    ProviderError,
    RunReport,
    VideoAssetPool,
    select_posts,
)
from .console import console, print_error, print_success

EXIT_CONFIG = 1
EXIT_NO_POSTS = 1
EXIT_POOL_EXHAUSTED = 2


def load_settings(
    subreddit: Optional[str] = None,
    count: Optional[int] = None,
) -> Settings:
    """Load settings from the environment and apply CLI overrides.

    Raises:
        typer.Exit: If the settings do not validate.
    """
    try:
        settings = Settings()
        overrides = {}
        if subreddit:
            overrides["subreddit"] = subreddit
        if count is not None:
            overrides["post_count"] = count
        if overrides:
            settings.source = SourceConfig(**{**settings.source.model_dump(), **overrides})
    except ValidationError as e:
        print_error("Invalid configuration", {
            ".".join(str(part) for part in err["loc"]): err["msg"] for err in e.errors()
        })
        raise typer.Exit(EXIT_CONFIG)
    return settings


def _install_cancel_handlers(cancel_event: asyncio.Event) -> None:
    """Set the cancel event on SIGINT / SIGTERM where the loop supports it."""
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, cancel_event.set)
        except NotImplementedError:
            pass  # Windows event loops have no signal handlers


async def _run_pipeline(orchestrator: PipelineOrchestrator) -> RunReport:
    cancel_event = asyncio.Event()
    _install_cancel_handlers(cancel_event)
    try:
        return await orchestrator.run(cancel_event=cancel_event)
    finally:
        await orchestrator.close()


async def _preview_posts(settings: Settings) -> list[Post]:
    from ..providers import RedditPostSource

    source = RedditPostSource.from_settings(settings)
    try:
        posts = await source.fetch(
            settings.source.subreddit,
            settings.source.sort,
            settings.source.time_window,
            settings.source.limit,
        )
    finally:
        await source.close()
    return select_posts(
        posts,
        min_length=settings.source.min_length,
        max_length=settings.source.max_length,
        count=settings.source.post_count,
        reverse=settings.source.reverse,
    )


async def _list_videos(settings: Settings) -> VideoAssetPool:
    from ..providers import CloudinaryAssetStore

    store = CloudinaryAssetStore.from_settings(settings)
    return await VideoAssetPool.from_store(
        store,
        settings.storage.video_bucket,
        settings.storage.video_extensions,
    )


def run(
    subreddit: Optional[str] = typer.Option(None, "--subreddit", "-s", help="Subreddit to read (overrides SOURCE__SUBREDDIT)"),
    count: Optional[int] = typer.Option(None, "--count", "-n", help="Number of posts to narrate"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Only fetch and select posts"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show detailed progress"),
) -> None:
    """Narrate Reddit posts into shorts and post each part to Discord.

    Press Ctrl+C to stop after the chunk in progress.
    """
    settings = load_settings(subreddit, count)

    if dry_run:
        try:
            posts = asyncio.run(_preview_posts(settings))
        except ConfigurationError as e:
            print_error(str(e))
            raise typer.Exit(EXIT_CONFIG)
        except NoEligiblePosts as e:
            print_error(str(e))
            raise typer.Exit(EXIT_NO_POSTS)
        except ProviderError as e:
            print_error(str(e))
            raise typer.Exit(EXIT_CONFIG)

        table = Table(title=f"r/{settings.source.subreddit} ({settings.source.sort})")
        table.add_column("#", justify="right")
        table.add_column("Title", style="bold")
        table.add_column("Chars", justify="right")
        for i, post in enumerate(posts, start=1):
            table.add_row(str(i), escape(post.title), str(len(post.text)))
        console.print(table)
        return

    display = PipelineDisplay(console=console, verbose=verbose)
    try:
        orchestrator = PipelineOrchestrator.from_settings(settings, display)
    except ConfigurationError as e:
        print_error(str(e))
        raise typer.Exit(EXIT_CONFIG)

    try:
        report = asyncio.run(_run_pipeline(orchestrator))
    except NoEligiblePosts as e:
        print_error(str(e))
        raise typer.Exit(EXIT_NO_POSTS)
    except AssetPoolExhausted as e:
        print_error(str(e), {"bucket": settings.storage.video_bucket})
        raise typer.Exit(EXIT_POOL_EXHAUSTED)
    except ProviderError as e:
        print_error(str(e))
        raise typer.Exit(EXIT_CONFIG)

    display.show_report(report)


def videos() -> None:
    """List the background videos currently available."""
    settings = load_settings()
    try:
        pool = asyncio.run(_list_videos(settings))
    except ConfigurationError as e:
        print_error(str(e))
        raise typer.Exit(EXIT_CONFIG)
    except ProviderError as e:
        print_error(str(e))
        raise typer.Exit(EXIT_CONFIG)

    table = Table(title=f"Background videos ({settings.storage.video_bucket})")
    table.add_column("Key", style="bold")
    table.add_column("URL", overflow="fold")
    for asset in pool:
        table.add_row(asset.key, asset.url)
    console.print(table)
    print_success(f"{len(pool)} video(s) available")


def config() -> None:
    """Show the effective configuration (secrets excluded)."""
    settings = load_settings()
    console.print_json(data=settings.public_dump())
