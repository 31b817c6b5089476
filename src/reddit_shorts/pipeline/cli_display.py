"""Clean CLI display system for the shorts pipeline.

Provides:
- Clean console output with only important milestones
- Detailed file logging for debugging
- A summary table of every chunk at the end of a run
"""

import logging
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .base import ChunkStatus, RunReport


class LogLevel(Enum):
    """Log levels for CLI display."""
    DEBUG = "debug"      # Only to file
    DETAIL = "detail"    # Only to file (verbose progress)
    INFO = "info"        # Console + file
    STEP = "step"        # Console + file (step headers)
    SUCCESS = "success"  # Console + file
    WARNING = "warning"  # Console + file
    ERROR = "error"      # Console + file


class PipelineDisplay:
    """Handles all CLI display for the shorts pipeline.

    Console output: Clean, milestone-focused
    File output: Detailed for debugging
    """

    ICONS = {
        LogLevel.DEBUG: "[.]",
        LogLevel.DETAIL: "[.]",
        LogLevel.INFO: " ",
        LogLevel.STEP: "[>]",
        LogLevel.SUCCESS: "[OK]",
        LogLevel.WARNING: "[!]",
        LogLevel.ERROR: "[X]",
    }

    COLORS = {
        LogLevel.DEBUG: "dim",
        LogLevel.DETAIL: "dim",
        LogLevel.INFO: "white",
        LogLevel.STEP: "cyan",
        LogLevel.SUCCESS: "green",
        LogLevel.WARNING: "yellow",
        LogLevel.ERROR: "red",
    }

    STATUS_STYLES = {
        ChunkStatus.PUBLISHED: "green",
        ChunkStatus.RENDER_FAILED: "yellow",
        ChunkStatus.ABORTED: "red",
    }

    LOG_FILE = "pipeline.log"

    def __init__(
        self,
        console: Optional[Console] = None,
        show_timestamps: bool = True,
        verbose: bool = False,
        log_dir: Optional[Path] = None,
    ):
        """Initialize pipeline display.

        Args:
            console: Rich console instance.
            show_timestamps: Show timestamps on each line.
            verbose: Show detailed progress (usually only in file).
            log_dir: Directory for the detailed log file. Defaults to ./logs.
        """
        self.console = console or Console()
        self.show_timestamps = show_timestamps
        self.verbose = verbose
        self.log_dir = log_dir or Path("logs")
        self._start_time: Optional[datetime] = None
        self._file_logger = self._setup_file_logging()

    def _setup_file_logging(self) -> logging.Logger:
        """Setup file-only logging for detailed logs."""
        self.log_dir.mkdir(parents=True, exist_ok=True)

        logger = logging.getLogger("reddit_shorts.pipeline.file")
        logger.setLevel(logging.DEBUG)
        for handler in list(logger.handlers):
            handler.close()
            logger.removeHandler(handler)
        logger.propagate = False

        file_handler = logging.FileHandler(
            self.log_dir / self.LOG_FILE,
            encoding="utf-8"
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(
            "%(asctime)s | %(levelname)-8s | %(message)s",
            datefmt="%H:%M:%S"
        ))
        logger.addHandler(file_handler)

        return logger

    def _timestamp(self) -> str:
        """Get current timestamp string."""
        return datetime.now().strftime("%H:%M:%S")

    def _log_to_file(self, level: LogLevel, message: str, step_name: Optional[str] = None) -> None:
        """Log message to file only."""
        msg = f"{step_name}: {message}" if step_name else message
        if level == LogLevel.ERROR:
            self._file_logger.error(msg)
        elif level == LogLevel.WARNING:
            self._file_logger.warning(msg)
        elif level == LogLevel.DEBUG or level == LogLevel.DETAIL:
            self._file_logger.debug(msg)
        else:
            self._file_logger.info(msg)

    def _print_to_console(
        self,
        level: LogLevel,
        message: str,
        step_name: Optional[str] = None,
    ) -> None:
        """Print formatted message to console."""
        parts = []

        if self.show_timestamps:
            parts.append(f"[dim]{self._timestamp()}[/dim] ")

        icon = self.ICONS.get(level, " ")
        color = self.COLORS.get(level, "white")

        if icon.strip():
            parts.append(f"[{color}]{icon}[/{color}] ")

        if step_name:
            parts.append(f"[bold cyan]{escape(step_name)}:[/bold cyan] ")

        parts.append(f"[{color}]{escape(message)}[/{color}]")

        self.console.print(Text.from_markup("".join(parts)))

    def log(
        self,
        level: LogLevel,
        message: str,
        step_name: Optional[str] = None,
    ) -> None:
        """Log a message.

        DEBUG/DETAIL: File only (unless verbose)
        Others: Console + File
        """
        self._log_to_file(level, message, step_name)

        if level in (LogLevel.DEBUG, LogLevel.DETAIL):
            if self.verbose:
                self._print_to_console(level, message, step_name)
        else:
            self._print_to_console(level, message, step_name)

    def debug(self, message: str, step_name: Optional[str] = None) -> None:
        """Log debug message (file only unless verbose)."""
        self.log(LogLevel.DEBUG, message, step_name)

    def detail(self, message: str, step_name: Optional[str] = None) -> None:
        """Log detailed progress (file only unless verbose)."""
        self.log(LogLevel.DETAIL, message, step_name)

    def info(self, message: str, step_name: Optional[str] = None) -> None:
        """Log info message (console + file)."""
        self.log(LogLevel.INFO, message, step_name)

    def step(self, message: str, step_name: Optional[str] = None) -> None:
        """Log step progress (console + file)."""
        self.log(LogLevel.STEP, message, step_name)

    def success(self, message: str, step_name: Optional[str] = None) -> None:
        """Log success message (console + file)."""
        self.log(LogLevel.SUCCESS, message, step_name)

    def warning(self, message: str, step_name: Optional[str] = None) -> None:
        """Log warning message (console + file)."""
        self.log(LogLevel.WARNING, message, step_name)

    def error(self, message: str, step_name: Optional[str] = None) -> None:
        """Log error message (console + file)."""
        self.log(LogLevel.ERROR, message, step_name)

    def start_run(self, subreddit: str, sort: str, post_count: int) -> None:
        """Display run start banner."""
        self._start_time = datetime.now()

        self.console.print()
        self.console.print(Panel(
            f"[bold cyan]Reddit Shorts[/bold cyan]\n"
            f"Source: [yellow]r/{subreddit}[/yellow] ({sort}), {post_count} post(s)\n"
            f"Started: [dim]{self._start_time.strftime('%Y-%m-%d %H:%M:%S')}[/dim]",
            border_style="cyan",
        ))
        self._log_to_file(LogLevel.INFO, f"=== RUN: r/{subreddit} ({sort}), {post_count} post(s) ===")

    def start_post(self, title: str, number: int, total: int) -> None:
        """Mark start of a post."""
        self.console.print()
        self.console.print(f"[dim]{'─' * 60}[/dim]")
        self.console.print(
            f"[bold white]Post {number}/{total}:[/bold white] "
            f"[bold cyan]{escape(title)}[/bold cyan]"
        )
        self.console.print(f"[dim]{'─' * 60}[/dim]")

        self._log_to_file(LogLevel.INFO, f"=== Post {number}/{total}: {title} ===")

    def start_chunk(self, index: int, total: int, duration: float) -> None:
        """Mark start of a chunk."""
        self.step(f"Chunk {index + 1}/{total} ({duration:.1f}s)")

    def end_run(self, report: RunReport, success: bool = True) -> None:
        """Display run completion banner."""
        end_time = datetime.now()
        duration = end_time - self._start_time if self._start_time else None
        duration_str = str(duration).split(".")[0] if duration else "unknown"

        self.console.print()

        if success:
            state = "Cancelled" if report.cancelled else "Complete"
            content = f"[bold green]Run {state}[/bold green]\n\n"
            content += f"Duration: {duration_str}\n"
            content += f"Published: [cyan]{report.published_count}[/cyan] short(s)"
            self.console.print(Panel(content, border_style="green", title=f"[green]{state}[/green]"))
            self._log_to_file(
                LogLevel.SUCCESS,
                f"=== {state.upper()}: {report.published_count} short(s) in {duration_str} ===",
            )
        else:
            self.console.print(Panel(
                f"[bold red]Pipeline Failed[/bold red]\n\n"
                f"Duration: {duration_str}\n"
                f"[dim]Check {self.log_dir / self.LOG_FILE} for details[/dim]",
                border_style="red",
                title="[red]Error[/red]",
            ))
            self._log_to_file(LogLevel.ERROR, f"=== FAILED: Pipeline failed after {duration_str} ===")

    def show_report(self, report: RunReport) -> None:
        """Display a table of every chunk's outcome."""
        table = Table(title="Run Summary", show_lines=False)
        table.add_column("Post", style="bold")
        table.add_column("Part", justify="right")
        table.add_column("Status")
        table.add_column("Detail", overflow="fold")

        for post_report in report.posts:
            if post_report.error:
                table.add_row(
                    escape(post_report.post.title),
                    "-",
                    "[red]skipped[/red]",
                    escape(post_report.error),
                )
                continue
            for outcome in post_report.outcomes:
                style = self.STATUS_STYLES.get(outcome.status, "white")
                table.add_row(
                    escape(post_report.post.title),
                    str(outcome.index + 1),
                    f"[{style}]{outcome.status.value}[/{style}]",
                    escape(outcome.media_url or outcome.error or ""),
                )

        self.console.print()
        self.console.print(table)
