"""Shared CLI utilities for uv-run.

This module contains exit codes, the console singleton, and helper
functions used by the CLI commands.
"""

import logging
import os
import sys
from collections.abc import Sequence

from rich.console import Console
from rich.logging import RichHandler
from rich.prompt import IntPrompt

# Exit codes following Unix conventions
EXIT_SUCCESS: int = 0
EXIT_ERROR: int = 1  # Input or resource error
EXIT_CONFIG_ERROR: int = 2  # Configuration/usage error

# TTY detection for Rich markup
# When stdout is piped, Rich automatically strips ANSI codes
_is_tty = sys.stdout.isatty()

# Rich console for output
console = Console(force_terminal=_is_tty, no_color=not _is_tty)

# Module logger
logger = logging.getLogger(__name__)


def _error(message: str) -> None:
    """Display error message with red styling."""
    console.print(f"[red]Error:[/red] {message}")


def _info(message: str) -> None:
    """Display info message with blue styling."""
    console.print(f"[blue]Info:[/blue] {message}")


def _success(message: str) -> None:
    """Display success message with green styling."""
    console.print(f"[green]✓[/green] {message}")


def _warning(message: str) -> None:
    """Display warning message with yellow styling."""
    console.print(f"[yellow]Warning:[/yellow] {message}")


def _setup_logging(verbose: bool, quiet: bool) -> None:
    """Configure logging based on verbosity flags.

    Args:
        verbose: If True, set DEBUG level.
        quiet: If True, set ERROR level.

    Note:
        verbose and quiet are mutually exclusive. If both are True,
        verbose takes precedence.

        UV_RUN_LOG_LEVEL env var overrides both flags.

    """
    env_level = os.environ.get("UV_RUN_LOG_LEVEL", "").upper()
    if env_level in ("DEBUG", "INFO", "WARNING", "ERROR"):
        level = getattr(logging, env_level)
    elif verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.ERROR
    else:
        level = logging.WARNING

    # Clear any existing handlers to avoid duplicates
    logging.root.handlers.clear()

    handler = RichHandler(console=console, rich_tracebacks=True, show_path=False)
    handler.setLevel(level)

    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[handler],
    )


def prompt_choice(options: Sequence[str], prompt: str) -> str | None:
    """Numbered chooser on the console.

    Entering 0 cancels.

    Args:
        options: Labels to choose from.
        prompt: Prompt title.

    Returns:
        The chosen label, or None when cancelled.

    """
    console.print(f"[bold]{prompt}[/bold]")
    for index, option in enumerate(options, start=1):
        console.print(f"  {index}. {option}")

    choices = [str(i) for i in range(len(options) + 1)]
    answer = IntPrompt.ask(
        "Number (0 to cancel)",
        console=console,
        choices=choices,
        show_choices=False,
    )
    if answer == 0:
        return None
    return options[answer - 1]
