"""Shared utilities for autostack CLI modules."""
from __future__ import annotations

import os
import shutil
from typing import Iterable, List, Optional

import typer
from pydantic import ValidationError
from rich.console import Console

EXIT_FAILURE = 1
EXIT_DNS_TIMEOUT = 3
EXIT_INTERRUPTED = 130


def is_mock() -> bool:
    """Return True when CLI runs in mock mode."""
    return os.environ.get("AUTOSTACK_MOCK") == "1"


def setup_file_logging(log_file: Optional[str] = None, verbose: bool = False) -> None:
    """Set up file logging for CLI commands.

    Args:
        log_file: Path to log file (optional)
        verbose: Enable verbose logging
    """
    from autostack.core.logger import setup_file_logging as _setup_file_logging
    _setup_file_logging(log_file=log_file, verbose=verbose)


def missing_commands(commands: Iterable[str]) -> List[str]:
    """Return the commands that are not on PATH."""
    return [cmd for cmd in commands if shutil.which(cmd) is None]


def confirm_action(message: str, yes_flag: bool = False, mock: bool = False) -> bool:
    """Prompt user for confirmation unless --yes or mock mode.

    Args:
        message: Confirmation message to display
        yes_flag: Skip prompt if True (from --yes flag)
        mock: Skip prompt if True (mock mode)

    Returns:
        True if confirmed, False otherwise
    """
    if yes_flag or mock:
        return True
    return typer.confirm(message)


def format_validation_error(error: ValidationError) -> str:
    """Flatten a pydantic ValidationError into one line per field."""
    messages = []
    for item in error.errors():
        field = ".".join(str(part) for part in item.get("loc", ()))
        message = item.get("msg", "invalid value").removeprefix("Value error, ")
        messages.append(f"{field}: {message}" if field else message)
    return "; ".join(messages)


def handle_cli_error(
    e: Exception,
    console: Console,
    verbose: bool = False,
    exit_code: int = EXIT_FAILURE
) -> None:
    """Handle CLI errors with consistent formatting.

    Args:
        e: Exception to handle
        console: Rich console for output
        verbose: Show exception traceback if True
        exit_code: Exit code to use
    """
    console.print(f"[red]Error:[/red] {e}")
    if verbose:
        console.print_exception()
    raise typer.Exit(exit_code)


def print_header(console: Console, title: str) -> None:
    """Print a section header between blank lines."""
    console.print(f"\n[bold blue]{title}[/bold blue]\n")


def print_success(console: Console, message: str, prefix: str = "✓") -> None:
    """Print success message with consistent formatting."""
    console.print(f"[green]{prefix}[/green] {message}")


def print_error(console: Console, message: str, prefix: str = "✗") -> None:
    """Print error message with consistent formatting."""
    console.print(f"[red]{prefix}[/red] {message}")


def print_warning(console: Console, message: str, prefix: str = "⚠") -> None:
    """Print warning message with consistent formatting."""
    console.print(f"[yellow]{prefix}[/yellow] {message}")


def print_info(console: Console, message: str, prefix: str = "ℹ") -> None:
    """Print info message with consistent formatting."""
    console.print(f"[cyan]{prefix}[/cyan] {message}")
