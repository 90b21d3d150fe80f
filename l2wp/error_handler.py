"""Unified CLI error handler for l2wp commands."""

from __future__ import annotations

import functools
import logging
import os
import traceback

import typer

from l2wp.errors import (
    ArchiveNotFoundError,
    CollaboratorError,
    L2WPError,
    MalformedInputError,
    NotFoundError,
    ValidationError,
)
from l2wp import ui

logger = logging.getLogger("l2wp.error_handler")


def _debug_mode() -> bool:
    """Check if debug output is enabled via L2WP_DEBUG env var."""
    return os.environ.get("L2WP_DEBUG", "").lower() in ("1", "true", "yes")


def _render_l2wp_error(e: L2WPError) -> None:
    """Render an L2WPError with Rich formatting and context."""
    console = ui.console
    console.print(f"\n[bold red]Error:[/bold red] {e}")

    # Context details (only in debug mode)
    if e.context and _debug_mode():
        context_parts = [
            f"  [dim]{key}:[/dim] {value}" for key, value in e.context.items() if value
        ]
        if context_parts:
            console.print("[dim]Context:[/dim]")
            for part in context_parts:
                console.print(part)

    # Actionable hints based on error type
    if isinstance(e, ArchiveNotFoundError):
        console.print("[dim]Check the archive path and try again.[/dim]")
    elif isinstance(e, ValidationError) and e.missing:
        console.print(
            "[dim]Export the project again from Lovable so the archive keeps "
            "its src/, public/ and package.json entries.[/dim]"
        )
    elif isinstance(e, MalformedInputError):
        console.print("[dim]Validate the file with a JSON linter before retrying.[/dim]")
    elif isinstance(e, NotFoundError) and e.context.get("kind") == "functionality":
        console.print("[dim]Run 'l2wp signatures' to see known functionality keys.[/dim]")
    elif isinstance(e, CollaboratorError):
        console.print("[dim]Run 'l2wp config paths' to check the host data directory.[/dim]")


def handle_errors(func):
    """Decorator that catches L2WPError and renders formatted CLI output.

    Usage::

        @app.command()
        @handle_errors
        def my_command(...):
            ...  # no try/except needed
    """

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except L2WPError as e:
            logger.debug("Command %s failed: %s", func.__name__, e)
            _render_l2wp_error(e)
            if _debug_mode():
                ui.console.print(f"\n[dim]{traceback.format_exc()}[/dim]")
            raise typer.Exit(e.exit_code)
        except KeyboardInterrupt:
            ui.console.print("\n[dim]Interrupted.[/dim]")
            raise typer.Exit(130)
        except (typer.Exit, typer.Abort, SystemExit):
            raise
        except Exception as e:
            ui.console.print(f"\n[bold red]Unexpected error:[/bold red] {e}")
            if _debug_mode():
                ui.console.print(f"\n[dim]{traceback.format_exc()}[/dim]")
            else:
                ui.console.print("[dim]Set L2WP_DEBUG=1 for full traceback.[/dim]")
            raise typer.Exit(1)

    return wrapper
