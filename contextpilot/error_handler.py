"""Unified CLI error handler for contextpilot commands."""

from __future__ import annotations

import functools
import logging
import os
import traceback

import typer

from contextpilot.errors import (
    ClipboardError,
    ContextPilotError,
    DecisionNotFoundError,
    FilesystemError,
    NotInitializedError,
    SessionError,
)
from contextpilot import ui

logger = logging.getLogger("contextpilot.error_handler")


def _debug_mode() -> bool:
    """Check if debug output is enabled via CONTEXTPILOT_DEBUG env var."""
    return os.environ.get("CONTEXTPILOT_DEBUG", "").lower() in ("1", "true", "yes")


def _render_error(e: ContextPilotError) -> None:
    """Render a ContextPilotError with Rich formatting and context."""
    console = ui.console
    console.print(f"\n{ui.icon('error')} [bold red]Error:[/bold red] {e}")

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
    if isinstance(e, NotInitializedError):
        console.print("[dim]Run 'contextpilot init' first to generate context files.[/dim]")
    elif isinstance(e, DecisionNotFoundError):
        console.print("[dim]Run 'contextpilot decision --list' to see logged decisions.[/dim]")
    elif isinstance(e, SessionError):
        console.print(
            "[dim]Save a fresh session with 'contextpilot save \"Your task\"'.[/dim]"
        )
    elif isinstance(e, FilesystemError):
        console.print("[dim]Check that the path exists and is readable.[/dim]")
    elif isinstance(e, ClipboardError):
        console.print("[dim]Use 'contextpilot resume --no-copy' to print instead.[/dim]")


def handle_errors(func):
    """Decorator that catches ContextPilotError and renders formatted CLI output.

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
        except ContextPilotError as e:
            logger.debug("Command failed: %s", e)
            _render_error(e)
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
                ui.console.print("[dim]Set CONTEXTPILOT_DEBUG=1 for full traceback.[/dim]")
            raise typer.Exit(1)

    return wrapper
