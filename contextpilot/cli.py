#!/usr/bin/env python3
"""
contextpilot: analyze a codebase and keep AI tool context files
(.cursorrules, CLAUDE.md, copilot-instructions.md) in sync with it.
"""
import logging
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler

from contextpilot import ui
from contextpilot.error_handler import handle_errors

app = typer.Typer(
    name="contextpilot",
    help="Make every AI tool understand your codebase.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

# Import subcommands
from contextpilot.commands import (  # noqa: E402
    analyze_cmd, config_cmd, decision_cmd, init_cmd, resume_cmd, save_cmd, score_cmd, sync_cmd,
)

app.add_typer(config_cmd.app, name="config", help="Manage configuration", rich_help_panel="Advanced")


def _get_version() -> str:
    try:
        from importlib.metadata import PackageNotFoundError, version

        return version("contextpilot")
    except PackageNotFoundError:
        return "0.0.0"


def _version_callback(value: bool):
    if value:
        print(f"contextpilot {_get_version()}")
        raise typer.Exit()


def _configure_logging(verbose: bool) -> None:
    """Route contextpilot loggers to stderr through Rich."""
    root_logger = logging.getLogger("contextpilot")
    root_logger.handlers.clear()
    if not verbose:
        root_logger.setLevel(logging.WARNING)
        return
    handler = RichHandler(
        console=Console(stderr=True),
        show_path=False,
        rich_tracebacks=True,
    )
    handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
    root_logger.addHandler(handler)
    root_logger.setLevel(logging.DEBUG)


def _root() -> Path:
    from contextpilot.core.config_service import get_config_service

    return get_config_service().get_root()


@app.callback()
def main_callback(
    plain: bool = typer.Option(False, "--plain", help="Plain text output (no colors or panels)."),
    json_output: bool = typer.Option(False, "--json", help="Machine-readable JSON output."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log what contextpilot is doing."),
    version: Optional[bool] = typer.Option(
        None, "--version", callback=_version_callback, is_eager=True,
        help="Show the version and exit.",
    ),
):
    """Make every AI tool understand your codebase."""
    from contextpilot.core.config_service import get_config_service

    _configure_logging(verbose)
    if plain or get_config_service().get("ui.plain_output", False) is True:
        ui.set_plain_mode(True)
    if json_output:
        ui.set_json_mode(True)


# ── Context files ──
@app.command(rich_help_panel="Context Files")
@handle_errors
def analyze(
    path: Path = typer.Argument(Path("."), help="Path to the project directory"),
    json_output: bool = typer.Option(False, "--json", help="Print the analysis as JSON"),
):
    """[bold cyan]Analyze[/bold cyan] the codebase without writing anything."""
    if json_output:
        ui.set_json_mode(True)
    analyze_cmd.show_analysis(path)


@app.command(rich_help_panel="Context Files")
@handle_errors
def init(
    dry_run: bool = typer.Option(False, "--dry-run", help="Show what would be generated without writing"),
):
    """[bold cyan]Generate[/bold cyan] context files for AI tools."""
    ui.banner()
    init_cmd.run_init(_root(), dry_run=dry_run)


@app.command(rich_help_panel="Context Files")
@handle_errors
def sync():
    """[bold cyan]Refresh[/bold cyan] context files after code changes."""
    sync_cmd.run_sync(_root())


@app.command(rich_help_panel="Context Files")
@handle_errors
def score():
    """Rate the [bold]quality[/bold] of your context files."""
    score_cmd.show_score(_root())


# ── Sessions ──
@app.command(rich_help_panel="Sessions")
@handle_errors
def save(
    task_words: Optional[List[str]] = typer.Argument(None, help="What you are working on"),
    task: Optional[str] = typer.Option(None, "--task", "-t", help="Task description"),
    goal: Optional[str] = typer.Option(None, "--goal", "-g", help="Goal/purpose"),
    state: Optional[str] = typer.Option(None, "--state", "-s", help="Current state"),
    notes: Optional[str] = typer.Option(None, "--notes", "-n", help="Additional notes"),
    quick: bool = typer.Option(False, "--quick", "-q", help="Quick save (skip interactive)"),
):
    """[bold cyan]Save[/bold cyan] the current work session for this branch."""
    save_cmd.run_save(
        _root(), task_words, task=task, goal=goal, state=state, notes=notes, quick=quick,
    )


@app.command(rich_help_panel="Sessions")
@handle_errors
def resume(
    no_copy: bool = typer.Option(False, "--no-copy", help="Print the prompt instead of copying it"),
):
    """[bold cyan]Restore[/bold cyan] session context and copy it to the clipboard."""
    resume_cmd.run_resume(_root(), no_copy=no_copy)


@app.command(rich_help_panel="Sessions")
@handle_errors
def decision(
    text: Optional[List[str]] = typer.Argument(None, help="The decision made"),
    context: str = typer.Option("", "--context", "-c", help="Why this decision was made"),
    list_all: bool = typer.Option(False, "--list", "-l", help="List all decisions"),
    delete: Optional[int] = typer.Option(None, "--delete", "-d", help="Delete decision by ID"),
):
    """[bold cyan]Log[/bold cyan] an architectural decision."""
    root = _root()
    if delete is not None:
        decision_cmd.delete_decision(root, delete)
    elif list_all:
        decision_cmd.list_decisions(root)
    else:
        decision_cmd.add_decision(root, text, context)


# ── Integrations ──
@app.command(rich_help_panel="Integrations")
def mcp():
    """Run the [bold]MCP server[/bold] over stdio."""
    from contextpilot.mcp.server import main as run_server

    run_server()


if __name__ == "__main__":
    app()
