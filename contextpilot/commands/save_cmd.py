"""`contextpilot save`: capture the current work session for this branch."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import typer

from contextpilot import ui
from contextpilot.core.session_service import SessionService
from contextpilot.errors import SessionError
from contextpilot.models import Session

logger = logging.getLogger("contextpilot.commands.save")


def _ask(label: str, default: str = "") -> str:
    return typer.prompt(label, default=default, show_default=bool(default)).strip()


def _ask_list(label: str) -> list[str]:
    """Collect items one per line until an empty answer."""
    ui.console.print(f"{label} [dim](one per line, empty line to finish)[/dim]")
    items = []
    while True:
        item = _ask("  -")
        if not item:
            return items
        items.append(item)


def interactive_session(session: Session) -> Session:
    """Fill in a session from prompts. Enter skips optional fields."""
    ui.console.print("[bold]Save Session Context[/bold]")
    ui.console.print("[dim](Press Enter to skip optional fields)[/dim]\n")

    session.task = _ask("Task (what are you working on?)", session.task)
    if not session.task:
        raise SessionError("task is required")

    session.goal = _ask("Goal (why?)", session.goal) or session.goal
    session.approaches += _ask_list("Approaches tried")
    session.state = _ask("Current state (where did you leave off?)", session.state) or session.state
    session.next_steps += _ask_list("Next steps")
    session.notes = _ask("Notes (anything else?)", session.notes) or session.notes
    return session


def run_save(
    root: Path,
    task_words: Optional[list[str]] = None,
    task: Optional[str] = None,
    goal: Optional[str] = None,
    state: Optional[str] = None,
    notes: Optional[str] = None,
    quick: bool = False,
) -> None:
    """Merge arguments into the branch's session and save it."""
    svc = SessionService(root)
    try:
        session = svc.load() or Session()
    except SessionError as e:
        logger.warning("Starting a fresh session: %s", e)
        session = Session()

    if task_words:
        session.task = " ".join(task_words)
    elif task:
        session.task = task
    if goal:
        session.goal = goal
    if state:
        session.state = state
    if notes:
        session.notes = notes

    if not session.task:
        if quick:
            ui.error_panel(
                "Please provide a task description",
                'Usage: contextpilot save "Your task description"\n'
                "   or: contextpilot save  (interactive mode)",
            )
            raise typer.Exit(1)
        session = interactive_session(session)

    svc.save(session)

    if ui.is_json():
        ui.print_json_output(session.to_dict())
        return

    items = [f"Task: {session.task}"]
    if session.goal:
        items.append(f"Goal: {session.goal}")
    if session.state:
        items.append(f"State: {session.state}")
    if session.approaches:
        items.append(f"Approaches: {len(session.approaches)} logged")
    if session.next_steps:
        items.append(f"Next steps: {len(session.next_steps)} items")

    ui.print_tree(f"{ui.icon('ok')} Session saved for branch '{session.branch}'", items)
    ui.format_next_step("contextpilot resume")
