"""`contextpilot resume`: turn the saved session into a prompt for AI tools."""
from __future__ import annotations

from pathlib import Path

from rich.panel import Panel

from contextpilot import ui
from contextpilot.clipboard import copy_to_clipboard
from contextpilot.core.session_service import SessionService
from contextpilot.errors import ClipboardError

RULE_WIDTH = 50


def _print_prompt(prompt: str) -> None:
    if ui.is_plain():
        print("Session Context:")
        print("-" * RULE_WIDTH)
        print(prompt)
        print("-" * RULE_WIDTH)
        return
    ui.console.print(Panel(prompt.rstrip(), title="Session Context", border_style="cyan"))


def run_resume(root: Path, no_copy: bool = False) -> None:
    svc = SessionService(root)
    session = svc.load()

    if session is None:
        if ui.is_json():
            ui.print_json_output({"found": False, "prompt": ""})
            return
        ui.console.print("No saved session for this branch.")
        ui.format_next_step('contextpilot save "Your task description"')
        return

    prompt = svc.generate_prompt(session)
    if ui.is_json():
        ui.print_json_output({"found": True, "prompt": prompt, "session": session.to_dict()})
        return

    if not no_copy:
        try:
            copy_to_clipboard(prompt)
        except ClipboardError as e:
            ui.console.print(f"{ui.icon('warn')} Could not copy to clipboard: {e}\n")
            no_copy = True
        else:
            ui.console.print(f"{ui.icon('ok')} Session context copied to clipboard!")
            ui.console.print("[dim]Paste into Cursor, Claude Code, or ChatGPT to resume.[/dim]")
            return

    _print_prompt(prompt)
