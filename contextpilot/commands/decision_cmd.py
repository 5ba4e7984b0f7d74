"""`contextpilot decision`: add, list and delete architectural decisions."""
from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer
from rich.table import Table

from contextpilot import ui
from contextpilot.core.decision_service import DecisionService, summarize

TABLE_TEXT_WIDTH = 54


def list_decisions(root: Path) -> None:
    decisions = DecisionService(root).list()

    if ui.is_json():
        ui.print_json_output([d.to_dict() for d in decisions])
        return

    if not decisions:
        ui.console.print("No decisions logged yet.")
        ui.format_next_step('contextpilot decision "Your decision here"')
        return

    table = Table(title="Architectural Decisions", show_header=True)
    table.add_column("#", justify="right", style="cyan")
    table.add_column("Date", style="dim")
    table.add_column("Decision")
    table.add_column("Context", style="dim")
    for d in decisions:
        table.add_row(str(d.id), d.date, summarize(d.text, TABLE_TEXT_WIDTH), d.context)
    ui.console.print(table)
    ui.console.print(f"\nTotal: {len(decisions)} decision(s)")


def delete_decision(root: Path, decision_id: int) -> None:
    DecisionService(root).delete(decision_id)
    if ui.is_json():
        ui.print_json_output({"deleted": decision_id})
        return
    ui.console.print(f"{ui.icon('ok')} Deleted decision #{decision_id}")


def add_decision(root: Path, words: Optional[list[str]], context: str = "") -> None:
    if not words:
        ui.error_panel(
            "Please provide a decision to log",
            'contextpilot decision "Your decision here"\n'
            "contextpilot decision --list\n"
            "contextpilot decision --delete <id>",
        )
        raise typer.Exit(1)

    text = " ".join(words)
    decision = DecisionService(root).add(text, context)

    if ui.is_json():
        ui.print_json_output(decision.to_dict())
        return

    items = [text]
    if context:
        items.append(f"Context: {context}")
    ui.print_tree(f"{ui.icon('ok')} Decision #{decision.id} logged!", items)
    ui.format_next_step("contextpilot sync")
