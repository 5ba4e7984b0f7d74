"""`contextpilot score`: rate the quality of the context files."""
from __future__ import annotations

from pathlib import Path

from rich.table import Table

from contextpilot import ui
from contextpilot.core.score_service import (
    COMPLETENESS_MAX,
    DECISIONS_MAX,
    FRESHNESS_MAX,
    ScoreService,
    score_status,
)

GREAT_SCORE = 80


def show_score(root: Path) -> None:
    result = ScoreService(root).calculate()

    if ui.is_json():
        ui.print_json_output(result.to_dict())
        return

    console = ui.console
    style = ui.score_style(result.total)
    console.print(f"[bold]Context Quality Score:[/bold] [{style}]{result.total}/100[/{style}]\n")

    table = Table(show_header=True)
    table.add_column("Category", style="cyan")
    table.add_column("Score", justify="right")
    table.add_column("Status")
    for label, score, max_score in (
        ("Completeness", result.completeness, COMPLETENESS_MAX),
        ("Freshness", result.freshness, FRESHNESS_MAX),
        ("Decisions", result.decisions, DECISIONS_MAX),
    ):
        table.add_row(label, f"{score}/{max_score}", score_status(score, max_score))
    console.print(table)

    if result.issues:
        console.print()
        ui.print_tree(f"{ui.icon('warn')} Issues:", result.issues)
    if result.suggestions:
        console.print()
        ui.print_tree("Suggestions:", result.suggestions)
    if result.total >= GREAT_SCORE:
        console.print()
        ui.success_panel("Great job! Your context files are in good shape.")
