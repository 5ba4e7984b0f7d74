"""`contextpilot sync`: refresh context documents after code changes."""
from __future__ import annotations

from pathlib import Path

from contextpilot import ui
from contextpilot.core.sync_service import SyncService

MAX_SHOWN_CHANGES = 5


def run_sync(root: Path) -> None:
    console = ui.console
    svc = SyncService(root)

    with console.status("[bold cyan]Re-analyzing codebase...[/bold cyan]"):
        result = svc.sync()

    if ui.is_json():
        ui.print_json_output({
            "changed_files": result.changed_files,
            "written": [str(path) for _, path in result.generated.generated_files],
        })
        return

    changes = result.changed_files
    if changes:
        shown = changes[:MAX_SHOWN_CHANGES]
        if len(changes) > MAX_SHOWN_CHANGES:
            shown.append(f"... and {len(changes) - MAX_SHOWN_CHANGES} more")
        ui.print_tree(f"{len(changes)} file(s) changed since last sync", shown)
    else:
        console.print("[dim]No git changes detected (or not a git repo)[/dim]")

    console.print()
    ui.print_tree(
        "Updated context files:",
        [str(path.relative_to(root)) for _, path in result.generated.generated_files],
    )

    analysis = result.analysis
    if analysis.framework:
        summary = analysis.framework.name
        languages = sorted(analysis.languages, key=lambda lang: -lang.file_count)
        if languages:
            summary += f" + {languages[0].name}"
        console.print(f"\n[bold]Current state:[/bold] {summary}")
    ui.success_panel("Context files updated!")
