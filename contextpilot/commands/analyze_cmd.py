"""Analysis display shared by `analyze` and `init`."""
from __future__ import annotations

from pathlib import Path

from rich.table import Table

from contextpilot import ui
from contextpilot.analyzers.codebase_analyzer import CodebaseAnalyzer
from contextpilot.analyzers.models import Analysis


def pattern_items(analysis: Analysis) -> list[str]:
    """Detected tooling patterns as "Label: value" strings."""
    p = analysis.patterns
    rows = [
        ("ORM", p.orm),
        ("Tests", p.test_framework),
        ("Styling", p.styling),
        ("State", p.state_management),
        ("Linter", p.linter),
        ("Formatter", p.formatter),
    ]
    return [f"{label}: {value}" for label, value in rows if value]


def render_summary(analysis: Analysis) -> None:
    """Print the analysis as a tree summary."""
    console = ui.console
    languages = sorted(analysis.languages, key=lambda lang: -lang.file_count)

    items: list[str] = []
    if languages:
        items.append("Languages: " + ", ".join(
            f"{lang.name} ({lang.file_count} files, {lang.percentage:.1f}%)"
            for lang in languages
        ))
    if analysis.framework:
        version = f" {analysis.framework.version}" if analysis.framework.version else ""
        items.append(f"Framework: {analysis.framework.name}{version}")
    if analysis.packages.manager:
        items.append(f"Package manager: {analysis.packages.manager}")

    structure = f"Structure: {analysis.structure.type}"
    if analysis.structure.src_dir:
        structure += f" (src: {analysis.structure.src_dir})"
    items.append(structure)
    if analysis.structure.folders:
        items.append("Folders: " + ", ".join(analysis.structure.folders))
    if analysis.structure.entry_point:
        items.append(f"Entry point: {analysis.structure.entry_point}")
    items.extend(pattern_items(analysis))

    ui.print_tree("Analysis", items)

    if languages and not ui.is_plain():
        table = Table(title="Languages", show_header=True, expand=False)
        table.add_column("Language", style="cyan")
        table.add_column("Extension", style="dim")
        table.add_column("Files", justify="right")
        table.add_column("Share", justify="right")
        for lang in languages:
            table.add_row(
                lang.name, lang.extension, str(lang.file_count), f"{lang.percentage:.1f}%",
            )
        console.print()
        console.print(table)


def show_analysis(path: Path) -> None:
    """Analyze ``path`` and print the report (or JSON in --json mode)."""
    if ui.is_json():
        analysis = CodebaseAnalyzer(path).analyze()
        ui.print_json_output(analysis.to_dict())
        return

    with ui.console.status("[bold cyan]Analyzing codebase...[/bold cyan]"):
        analysis = CodebaseAnalyzer(path).analyze()

    ui.console.print()
    render_summary(analysis)
