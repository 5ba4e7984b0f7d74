"""`contextpilot init`: analyze the codebase and write the context documents."""
from __future__ import annotations

from pathlib import Path

from contextpilot import ui
from contextpilot.analyzers.codebase_analyzer import CodebaseAnalyzer
from contextpilot.commands.analyze_cmd import render_summary
from contextpilot.core.config_service import ConfigService
from contextpilot.core.context_generator import ContextGenerator
from contextpilot.models import CONFIG_FILE_NAME, CONTEXT_FILES, STATE_DIR_NAME

TARGET_TOOLS = {
    "cursor": "Cursor",
    "claude": "Claude Code",
    "copilot": "GitHub Copilot",
}


def planned_files(targets: list[str]) -> list[str]:
    files = [f"{CONTEXT_FILES[t]} ({TARGET_TOOLS[t]})" for t in targets if t in CONTEXT_FILES]
    files.append(f"{STATE_DIR_NAME}/{CONFIG_FILE_NAME} (ContextPilot config)")
    return files


def run_init(root: Path, dry_run: bool = False) -> None:
    """Analyze ``root`` and generate context files unless ``dry_run``."""
    console = ui.console
    config = ConfigService(root)
    targets = config.get_output_targets()

    with console.status("[bold cyan]Analyzing codebase...[/bold cyan]"):
        analysis = CodebaseAnalyzer(root).analyze()

    if ui.is_json():
        if not dry_run:
            result = ContextGenerator(analysis, root, config=config).generate_all(targets)
            written = [str(path) for _, path in result.generated_files]
        else:
            written = []
        ui.print_json_output({"analysis": analysis.to_dict(), "written": written})
        return

    render_summary(analysis)
    console.print()

    if dry_run:
        console.print("[bold]Dry run - no files written[/bold]")
        ui.print_tree("Would generate:", planned_files(targets))
        return

    ContextGenerator(analysis, root, config=config).generate_all(targets)
    ui.print_tree("Generated context files:", planned_files(targets))
    ui.success_panel(
        "Done! Your AI tools now understand your codebase.",
        "Review and customize the generated files.\n"
        "Run 'contextpilot sync' after major code changes.\n"
        "Log decisions with 'contextpilot decision \"...\"'.",
    )
