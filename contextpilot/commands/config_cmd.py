"""CLI commands for configuration management."""
from __future__ import annotations

import typer

from contextpilot import ui
from contextpilot.error_handler import handle_errors

app = typer.Typer(
    name="config",
    help="Manage contextpilot configuration.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


def _flatten(data: dict, prefix: str = "") -> list[tuple[str, object]]:
    rows = []
    for key, value in data.items():
        dotted = f"{prefix}{key}"
        if isinstance(value, dict):
            rows.extend(_flatten(value, f"{dotted}."))
        else:
            rows.append((dotted, value))
    return rows


@app.command()
@handle_errors
def show():
    """Display the resolved configuration (all layers merged)."""
    from rich.panel import Panel
    from rich.table import Table
    from contextpilot.core.config_service import get_config_service

    svc = get_config_service()
    info = svc.show()

    if ui.is_json():
        ui.print_json_output(info)
        return

    console = ui.console
    sources = info["sources"]
    console.print(Panel(
        f"Global:  {sources['global_config'] or '[dim]not found[/dim]'}\n"
        f"Project: {sources['project_config'] or '[dim]not found[/dim]'}",
        title="Config Sources",
        border_style="cyan",
    ))

    table = Table(title="Settings", show_header=True)
    table.add_column("Setting", style="cyan")
    table.add_column("Value")
    for key, value in _flatten(info["resolved"]):
        if isinstance(value, list):
            value = ", ".join(str(v) for v in value)
        table.add_row(key, str(value))
    console.print(table)

    state = info["state"]
    console.print(
        f"\n[dim]State version {state['version']}, "
        f"last sync: {state['lastSync'] or 'never'}[/dim]"
    )


@app.command("set")
@handle_errors
def set_value(
    key: str = typer.Argument(..., help="Config key in dotted notation (e.g. session.history_limit)"),
    value: str = typer.Argument(..., help="Value to set (comma-separated for lists)"),
):
    """Set a global configuration value."""
    from contextpilot.core.config_service import get_config_service, parse_value

    svc = get_config_service()
    parsed_value = parse_value(value)
    svc.set_global(key, parsed_value)
    ui.console.print(f"[green]Set[/green] {key} = {parsed_value}")
