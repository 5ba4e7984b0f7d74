"""Shared UI theme, console, and display helpers for contextpilot."""

import json
import sys
from rich.console import Console
from rich.theme import Theme
from rich.panel import Panel
from rich.text import Text
from rich.align import Align

# ── Output Mode State ──
_plain_mode: bool = False
_json_mode: bool = False


def set_plain_mode(enabled: bool = True) -> None:
    """Enable or disable plain text output (no colors, no panels, ASCII only)."""
    global _plain_mode, console
    _plain_mode = enabled
    if enabled:
        console = Console(no_color=True, highlight=False, theme=CONTEXTPILOT_THEME)
    else:
        console = Console(theme=CONTEXTPILOT_THEME)


def set_json_mode(enabled: bool = True) -> None:
    """Enable or disable JSON output mode."""
    global _json_mode
    _json_mode = enabled


def is_plain() -> bool:
    """Check if plain output mode is active."""
    return _plain_mode


def is_json() -> bool:
    """Check if JSON output mode is active."""
    return _json_mode


def print_json_output(data: dict | list) -> None:
    """Print data as formatted JSON to stdout."""
    print(json.dumps(data, indent=2, default=str))


# ── Theme ──
CONTEXTPILOT_THEME = Theme({
    "info": "cyan",
    "success": "bold green",
    "warning": "yellow",
    "error": "bold red",
    "brand": "bold cyan",
    "muted": "dim",
})

console = Console(theme=CONTEXTPILOT_THEME)

# ── Status Icons ──
ICONS = {
    "ok": "[green]✔[/green]",             # checkmark
    "warn": "[yellow]⚠[/yellow]",         # warning sign
    "error": "[red]✘[/red]",              # cross
}

# ASCII equivalents for plain mode
PLAIN_ICONS = {
    "ok": "[OK]",
    "warn": "[!]",
    "error": "[!!]",
}

# Score colour bands
SCORE_STYLES = (
    (75, "green"),
    (50, "yellow"),
    (0, "red"),
)


def icon(name: str) -> str:
    """Get an icon for the active output mode."""
    if _plain_mode:
        return PLAIN_ICONS.get(name, "")
    return ICONS.get(name, "")


def banner():
    """Display the contextpilot welcome banner."""
    if _json_mode:
        return
    if _plain_mode:
        print("contextpilot - Make every AI tool understand your codebase")
        print()
        return

    content = Text.from_markup(
        "\n"
        "[bold cyan]  c o n t e x t p i l o t[/bold cyan]\n"
        "[dim]  Make every AI tool understand[/dim]\n"
        "[dim]  your codebase[/dim]\n"
    )

    console.print(Panel(
        Align.center(content),
        border_style="cyan",
        padding=(0, 4),
    ))


def tree_lines(items: list[str], indent: str = "   ") -> list[str]:
    """Render items as a one-level tree (├── / └──)."""
    if _plain_mode:
        return [f"{indent}- {item}" for item in items]
    lines = []
    for i, item in enumerate(items):
        branch = "└──" if i == len(items) - 1 else "├──"
        lines.append(f"{indent}{branch} {item}")
    return lines


def print_tree(title: str, items: list[str]) -> None:
    """Print a titled tree of items."""
    if _json_mode:
        return
    console.print(f"[bold]{title}[/bold]")
    for line in tree_lines(items):
        console.print(line, highlight=False)


def score_style(total: int) -> str:
    """Pick the colour used to render an overall score."""
    for threshold, style in SCORE_STYLES:
        if total >= threshold:
            return style
    return "red"


def success_panel(title: str, content=None):
    """Display a success panel."""
    if _json_mode:
        return
    if _plain_mode:
        print(f"OK: {title}")
        if content:
            print(f"  {content}")
        return

    console.print(Panel(
        content or "",
        title=f"[bold green]{title}[/bold green]",
        border_style="green",
    ))


def error_panel(title: str, content: str = ""):
    """Display an error panel."""
    if _json_mode:
        print_json_output({"error": title, "detail": content})
        return
    if _plain_mode:
        print(f"ERROR: {title}", file=sys.stderr)
        if content:
            print(f"  {content}", file=sys.stderr)
        return

    console.print(Panel(
        content,
        title=f"[bold red]{title}[/bold red]",
        border_style="red",
    ))


def format_next_step(command: str):
    """Display the next step suggestion."""
    if _json_mode:
        return
    if _plain_mode:
        print(f"\n  Next: {command}")
        return

    console.print(f"\n  [bold]Next:[/bold] [cyan]{command}[/cyan]")
