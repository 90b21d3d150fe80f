"""Shared UI theme, console, and display helpers for l2wp."""

import json

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.theme import Theme

# ── Output Mode State ──
_plain_mode: bool = False
_json_mode: bool = False


def set_plain_mode(enabled: bool = True) -> None:
    """Enable or disable plain text output (no colors, no panels, ASCII only)."""
    global _plain_mode, console
    _plain_mode = enabled
    if enabled:
        console = Console(theme=L2WP_THEME, no_color=True, highlight=False)
    else:
        console = Console(theme=L2WP_THEME)


def set_json_mode(enabled: bool = True) -> None:
    """Enable or disable JSON output mode."""
    global _json_mode
    _json_mode = enabled


def is_plain() -> bool:
    return _plain_mode


def is_json() -> bool:
    return _json_mode


def print_json_output(data: dict | list) -> None:
    """Print data as formatted JSON to stdout."""
    print(json.dumps(data, indent=2, default=str, ensure_ascii=False))


# ── Theme ──
L2WP_THEME = Theme({
    "info": "cyan",
    "success": "bold green",
    "warning": "yellow",
    "error": "bold red",
    "brand": "bold magenta",
    "muted": "dim",
    "slug": "cyan",
})

console = Console(theme=L2WP_THEME)

# ── Status Icons ──
ICONS = {
    "complete": "[green]✔[/green]",       # checkmark
    "active": "[green]●[/green]",         # filled circle
    "installed": "[yellow]◉[/yellow]",    # dotted circle
    "missing": "[dim]○[/dim]",            # empty circle
    "warning": "[yellow]⚠[/yellow]",      # warning sign
    "error": "[red]✘[/red]",              # cross
    "arrow": "[dim]──▸[/dim]",  # arrow
    "bullet": "[cyan]•[/cyan]",           # bullet
}

# ASCII equivalents for plain mode
PLAIN_ICONS = {
    "complete": "[OK]",
    "active": "[on]",
    "installed": "[--]",
    "missing": "[ ]",
    "warning": "[!]",
    "error": "[!!]",
    "arrow": "-->",
    "bullet": "*",
}


def icon(name: str) -> str:
    """Get an icon, respecting plain mode."""
    if _plain_mode:
        return PLAIN_ICONS.get(name, "")
    return ICONS.get(name, "")


def solution_status_icon(installed: bool, active: bool) -> str:
    """Icon for a solution candidate's installation state."""
    if active:
        return icon("active")
    if installed:
        return icon("installed")
    return icon("missing")


def key_value_panel(title: str, rows: dict, border_style: str = "cyan") -> None:
    """Render a small bordered block of ``key: value`` lines."""
    if _json_mode:
        print_json_output(rows)
        return
    if _plain_mode:
        print(title)
        for key, value in rows.items():
            print(f"  {key}: {value}")
        print()
        return
    body = "\n".join(f"[bold]{key}:[/bold] {value}" for key, value in rows.items())
    console.print(Panel(body, title=title, border_style=border_style))


def simple_table(title: str, columns: list[str], rows: list[list]) -> Table:
    """Build a table with the standard l2wp styling."""
    table = Table(title=title, show_header=True, border_style="cyan")
    for i, column in enumerate(columns):
        table.add_column(column, style="cyan" if i == 0 else None)
    for row in rows:
        table.add_row(*[str(cell) for cell in row])
    return table


def show_warnings(warnings: list[str]) -> None:
    """Print non-blocking warnings."""
    for warning in warnings:
        if _plain_mode:
            print(f"{PLAIN_ICONS['warning']} {warning}")
        else:
            console.print(f"{ICONS['warning']} [warning]{warning}[/warning]")
