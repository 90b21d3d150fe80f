"""CLI commands for configuration management."""
from __future__ import annotations

import typer

from l2wp import ui
from l2wp.error_handler import handle_errors

app = typer.Typer(
    name="config",
    help="Manage l2wp configuration.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


def parse_value(value: str) -> object:
    """Config values typed on the command line: booleans, ints, else text."""
    if value.lower() in ("true", "yes", "1"):
        return True
    if value.lower() in ("false", "no", "0"):
        return False
    try:
        return int(value)
    except ValueError:
        return value


@app.command()
@handle_errors
def show(
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """Display the resolved configuration (all layers merged)."""
    from rich.panel import Panel
    from l2wp.core.config_service import get_config_service

    info = get_config_service().show()
    if json_output:
        ui.print_json_output(info)
        return

    sources = info["sources"]
    ui.console.print(Panel(
        f"Global:  {sources['global_config'] or '[dim]not found[/dim]'}\n"
        f"Project: {sources['project_config'] or '[dim]not found[/dim]'}",
        title="Config Sources",
        border_style="cyan",
    ))

    resolved = info["resolved"]
    top_level = [[key, str(value) or "[dim]not set[/dim]"] for key, value in resolved.items()
                 if not isinstance(value, dict)]
    if top_level:
        ui.console.print(ui.simple_table("General", ["Setting", "Value"], top_level))
    for section, values in resolved.items():
        if not isinstance(values, dict):
            continue
        rows = [[key, str(val) if val not in ("", None) else "[dim]not set[/dim]"] for key, val in values.items()]
        ui.console.print(ui.simple_table(section.capitalize(), ["Setting", "Value"], rows))


@app.command("set")
@handle_errors
def set_value(
    key: str = typer.Argument(..., help="Config key in dotted notation (e.g. archive.max_size_mb)"),
    value: str = typer.Argument(..., help="Value to set"),
):
    """Set a global configuration value."""
    from l2wp.core.config_service import get_config_service

    parsed_value = parse_value(value)
    get_config_service().set_global(key, parsed_value)
    ui.console.print(f"[green]Set[/green] {key} = {parsed_value}")


@app.command()
@handle_errors
def paths():
    """Show config file locations and the data directory."""
    from l2wp.core.config_service import get_config_service

    for label, location in get_config_service().config_paths().items():
        ui.console.print(f"[cyan]{label}:[/cyan] {location}")


@app.command()
@handle_errors
def init():
    """Create a .l2wp.toml project config in the current directory."""
    from l2wp.core.config_service import get_config_service
    from l2wp.errors import ConfigError

    try:
        path = get_config_service().init_project_config()
    except FileExistsError as e:
        raise ConfigError(str(e)) from e
    ui.console.print(f"[green]Created[/green] {path}")
