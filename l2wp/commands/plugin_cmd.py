"""Plugin listing command."""
from __future__ import annotations

import typer
from rich.table import Table

from l2wp import ui

app = typer.Typer(no_args_is_help=False)


GROUP_LABELS = {
    "l2wp.field_providers": "Field provider",
    "l2wp.plugin_registries": "Plugin registry",
    "l2wp.document_stores": "Document store",
}


@app.callback(invoke_without_command=True)
def plugins(
    fields: bool = typer.Option(False, "--fields", help="Show field provider plugins only"),
    registries: bool = typer.Option(False, "--registries", help="Show plugin registry plugins only"),
    stores: bool = typer.Option(False, "--stores", help="Show document store plugins only"),
):
    """List all discovered l2wp plugins."""
    from l2wp.plugins import (
        DOCUMENT_STORE_GROUP,
        FIELD_PROVIDER_GROUP,
        PLUGIN_REGISTRY_GROUP,
        list_all_plugins,
    )

    all_plugins = list_all_plugins()

    if fields:
        all_plugins = [p for p in all_plugins if p.group == FIELD_PROVIDER_GROUP]
    elif registries:
        all_plugins = [p for p in all_plugins if p.group == PLUGIN_REGISTRY_GROUP]
    elif stores:
        all_plugins = [p for p in all_plugins if p.group == DOCUMENT_STORE_GROUP]

    if not all_plugins:
        ui.console.print("[dim]No plugins found.[/dim]")
        return

    table = Table(title="l2wp Plugins", show_header=True, border_style="cyan")
    table.add_column("Name", style="cyan")
    table.add_column("Type")
    table.add_column("Module", style="dim")
    table.add_column("Status", justify="center")

    for plugin in sorted(all_plugins, key=lambda p: (p.group, p.name)):
        type_label = GROUP_LABELS.get(plugin.group, plugin.group)
        if plugin.loaded:
            status = ui.icon("complete")
        else:
            status = f"[red]{plugin.error[:40]}[/red]" if plugin.error else ui.icon("error")
        table.add_row(plugin.name, type_label, plugin.module, status)

    ui.console.print(table)
    ui.console.print(f"\n[dim]{len(all_plugins)} plugin(s) discovered[/dim]")
