"""CLI commands for saved solution preferences."""
from __future__ import annotations

import typer

from l2wp import ui
from l2wp.error_handler import handle_errors

app = typer.Typer(
    name="prefs",
    help="Manage saved solution preferences.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


def _store():
    from l2wp.core.config_service import get_config_service
    from l2wp.core.preferences import PreferenceStore

    return PreferenceStore.in_dir(get_config_service().get_data_dir())


@app.command()
@handle_errors
def show(
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """Show the saved functionality -> solution choices."""
    prefs = _store().load()
    if json_output:
        ui.print_json_output(prefs)
        return
    if not prefs:
        ui.console.print("[muted]No saved preferences.[/muted]")
        return
    ui.console.print(ui.simple_table("Preferences", ["Functionality", "Solution"], [[k, v] for k, v in prefs.items()]))


@app.command("set")
@handle_errors
def set_pref(
    key: str = typer.Argument(..., help="Functionality key (e.g. forms)"),
    slug: str = typer.Argument(..., help="Solution slug to prefer"),
):
    """Prefer a solution for one functionality."""
    from l2wp.core.config_service import get_config_service
    from l2wp.detection.signatures import load_signatures
    from l2wp.errors import NotFoundError

    mapping = load_signatures(get_config_service().get_signatures_path())
    if key not in mapping:
        raise NotFoundError("functionality", key, available=sorted(mapping))
    slugs = [s.slug for s in mapping[key].solutions]
    if slug not in slugs:
        raise NotFoundError(f"solution for {key}", slug, available=slugs)

    _store().update(key, slug)
    ui.console.print(f"[success]Saved[/success] {key} {ui.icon('arrow')} {slug}")


@app.command()
@handle_errors
def clear():
    """Forget all saved preferences."""
    _store().clear()
    ui.console.print("[success]Preferences cleared[/success]")
