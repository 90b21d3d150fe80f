#!/usr/bin/env python3
"""
l2wp: convert Lovable project exports into page-builder documents,
detect the functionalities they use and recommend host components.
"""
from pathlib import Path
from typing import List

import typer

from l2wp import __version__, ui
from l2wp.error_handler import handle_errors

app = typer.Typer(
    name="l2wp",
    help="Lovable to WordPress page-builder conversion CLI.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

# Import subcommands
from l2wp.commands import config_cmd, convert_cmd, plugin_cmd, prefs_cmd  # noqa: E402

app.add_typer(convert_cmd.app, name="convert", help="Translate sources into builder documents", rich_help_panel="Conversion")
app.add_typer(prefs_cmd.app, name="prefs", help="Manage saved solution preferences", rich_help_panel="Components")
app.add_typer(config_cmd.app, name="config", help="Manage configuration", rich_help_panel="Advanced")
app.add_typer(plugin_cmd.app, name="plugins", help="List discovered l2wp plugins", rich_help_panel="Advanced")


def _version_callback(value: bool):
    if value:
        print(f"l2wp {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Only log errors"),
    plain: bool = typer.Option(False, "--plain", help="Plain text output (no colors or panels)"),
    version: bool = typer.Option(
        False, "--version", callback=_version_callback, is_eager=True, help="Show the version and exit",
    ),
):
    """Lovable to WordPress page-builder conversion CLI."""
    from l2wp.config import load_environment
    from l2wp.core.config_service import get_config_service
    from l2wp.logging_config import setup_logging

    load_environment()
    setup_logging(verbose=verbose, quiet=quiet)
    ui.set_plain_mode(plain or bool(get_config_service().get("ui.plain_output", False)))


# ── Archive ──

@app.command(rich_help_panel="Archive")
@handle_errors
def validate(
    archive: Path = typer.Argument(..., help="Lovable project ZIP"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """[bold cyan]Validate[/bold cyan] an archive: size, type and required structure."""
    from l2wp.commands.analyze_cmd import validate_archive

    ui.set_json_mode(json_output)
    validate_archive(archive)


@app.command(rich_help_panel="Archive")
@handle_errors
def analyze(
    archive: Path = typer.Argument(..., help="Lovable project ZIP or unpacked project directory"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """[bold cyan]Analyze[/bold cyan] pages, components, dependencies and assets."""
    from l2wp.commands.analyze_cmd import analyze_archive

    ui.set_json_mode(json_output)
    analyze_archive(archive)


@app.command(rich_help_panel="Archive")
@handle_errors
def styles(
    archive: Path = typer.Argument(..., help="Lovable project ZIP or unpacked project directory"),
    palette: bool = typer.Option(False, "--palette", "-p", help="Show the color palette with hex values"),
    stylesheet: bool = typer.Option(False, "--stylesheet", help="Print the generated stylesheet"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """Extract colors, fonts and custom CSS."""
    from l2wp.commands.analyze_cmd import show_styles

    ui.set_json_mode(json_output)
    show_styles(archive, palette=palette, stylesheet=stylesheet)


# ── Components ──

@app.command(rich_help_panel="Components")
@handle_errors
def detect(
    archive: Path = typer.Argument(..., help="Lovable project ZIP or unpacked project directory"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """[bold cyan]Detect[/bold cyan] functionalities (forms, popups, sliders, ...)."""
    from l2wp.commands.analyze_cmd import detect_archive

    ui.set_json_mode(json_output)
    detect_archive(archive)


@app.command(rich_help_panel="Components")
@handle_errors
def recommend(
    key: str = typer.Argument(..., help="Functionality key (see 'l2wp signatures')"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """Rank substitute components for one functionality."""
    from l2wp.commands.recommend_cmd import recommend as _recommend

    ui.set_json_mode(json_output)
    _recommend(key)


@app.command(rich_help_panel="Components")
@handle_errors
def signatures(
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """List the known functionality signatures."""
    from l2wp.commands.recommend_cmd import list_signatures

    ui.set_json_mode(json_output)
    list_signatures()


# ── Conversion ──

@app.command("import", rich_help_panel="Conversion")
@handle_errors
def import_archive(
    archive: Path = typer.Argument(..., help="Lovable project ZIP"),
    choice: List[str] = typer.Option([], "--choice", "-c", help="KEY=SLUG component choice (repeatable; SLUG may be 'skip')"),
    user: str = typer.Option(None, "--user", "-u", help="User the analysis is cached for"),
    no_plugins: bool = typer.Option(False, "--no-plugins", help="Do not install chosen plugins"),
    no_assets: bool = typer.Option(False, "--no-assets", help="Do not import image assets"),
    no_css: bool = typer.Option(False, "--no-css", help="Do not extract and apply the stylesheet"),
    remember: bool = typer.Option(False, "--remember", help="Save the choices as preferences"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """[bold cyan]Import[/bold cyan] a project: plugins, draft pages, assets and CSS."""
    from l2wp.commands.import_cmd import import_archive as _import

    ui.set_json_mode(json_output)
    _import(
        archive,
        choice,
        user=user,
        install_plugins=not no_plugins,
        import_assets=not no_assets,
        apply_css=not no_css,
        remember=remember,
    )


@app.command(rich_help_panel="Conversion")
@handle_errors
def render(
    file: Path = typer.Argument(..., help="Text file or stored document JSON", exists=True, dir_okay=False),
    context: str = typer.Option(..., "--context", "-C", help="Content item id to render for"),
    contexts: Path = typer.Option(None, "--contexts", help="YAML file with posts and field values"),
):
    """Resolve {{namespace.field}} placeholders for one content item."""
    from l2wp.commands.render_cmd import render_file

    render_file(file, context, contexts=contexts)


if __name__ == "__main__":
    app()
