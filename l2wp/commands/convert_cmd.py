"""CLI commands for translating sources into builder documents."""
from __future__ import annotations

import json
from pathlib import Path

import typer

from l2wp import ui
from l2wp.error_handler import handle_errors

app = typer.Typer(
    name="convert",
    help="Translate page sources or design JSON into builder documents.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


def _write_or_print(payload: str, output: Path | None) -> None:
    if output:
        output.write_text(payload, encoding="utf-8")
        ui.console.print(f"[success]Wrote[/success] {output}")
    else:
        print(payload)


@app.command()
@handle_errors
def page(
    file: Path = typer.Argument(..., help="Page component source (.tsx/.jsx)", exists=True, dir_okay=False),
    save: bool = typer.Option(False, "--save", "-s", help="Store the result as a draft document"),
    title: str = typer.Option(None, "--title", "-t", help="Document title (defaults to the file name)"),
    output: Path = typer.Option(None, "--output", "-o", help="Write the tree JSON to this file"),
):
    """Translate one page component into sections, columns and widgets."""
    from l2wp.builder.page_translator import PageTranslator
    from l2wp.host import get_document_store

    tree = PageTranslator().translate(file.read_text(encoding="utf-8", errors="replace"))
    content = [node.to_dict() for node in tree]

    if save:
        doc_id = get_document_store().create_document(title or file.stem, content, "page", status="draft")
        ui.console.print(f"{ui.icon('complete')} Created document [slug]{doc_id}[/slug] "
                         f"with {len(tree)} section(s)")
        return
    _write_or_print(json.dumps(content, indent=2, ensure_ascii=False), output)


@app.command()
@handle_errors
def design(
    file: Path = typer.Argument(..., help="Design JSON file", exists=True, dir_okay=False),
    dry_run: bool = typer.Option(False, "--dry-run", "-n", help="Print the template instead of storing it"),
    output: Path = typer.Option(None, "--output", "-o", help="With --dry-run, write the template here"),
):
    """Export a design JSON description as a builder template."""
    from l2wp.builder.design_translator import (
        DesignTranslator,
        design_title,
        export_as_json,
        export_design,
        parse_design,
    )
    from l2wp.host import get_document_store

    text = file.read_text(encoding="utf-8", errors="replace")
    if dry_run:
        design_data = parse_design(text, source=str(file))
        document = DesignTranslator().convert(design_data)
        document.title = design_title(design_data)
        _write_or_print(export_as_json(document), output)
        return

    doc_id, document = export_design(text, get_document_store(), source=str(file))
    ui.console.print(f"{ui.icon('complete')} Exported [bold]{document.title}[/bold] "
                     f"as document [slug]{doc_id}[/slug] ({len(document.content)} section(s))")
