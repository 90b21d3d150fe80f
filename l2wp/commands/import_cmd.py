"""End-to-end import command."""
from __future__ import annotations

import getpass
from pathlib import Path
from typing import Optional

from l2wp import ui
from l2wp.core import UploadResult
from l2wp.core.import_service import SKIP, ImportService
from l2wp.errors import ValidationError


def parse_choices(values: list[str]) -> dict[str, str]:
    """``["forms=contact-form-7", "animations=skip"]`` -> dict."""
    choices: dict[str, str] = {}
    for value in values:
        key, sep, slug = value.partition("=")
        if not sep or not key.strip() or not slug.strip():
            raise ValidationError(
                f"Invalid --choice '{value}', expected KEY=SLUG",
                reason="invalid_choice",
            )
        choices[key.strip()] = slug.strip()
    return choices


def default_user() -> str:
    try:
        return getpass.getuser()
    except (KeyError, OSError):
        return "default"


def resolve_choices(service: ImportService, upload: UploadResult, explicit: dict[str, str]) -> dict[str, str]:
    """Explicit choices win; other detected keys take their preferred solution."""
    recommender = service.recommender()
    choices = {}
    for key in upload.detections:
        if key in explicit:
            choices[key] = explicit[key]
            continue
        preferred = recommender.get_preferred_solution(key)
        choices[key] = preferred.slug if preferred else SKIP
    for key, slug in explicit.items():
        choices.setdefault(key, slug)
    return choices


def show_upload(upload: UploadResult, choices: dict[str, str]) -> None:
    project = upload.project
    ui.key_value_panel(project.project_name, {
        "Pages": len(project.pages),
        "Components": len(project.components),
        "Images": len(project.assets.images),
        "Functionalities": len(upload.detections),
    })
    ui.show_warnings(upload.warnings)
    if choices:
        rows = [[key, upload.detections[key].name if key in upload.detections else "-", slug]
                for key, slug in choices.items()]
        ui.console.print(ui.simple_table("Component Choices", ["Key", "Functionality", "Solution"], rows))


def import_archive(
    archive: Path,
    choice: list[str],
    user: Optional[str] = None,
    install_plugins: bool = True,
    import_assets: bool = True,
    apply_css: bool = True,
    remember: bool = False,
) -> None:
    explicit = parse_choices(choice)
    user = user or default_user()
    service = ImportService()

    upload = service.upload(archive, user)
    choices = resolve_choices(service, upload, explicit)
    if not ui.is_json():
        show_upload(upload, choices)

    report = service.run_import(
        user,
        choices,
        install_plugins=install_plugins,
        import_assets=import_assets,
        apply_css=apply_css,
        remember=remember,
    )

    if ui.is_json():
        ui.print_json_output({"upload": upload.to_dict(), "choices": choices, "report": report.to_dict()})
        return

    status_icon = ui.icon("complete") if report.status == "success" else ui.icon("warning")
    ui.key_value_panel(f"Import {report.status}", {
        "Pages created": len(report.created_pages),
        "Plugins installed": ", ".join(report.installed_plugins) or "-",
        "Assets imported": report.imported_assets,
        "CSS extracted": "yes" if report.css_extracted else "no",
    }, border_style="green" if report.status == "success" else "yellow")
    for page in report.created_pages:
        ui.console.print(f"  {ui.icon('bullet')} {page.page_name} {ui.icon('arrow')} "
                         f"document {page.document_id} ({page.sections_count} section(s))")
    for error in report.errors:
        ui.console.print(f"  {ui.icon('error')} [error]{error}[/error]")
    ui.console.print(f"\n{status_icon} Done.")
