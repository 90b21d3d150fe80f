"""Archive commands: validate, analyze, detect, styles."""
from __future__ import annotations

import contextlib
from pathlib import Path
from typing import Iterator

from l2wp import ui
from l2wp.analyzers.archive_analyzer import ArchiveAnalyzer
from l2wp.analyzers.models import ProjectModel
from l2wp.analyzers.style_extractor import StyleExtractor
from l2wp.analyzers.validator import ArchiveValidator, format_size
from l2wp.core.config_service import get_config_service
from l2wp.detection.detector import FunctionalityDetector
from l2wp.detection.signatures import load_signatures


@contextlib.contextmanager
def open_project(path: Path) -> Iterator[ProjectModel]:
    """Analyze a ZIP archive (extracted to a temp dir) or an unpacked project dir."""
    config_svc = get_config_service()
    with ArchiveAnalyzer(temp_root=config_svc.get_temp_dir()) as analyzer:
        if path.is_dir():
            yield analyzer.analyze_directory(path)
        else:
            yield analyzer.analyze(path)


def validate_archive(archive: Path) -> None:
    config_svc = get_config_service()
    report = ArchiveValidator(max_size=config_svc.get_max_archive_bytes()).validate(archive)
    if ui.is_json():
        ui.print_json_output({
            "path": str(report.path),
            "size": report.size,
            "entries": report.entry_count,
            "warnings": report.warnings,
        })
        return
    ui.key_value_panel("Archive OK", {
        "File": report.path.name,
        "Size": format_size(report.size),
        "Entries": report.entry_count,
    }, border_style="green")
    ui.show_warnings(report.warnings)


def analyze_archive(archive: Path) -> None:
    with open_project(archive) as project:
        if ui.is_json():
            ui.print_json_output(project.to_dict(include_content=False))
            return

        ui.key_value_panel(project.project_name, {
            "Description": project.description or "-",
            "Build tool": project.build.build_tool,
            "Pages": len(project.pages),
            "Components": len(project.components),
            "Dependencies": len(project.manifest.all_dependencies()),
            "Assets": f"{len(project.assets.images)} images, {len(project.assets.fonts)} fonts, "
                      f"{len(project.assets.css)} stylesheets",
        })
        if project.pages:
            rows = [[p.name, p.path, format_size(p.size)] for p in project.pages]
            ui.console.print(ui.simple_table("Pages", ["Page", "Path", "Size"], rows))
        if project.metadata.technologies:
            ui.console.print(f"[muted]Technologies:[/muted] {', '.join(project.metadata.technologies)}")


def detect_archive(archive: Path) -> None:
    config_svc = get_config_service()
    mapping = load_signatures(config_svc.get_signatures_path())
    with open_project(archive) as project:
        detector = FunctionalityDetector(mapping)
        detections = detector.detect(project)

    if ui.is_json():
        ui.print_json_output({key: d.to_dict() for key, d in detections.items()})
        return
    if not detections:
        ui.console.print("[muted]No known functionalities detected.[/muted]")
        return

    rows = []
    for key, detection in detections.items():
        patterns = sorted({o.pattern for o in detection.occurrences})
        rows.append([key, detection.name, detection.count, ", ".join(patterns)])
    ui.console.print(ui.simple_table("Detected Functionalities", ["Key", "Name", "Matches", "Patterns"], rows))
    ui.console.print("\n[muted]Run 'l2wp recommend KEY' to rank substitute components.[/muted]")


def show_styles(archive: Path, palette: bool = False, stylesheet: bool = False) -> None:
    extractor = StyleExtractor()
    with open_project(archive) as project:
        data = extractor.extract(project)

    if stylesheet:
        print(extractor.generate_stylesheet(data))
        return
    if ui.is_json():
        payload = data.to_dict()
        if palette:
            payload = {"palette": extractor.get_color_palette(data)}
        ui.print_json_output(payload)
        return

    if palette:
        rows = [[c["id"], c["label"], c["color"]] for c in extractor.get_color_palette(data)]
        ui.console.print(ui.simple_table("Color Palette", ["Id", "Label", "Color"], rows))
        return

    rows = [[name, value] for name, value in data.colors.items()]
    ui.console.print(ui.simple_table("Colors", ["Property", "Value"], rows))
    if data.fonts:
        font_rows = [[f.name, f.source, f.url or "-"] for f in data.fonts]
        ui.console.print(ui.simple_table("Fonts", ["Family", "Source", "URL"], font_rows))
    ui.console.print(f"[muted]Custom CSS: {len(data.custom_css)} characters after cleanup[/muted]")
