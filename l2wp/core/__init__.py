"""Service layer for l2wp.

Services return typed dataclasses and never import from l2wp.ui,
l2wp.cli or typer. The CLI handles presentation.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from l2wp.analyzers.models import ProjectModel
    from l2wp.builder.page_translator import PageResult
    from l2wp.detection.models import Detection

SUCCESS = "success"
PARTIAL = "partial"


@dataclass
class BatchResult:
    """Outcome of a fail-soft batch: what went through, what did not."""

    succeeded: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors


@dataclass
class UploadResult:
    """Result of validating, analyzing and scanning an uploaded archive."""

    project: ProjectModel
    detections: dict[str, Detection]
    warnings: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "project": self.project.to_dict(include_content=False),
            "detections": {key: d.to_dict() for key, d in self.detections.items()},
            "warnings": list(self.warnings),
        }


@dataclass
class ImportReport:
    """Summary of one import run."""

    status: str
    created_pages: list[PageResult] = field(default_factory=list)
    installed_plugins: list[str] = field(default_factory=list)
    imported_assets: int = 0
    css_extracted: bool = False
    errors: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "status": self.status,
            "created_pages": [
                {"page": p.page_name, "id": p.document_id, "sections": p.sections_count}
                for p in self.created_pages
            ],
            "installed_plugins": list(self.installed_plugins),
            "imported_assets": self.imported_assets,
            "css_extracted": self.css_extracted,
            "errors": list(self.errors),
        }
