"""Pattern-based functionality detection.

Every signature pattern is searched case-insensitively in each page and
component source, then in every dependency name. Hits become
:class:`Occurrence` records; only functionalities with at least one hit
produce a :class:`Detection`.
"""

from __future__ import annotations

import logging
from typing import Optional

from l2wp.analyzers.models import ProjectModel

from .models import Detection, Occurrence, SignatureMapping

logger = logging.getLogger(__name__)

CONTEXT_BEFORE = 100
CONTEXT_WINDOW = 200


def context_around(content: str, pattern: str) -> str:
    """Snippet of at most 200 characters around the first match of ``pattern``."""
    pos = content.lower().find(pattern.lower())
    if pos < 0:
        return ""
    start = max(0, pos - CONTEXT_BEFORE)
    snippet = content[start:start + CONTEXT_WINDOW].strip()
    if len(snippet) > CONTEXT_WINDOW:
        snippet = snippet[:CONTEXT_WINDOW - 3] + "..."
    return snippet


class FunctionalityDetector:
    """Scan a ProjectModel against a signature table."""

    def __init__(self, mapping: Optional[SignatureMapping] = None):
        self.mapping: SignatureMapping = mapping or {}
        self.detections: dict[str, Detection] = {}

    def detect(self, project: ProjectModel) -> dict[str, Detection]:
        files = project.source_files()
        dependencies = list(project.manifest.all_dependencies())
        lowered = [f.content.lower() for f in files]

        detections: dict[str, Detection] = {}
        for key, entry in self.mapping.items():
            occurrences: list[Occurrence] = []
            for source, content in zip(files, lowered):
                for pattern in entry.patterns:
                    if pattern.lower() in content:
                        occurrences.append(Occurrence(
                            pattern=pattern,
                            context=context_around(source.content, pattern),
                            file=source.name,
                        ))
            for dependency in dependencies:
                for pattern in entry.patterns:
                    if pattern.lower() in dependency.lower():
                        occurrences.append(Occurrence(pattern=pattern, dependency=dependency))

            if occurrences:
                detections[key] = Detection(
                    key=key,
                    name=entry.name,
                    occurrences=occurrences,
                    solutions=list(entry.solutions),
                )

        self.detections = detections
        logger.info("Detected %d functionalities", len(detections))
        return detections

    def get_summary(self) -> dict:
        return {
            "total_functionalities": len(self.detections),
            "functionalities": {
                key: {
                    "name": detection.name,
                    "count": detection.count,
                    "solutions_available": len(detection.solutions),
                }
                for key, detection in self.detections.items()
            },
        }

    def get_detections(self) -> dict[str, Detection]:
        return self.detections

    def get_detection(self, key: str) -> Optional[Detection]:
        return self.detections.get(key)
