"""Data models for functionality detection and recommendations."""
from __future__ import annotations

from dataclasses import asdict, dataclass, field, replace
from typing import Optional


@dataclass
class SolutionCandidate:
    """One substitute component for a detected functionality.

    ``installed`` and ``active`` are filled in at query time and are
    never persisted with the signature table.
    """
    slug: str
    name: str = ""
    provider: str = ""
    type: str = "plugin"  # native | plugin
    pricing: str = "free"  # free | premium
    compatibility: int = 0  # 0-100
    features: list[str] = field(default_factory=list)
    conversion_method: str = "generic_conversion"
    installed: bool = False
    active: bool = False

    @property
    def is_native(self) -> bool:
        return self.type == "native"

    def with_status(self, installed: bool, active: bool) -> "SolutionCandidate":
        return replace(self, installed=installed, active=active, features=list(self.features))

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "SolutionCandidate":
        return cls(
            slug=str(data["slug"]),
            name=data.get("name", data["slug"]),
            provider=data.get("provider", ""),
            type=data.get("type", "plugin"),
            pricing=data.get("pricing", "free"),
            compatibility=int(data.get("compatibility", 0)),
            features=list(data.get("features") or []),
            conversion_method=data.get("conversion_method") or "generic_conversion",
        )


@dataclass
class SignatureEntry:
    """A detectable functionality: how to spot it and what can replace it."""
    key: str
    name: str
    patterns: list[str] = field(default_factory=list)
    solutions: list[SolutionCandidate] = field(default_factory=list)

    @classmethod
    def from_dict(cls, key: str, data: dict) -> "SignatureEntry":
        return cls(
            key=key,
            name=data.get("name", key),
            patterns=[str(p) for p in data.get("detector_patterns") or [] if p],
            solutions=[SolutionCandidate.from_dict(s) for s in data.get("recommended_solutions") or []],
        )


# Functionality key -> entry, in table order
SignatureMapping = dict[str, SignatureEntry]


@dataclass
class Occurrence:
    """One pattern hit, in a source file or a dependency name."""
    pattern: str
    context: str = ""
    file: Optional[str] = None
    dependency: Optional[str] = None

    @property
    def source(self) -> str:
        return self.file if self.file is not None else (self.dependency or "")

    def to_dict(self) -> dict:
        data = {"pattern": self.pattern}
        if self.file is not None:
            data["file"] = self.file
            data["context"] = self.context
        if self.dependency is not None:
            data["dependency"] = self.dependency
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "Occurrence":
        return cls(
            pattern=data["pattern"],
            context=data.get("context", ""),
            file=data.get("file"),
            dependency=data.get("dependency"),
        )


@dataclass
class Detection:
    """A functionality found in the project, with its evidence."""
    key: str
    name: str
    occurrences: list[Occurrence] = field(default_factory=list)
    solutions: list[SolutionCandidate] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.occurrences)

    def to_dict(self) -> dict:
        return {
            "key": self.key,
            "name": self.name,
            "count": self.count,
            "occurrences": [o.to_dict() for o in self.occurrences],
            "recommended_solutions": [s.to_dict() for s in self.solutions],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Detection":
        return cls(
            key=data["key"],
            name=data.get("name", data["key"]),
            occurrences=[Occurrence.from_dict(o) for o in data.get("occurrences", [])],
            solutions=[SolutionCandidate.from_dict(s) for s in data.get("recommended_solutions", [])],
        )
