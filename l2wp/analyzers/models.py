"""Data models for archive analysis results."""
from __future__ import annotations

from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Optional

from l2wp.errors import MalformedInputError

DEFAULT_PROJECT_NAME = "Lovable Project"


@dataclass(frozen=True)
class PageFile:
    """A top-level page component (``src/pages/*.tsx``)."""
    name: str  # file name without extension
    file: str
    path: str
    content: str
    size: int

    @classmethod
    def from_dict(cls, data: dict) -> "PageFile":
        return cls(
            name=data["name"],
            file=data["file"],
            path=data.get("path", ""),
            content=data.get("content", ""),
            size=int(data.get("size", 0)),
        )


@dataclass(frozen=True)
class ComponentFile(PageFile):
    """A component found anywhere under ``src/components``."""


@dataclass
class DependencyManifest:
    """Dependencies recovered from ``package.json``."""
    name: str = ""
    version: str = ""
    dependencies: dict[str, str] = field(default_factory=dict)
    dev_dependencies: dict[str, str] = field(default_factory=dict)

    def all_dependencies(self) -> dict[str, str]:
        """Runtime then dev dependencies; runtime wins on duplicates."""
        ordered = dict(self.dependencies)
        for name, version in self.dev_dependencies.items():
            ordered.setdefault(name, version)
        return ordered

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "version": self.version,
            "dependencies": dict(self.dependencies),
            "devDependencies": dict(self.dev_dependencies),
        }

    @classmethod
    def from_dict(cls, data: dict, source: str = "package.json") -> "DependencyManifest":
        """Raises MalformedInputError when a dependency table is not an object."""
        tables = {}
        for key, alias in (("dependencies", None), ("devDependencies", "dev_dependencies")):
            table = data.get(key) or (data.get(alias) if alias else None) or {}
            if not isinstance(table, dict):
                raise MalformedInputError("syntax", source=source, detail=f"'{key}' must be an object")
            tables[key] = {str(name): str(version) for name, version in table.items()}
        return cls(
            name=str(data.get("name", "") or ""),
            version=str(data.get("version", "") or ""),
            dependencies=tables["dependencies"],
            dev_dependencies=tables["devDependencies"],
        )


@dataclass
class AssetFile:
    """One inventoried asset. ``content`` is only kept for stylesheets."""
    name: str
    path: str
    size: int
    type: str  # file extension, lower case
    content: str = ""

    @classmethod
    def from_dict(cls, data: dict) -> "AssetFile":
        return cls(
            name=data["name"],
            path=data.get("path", ""),
            size=int(data.get("size", 0)),
            type=data.get("type", ""),
            content=data.get("content", ""),
        )


@dataclass
class AssetInventory:
    images: list[AssetFile] = field(default_factory=list)
    fonts: list[AssetFile] = field(default_factory=list)
    css: list[AssetFile] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.images) + len(self.fonts) + len(self.css)

    def to_dict(self) -> dict:
        return {
            "images": [asdict(a) for a in self.images],
            "fonts": [asdict(a) for a in self.fonts],
            "css": [asdict(a) for a in self.css],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "AssetInventory":
        return cls(
            images=[AssetFile.from_dict(a) for a in data.get("images", [])],
            fonts=[AssetFile.from_dict(a) for a in data.get("fonts", [])],
            css=[AssetFile.from_dict(a) for a in data.get("css", [])],
        )


@dataclass
class BuildMetadata:
    """Build tooling and the top-level shape of the extracted project."""
    build_tool: str = "unknown"
    has_src: bool = False
    has_public: bool = False
    has_manifest: bool = False
    has_index_html: bool = False

    @classmethod
    def from_dict(cls, data: dict) -> "BuildMetadata":
        return cls(**{k: data[k] for k in cls.__dataclass_fields__ if k in data})


@dataclass
class ProjectMetadata:
    """Fields read from the optional ``project-structure.json`` description."""
    name: str = ""
    description: str = ""
    objective: str = ""
    target_audience: str = ""
    technologies: list[str] = field(default_factory=list)
    design: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict) -> "ProjectMetadata":
        return cls(**{k: data[k] for k in cls.__dataclass_fields__ if k in data})


@dataclass
class ProjectModel:
    """Complete analysis of one uploaded project archive."""
    project_name: str = DEFAULT_PROJECT_NAME
    description: str = ""
    pages: list[PageFile] = field(default_factory=list)
    components: list[ComponentFile] = field(default_factory=list)
    manifest: DependencyManifest = field(default_factory=DependencyManifest)
    assets: AssetInventory = field(default_factory=AssetInventory)
    build: BuildMetadata = field(default_factory=BuildMetadata)
    metadata: ProjectMetadata = field(default_factory=ProjectMetadata)
    root_path: Optional[Path] = None

    @property
    def design_tokens(self) -> dict[str, Any]:
        return self.metadata.design

    def source_files(self) -> list[PageFile]:
        """Pages then components, in extraction order."""
        return [*self.pages, *self.components]

    def to_dict(self, include_content: bool = True) -> dict:
        def _file(f: PageFile) -> dict:
            data = asdict(f)
            if not include_content:
                data.pop("content")
            return data

        return {
            "project_name": self.project_name,
            "description": self.description,
            "pages": [_file(p) for p in self.pages],
            "components": [_file(c) for c in self.components],
            "manifest": self.manifest.to_dict(),
            "assets": self.assets.to_dict(),
            "build": asdict(self.build),
            "metadata": asdict(self.metadata),
            "root_path": str(self.root_path) if self.root_path else None,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ProjectModel":
        root = data.get("root_path")
        return cls(
            project_name=data.get("project_name") or DEFAULT_PROJECT_NAME,
            description=data.get("description", ""),
            pages=[PageFile.from_dict(p) for p in data.get("pages", [])],
            components=[ComponentFile.from_dict(c) for c in data.get("components", [])],
            manifest=DependencyManifest.from_dict(data.get("manifest", {})),
            assets=AssetInventory.from_dict(data.get("assets", {})),
            build=BuildMetadata.from_dict(data.get("build", {})),
            metadata=ProjectMetadata.from_dict(data.get("metadata", {})),
            root_path=Path(root) if root else None,
        )
