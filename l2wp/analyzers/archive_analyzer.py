"""Archive analyzer.

Unpacks an exported Lovable project archive into a private temporary
directory and recovers a :class:`ProjectModel`: pages, components, the
``package.json`` manifest, optional project metadata, assets and the
build tool in use.

The extraction directory belongs to the analyzer instance. Callers are
expected to call :meth:`ArchiveAnalyzer.cleanup` (or use the analyzer as
a context manager); anything left behind is removed at interpreter exit.
"""

from __future__ import annotations

import atexit
import json
import logging
import shutil
import tempfile
import zipfile
from pathlib import Path
from typing import Optional, Union

from l2wp.errors import ArchiveNotFoundError, ExtractionError, MalformedInputError, ValidationError

from .models import (
    DEFAULT_PROJECT_NAME,
    AssetFile,
    AssetInventory,
    BuildMetadata,
    ComponentFile,
    DependencyManifest,
    PageFile,
    ProjectMetadata,
    ProjectModel,
)

logger = logging.getLogger(__name__)

PAGE_EXTENSIONS: set[str] = {".tsx", ".jsx"}
IMAGE_EXTENSIONS: set[str] = {"jpg", "jpeg", "png", "gif", "svg", "webp"}
FONT_EXTENSIONS: set[str] = {"woff", "woff2", "ttf", "otf", "eot"}

# Directories scanned for images and fonts, relative to the project root
ASSET_DIRS = ("public", "src/assets")
# Conventional top-level stylesheets, in inventory order
STYLESHEETS = ("src/index.css", "src/App.css")

MANIFEST_FILE = "package.json"
METADATA_FILE = "project-structure.json"

# Build tool -> config files that identify it, checked in order
BUILD_TOOL_SIGNATURES: list[tuple[str, tuple[str, ...]]] = [
    ("vite", ("vite.config.ts", "vite.config.js")),
    ("webpack", ("webpack.config.js",)),
    ("next", ("next.config.js",)),
]


def has_project_files(directory: Path) -> bool:
    """True when ``directory`` looks like a project root."""
    return (
        (directory / MANIFEST_FILE).is_file()
        or (directory / "src").is_dir()
        or (directory / "index.html").is_file()
    )


def detect_build_tool(root: Path) -> str:
    for tool, config_files in BUILD_TOOL_SIGNATURES:
        if any((root / name).is_file() for name in config_files):
            return tool
    return "unknown"


def _read_text(path: Path) -> str:
    return path.read_text(encoding="utf-8", errors="replace")


def _load_json(path: Path):
    try:
        with open(path, "rb") as f:
            raw = f.read()
        return json.loads(raw.decode("utf-8"))
    except (ValueError, RecursionError) as e:
        # JSONDecodeError and UnicodeDecodeError are both ValueErrors
        raise MalformedInputError.from_exception(e, source=path.name) from e


class ArchiveAnalyzer:
    """Extract and analyze one project archive at a time."""

    def __init__(self, temp_root: Optional[Union[str, Path]] = None):
        self.temp_root = Path(temp_root) if temp_root else None
        self.extract_dir: Optional[Path] = None
        self.project_root: Optional[Path] = None
        self._atexit_registered = False

    def __enter__(self) -> "ArchiveAnalyzer":
        return self

    def __exit__(self, *exc) -> None:
        self.cleanup()

    # ── Public API ──

    def analyze(self, archive_path: Union[str, Path]) -> ProjectModel:
        """Extract ``archive_path`` and build its ProjectModel.

        Raises:
            ArchiveNotFoundError: the archive does not exist.
            ExtractionError: the archive is corrupt or unreadable.
            ValidationError: no project files were found, even after
                descending into a single wrapping directory.
            MalformedInputError: ``package.json`` is not valid JSON, or
                one of its dependency tables is not an object.
        """
        archive_path = Path(archive_path)
        if not archive_path.is_file():
            raise ArchiveNotFoundError(str(archive_path))

        logger.info("Analyzing archive %s", archive_path)
        extract_dir = self._extract(archive_path)
        root = self._locate_project_root(extract_dir)
        return self.analyze_directory(root)

    def analyze_directory(self, root: Union[str, Path]) -> ProjectModel:
        """Build a ProjectModel from an already extracted project tree."""
        root = Path(root)
        self.project_root = root

        metadata = self._read_metadata(root)
        model = ProjectModel(
            project_name=metadata.name or DEFAULT_PROJECT_NAME,
            description=metadata.description,
            pages=self._detect_pages(root),
            components=self._detect_components(root),
            manifest=self._read_manifest(root),
            assets=self._detect_assets(root),
            build=BuildMetadata(
                build_tool=detect_build_tool(root),
                has_src=(root / "src").is_dir(),
                has_public=(root / "public").is_dir(),
                has_manifest=(root / MANIFEST_FILE).is_file(),
                has_index_html=(root / "index.html").is_file(),
            ),
            metadata=metadata,
            root_path=root,
        )
        logger.info(
            "Found %d pages, %d components, %d assets (build tool: %s)",
            len(model.pages), len(model.components), model.assets.total, model.build.build_tool,
        )
        return model

    def cleanup(self) -> None:
        """Recursively remove the extraction directory, if any."""
        if self.extract_dir is not None and self.extract_dir.exists():
            shutil.rmtree(self.extract_dir, ignore_errors=True)
            logger.debug("Removed %s", self.extract_dir)
        self.extract_dir = None
        self.project_root = None
        if self._atexit_registered:
            atexit.unregister(self.cleanup)
            self._atexit_registered = False

    # ── Extraction ──

    def _extract(self, archive_path: Path) -> Path:
        if self.temp_root is not None:
            self.temp_root.mkdir(parents=True, exist_ok=True)
        # A fresh directory per call keeps concurrent analyses apart
        extract_dir = Path(tempfile.mkdtemp(prefix="l2wp-", dir=self.temp_root))
        self.cleanup()
        self.extract_dir = extract_dir
        if not self._atexit_registered:
            atexit.register(self.cleanup)
            self._atexit_registered = True

        try:
            with zipfile.ZipFile(archive_path) as zf:
                base = extract_dir.resolve()
                for member in zf.infolist():
                    target = (extract_dir / member.filename).resolve()
                    if target != base and base not in target.parents:
                        logger.warning("Skipping entry outside extraction dir: %s", member.filename)
                        continue
                    zf.extract(member, extract_dir)
        except (zipfile.BadZipFile, zipfile.LargeZipFile, OSError) as e:
            self.cleanup()
            raise ExtractionError(f"Could not extract {archive_path.name}: {e}", archive=str(archive_path)) from e

        logger.debug("Extracted %s to %s", archive_path, extract_dir)
        return extract_dir

    def _locate_project_root(self, extract_dir: Path) -> Path:
        """Descend once into a lone wrapping directory."""
        root = extract_dir
        if not has_project_files(root):
            dirs = [p for p in root.iterdir() if p.is_dir()]
            if len(dirs) == 1:
                root = dirs[0]
                logger.debug("Descending into wrapper directory %s", root.name)
        if not has_project_files(root):
            raise ValidationError(
                "No project files found (expected package.json, src/ or index.html)",
                reason="invalid_structure",
            )
        return root

    # ── Recovery ──

    def _detect_pages(self, root: Path) -> list[PageFile]:
        pages_dir = root / "src" / "pages"
        if not pages_dir.is_dir():
            return []
        pages = []
        for path in sorted(pages_dir.iterdir()):
            if path.is_file() and path.suffix in PAGE_EXTENSIONS:
                pages.append(PageFile(
                    name=path.stem,
                    file=path.name,
                    path=str(path),
                    content=_read_text(path),
                    size=path.stat().st_size,
                ))
        return pages

    def _detect_components(self, root: Path) -> list[ComponentFile]:
        components_dir = root / "src" / "components"
        if not components_dir.is_dir():
            return []
        components = []
        for path in sorted(components_dir.rglob("*")):
            if path.is_file() and path.suffix in PAGE_EXTENSIONS:
                components.append(ComponentFile(
                    name=path.stem,
                    file=path.name,
                    path=str(path),
                    content=_read_text(path),
                    size=path.stat().st_size,
                ))
        return components

    def _read_manifest(self, root: Path) -> DependencyManifest:
        manifest_path = root / MANIFEST_FILE
        if not manifest_path.is_file():
            return DependencyManifest()
        data = _load_json(manifest_path)
        if not isinstance(data, dict):
            return DependencyManifest()
        return DependencyManifest.from_dict(data)

    def _read_metadata(self, root: Path) -> ProjectMetadata:
        meta_path = root / METADATA_FILE
        if not meta_path.is_file():
            return ProjectMetadata()
        try:
            data = _load_json(meta_path)
        except MalformedInputError as e:
            # Optional file: an unreadable description is not fatal
            logger.warning("Ignoring %s: %s", METADATA_FILE, e)
            return ProjectMetadata()
        proyecto = data.get("proyecto") if isinstance(data, dict) else None
        if not isinstance(proyecto, dict):
            return ProjectMetadata()

        technologies = proyecto.get("tecnologias") or []
        if not isinstance(technologies, list):
            logger.warning("Ignoring %s: 'tecnologias' is not a list", METADATA_FILE)
            technologies = []
        design = proyecto.get("diseño") or {}
        if not isinstance(design, dict):
            logger.warning("Ignoring %s: 'diseño' is not an object", METADATA_FILE)
            design = {}

        return ProjectMetadata(
            name=proyecto.get("nombre", "") or "",
            description=proyecto.get("descripcion", "") or "",
            objective=proyecto.get("objetivo", "") or "",
            target_audience=proyecto.get("publico_objetivo", "") or "",
            technologies=[str(t) for t in technologies],
            design=dict(design),
        )

    def _detect_assets(self, root: Path) -> AssetInventory:
        inventory = AssetInventory()
        for rel in ASSET_DIRS:
            directory = root / rel
            if not directory.is_dir():
                continue
            for path in sorted(directory.rglob("*")):
                if not path.is_file():
                    continue
                ext = path.suffix.lower().lstrip(".")
                if ext in IMAGE_EXTENSIONS:
                    bucket = inventory.images
                elif ext in FONT_EXTENSIONS:
                    bucket = inventory.fonts
                else:
                    continue
                bucket.append(AssetFile(name=path.name, path=str(path), size=path.stat().st_size, type=ext))

        for rel in STYLESHEETS:
            path = root / rel
            if path.is_file():
                inventory.css.append(AssetFile(
                    name=path.name,
                    path=str(path),
                    size=path.stat().st_size,
                    type="css",
                    content=_read_text(path),
                ))
        return inventory
