"""End-to-end import orchestration.

Two steps, matching the interactive workflow:

1. :meth:`ImportService.upload` validates and analyzes an archive, scans
   it for functionalities and caches the result for the user.
2. :meth:`ImportService.run_import` takes the user's component choices
   and, from the cached analysis, installs plugins, builds one draft
   document per page, imports image assets and extracts the stylesheet.

Step 2 is fail-soft: a failed plugin, page or asset is reported in the
result and the rest of the batch still runs.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Union

from l2wp.analyzers.archive_analyzer import ArchiveAnalyzer
from l2wp.analyzers.models import AssetFile
from l2wp.analyzers.style_extractor import StyleData, StyleExtractor
from l2wp.analyzers.validator import ArchiveValidator
from l2wp.builder.page_translator import build_pages
from l2wp.core import PARTIAL, SUCCESS, BatchResult, ImportReport, UploadResult
from l2wp.core.cache import AnalysisCache, user_key
from l2wp.core.config_service import ConfigService, get_config_service
from l2wp.core.preferences import PreferenceStore
from l2wp.detection.detector import FunctionalityDetector
from l2wp.detection.models import SignatureMapping
from l2wp.detection.recommender import PluginRecommender
from l2wp.detection.signatures import load_signatures
from l2wp.errors import L2WPError, NotFoundError
from l2wp.host import get_document_store, get_media_library, get_plugin_registry
from l2wp.host.document_store import DocumentStore
from l2wp.host.media_library import MediaLibrary
from l2wp.host.plugin_registry import PluginRegistry

logger = logging.getLogger("l2wp.core.import")

SKIP = "skip"
STYLES_DIR = "styles"


class ImportService:
    """Runs uploads and imports against one set of host collaborators.

    Collaborators not passed in are built from config.
    """

    def __init__(
        self,
        config: Optional[ConfigService] = None,
        registry: Optional[PluginRegistry] = None,
        store: Optional[DocumentStore] = None,
        media: Optional[MediaLibrary] = None,
        cache: Optional[AnalysisCache] = None,
        mapping: Optional[SignatureMapping] = None,
        preferences: Optional[PreferenceStore] = None,
    ):
        self.config = config or get_config_service()
        data_dir = self.config.get_data_dir()
        self.data_dir = data_dir
        self.registry = registry or get_plugin_registry(data_dir=data_dir)
        self.store = store or get_document_store(data_dir=data_dir)
        self.media = media or get_media_library(data_dir=data_dir)
        self.cache = cache or AnalysisCache.in_dir(data_dir, ttl=int(self.config.get("cache.ttl_seconds", 3600)))
        self.mapping = mapping if mapping is not None else load_signatures(self.config.get_signatures_path())
        self.preferences = preferences or PreferenceStore.in_dir(data_dir)

    def recommender(self) -> PluginRecommender:
        return PluginRecommender(
            self.mapping,
            registry=self.registry,
            preferences=self.preferences,
            pro_active=self.config.get_pro_override(),
        )

    # ── Step 1 ──

    def upload(self, archive: Union[str, Path], user: str, filename: Optional[str] = None) -> UploadResult:
        """Validate, analyze and scan ``archive``; cache the result for ``user``.

        The extraction directory is removed before returning, whatever
        the outcome.
        """
        validator = ArchiveValidator(max_size=self.config.get_max_archive_bytes())
        report = validator.validate(archive, filename=filename)

        with ArchiveAnalyzer(temp_root=self.config.get_temp_dir()) as analyzer:
            project = analyzer.analyze(archive)
            detections = FunctionalityDetector(self.mapping).detect(project)
            entry = self.cache.put(user, project, detections)

        logger.info(
            "Uploaded %s for %s: %d page(s), %d functionalit%s",
            entry.project.project_name, user, len(entry.project.pages),
            len(detections), "y" if len(detections) == 1 else "ies",
        )
        return UploadResult(project=entry.project, detections=detections, warnings=report.warnings)

    # ── Step 2 ──

    def run_import(
        self,
        user: str,
        choices: Optional[dict[str, str]] = None,
        install_plugins: bool = True,
        import_assets: bool = True,
        apply_css: bool = True,
        remember: bool = False,
    ) -> ImportReport:
        """Import the cached analysis for ``user``.

        Args:
            choices: Functionality key -> chosen slug (``"skip"`` to skip).
            install_plugins: Install (and activate) the chosen plugins.
            import_assets: Copy image assets into the media library.
            apply_css: Extract the project stylesheet and attach it to pages.
            remember: Save ``choices`` as the user's preferences.

        Raises:
            NotFoundError: no (unexpired) analysis is cached for ``user``.
        """
        entry = self.cache.get(user)
        if entry is None:
            raise NotFoundError("analysis", user)
        project = entry.project
        choices = dict(choices or {})
        report = ImportReport(status=SUCCESS)

        if remember and choices:
            self.preferences.save(choices)

        if install_plugins and choices:
            plugins = self.install_choices(choices)
            report.installed_plugins = plugins.succeeded
            report.errors.extend(plugins.errors)

        style: Optional[StyleData] = None
        if apply_css:
            style = StyleExtractor().extract(project)
            report.css_extracted = self._store_stylesheet(user, style)

        report.created_pages = build_pages(project, self.store, style=style, status="draft", errors=report.errors)

        if import_assets:
            assets = self.import_images(project.assets.images)
            report.imported_assets = len(assets.succeeded)
            report.errors.extend(assets.errors)

        self.cache.delete(user)
        report.status = SUCCESS if not report.errors else PARTIAL
        logger.info(
            "Import for %s finished (%s): %d page(s), %d plugin(s), %d asset(s)",
            user, report.status, len(report.created_pages), len(report.installed_plugins), report.imported_assets,
        )
        return report

    def install_choices(self, choices: dict[str, str]) -> BatchResult:
        """Install and activate each chosen slug that is not already active."""
        recommender = self.recommender()
        result = BatchResult()
        for key, slug in choices.items():
            if not slug or slug == SKIP or recommender.is_active(slug):
                continue
            try:
                recommender.install_plugin(slug)
                recommender.activate_plugin(slug)
            except L2WPError as e:
                logger.warning("Failed to install %s for %s: %s", slug, key, e)
                result.errors.append(f"Failed to install {slug}: {e}")
                continue
            result.succeeded.append(slug)
        return result

    def import_images(self, images: list[AssetFile]) -> BatchResult:
        result = BatchResult()
        for image in images:
            try:
                media_id = self.media.import_file(Path(image.path), image.name)
            except L2WPError as e:
                logger.warning("Failed to import asset %s: %s", image.name, e)
                result.errors.append(f"Failed to import asset {image.name}: {e}")
                continue
            result.succeeded.append(media_id)
        return result

    def _store_stylesheet(self, user: str, style: StyleData) -> bool:
        """Keep the generated stylesheet for later use; False when empty."""
        stylesheet = StyleExtractor().generate_stylesheet(style)
        if not stylesheet.strip():
            return False
        path = self.data_dir / STYLES_DIR / f"{user_key(user)}.css"
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(stylesheet, encoding="utf-8")
        logger.debug("Stored stylesheet at %s", path)
        return True
