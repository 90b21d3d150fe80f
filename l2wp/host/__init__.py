"""Host collaborators: plugin registry, document store, media library.

Implementations are discovered via entry points (groups
``l2wp.plugin_registries`` and ``l2wp.document_stores``) and selected by
config (``host.registry``, ``host.document_store``). The file-backed
built-ins keep their state under the l2wp data directory.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from .document_store import DocumentStore, JsonDocumentStore
from .media_library import DirectoryMediaLibrary, MediaLibrary
from .plugin_registry import FilePluginRegistry, PluginRegistry

logger = logging.getLogger("l2wp.host")

BUILTIN_REGISTRIES: dict[str, type] = {"file": FilePluginRegistry}
BUILTIN_DOCUMENT_STORES: dict[str, type] = {"json": JsonDocumentStore}


def _select(kind: str, name: str, discovered: dict[str, type], builtins: dict[str, type]) -> type:
    available = {**builtins, **discovered}
    if name not in available:
        from l2wp.errors import ConfigError
        raise ConfigError(
            f"Unknown {kind} '{name}'. Available: {', '.join(sorted(available))}",
            context={kind: name},
        )
    return available[name]


def _data_dir(data_dir: Optional[Path]) -> Path:
    if data_dir is not None:
        return Path(data_dir)
    from l2wp.core.config_service import get_config_service
    return get_config_service().get_data_dir()


def get_plugin_registry(name: Optional[str] = None, data_dir: Optional[Path] = None) -> PluginRegistry:
    """Instantiate the configured plugin registry."""
    from l2wp.core.config_service import get_config_service
    from l2wp.plugins import discover_plugin_registries

    name = name or get_config_service().get("host.registry", "file")
    cls = _select("plugin registry", name, discover_plugin_registries(), BUILTIN_REGISTRIES)
    logger.debug("Using plugin registry %s", name)
    return cls.in_dir(_data_dir(data_dir))


def get_document_store(name: Optional[str] = None, data_dir: Optional[Path] = None) -> DocumentStore:
    """Instantiate the configured document store."""
    from l2wp.core.config_service import get_config_service
    from l2wp.plugins import discover_document_stores

    name = name or get_config_service().get("host.document_store", "json")
    cls = _select("document store", name, discover_document_stores(), BUILTIN_DOCUMENT_STORES)
    logger.debug("Using document store %s", name)
    return cls.in_dir(_data_dir(data_dir))


def get_media_library(data_dir: Optional[Path] = None) -> MediaLibrary:
    return DirectoryMediaLibrary.in_dir(_data_dir(data_dir))


__all__ = [
    "DocumentStore",
    "MediaLibrary",
    "PluginRegistry",
    "get_document_store",
    "get_media_library",
    "get_plugin_registry",
]
