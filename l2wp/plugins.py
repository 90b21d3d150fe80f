"""Plugin discovery via setuptools entry points.

Third-party packages can register collaborators by declaring entry points
in their ``pyproject.toml``::

    [project.entry-points."l2wp.field_providers"]
    acf = "l2wp_acf:ACFFieldProvider"

After ``pip install l2wp-acf``, setting ``fields.acf = "acf"`` routes
``{{acf.*}}`` placeholders to that provider.

Entry point groups:
    l2wp.field_providers    - custom-field backends (FieldProvider protocol)
    l2wp.plugin_registries  - host plugin registries (PluginRegistry protocol)
    l2wp.document_stores    - target document stores (DocumentStore protocol)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from importlib.metadata import entry_points
from typing import Any

logger = logging.getLogger("l2wp.plugins")

# Entry point group names
FIELD_PROVIDER_GROUP = "l2wp.field_providers"
PLUGIN_REGISTRY_GROUP = "l2wp.plugin_registries"
DOCUMENT_STORE_GROUP = "l2wp.document_stores"

ALL_GROUPS = [FIELD_PROVIDER_GROUP, PLUGIN_REGISTRY_GROUP, DOCUMENT_STORE_GROUP]


@dataclass
class PluginInfo:
    """Metadata about a discovered plugin."""

    name: str
    group: str
    module: str
    loaded: bool = False
    error: str = ""
    instance: Any = field(default=None, repr=False)


def discover_plugins(group: str) -> dict[str, Any]:
    """Discover all registered plugins for a given entry point group.

    Args:
        group: Entry point group name (e.g. ``l2wp.field_providers``).

    Returns:
        Dict mapping plugin name to its loaded class/module.
    """
    plugins = {}
    for ep in entry_points(group=group):
        try:
            plugins[ep.name] = ep.load()
            logger.debug("Loaded plugin %s from %s", ep.name, ep.value)
        except Exception as e:
            logger.warning("Failed to load plugin %s: %s", ep.name, e)
    return plugins


def discover_field_providers() -> dict[str, type]:
    return discover_plugins(FIELD_PROVIDER_GROUP)


def discover_plugin_registries() -> dict[str, type]:
    return discover_plugins(PLUGIN_REGISTRY_GROUP)


def discover_document_stores() -> dict[str, type]:
    return discover_plugins(DOCUMENT_STORE_GROUP)


def list_all_plugins() -> list[PluginInfo]:
    """List all discovered plugins across all groups with load status."""
    results = []
    for group in ALL_GROUPS:
        for ep in entry_points(group=group):
            info = PluginInfo(name=ep.name, group=group, module=ep.value)
            try:
                ep.load()
                info.loaded = True
            except Exception as e:
                info.error = str(e)
            results.append(info)
    return results
