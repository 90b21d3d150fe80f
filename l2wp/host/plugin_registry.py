"""Host plugin registry collaborator.

The recommender only needs to ask whether a slug is installed or active
and to request installation/activation. :class:`FilePluginRegistry`
keeps that state in a YAML file so the pipeline can run without a live
host; a real host integration registers its own class under the
``l2wp.plugin_registries`` entry point group.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Protocol, Union, runtime_checkable

import yaml

from l2wp.errors import CollaboratorError

logger = logging.getLogger("l2wp.host.registry")

REGISTRY_FILE = "plugins.yaml"


@runtime_checkable
class PluginRegistry(Protocol):
    """Protocol that all plugin registries must satisfy."""

    name: str

    def is_installed(self, slug: str) -> bool: ...
    def is_active(self, slug: str) -> bool: ...
    def install(self, slug: str) -> None: ...
    def activate(self, slug: str) -> None: ...
    def pro_defined(self) -> bool: ...
    def pro_active(self) -> bool: ...


def match_plugin_path(paths, slug: str) -> Optional[str]:
    """First plugin path that starts with ``slug/`` or names ``slug.php``."""
    for path in paths:
        if path.startswith(f"{slug}/") or f"{slug}.php" in path:
            return path
    return None


class FilePluginRegistry:
    """Plugin registry persisted as YAML.

    File layout::

        plugins:
          contact-form-7/wp-contact-form-7.php: {active: true}
        pro: {defined: false, active: false}
        unavailable: [some-slug]   # install() fails for these
    """

    name = "file"

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    @classmethod
    def in_dir(cls, data_dir: Union[str, Path]) -> "FilePluginRegistry":
        return cls(Path(data_dir) / REGISTRY_FILE)

    def _load(self) -> dict:
        if not self.path.is_file():
            return {"plugins": {}, "pro": {"defined": False, "active": False}, "unavailable": []}
        try:
            with open(self.path) as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise CollaboratorError(
                f"Plugin registry unreadable: {self.path}", collaborator=self.name, cause=e
            ) from e
        data.setdefault("plugins", {})
        data.setdefault("pro", {"defined": False, "active": False})
        data.setdefault("unavailable", [])
        return data

    def _save(self, data: dict) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w") as f:
            yaml.safe_dump(data, f, default_flow_style=False, sort_keys=False)

    def plugins(self) -> dict[str, dict]:
        return dict(self._load()["plugins"])

    def find_plugin_file(self, slug: str) -> Optional[str]:
        return match_plugin_path(self._load()["plugins"], slug)

    def is_installed(self, slug: str) -> bool:
        return self.find_plugin_file(slug) is not None

    def is_active(self, slug: str) -> bool:
        data = self._load()
        path = match_plugin_path(data["plugins"], slug)
        if path is None:
            return False
        return bool((data["plugins"][path] or {}).get("active", False))

    def install(self, slug: str) -> None:
        data = self._load()
        if match_plugin_path(data["plugins"], slug) is not None:
            return
        if slug in data["unavailable"]:
            raise CollaboratorError(
                f"Plugin '{slug}' could not be downloaded", collaborator=self.name, context={"slug": slug}
            )
        data["plugins"][f"{slug}/{slug}.php"] = {"active": False}
        self._save(data)
        logger.info("Installed plugin %s", slug)

    def activate(self, slug: str) -> None:
        data = self._load()
        path = match_plugin_path(data["plugins"], slug)
        if path is None:
            raise CollaboratorError("Plugin file not found", collaborator=self.name, context={"slug": slug})
        entry = data["plugins"].get(path) or {}
        if entry.get("active"):
            return
        entry["active"] = True
        data["plugins"][path] = entry
        self._save(data)
        logger.info("Activated plugin %s", path)

    def pro_defined(self) -> bool:
        return bool(self._load()["pro"].get("defined", False))

    def pro_active(self) -> bool:
        pro = self._load()["pro"]
        return bool(pro.get("defined", False) and pro.get("active", False))
