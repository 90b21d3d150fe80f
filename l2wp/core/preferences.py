"""Persisted solution preferences (functionality key -> chosen slug).

Stored as a small YAML file in the data directory. Writes are
read-modify-write without locking; the last writer wins.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Union

import yaml

logger = logging.getLogger("l2wp.core.preferences")

PREFERENCES_FILE = "preferences.yaml"


class PreferenceStore:
    """YAML-backed store for UserPreferences."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    @classmethod
    def in_dir(cls, data_dir: Union[str, Path]) -> "PreferenceStore":
        return cls(Path(data_dir) / PREFERENCES_FILE)

    def load(self) -> dict[str, str]:
        """Saved preferences; an absent or unreadable file means none."""
        if not self.path.is_file():
            return {}
        try:
            with open(self.path) as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            logger.warning("Could not read preferences from %s: %s", self.path, e)
            return {}
        prefs = data.get("preferences", {}) if isinstance(data, dict) else {}
        return {str(k): str(v) for k, v in (prefs or {}).items()}

    def save(self, preferences: dict[str, str]) -> None:
        """Replace the stored preferences."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w") as f:
            yaml.safe_dump({"preferences": dict(preferences)}, f, default_flow_style=False, sort_keys=False)
        logger.info("Saved %d preference(s) to %s", len(preferences), self.path)

    def update(self, key: str, slug: str) -> dict[str, str]:
        prefs = self.load()
        prefs[key] = slug
        self.save(prefs)
        return prefs

    def clear(self) -> None:
        if self.path.exists():
            self.path.unlink()
            logger.info("Cleared preferences at %s", self.path)
