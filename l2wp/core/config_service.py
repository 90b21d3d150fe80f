"""Layered configuration service for l2wp.

Priority (highest to lowest):
1. Environment variables (L2WP_*)
2. Project config (.l2wp.toml in current directory)
3. Global config (~/.config/l2wp/config.toml)
4. Built-in defaults
"""
from __future__ import annotations

import copy
import logging
import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import tomli_w

logger = logging.getLogger("l2wp.config")

MB = 1024 * 1024

# Default configuration values
DEFAULTS: dict[str, Any] = {
    "data_dir": "",
    "archive": {
        "max_size_mb": 50,
        "temp_dir": "",
    },
    "cache": {
        "ttl_seconds": 3600,
    },
    "detection": {
        "signatures_path": "",
    },
    "host": {
        # "auto" asks the plugin registry; true/false force the pro tier state
        "pro_active": "auto",
        "registry": "file",
        "document_store": "json",
    },
    "fields": {
        "acf": "null",
        "jet": "null",
        "mb": "null",
        "meta_path": "",
    },
    "ui": {
        "plain_output": False,
    },
}

# Mapping of env vars to config paths
ENV_VAR_MAP = {
    "L2WP_HOME": "data_dir",
    "L2WP_MAX_ZIP_MB": "archive.max_size_mb",
    "L2WP_TEMP_DIR": "archive.temp_dir",
    "L2WP_CACHE_TTL": "cache.ttl_seconds",
    "L2WP_SIGNATURES": "detection.signatures_path",
    "L2WP_PRO_ACTIVE": "host.pro_active",
    "L2WP_FIELD_ACF": "fields.acf",
    "L2WP_FIELD_JET": "fields.jet",
    "L2WP_FIELD_MB": "fields.mb",
    "L2WP_FIELDS_FILE": "fields.meta_path",
    "L2WP_PLAIN": "ui.plain_output",
}

# Values that must stay numeric when they arrive as env strings
_INT_KEYS = {"archive.max_size_mb", "cache.ttl_seconds"}


def _global_config_dir() -> Path:
    """Return the global config directory: ~/.config/l2wp/."""
    return Path.home() / ".config" / "l2wp"


def _global_config_path() -> Path:
    return _global_config_dir() / "config.toml"


def _project_config_path() -> Path:
    """Return the project config file path (.l2wp.toml in cwd)."""
    return Path.cwd() / ".l2wp.toml"


def _read_toml(path: Path) -> dict:
    """Read a TOML file, returning empty dict if missing or unreadable."""
    if not path.is_file():
        return {}
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        logger.warning("Failed to read %s: %s", path, e)
        return {}


def _write_toml(data: dict, path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "wb") as f:
        tomli_w.dump(data, f)


def _deep_merge(base: dict, override: dict) -> dict:
    """Deep merge override into base (override wins)."""
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _get_nested(data: dict, dotted_key: str, default: Any = None) -> Any:
    """Get a value from a nested dict using dotted key notation."""
    current = data
    for key in dotted_key.split("."):
        if not isinstance(current, dict):
            return default
        current = current.get(key)
        if current is None:
            return default
    return current


def _set_nested(data: dict, dotted_key: str, value: Any) -> None:
    """Set a value in a nested dict using dotted key notation."""
    keys = dotted_key.split(".")
    current = data
    for key in keys[:-1]:
        if key not in current or not isinstance(current[key], dict):
            current[key] = {}
        current = current[key]
    current[keys[-1]] = value


def _coerce_env(config_path: str, raw: str) -> Any:
    """Turn an env var string into a bool/int where the key expects one."""
    lowered = raw.lower()
    if lowered in ("true", "yes"):
        return True
    if lowered in ("false", "no"):
        return False
    if config_path in _INT_KEYS:
        try:
            return int(raw)
        except ValueError:
            logger.warning("Ignoring non-numeric value %r for %s", raw, config_path)
            return None
    if lowered in ("1", "0") and config_path in ("host.pro_active", "ui.plain_output"):
        return lowered == "1"
    return raw


@dataclass
class ResolvedConfig:
    """Fully resolved configuration after merging all layers."""
    data: dict = field(default_factory=dict)
    global_config_path: Optional[Path] = None
    project_config_path: Optional[Path] = None

    def get(self, dotted_key: str, default: Any = None) -> Any:
        return _get_nested(self.data, dotted_key, default)


class ConfigService:
    """Layered configuration service.

    Resolves config from multiple sources with clear precedence:
    1. Environment variables (L2WP_*)
    2. Project config (.l2wp.toml)
    3. Global config (~/.config/l2wp/config.toml)
    4. Built-in defaults
    """

    def __init__(self):
        self._resolved: Optional[ResolvedConfig] = None

    def resolve(self, force: bool = False) -> ResolvedConfig:
        """Resolve the full config from all layers."""
        if self._resolved is not None and not force:
            return self._resolved

        merged = copy.deepcopy(DEFAULTS)

        global_path = _global_config_path()
        global_data = _read_toml(global_path)
        if global_data:
            merged = _deep_merge(merged, global_data)
            logger.debug("Loaded global config from %s", global_path)

        project_path = _project_config_path()
        project_data = _read_toml(project_path)
        if project_data:
            merged = _deep_merge(merged, project_data)
            logger.debug("Loaded project config from %s", project_path)

        for env_var, config_path in ENV_VAR_MAP.items():
            env_value = os.environ.get(env_var)
            if env_value is None:
                continue
            value = _coerce_env(config_path, env_value)
            if value is not None:
                _set_nested(merged, config_path, value)

        self._resolved = ResolvedConfig(
            data=merged,
            global_config_path=global_path if global_path.is_file() else None,
            project_config_path=project_path if project_path.is_file() else None,
        )
        return self._resolved

    def get(self, dotted_key: str, default: Any = None) -> Any:
        """Get a resolved config value."""
        return self.resolve().get(dotted_key, default)

    def get_data_dir(self) -> Path:
        """Directory holding the cache, preferences and file-backed host data."""
        config_dir = self.get("data_dir", "")
        if config_dir:
            return Path(config_dir).expanduser()
        return Path.home() / ".l2wp"

    def get_max_archive_bytes(self) -> int:
        return int(self.get("archive.max_size_mb", 50)) * MB

    def get_temp_dir(self) -> Optional[Path]:
        """Parent directory for extraction dirs; None means the system default."""
        temp_dir = self.get("archive.temp_dir", "")
        return Path(temp_dir).expanduser() if temp_dir else None

    def get_signatures_path(self) -> Optional[Path]:
        """Override for the packaged signature table, if configured."""
        path = self.get("detection.signatures_path", "")
        return Path(path).expanduser() if path else None

    def get_pro_override(self) -> Optional[bool]:
        """Forced pro-tier state, or None to ask the plugin registry."""
        value = self.get("host.pro_active", "auto")
        if isinstance(value, bool):
            return value
        return None

    def get_field_provider_name(self, namespace: str) -> str:
        return str(self.get(f"fields.{namespace}", "null") or "null")

    def set_global(self, dotted_key: str, value: Any) -> None:
        """Set a value in the global config file."""
        path = _global_config_path()
        data = _read_toml(path)
        _set_nested(data, dotted_key, value)
        _write_toml(data, path)
        self._resolved = None
        logger.info("Set %s = %s in %s", dotted_key, value, path)

    def init_project_config(self) -> Path:
        """Create a .l2wp.toml in the current directory with defaults."""
        path = _project_config_path()
        if path.exists():
            raise FileExistsError(f"Project config already exists: {path}")

        data = {
            "data_dir": "./l2wp-data",
            "archive": {"max_size_mb": DEFAULTS["archive"]["max_size_mb"]},
            "fields": {"acf": "null", "jet": "null", "mb": "null"},
        }
        _write_toml(data, path)
        logger.info("Created project config: %s", path)
        return path

    def show(self) -> dict:
        """Return the resolved config and the files it came from."""
        resolved = self.resolve(force=True)
        return {
            "resolved": resolved.data,
            "sources": {
                "global_config": str(resolved.global_config_path) if resolved.global_config_path else None,
                "project_config": str(resolved.project_config_path) if resolved.project_config_path else None,
            },
        }

    def config_paths(self) -> dict[str, str]:
        """Return all config file locations and their existence status."""
        global_path = _global_config_path()
        project_path = _project_config_path()
        data_dir = self.get_data_dir()
        return {
            "global_config": f"{global_path} ({'exists' if global_path.is_file() else 'not found'})",
            "project_config": f"{project_path} ({'exists' if project_path.is_file() else 'not found'})",
            "data_dir": f"{data_dir} ({'exists' if data_dir.exists() else 'not found'})",
        }


# Module-level singleton
_config_service: Optional[ConfigService] = None


def get_config_service() -> ConfigService:
    """Get or create the global ConfigService instance."""
    global _config_service
    if _config_service is None:
        _config_service = ConfigService()
    return _config_service


def reset_config_service() -> None:
    """Reset the global config service (useful for testing)."""
    global _config_service
    _config_service = None
