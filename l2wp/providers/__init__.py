"""Field provider registry and per-namespace selection.

Providers are discovered via setuptools entry points (group
``l2wp.field_providers``). The built-in providers (null, meta) are
registered in pyproject.toml; third-party packages can add providers
for a host's custom-field plugin by declaring their own entry points.
"""
from __future__ import annotations

import logging
from typing import Optional

# Ensure .env is loaded before reading any env vars
from l2wp.config import load_environment

from .base import FieldInfo, FieldProvider

load_environment()

logger = logging.getLogger("l2wp.providers")

# Placeholder namespaces served by a configurable field provider
FIELD_NAMESPACES = ("acf", "jet", "mb")

# Registry of available providers (lazy-loaded via entry points)
PROVIDERS: dict[str, type] = {}

_instances: dict[str, FieldProvider] = {}


def _register_defaults():
    """Discover and register providers via entry points.

    Falls back to direct imports if entry points are not available
    (e.g. running from source without pip install -e).
    """
    if PROVIDERS:
        return

    from l2wp.plugins import discover_field_providers
    discovered = discover_field_providers()

    if discovered:
        PROVIDERS.update(discovered)
        logger.debug("Discovered %d field providers via entry points: %s",
                     len(discovered), list(discovered.keys()))
    else:
        logger.debug("No entry points found, falling back to direct imports")
        from .meta_provider import MetaFieldProvider
        from .null_provider import NullFieldProvider
        PROVIDERS["null"] = NullFieldProvider
        PROVIDERS["meta"] = MetaFieldProvider


def get_field_provider(name: str) -> FieldProvider:
    """Get a field provider instance by registered name.

    Raises:
        ConfigError: If no provider is registered under ``name``.
    """
    _register_defaults()
    if name not in PROVIDERS:
        from l2wp.errors import ConfigError
        available = ", ".join(sorted(PROVIDERS.keys()))
        raise ConfigError(
            f"Unknown field provider '{name}'. Available: {available}",
            context={"provider": name},
        )
    if name not in _instances:
        _instances[name] = PROVIDERS[name]()
    return _instances[name]


def build_providers(names: Optional[dict[str, str]] = None) -> dict[str, FieldProvider]:
    """Map each field namespace to its provider.

    Args:
        names: Namespace to provider name. Missing namespaces are read
            from config (``fields.acf`` etc., default ``null``).
    """
    names = dict(names or {})
    if len(names) < len(FIELD_NAMESPACES):
        from l2wp.core.config_service import get_config_service
        config_svc = get_config_service()
        for namespace in FIELD_NAMESPACES:
            names.setdefault(namespace, config_svc.get_field_provider_name(namespace))
    return {namespace: get_field_provider(names[namespace]) for namespace in FIELD_NAMESPACES}


def get_provider_names() -> list[str]:
    """Get sorted list of all registered provider names."""
    _register_defaults()
    return sorted(PROVIDERS.keys())


def reset_providers():
    """Drop cached provider instances (useful when config changes)."""
    _instances.clear()


__all__ = [
    "FIELD_NAMESPACES",
    "FieldInfo",
    "FieldProvider",
    "build_providers",
    "get_field_provider",
    "get_provider_names",
    "reset_providers",
]
