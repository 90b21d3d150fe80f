"""Tests for the plugin discovery system."""
from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest

from l2wp.plugins import (
    DOCUMENT_STORE_GROUP,
    FIELD_PROVIDER_GROUP,
    PLUGIN_REGISTRY_GROUP,
    discover_field_providers,
    discover_plugins,
    list_all_plugins,
)


def _make_entry_point(name: str, value: str, group: str):
    """Create a mock entry point."""
    ep = MagicMock()
    ep.name = name
    ep.value = value
    ep.group = group
    return ep


class TestDiscoverPlugins:
    """Tests for discover_plugins function."""

    def test_discovers_entry_points(self):
        """Should load plugins from entry points."""
        mock_class = type("MockProvider", (), {})
        ep = _make_entry_point("mock", "mock_pkg:MockProvider", FIELD_PROVIDER_GROUP)
        ep.load.return_value = mock_class

        with patch("l2wp.plugins.entry_points", return_value=[ep]):
            result = discover_plugins(FIELD_PROVIDER_GROUP)

        assert result == {"mock": mock_class}

    def test_handles_load_error(self):
        """Should skip plugins that fail to load."""
        ep = _make_entry_point("broken", "broken_pkg:Bad", FIELD_PROVIDER_GROUP)
        ep.load.side_effect = ImportError("no module")

        with patch("l2wp.plugins.entry_points", return_value=[ep]):
            result = discover_plugins(FIELD_PROVIDER_GROUP)

        assert result == {}

    def test_empty_group(self):
        with patch("l2wp.plugins.entry_points", return_value=[]):
            assert discover_plugins(DOCUMENT_STORE_GROUP) == {}


class TestDiscoverFieldProviders:
    def test_calls_with_field_provider_group(self):
        with patch("l2wp.plugins.discover_plugins", return_value={"acf": object}) as mock:
            result = discover_field_providers()

        mock.assert_called_once_with(FIELD_PROVIDER_GROUP)
        assert result == {"acf": object}


class TestListAllPlugins:
    def test_lists_plugins_from_all_groups(self):
        """Should return PluginInfo for every entry point across groups."""
        ep1 = _make_entry_point("meta", "l2wp.providers.meta_provider:MetaFieldProvider", FIELD_PROVIDER_GROUP)
        ep1.load.return_value = object
        ep2 = _make_entry_point("broken", "bad:Thing", PLUGIN_REGISTRY_GROUP)
        ep2.load.side_effect = ImportError("no module")

        def fake_entry_points(group):
            return {FIELD_PROVIDER_GROUP: [ep1], PLUGIN_REGISTRY_GROUP: [ep2], DOCUMENT_STORE_GROUP: []}[group]

        with patch("l2wp.plugins.entry_points", side_effect=fake_entry_points):
            result = list_all_plugins()

        assert len(result) == 2
        loaded = [p for p in result if p.loaded]
        failed = [p for p in result if not p.loaded]
        assert [p.name for p in loaded] == ["meta"]
        assert [p.name for p in failed] == ["broken"]
        assert "no module" in failed[0].error


class TestProviderRegistryIntegration:
    """The field provider registry populates itself through plugin discovery."""

    def test_providers_register_from_entry_points(self, monkeypatch):
        from l2wp import providers

        monkeypatch.setattr(providers, "PROVIDERS", {})
        mock_cls = MagicMock()

        with patch("l2wp.plugins.discover_field_providers", return_value={"acf": mock_cls}):
            providers._register_defaults()

        assert providers.PROVIDERS == {"acf": mock_cls}

    def test_fallback_when_no_entry_points(self, monkeypatch):
        from l2wp import providers
        from l2wp.providers.meta_provider import MetaFieldProvider
        from l2wp.providers.null_provider import NullFieldProvider

        monkeypatch.setattr(providers, "PROVIDERS", {})

        with patch("l2wp.plugins.discover_field_providers", return_value={}):
            providers._register_defaults()

        assert providers.PROVIDERS == {"null": NullFieldProvider, "meta": MetaFieldProvider}

    def test_get_provider_names_dynamic(self, monkeypatch):
        from l2wp import providers

        monkeypatch.setattr(providers, "PROVIDERS", {"meta": object, "acf": object})
        assert providers.get_provider_names() == ["acf", "meta"]


class TestHostSelection:
    def test_discovered_registry_wins(self, l2wp_home):
        from l2wp.host import get_plugin_registry

        custom = MagicMock()
        custom.in_dir.return_value = "registry"
        with patch("l2wp.plugins.discover_plugin_registries", return_value={"remote": custom}):
            assert get_plugin_registry("remote") == "registry"
        custom.in_dir.assert_called_once_with(l2wp_home)

    def test_unknown_store_is_config_error(self):
        from l2wp.errors import ConfigError
        from l2wp.host import get_document_store

        with patch("l2wp.plugins.discover_document_stores", return_value={}):
            with pytest.raises(ConfigError, match="Unknown document store 'sql'"):
                get_document_store("sql")
