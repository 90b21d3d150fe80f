"""Tests for the file-backed host collaborators."""

import pytest
import yaml

from l2wp.errors import CollaboratorError, ConfigError, NotFoundError
from l2wp.host import get_document_store, get_media_library, get_plugin_registry
from l2wp.host.document_store import DocumentStore, JsonDocumentStore
from l2wp.host.media_library import DirectoryMediaLibrary, MediaLibrary
from l2wp.host.plugin_registry import FilePluginRegistry, PluginRegistry, match_plugin_path


class TestMatchPluginPath:
    def test_directory_prefix(self):
        assert match_plugin_path(["contact-form-7/wp-contact-form-7.php"], "contact-form-7") == (
            "contact-form-7/wp-contact-form-7.php"
        )

    def test_file_name(self):
        assert match_plugin_path(["hello.php"], "hello") == "hello.php"

    def test_no_match(self):
        assert match_plugin_path(["akismet/akismet.php"], "jetpack") is None


class TestFilePluginRegistry:
    def test_protocol(self, tmp_path):
        assert isinstance(FilePluginRegistry(tmp_path / "plugins.yaml"), PluginRegistry)

    def test_empty_registry(self, tmp_path):
        registry = FilePluginRegistry(tmp_path / "plugins.yaml")
        assert registry.plugins() == {}
        assert not registry.is_installed("woocommerce")
        assert not registry.pro_defined()
        assert not registry.pro_active()

    def test_install_registers_inactive_plugin(self, tmp_path):
        registry = FilePluginRegistry(tmp_path / "plugins.yaml")
        registry.install("woocommerce")
        assert registry.plugins() == {"woocommerce/woocommerce.php": {"active": False}}
        assert registry.is_installed("woocommerce")
        assert not registry.is_active("woocommerce")

    def test_install_is_idempotent(self, tmp_path):
        registry = FilePluginRegistry(tmp_path / "plugins.yaml")
        registry.install("woocommerce")
        registry.activate("woocommerce")
        registry.install("woocommerce")
        assert registry.is_active("woocommerce")

    def test_activate_missing(self, tmp_path):
        registry = FilePluginRegistry(tmp_path / "plugins.yaml")
        with pytest.raises(CollaboratorError, match="Plugin file not found"):
            registry.activate("woocommerce")

    def test_unavailable(self, tmp_path):
        path = tmp_path / "plugins.yaml"
        path.write_text(yaml.safe_dump({"unavailable": ["meta-box"]}))
        with pytest.raises(CollaboratorError) as exc_info:
            FilePluginRegistry(path).install("meta-box")
        assert exc_info.value.context["slug"] == "meta-box"

    def test_pro_requires_defined(self, tmp_path):
        path = tmp_path / "plugins.yaml"
        path.write_text(yaml.safe_dump({"pro": {"defined": False, "active": True}}))
        assert not FilePluginRegistry(path).pro_active()

    def test_unreadable_file(self, tmp_path):
        path = tmp_path / "plugins.yaml"
        path.write_text("plugins: [unclosed\n")
        with pytest.raises(CollaboratorError, match="unreadable"):
            FilePluginRegistry(path).is_installed("x")


class TestJsonDocumentStore:
    def test_protocol(self, tmp_path):
        assert isinstance(JsonDocumentStore(tmp_path), DocumentStore)

    def test_sequential_ids(self, tmp_path):
        store = JsonDocumentStore(tmp_path / "documents")
        assert store.create_document("Home", [], "page") == "1"
        assert store.create_document("About", [], "page") == "2"

    def test_document_contents(self, tmp_path):
        store = JsonDocumentStore(tmp_path / "documents")
        tree = [{"id": "abc", "elType": "section", "settings": {}, "elements": []}]
        doc_id = store.create_document("Home", tree, "page", page_settings={"custom_css": "a{}"}, status="draft")
        doc = store.get_document(doc_id)
        assert doc["title"] == "Home"
        assert doc["type"] == "page"
        assert doc["status"] == "draft"
        assert doc["edit_mode"] == "builder"
        assert doc["content"] == tree
        assert doc["page_settings"] == {"custom_css": "a{}"}

    def test_no_page_settings_key_when_empty(self, tmp_path):
        store = JsonDocumentStore(tmp_path)
        doc = store.get_document(store.create_document("T", [], "section"))
        assert "page_settings" not in doc
        assert doc["status"] == "publish"

    def test_list_documents(self, tmp_path):
        store = JsonDocumentStore(tmp_path)
        for title in ["A", "B"]:
            store.create_document(title, [], "page")
        assert store.list_documents() == [
            {"id": "1", "title": "A", "type": "page"},
            {"id": "2", "title": "B", "type": "page"},
        ]

    def test_missing_document(self, tmp_path):
        with pytest.raises(NotFoundError):
            JsonDocumentStore(tmp_path).get_document("7")

    def test_write_failure(self, tmp_path):
        blocker = tmp_path / "documents"
        blocker.write_text("a file where the directory should be")
        with pytest.raises(CollaboratorError, match="Could not write document 'Home'"):
            JsonDocumentStore(blocker).create_document("Home", [], "page")


class TestDirectoryMediaLibrary:
    def test_protocol(self, tmp_path):
        assert isinstance(DirectoryMediaLibrary(tmp_path), MediaLibrary)

    def test_import(self, tmp_path):
        source = tmp_path / "logo.png"
        source.write_bytes(b"png")
        library = DirectoryMediaLibrary(tmp_path / "media")
        assert library.import_file(source, "logo.png") == "1"
        assert library.import_file(source, "logo.png") == "2"
        assert library.list_media() == ["1-logo.png", "2-logo.png"]
        assert (tmp_path / "media" / "1-logo.png").read_bytes() == b"png"

    def test_missing_source(self, tmp_path):
        with pytest.raises(CollaboratorError, match="Media file not found"):
            DirectoryMediaLibrary(tmp_path / "media").import_file(tmp_path / "nope.png", "nope.png")

    def test_empty_library(self, tmp_path):
        assert DirectoryMediaLibrary(tmp_path / "media").list_media() == []


class TestSelection:
    def test_defaults_live_in_data_dir(self, l2wp_home):
        assert get_plugin_registry().path == l2wp_home / "plugins.yaml"
        assert get_document_store().root == l2wp_home / "documents"
        assert get_media_library().root == l2wp_home / "media"

    def test_explicit_data_dir(self, tmp_path):
        assert get_document_store(data_dir=tmp_path).root == tmp_path / "documents"

    def test_unknown_registry(self):
        with pytest.raises(ConfigError, match="Unknown plugin registry 'remote'"):
            get_plugin_registry("remote")
