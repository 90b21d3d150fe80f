"""Tests for custom exception hierarchy."""

import json

import pytest

from l2wp.errors import (
    ArchiveNotFoundError,
    CollaboratorError,
    ConfigError,
    ExtractionError,
    L2WPError,
    MalformedInputError,
    NotFoundError,
    ValidationError,
    classify_json_error,
)


class TestL2WPErrorBase:
    def test_message(self):
        assert str(L2WPError("test error")) == "test error"

    def test_empty_context_by_default(self):
        assert L2WPError("test error").context == {}

    def test_context_passed_through(self):
        e = L2WPError("test error", context={"archive": "site.zip"})
        assert e.context == {"archive": "site.zip"}

    def test_exit_code_default(self):
        assert L2WPError("test error").exit_code == 1

    def test_hierarchy(self):
        for cls in (
            ArchiveNotFoundError, ValidationError, ExtractionError,
            MalformedInputError, NotFoundError, CollaboratorError, ConfigError,
        ):
            assert issubclass(cls, L2WPError)


class TestArchiveErrors:
    def test_archive_not_found(self):
        e = ArchiveNotFoundError("/tmp/site.zip")
        assert str(e) == "Archive not found: /tmp/site.zip"
        assert e.context["archive"] == "/tmp/site.zip"

    def test_validation_error_lists_missing(self):
        e = ValidationError(
            "Missing required files/directories: src/, package.json",
            reason="invalid_structure",
            missing=["src/", "package.json"],
        )
        assert e.exit_code == 2
        assert e.reason == "invalid_structure"
        assert e.missing == ["src/", "package.json"]
        assert e.context["missing"] == ["src/", "package.json"]

    def test_validation_error_merges_context(self):
        e = ValidationError("too big", reason="file_too_large", context={"size": 10})
        assert e.context == {"reason": "file_too_large", "missing": [], "size": 10}

    def test_extraction_error(self):
        e = ExtractionError("corrupt", archive="site.zip")
        assert e.context["archive"] == "site.zip"


class TestClassifyJsonError:
    def _decode_error(self, text):
        with pytest.raises(json.JSONDecodeError) as exc_info:
            json.loads(text)
        return exc_info.value

    def test_syntax(self):
        assert classify_json_error(self._decode_error("{bad")) == "syntax"

    def test_control_character(self):
        assert classify_json_error(self._decode_error('{"a": "line\x01break"}')) == "control-character"

    def test_encoding(self):
        with pytest.raises(UnicodeDecodeError) as exc_info:
            b"\xff\xfe\xfa".decode("utf-8")
        assert classify_json_error(exc_info.value) == "encoding"

    def test_depth(self):
        assert classify_json_error(RecursionError()) == "depth"

    def test_unknown(self):
        assert classify_json_error(TypeError("nope")) == "unknown"


class TestMalformedInputError:
    def test_message_includes_source(self):
        e = MalformedInputError("syntax", source="package.json")
        assert str(e) == "Syntax error, malformed JSON in package.json"
        assert e.classification == "syntax"

    def test_unknown_classification_falls_back(self):
        assert str(MalformedInputError("weird")) == "Unknown JSON error"

    def test_from_exception(self):
        with pytest.raises(json.JSONDecodeError) as exc_info:
            json.loads("[1,")
        e = MalformedInputError.from_exception(exc_info.value, source="design.json")
        assert e.classification == "syntax"
        assert e.context["source"] == "design.json"
        assert e.context["detail"]


class TestNotFoundError:
    def test_basic(self):
        e = NotFoundError("content type", "product")
        assert str(e) == "Unknown content type 'product'"
        assert e.context == {"kind": "content type", "name": "product"}

    def test_with_available(self):
        e = NotFoundError("functionality", "chat", available=["forms", "sliders"])
        assert "forms, sliders" in str(e)


class TestCollaboratorError:
    def test_wraps_cause(self):
        cause = OSError("disk full")
        e = CollaboratorError("Could not write", collaborator="json", cause=cause)
        assert e.cause is cause
        assert e.context["collaborator"] == "json"
        assert "disk full" in e.context["cause"]

    def test_extra_context(self):
        e = CollaboratorError("Plugin file not found", collaborator="file", context={"slug": "x"})
        assert e.context == {"collaborator": "file", "slug": "x"}
