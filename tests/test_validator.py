"""Tests for archive upload validation."""

import pytest

from l2wp.analyzers.validator import ArchiveValidator, format_size
from l2wp.errors import ArchiveNotFoundError, ValidationError


class TestFormatSize:
    def test_whole_megabytes(self):
        assert format_size(50 * 1024 * 1024) == "50 MB"

    def test_fractional(self):
        assert format_size(1536) == "1.5 KB"

    def test_bytes(self):
        assert format_size(12) == "12 B"


class TestValidate:
    def test_valid_archive(self, project_zip):
        report = ArchiveValidator().validate(project_zip)
        assert report.path == project_zip
        assert report.entry_count == 9
        assert report.warnings == []

    def test_missing_file(self, tmp_path):
        with pytest.raises(ArchiveNotFoundError):
            ArchiveValidator().validate(tmp_path / "nope.zip")

    def test_too_large(self, project_zip):
        with pytest.raises(ValidationError) as exc_info:
            ArchiveValidator(max_size=10).validate(project_zip)
        assert exc_info.value.reason == "file_too_large"
        assert "File size exceeds maximum allowed size of 10 B" == str(exc_info.value)

    def test_size_checked_before_type(self, tmp_path):
        path = tmp_path / "notes.txt"
        path.write_text("x" * 100)
        with pytest.raises(ValidationError) as exc_info:
            ArchiveValidator(max_size=10).validate(path)
        assert exc_info.value.reason == "file_too_large"

    def test_wrong_extension(self, tmp_path):
        path = tmp_path / "notes.txt"
        path.write_text("hello")
        with pytest.raises(ValidationError, match="File must be a ZIP archive") as exc_info:
            ArchiveValidator().validate(path)
        assert exc_info.value.reason == "invalid_type"

    def test_zip_name_but_not_zip(self, tmp_path):
        path = tmp_path / "fake.zip"
        path.write_text("not really a zip")
        with pytest.raises(ValidationError) as exc_info:
            ArchiveValidator().validate(path)
        assert exc_info.value.reason == "invalid_type"

    def test_client_filename_is_checked(self, project_zip, tmp_path):
        upload = tmp_path / "upload.tmp"
        upload.write_bytes(project_zip.read_bytes())
        report = ArchiveValidator().validate(upload, filename="site.zip")
        assert report.entry_count == 9

    def test_missing_structure_names_everything(self, make_zip):
        path = make_zip({"src/main.tsx": "x", "README.md": "readme"})
        with pytest.raises(ValidationError) as exc_info:
            ArchiveValidator().validate(path)
        e = exc_info.value
        assert e.reason == "invalid_structure"
        assert e.missing == ["public/", "package.json"]
        assert str(e) == "Missing required files/directories: public/, package.json"

    def test_wrapped_project_passes(self, make_zip, demo_files):
        path = make_zip(demo_files, prefix="my-site/")
        assert ArchiveValidator().validate(path).entry_count == 9


class TestWarnings:
    def test_unexpected_extensions_once_each(self, make_zip, demo_files):
        files = demo_files
        files["public/a.ico"] = b"1"
        files["public/b.ico"] = b"2"
        files["public/font.woff2"] = b"3"
        report = ArchiveValidator().validate(make_zip(files))
        assert report.warnings == [
            "Unexpected file extension: ico",
            "Unexpected file extension: woff2",
        ]

    def test_dangerous_files(self, make_zip, demo_files):
        files = demo_files
        files["public/deploy.sh"] = "rm -rf /"
        report = ArchiveValidator().validate(make_zip(files))
        assert "Potentially dangerous file detected: public/deploy.sh" in report.warnings
        assert "Unexpected file extension: sh" in report.warnings

    def test_security_scan_never_fails(self, make_zip, demo_files):
        files = demo_files
        files["public/shell.php"] = "<?php ?>"
        report = ArchiveValidator().validate(make_zip(files))
        assert report.entry_count == 10

    def test_custom_required_structure(self, make_zip):
        validator = ArchiveValidator(required=("index.html",))
        report = validator.validate(make_zip({"index.html": "<html></html>"}))
        assert report.entry_count == 1
