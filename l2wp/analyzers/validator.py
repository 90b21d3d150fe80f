"""Upload validation for project archives.

Checks run in order and the first failing one is terminal: size, type,
required structure. A final security scan never fails validation; it
only adds warnings.
"""

from __future__ import annotations

import logging
import zipfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Union

from l2wp.errors import ArchiveNotFoundError, ValidationError

logger = logging.getLogger(__name__)

DEFAULT_MAX_SIZE = 50 * 1024 * 1024

REQUIRED_STRUCTURE: tuple[str, ...] = ("src/", "public/", "package.json")

ALLOWED_EXTENSIONS: frozenset[str] = frozenset({
    "js", "jsx", "ts", "tsx",
    "json", "css", "scss", "sass",
    "html", "svg", "png", "jpg", "jpeg", "gif", "webp",
    "md", "txt", "yml", "yaml",
})

# Script/executable types and directory traversal
DANGEROUS_PATTERNS: tuple[str, ...] = (".php", ".exe", ".sh", ".bat", ".cmd", "../")


def format_size(num_bytes: int) -> str:
    """Human readable size, e.g. ``50 MB``."""
    size = float(num_bytes)
    for unit in ("B", "KB", "MB", "GB"):
        if size < 1024 or unit == "GB":
            return f"{size:.0f} {unit}" if size == int(size) else f"{size:.1f} {unit}"
        size /= 1024
    return f"{num_bytes} B"


@dataclass
class ValidationReport:
    """Outcome of a successful validation."""
    path: Path
    size: int
    entry_count: int
    warnings: list[str] = field(default_factory=list)


class ArchiveValidator:
    """Validate an uploaded archive before it is extracted."""

    def __init__(
        self,
        max_size: Optional[int] = None,
        required: Optional[tuple[str, ...]] = None,
        allowed_extensions: Optional[frozenset[str]] = None,
    ):
        self.max_size = max_size if max_size is not None else DEFAULT_MAX_SIZE
        self.required = tuple(required) if required is not None else REQUIRED_STRUCTURE
        self.allowed_extensions = allowed_extensions or ALLOWED_EXTENSIONS

    def validate(self, path: Union[str, Path], filename: Optional[str] = None) -> ValidationReport:
        """Validate ``path``. ``filename`` is the client-side name, when
        it differs from the stored file (e.g. an upload temp file).

        Raises:
            ArchiveNotFoundError: nothing at ``path``.
            ValidationError: size, type or structure check failed.
        """
        path = Path(path)
        if not path.is_file():
            raise ArchiveNotFoundError(str(path))

        size = path.stat().st_size
        if size > self.max_size:
            raise ValidationError(
                f"File size exceeds maximum allowed size of {format_size(self.max_size)}",
                reason="file_too_large",
                context={"size": size, "max_size": self.max_size},
            )

        name = filename or path.name
        if Path(name).suffix.lower() != ".zip" or not zipfile.is_zipfile(path):
            raise ValidationError("File must be a ZIP archive", reason="invalid_type", context={"file": name})

        try:
            with zipfile.ZipFile(path) as zf:
                names = zf.namelist()
        except zipfile.BadZipFile as e:
            raise ValidationError(
                f"Could not open ZIP file: {e}", reason="invalid_structure", context={"file": name}
            ) from e

        warnings: list[str] = []
        missing = self.find_missing(names)
        warnings.extend(self.check_extensions(names))
        if missing:
            raise ValidationError(
                f"Missing required files/directories: {', '.join(missing)}",
                reason="invalid_structure",
                missing=missing,
                context={"warnings": warnings},
            )

        warnings.extend(self.check_security(names))
        for warning in warnings:
            logger.warning("%s: %s", name, warning)
        return ValidationReport(path=path, size=size, entry_count=len(names), warnings=warnings)

    def find_missing(self, names: list[str]) -> list[str]:
        """Required entries not matched by any archive member, in declared order."""
        return [req for req in self.required if not any(req in entry for entry in names)]

    def check_extensions(self, names: list[str]) -> list[str]:
        seen: list[str] = []
        for entry in names:
            if entry.endswith("/"):
                continue
            ext = Path(entry).suffix.lower().lstrip(".")
            if ext and ext not in self.allowed_extensions and ext not in seen:
                seen.append(ext)
        return [f"Unexpected file extension: {ext}" for ext in seen]

    def check_security(self, names: list[str]) -> list[str]:
        return [
            f"Potentially dangerous file detected: {entry}"
            for entry in names
            if any(pattern in entry for pattern in DANGEROUS_PATTERNS)
        ]
