"""Custom exception hierarchy for l2wp.

All l2wp-specific exceptions derive from L2WPError. Each exception
carries an optional ``context`` dict with structured metadata
(archive path, missing items, collaborator name, etc.) that the CLI
error handler can render.

Exception hierarchy::

    L2WPError
    ├── ArchiveNotFoundError
    ├── ValidationError
    ├── ExtractionError
    ├── MalformedInputError
    ├── NotFoundError
    ├── CollaboratorError
    └── ConfigError
"""
from __future__ import annotations

import json
from typing import Optional


class L2WPError(Exception):
    """Base class for all l2wp exceptions.

    Args:
        message: Human-readable error description.
        context: Optional dict of structured metadata.
    """

    exit_code: int = 1

    def __init__(self, message: str, context: Optional[dict] = None):
        self.context = context or {}
        super().__init__(message)


# ── Archive Errors ─────────────────────────────────────────────────

class ArchiveNotFoundError(L2WPError):
    """Raised when the archive to analyze does not exist."""

    def __init__(self, path: str):
        super().__init__(f"Archive not found: {path}", context={"archive": path})


class ValidationError(L2WPError):
    """Raised when an archive fails size, type or structure validation.

    ``missing`` lists every absent structural element so the message
    can name all of them at once.
    """

    exit_code = 2

    def __init__(
        self,
        message: str,
        reason: str = "",
        missing: Optional[list[str]] = None,
        context: Optional[dict] = None,
    ):
        self.reason = reason
        self.missing = list(missing or [])
        ctx = {"reason": reason, "missing": self.missing}
        if context:
            ctx.update(context)
        super().__init__(message, context=ctx)


class ExtractionError(L2WPError):
    """Raised when an archive is corrupt or cannot be unpacked."""

    def __init__(self, message: str, archive: str = ""):
        super().__init__(message, context={"archive": archive})


# ── Input Errors ───────────────────────────────────────────────────

# Decode-error classification -> human readable message
JSON_ERROR_MESSAGES = {
    "depth": "Maximum stack depth exceeded",
    "control-character": "Unexpected control character found",
    "syntax": "Syntax error, malformed JSON",
    "encoding": "Malformed UTF-8 characters",
    "unknown": "Unknown JSON error",
}


def classify_json_error(error: BaseException) -> str:
    """Map a JSON decoding failure onto a decode-error classification."""
    if isinstance(error, RecursionError):
        return "depth"
    if isinstance(error, UnicodeError):
        return "encoding"
    if isinstance(error, json.JSONDecodeError):
        if "control character" in error.msg.lower():
            return "control-character"
        return "syntax"
    return "unknown"


class MalformedInputError(L2WPError):
    """Raised when JSON input (a manifest, a design file) cannot be decoded."""

    def __init__(self, classification: str, source: str = "", detail: str = ""):
        self.classification = classification
        message = JSON_ERROR_MESSAGES.get(classification, JSON_ERROR_MESSAGES["unknown"])
        if source:
            message = f"{message} in {source}"
        super().__init__(
            message,
            context={"classification": classification, "source": source, "detail": detail},
        )

    @classmethod
    def from_exception(cls, error: BaseException, source: str = "") -> "MalformedInputError":
        return cls(classify_json_error(error), source=source, detail=str(error))


# ── Lookup Errors ──────────────────────────────────────────────────

class NotFoundError(L2WPError):
    """Raised when a content type, taxonomy or functionality key is unknown."""

    def __init__(self, kind: str, name: str, available: Optional[list[str]] = None):
        available_str = f". Available: {', '.join(available)}" if available else ""
        super().__init__(
            f"Unknown {kind} '{name}'{available_str}",
            context={"kind": kind, "name": name},
        )


# ── Collaborator Errors ────────────────────────────────────────────

class CollaboratorError(L2WPError):
    """Wraps a failure reported by a field provider, document store,
    plugin registry or media library without reinterpreting it."""

    def __init__(
        self,
        message: str,
        collaborator: str = "",
        cause: Optional[BaseException] = None,
        context: Optional[dict] = None,
    ):
        self.cause = cause
        ctx = {"collaborator": collaborator}
        if cause is not None:
            ctx["cause"] = repr(cause)
        if context:
            ctx.update(context)
        super().__init__(message, context=ctx)


class ConfigError(L2WPError):
    """Raised when configuration is invalid or missing."""
    pass
