"""Field provider for hosts without a custom-field backend."""

from __future__ import annotations

from typing import Any

from .base import FieldInfo


class NullFieldProvider:
    """Knows no fields; every placeholder in its namespace renders empty."""

    name = "null"

    def get_field_value(self, field: str, context_id: str) -> Any:
        return None

    def list_fields(self, content_type: str) -> list[FieldInfo]:
        return []
