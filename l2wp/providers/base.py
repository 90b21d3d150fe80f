"""Field Provider Protocol and shared types."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable


@dataclass
class FieldInfo:
    """One custom field a provider exposes for a content type."""

    name: str
    label: str = ""
    type: str = "text"

    def to_dict(self) -> dict:
        return {"name": self.name, "label": self.label or self.name, "type": self.type}

    @classmethod
    def from_dict(cls, data: dict) -> "FieldInfo":
        return cls(
            name=str(data["name"]),
            label=str(data.get("label", "")),
            type=str(data.get("type", "text")),
        )


@runtime_checkable
class FieldProvider(Protocol):
    """Protocol that all custom-field backends must satisfy."""

    name: str

    def get_field_value(self, field: str, context_id: str) -> Any: ...
    def list_fields(self, content_type: str) -> list[FieldInfo]: ...
