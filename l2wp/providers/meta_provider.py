"""Field provider backed by a YAML file of per-context field values.

Layout::

    contexts:
      42:
        price: 19.99
        gallery: [a.jpg, b.jpg]
    content_types:
      product:
        - {name: price, label: Price, type: number}
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Optional, Union

import yaml

from l2wp.errors import MalformedInputError, NotFoundError

from .base import FieldInfo

logger = logging.getLogger("l2wp.providers.meta")

FIELDS_FILE = "fields.yaml"


class MetaFieldProvider:
    """Reads field values and field definitions from a YAML file."""

    name = "meta"

    def __init__(self, path: Optional[Union[str, Path]] = None):
        if path is None:
            from l2wp.core.config_service import get_config_service

            config_svc = get_config_service()
            configured = config_svc.get("fields.meta_path", "")
            path = Path(configured).expanduser() if configured else config_svc.get_data_dir() / FIELDS_FILE
        self.path = Path(path)
        self._data: Optional[dict] = None

    def _load(self) -> dict:
        if self._data is None:
            if not self.path.is_file():
                logger.debug("No field data at %s", self.path)
                self._data = {}
            else:
                try:
                    self._data = yaml.safe_load(self.path.read_text(encoding="utf-8")) or {}
                except yaml.YAMLError as e:
                    raise MalformedInputError("syntax", source=str(self.path), detail=str(e)) from e
                logger.debug("Loaded field data from %s", self.path)
        return self._data

    def _contexts(self) -> dict[str, dict]:
        contexts = self._load().get("contexts") or {}
        return {str(key): value or {} for key, value in contexts.items()}

    def get_field_value(self, field: str, context_id: str) -> Any:
        return self._contexts().get(str(context_id), {}).get(field)

    def list_fields(self, content_type: str) -> list[FieldInfo]:
        content_types = self._load().get("content_types") or {}
        if content_type not in content_types:
            raise NotFoundError("content type", content_type, available=sorted(content_types))
        return [FieldInfo.from_dict(entry) for entry in content_types[content_type] or []]
