"""Target document store collaborator."""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional, Protocol, Union, runtime_checkable

from l2wp import __version__
from l2wp.errors import CollaboratorError, NotFoundError

logger = logging.getLogger("l2wp.host.documents")

DOCUMENTS_DIR = "documents"


@runtime_checkable
class DocumentStore(Protocol):
    """Protocol that all document stores must satisfy."""

    name: str

    def create_document(
        self,
        title: str,
        content_tree: list[dict],
        type_hint: str,
        page_settings: Optional[dict] = None,
        status: str = "publish",
    ) -> str: ...


class JsonDocumentStore:
    """Stores each document as ``documents/<id>.json`` under a data directory."""

    name = "json"

    def __init__(self, root: Union[str, Path]):
        self.root = Path(root)

    @classmethod
    def in_dir(cls, data_dir: Union[str, Path]) -> "JsonDocumentStore":
        return cls(Path(data_dir) / DOCUMENTS_DIR)

    def _next_id(self) -> str:
        existing = [int(p.stem) for p in self.root.glob("*.json") if p.stem.isdigit()]
        return str(max(existing, default=0) + 1)

    def create_document(
        self,
        title: str,
        content_tree: list[dict],
        type_hint: str,
        page_settings: Optional[dict] = None,
        status: str = "publish",
    ) -> str:
        document: dict[str, Any] = {
            "title": title,
            "type": type_hint,
            "status": status,
            "edit_mode": "builder",
            "source": "lovable",
            "version": __version__,
            "created": datetime.now(timezone.utc).isoformat(),
            "content": content_tree,
        }
        if page_settings:
            document["page_settings"] = page_settings

        try:
            self.root.mkdir(parents=True, exist_ok=True)
            doc_id = self._next_id()
            path = self.root / f"{doc_id}.json"
            path.write_text(json.dumps(document, indent=2, ensure_ascii=False), encoding="utf-8")
        except OSError as e:
            raise CollaboratorError(f"Could not write document '{title}'", collaborator=self.name, cause=e) from e

        logger.info("Created %s document %s (%s)", type_hint, doc_id, title)
        return doc_id

    def get_document(self, doc_id: str) -> dict:
        path = self.root / f"{doc_id}.json"
        if not path.is_file():
            raise NotFoundError("document", doc_id)
        return json.loads(path.read_text(encoding="utf-8"))

    def list_documents(self) -> list[dict]:
        docs = []
        for path in sorted(self.root.glob("*.json"), key=lambda p: int(p.stem) if p.stem.isdigit() else 0):
            data = json.loads(path.read_text(encoding="utf-8"))
            docs.append({"id": path.stem, "title": data.get("title", ""), "type": data.get("type", "")})
        return docs
