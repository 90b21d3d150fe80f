"""Media library collaborator: receives imported image assets."""

from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import Protocol, Union, runtime_checkable

from l2wp.errors import CollaboratorError

logger = logging.getLogger("l2wp.host.media")

MEDIA_DIR = "media"


@runtime_checkable
class MediaLibrary(Protocol):
    """Protocol that all media libraries must satisfy."""

    name: str

    def import_file(self, path: Path, name: str) -> str: ...


class DirectoryMediaLibrary:
    """Copies each file to ``media/<id>-<name>`` under a data directory."""

    name = "directory"

    def __init__(self, root: Union[str, Path]):
        self.root = Path(root)

    @classmethod
    def in_dir(cls, data_dir: Union[str, Path]) -> "DirectoryMediaLibrary":
        return cls(Path(data_dir) / MEDIA_DIR)

    def _next_id(self) -> int:
        ids = [int(p.name.split("-", 1)[0]) for p in self.root.iterdir() if p.name.split("-", 1)[0].isdigit()]
        return max(ids, default=0) + 1

    def import_file(self, path: Path, name: str) -> str:
        path = Path(path)
        if not path.is_file():
            raise CollaboratorError(f"Media file not found: {path}", collaborator=self.name)
        try:
            self.root.mkdir(parents=True, exist_ok=True)
            media_id = str(self._next_id())
            shutil.copyfile(path, self.root / f"{media_id}-{Path(name).name}")
        except OSError as e:
            raise CollaboratorError(f"Could not import '{name}'", collaborator=self.name, cause=e) from e
        logger.debug("Imported %s as media %s", name, media_id)
        return media_id

    def list_media(self) -> list[str]:
        if not self.root.is_dir():
            return []
        return sorted(p.name for p in self.root.iterdir() if p.is_file())
