"""Per-user analysis cache.

Holds the result of the last upload between the analysis and import
steps. Entries expire after ``ttl`` seconds (one hour by default). There
is no locking: a second upload by the same user overwrites the first.
"""

from __future__ import annotations

import json
import logging
import re
import shutil
import time
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Callable, Optional, Union

from l2wp.analyzers.models import AssetFile, ProjectModel
from l2wp.detection.models import Detection

logger = logging.getLogger("l2wp.core.cache")

CACHE_DIR = "cache"
ASSETS_DIR = "assets"
DEFAULT_TTL = 3600

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9_.-]")


def user_key(user: str) -> str:
    """File-name-safe form of a user id."""
    return _UNSAFE_CHARS.sub("_", str(user))


@dataclass
class CachedAnalysis:
    """A cached upload: the project model and what was detected in it."""

    user: str
    created_at: float
    project: ProjectModel
    detections: dict[str, Detection] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "user": self.user,
            "created_at": self.created_at,
            "project": self.project.to_dict(),
            "detections": {key: d.to_dict() for key, d in self.detections.items()},
        }

    @classmethod
    def from_dict(cls, data: dict) -> "CachedAnalysis":
        return cls(
            user=data["user"],
            created_at=float(data["created_at"]),
            project=ProjectModel.from_dict(data["project"]),
            detections={k: Detection.from_dict(v) for k, v in (data.get("detections") or {}).items()},
        )


class AnalysisCache:
    """JSON file per user under ``directory``."""

    def __init__(
        self,
        directory: Union[str, Path],
        ttl: int = DEFAULT_TTL,
        clock: Callable[[], float] = time.time,
    ):
        self.directory = Path(directory)
        self.ttl = ttl
        self.clock = clock

    @classmethod
    def in_dir(cls, data_dir: Union[str, Path], ttl: int = DEFAULT_TTL) -> "AnalysisCache":
        return cls(Path(data_dir) / CACHE_DIR, ttl=ttl)

    def _path(self, user: str) -> Path:
        return self.directory / f"{user_key(user)}.json"

    def _assets_dir(self, user: str) -> Path:
        return self.directory / ASSETS_DIR / user_key(user)

    def _stage_images(self, user: str, project: ProjectModel) -> ProjectModel:
        """Copy image assets out of the extraction dir so they survive cleanup."""
        target = self._assets_dir(user)
        shutil.rmtree(target, ignore_errors=True)
        staged: list[AssetFile] = []
        for index, image in enumerate(project.assets.images):
            source = Path(image.path)
            if not source.is_file():
                staged.append(image)
                continue
            target.mkdir(parents=True, exist_ok=True)
            copy = target / f"{index:04d}-{image.name}"
            shutil.copyfile(source, copy)
            staged.append(replace(image, path=str(copy)))
        return replace(project, assets=replace(project.assets, images=staged))

    def put(
        self,
        user: str,
        project: ProjectModel,
        detections: Optional[dict[str, Detection]] = None,
    ) -> CachedAnalysis:
        self.directory.mkdir(parents=True, exist_ok=True)
        project = self._stage_images(user, project)
        entry = CachedAnalysis(user=str(user), created_at=self.clock(), project=project, detections=detections or {})
        self._path(user).write_text(json.dumps(entry.to_dict(), ensure_ascii=False), encoding="utf-8")
        logger.debug("Cached analysis of %s for %s", project.project_name, user)
        return entry

    def get(self, user: str) -> Optional[CachedAnalysis]:
        """The cached analysis, or None when absent, expired or unreadable."""
        path = self._path(user)
        if not path.is_file():
            return None
        try:
            entry = CachedAnalysis.from_dict(json.loads(path.read_text(encoding="utf-8")))
        except (OSError, ValueError, KeyError, TypeError) as e:
            logger.warning("Discarding unreadable cache entry %s: %s", path, e)
            self.delete(user)
            return None
        if self.clock() - entry.created_at > self.ttl:
            logger.debug("Cache entry for %s expired", user)
            self.delete(user)
            return None
        return entry

    def delete(self, user: str) -> None:
        self._path(user).unlink(missing_ok=True)
        shutil.rmtree(self._assets_dir(user), ignore_errors=True)
