from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Sequence

from app.core.logging import get_logger
from app.services.extractor import ArticleRecord
from app.services.normalize import utc_snapshot_date

logger = get_logger(__name__)

SNAPSHOT_PREFIX = "articles_"
SNAPSHOT_SUFFIX = ".json"

class SnapshotArchive:
    """One JSON file per UTC day, keeping the newest ``retention`` files."""

    def __init__(self, directory: str | Path, retention: int = 7):
        if retention < 1:
            raise ValueError("retention must be at least 1")
        self.directory = Path(directory)
        self.retention = retention

    def ensure_directory(self) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)

    def filename_for(self, day: str) -> str:
        return f"{SNAPSHOT_PREFIX}{day}{SNAPSHOT_SUFFIX}"

    def list_snapshots(self) -> list[str]:
        if not self.directory.is_dir():
            return []
        return sorted(
            p.name
            for p in self.directory.iterdir()
            if p.is_file() and p.name.startswith(SNAPSHOT_PREFIX) and p.name.endswith(SNAPSHOT_SUFFIX)
        )

    def prune(self, keep: str | None = None) -> list[str]:
        """Delete the oldest snapshots so that, counting ``keep``, only
        ``retention`` remain. Returns the deleted names."""
        names = set(self.list_snapshots())
        if keep:
            names.add(keep)
        ordered = sorted(names)
        stale = [n for n in ordered[: -self.retention] if n != keep]
        for name in stale:
            (self.directory / name).unlink(missing_ok=True)
        if stale:
            logger.info("snapshots_pruned", deleted=stale)
        return stale

    def write(self, records: Sequence[ArticleRecord], day: str | None = None) -> Path:
        self.ensure_directory()
        name = self.filename_for(day or utc_snapshot_date())
        self.prune(keep=name)
        path = self.directory / name
        payload = [rec.to_dict() for rec in records]
        path.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")
        logger.info("snapshot_written", path=str(path), count=len(payload))
        return path

    def status(self) -> dict:
        exists = self.directory.is_dir()
        return {
            "directory": str(self.directory.resolve()),
            "exists": exists,
            "writable": exists and os.access(self.directory, os.W_OK),
        }
