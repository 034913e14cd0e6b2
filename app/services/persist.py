from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Sequence

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.core.logging import get_logger
from app.services.extractor import ArticleRecord
from app.services.snapshot import SnapshotArchive
from app.services.storage import upsert_articles

logger = get_logger(__name__)

@dataclass(frozen=True)
class StorageStatus:
    database: bool
    file: bool

    @property
    def complete(self) -> bool:
        return self.database and self.file

    def to_dict(self) -> dict:
        return {"database": self.database, "file": self.file}

async def save_to_database(
    sessionmaker: async_sessionmaker[AsyncSession],
    records: Sequence[ArticleRecord],
) -> bool:
    if not records:
        return True
    try:
        async with sessionmaker() as session:
            await upsert_articles(session, records)
    except (SQLAlchemyError, OSError) as exc:
        logger.error("database_save_failed", count=len(records), error=str(exc))
        return False
    return True

async def save_to_file(
    archive: SnapshotArchive,
    records: Sequence[ArticleRecord],
    day: str | None = None,
) -> bool:
    # An empty scrape leaves the day's existing snapshot alone
    if not records:
        return True
    try:
        await asyncio.to_thread(archive.write, records, day)
    except (OSError, TypeError, ValueError) as exc:
        logger.error("snapshot_save_failed", directory=str(archive.directory), error=str(exc))
        return False
    return True

async def persist_batch(
    sessionmaker: async_sessionmaker[AsyncSession],
    archive: SnapshotArchive,
    records: Sequence[ArticleRecord],
    day: str | None = None,
) -> StorageStatus:
    """Write ``records`` to the store and the day's snapshot concurrently.

    Each side reports its own outcome; a failure on one does not undo or
    skip the other.
    """
    db_ok, file_ok = await asyncio.gather(
        save_to_database(sessionmaker, records),
        save_to_file(archive, records, day),
    )
    status = StorageStatus(database=db_ok, file=file_ok)
    if not status.complete:
        logger.warning("partial_persistence", **status.to_dict())
    return status
