from __future__ import annotations

from typing import Sequence

from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.db import utcnow
from app.core.logging import get_logger
from app.models import Article
from app.services.extractor import ArticleRecord

logger = get_logger(__name__)

_DIALECT_INSERTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}

def build_upsert(dialect_name: str, records: Sequence[ArticleRecord]):
    try:
        insert = _DIALECT_INSERTS[dialect_name]
    except KeyError:
        raise NotImplementedError(f"Upsert not supported for dialect {dialect_name!r}")

    rows = [
        {
            "title": rec.title,
            "summary": rec.summary,
            "link": rec.link,
            "source": rec.source,
            "created_at": utcnow(),
            "updated_at": utcnow(),
        }
        for rec in records
    ]
    stmt = insert(Article).values(rows)
    return stmt.on_conflict_do_update(
        index_elements=[Article.link],
        set_={
            "title": stmt.excluded.title,
            "summary": stmt.excluded.summary,
            "updated_at": utcnow(),
        },
    )

async def upsert_articles(session: AsyncSession, records: Sequence[ArticleRecord]) -> int:
    """Insert or refresh ``records`` in one transaction.

    The whole batch goes out as a single multi-row INSERT; rows whose link
    already exists get their title, summary and updated_at replaced while
    created_at is kept. Any error rolls the batch back and propagates.
    """
    if not records:
        return 0
    stmt = build_upsert(session.bind.dialect.name, records)
    async with session.begin():
        await session.execute(stmt)
    logger.info("articles_upserted", count=len(records))
    return len(records)
