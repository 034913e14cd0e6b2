from __future__ import annotations

from sqlalchemy import select, desc
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.core.errors import ScrapeFailedError
from app.core.logging import get_logger
from app.models import Article
from app.services.cache_gate import CACHED_FIELDS
from app.services.normalize import iso_timestamp

logger = get_logger(__name__)

STALE_MESSAGE = "Data may be outdated"
EMPTY_MESSAGE = "No data available"

async def latest_articles(session: AsyncSession, limit: int) -> list[Article]:
    stmt = select(Article).order_by(desc(Article.created_at), desc(Article.id)).limit(limit)
    return list((await session.execute(stmt)).scalars().all())

async def fallback_response(
    sessionmaker: async_sessionmaker[AsyncSession],
    error: Exception,
    limit: int = 50,
) -> dict:
    """Build the reply for a failed live scrape from whatever is stored.

    Raises :class:`ScrapeFailedError` when the store cannot be read either.
    """
    try:
        async with sessionmaker() as session:
            rows = await latest_articles(session, limit)
    except (SQLAlchemyError, OSError) as exc:
        logger.error("fallback_query_failed", error=str(exc), scrape_error=str(error))
        raise ScrapeFailedError("Failed to collect data", cause=error) from exc

    has_data = bool(rows)
    logger.info("fallback_served", count=len(rows), stale=has_data)
    return {
        "success": has_data,
        "fromCache": True,
        "message": STALE_MESSAGE if has_data else EMPTY_MESSAGE,
        "count": len(rows),
        "articles": [row.to_dict(*CACHED_FIELDS) for row in rows],
        "timestamp": iso_timestamp(),
        "error": None if has_data else str(error),
    }
