from __future__ import annotations

import datetime as dt
from dataclasses import dataclass
from typing import Optional

from sqlalchemy import select, desc
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.core.logging import get_logger
from app.models import Article
from app.services.normalize import utc_now

logger = get_logger(__name__)

CACHED_FIELDS = ("title", "summary", "link")

@dataclass(frozen=True)
class CachePolicy:
    """How many recently stored rows make a fresh scrape unnecessary."""
    window_seconds: int = 300
    min_articles: int = 10
    max_articles: int = 50

    @classmethod
    def from_settings(cls, cfg) -> "CachePolicy":
        return cls(
            window_seconds=cfg.cache_window_seconds,
            min_articles=cfg.cache_min_articles,
            max_articles=cfg.cache_max_articles,
        )

async def recent_articles(session: AsyncSession, since: dt.datetime, limit: int) -> list[Article]:
    stmt = (
        select(Article)
        .where(Article.created_at > since)
        .order_by(desc(Article.created_at), desc(Article.id))
        .limit(limit)
    )
    return list((await session.execute(stmt)).scalars().all())

async def check_cache(
    sessionmaker: async_sessionmaker[AsyncSession],
    policy: CachePolicy,
    now: dt.datetime | None = None,
) -> Optional[list[dict]]:
    """Return the recent rows when there are enough of them, else ``None``.

    A store error counts as a miss: the caller goes on to scrape live.
    """
    since = (now or utc_now()) - dt.timedelta(seconds=policy.window_seconds)
    try:
        async with sessionmaker() as session:
            rows = await recent_articles(session, since, policy.max_articles)
    except (SQLAlchemyError, OSError) as exc:
        logger.warning("cache_check_failed", error=str(exc))
        return None

    if len(rows) >= policy.min_articles:
        logger.info("cache_hit", count=len(rows), window_seconds=policy.window_seconds)
        return [row.to_dict(*CACHED_FIELDS) for row in rows]

    logger.info("cache_miss", count=len(rows), required=policy.min_articles)
    return None
