from __future__ import annotations

import asyncio
import datetime as dt
from dataclasses import dataclass, field
from typing import Optional

from sqlalchemy import select, desc, func, or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.sql.elements import ColumnElement

from app.core.db import icontains
from app.core.errors import QueryError
from app.core.logging import get_logger
from app.models import Article

logger = get_logger(__name__)

LISTED_FIELDS = ("title", "summary", "link", "source", "created_at")

def parse_int(value: Optional[str], default: int, minimum: int = 0) -> int:
    """Lenient integer parsing for query-string values."""
    if value is None:
        return default
    try:
        parsed = int(str(value).strip())
    except ValueError:
        return default
    return parsed if parsed >= minimum else default

def parse_bound(value: Optional[str], name: str, end_of_day: bool = False) -> Optional[dt.datetime]:
    """Parse an ISO date or datetime into a naive UTC datetime.

    A date-only upper bound is widened to the last instant of that day so the
    whole day is included.
    """
    if value is None or not value.strip():
        return None
    raw = value.strip()
    try:
        if len(raw) == 10:
            day = dt.date.fromisoformat(raw)
            moment = dt.datetime.combine(day, dt.time.max if end_of_day else dt.time.min)
        else:
            moment = dt.datetime.fromisoformat(raw.replace("Z", "+00:00"))
    except ValueError:
        raise QueryError(f"Invalid {name}: {value!r}, expected YYYY-MM-DD or an ISO-8601 datetime")
    if moment.tzinfo is not None:
        moment = moment.astimezone(dt.timezone.utc).replace(tzinfo=None)
    return moment

def _like_pattern(term: str) -> str:
    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"

@dataclass
class ArticleQuery:
    """Filters for the history listing.

    Predicates are collected once and shared by the page statement and the
    count statement, so both always agree on what matches.
    """
    search: Optional[str] = None
    date_from: Optional[dt.datetime] = None
    date_to: Optional[dt.datetime] = None
    limit: int = 50
    offset: int = 0
    predicates: list[ColumnElement[bool]] = field(default_factory=list, init=False, repr=False)

    def __post_init__(self) -> None:
        if self.search:
            pattern = _like_pattern(self.search)
            self.predicates.append(
                or_(
                    icontains(Article.title, pattern),
                    icontains(Article.summary, pattern),
                )
            )
        if self.date_from is not None:
            self.predicates.append(Article.created_at >= self.date_from)
        if self.date_to is not None:
            self.predicates.append(Article.created_at <= self.date_to)

    @classmethod
    def from_params(
        cls,
        search: Optional[str] = None,
        from_date: Optional[str] = None,
        to_date: Optional[str] = None,
        limit: Optional[str] = None,
        offset: Optional[str] = None,
        default_limit: int = 50,
    ) -> "ArticleQuery":
        return cls(
            search=(search or "").strip() or None,
            date_from=parse_bound(from_date, "fromDate"),
            date_to=parse_bound(to_date, "toDate", end_of_day=True),
            limit=parse_int(limit, default_limit),
            offset=parse_int(offset, 0),
        )

    def page_statement(self):
        return (
            select(Article)
            .where(*self.predicates)
            .order_by(desc(Article.created_at), desc(Article.id))
            .limit(self.limit)
            .offset(self.offset)
        )

    def count_statement(self):
        return select(func.count(Article.id)).where(*self.predicates)

async def _fetch_page(sessionmaker: async_sessionmaker[AsyncSession], query: ArticleQuery) -> list[Article]:
    async with sessionmaker() as session:
        return list((await session.execute(query.page_statement())).scalars().all())

async def _fetch_total(sessionmaker: async_sessionmaker[AsyncSession], query: ArticleQuery) -> int:
    async with sessionmaker() as session:
        return int((await session.execute(query.count_statement())).scalar_one())

async def search_articles(sessionmaker: async_sessionmaker[AsyncSession], query: ArticleQuery) -> dict:
    try:
        rows, total = await asyncio.gather(
            _fetch_page(sessionmaker, query),
            _fetch_total(sessionmaker, query),
        )
    except (SQLAlchemyError, OSError) as exc:
        logger.error("article_query_failed", error=str(exc), query=repr(query))
        raise QueryError(f"Database query failed: {exc}") from exc

    return {
        "success": True,
        "count": len(rows),
        "total": total,
        "limit": query.limit,
        "offset": query.offset,
        "articles": [row.to_dict(*LISTED_FIELDS) for row in rows],
    }
