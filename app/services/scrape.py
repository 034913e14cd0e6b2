from __future__ import annotations

import time
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.core.errors import ExtractionError, FetchError
from app.core.logging import get_logger
from app.services.cache_gate import CachePolicy, check_cache
from app.services.extractor import ExtractorConfig, extract_articles
from app.services.fallback import fallback_response
from app.services.fetcher import Fetcher
from app.services.normalize import iso_timestamp
from app.services.persist import persist_batch
from app.services.snapshot import SnapshotArchive

logger = get_logger(__name__)

def _elapsed(started: float) -> str:
    return f"{round((time.perf_counter() - started) * 1000)}ms"

@dataclass
class ScrapeService:
    sessionmaker: async_sessionmaker[AsyncSession]
    fetcher: Fetcher
    archive: SnapshotArchive
    extractor: ExtractorConfig
    policy: CachePolicy
    fallback_limit: int = 50

    @classmethod
    def from_settings(cls, cfg, sessionmaker, fetcher=None, archive=None) -> "ScrapeService":
        return cls(
            sessionmaker=sessionmaker,
            fetcher=fetcher or Fetcher(cfg.user_agent, cfg.request_timeout_seconds, cfg.accept_language),
            archive=archive or SnapshotArchive(cfg.storage_dir, cfg.snapshot_retention),
            extractor=ExtractorConfig.from_settings(cfg),
            policy=CachePolicy.from_settings(cfg),
            fallback_limit=cfg.fallback_limit,
        )

    async def scrape(self) -> dict:
        """Serve recent rows, or scrape the homepage and store the result.

        Raises :class:`ScrapeFailedError` only when the live scrape failed and
        the store could not be read for a fallback either.
        """
        started = time.perf_counter()

        cached = await check_cache(self.sessionmaker, self.policy)
        if cached is not None:
            return {
                "success": True,
                "fromCache": True,
                "count": len(cached),
                "articles": cached,
                "timestamp": iso_timestamp(),
                "performance": _elapsed(started),
            }

        try:
            logger.info("scrape_started", url=self.extractor.site_url)
            html = await self.fetcher.fetch_page_html(self.extractor.site_url)
            articles = extract_articles(html, self.extractor)
        except (FetchError, ExtractionError) as exc:
            logger.error("scrape_failed", error=str(exc), error_type=type(exc).__name__)
            return await fallback_response(self.sessionmaker, exc, limit=self.fallback_limit)

        storage = await persist_batch(self.sessionmaker, self.archive, articles)
        logger.info("scrape_finished", count=len(articles), **storage.to_dict())
        return {
            "success": True,
            "fromCache": False,
            "count": len(articles),
            "articles": [a.to_dict() for a in articles],
            "timestamp": iso_timestamp(),
            "performance": _elapsed(started),
            "storage": storage.to_dict(),
        }
