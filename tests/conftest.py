"""Shared fixtures: a throwaway SQLite store, a snapshot directory and a
fake homepage served through ``httpx.MockTransport``."""

from __future__ import annotations

import datetime as dt
from pathlib import Path
from typing import Callable

import httpx
import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from app.core.config import Settings
from app.core.db import create_engine, create_sessionmaker, init_models
from app.models import Article
from app.services.fetcher import Fetcher
from app.services.snapshot import SnapshotArchive

SITE_URL = "https://g1.globo.com"

HOMEPAGE_HTML = """
<html><body>
  <div class="feed-post">
    <a class="feed-post-link" href="https://g1.globo.com/economia/noticia/alta.ghtml"> Dólar fecha em alta </a>
    <div class="feed-post-body-resumo"> Moeda subiu 1,2% no dia. </div>
  </div>
  <div class="feed-post">
    <a class="feed-post-link" href="/politica/noticia/votacao.ghtml">Câmara aprova projeto</a>
  </div>
  <div class="feed-post">
    <a class="feed-post-link" href="https://g1.globo.com/economia/noticia/alta.ghtml">Dólar sobe (atualizado)</a>
    <div class="feed-post-body-resumo">Outro resumo</div>
  </div>
  <div class="feed-post">
    <a class="feed-post-link" href="https://g1.globo.com/sem-titulo.ghtml">   </a>
  </div>
  <div class="feed-post">
    <span class="feed-post-link">Sem link</span>
  </div>
  <div class="other-block">
    <a class="feed-post-link" href="https://g1.globo.com/fora.ghtml">Fora do feed</a>
  </div>
</body></html>
"""


def make_fetcher(handler: Callable[[httpx.Request], httpx.Response]) -> Fetcher:
    return Fetcher("test-agent/1.0", 10, transport=httpx.MockTransport(handler))


class PageServer:
    """Counts requests and serves ``html`` (or ``status``) for every GET."""

    def __init__(self, html: str = HOMEPAGE_HTML, status: int = 200):
        self.html = html
        self.status = status
        self.calls = 0

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.calls += 1
        return httpx.Response(self.status, text=self.html)


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'news.db'}",
        storage_dir=str(tmp_path / "data"),
        site_url=SITE_URL,
        scheduler_enabled=False,
        log_level="WARNING",
    )


@pytest.fixture
async def engine(settings: Settings):
    eng = create_engine(settings)
    await init_models(eng)
    yield eng
    await eng.dispose()


@pytest.fixture
def sessionmaker(engine) -> async_sessionmaker[AsyncSession]:
    return create_sessionmaker(engine)


@pytest.fixture
async def broken_sessionmaker(tmp_path: Path):
    """A store that cannot be opened: its directory does not exist."""
    eng = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'missing' / 'nope.db'}")
    yield create_sessionmaker(eng)
    await eng.dispose()


@pytest.fixture
def archive(settings: Settings) -> SnapshotArchive:
    return SnapshotArchive(settings.storage_dir, retention=7)


@pytest.fixture
def page_server() -> PageServer:
    return PageServer()


@pytest.fixture
def seed_articles(sessionmaker):
    """Insert rows with explicit timestamps; ``created_at`` defaults to now."""

    async def _seed(count: int, *, created_at: dt.datetime | None = None, prefix: str = "seed", **fields):
        base = created_at or dt.datetime.now(dt.timezone.utc).replace(tzinfo=None)
        async with sessionmaker() as session:
            for i in range(count):
                stamp = base - dt.timedelta(seconds=i)
                session.add(
                    Article(
                        title=fields.get("title", f"{prefix} title {i}"),
                        summary=fields.get("summary", f"{prefix} summary {i}"),
                        link=f"https://g1.globo.com/{prefix}/{i}.ghtml",
                        source="G1",
                        created_at=stamp,
                        updated_at=stamp,
                    )
                )
            await session.commit()

    return _seed
