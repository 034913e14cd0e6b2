from __future__ import annotations

import datetime as dt

from app.services.cache_gate import CachePolicy, check_cache
from app.services.normalize import utc_now

POLICY = CachePolicy(window_seconds=300, min_articles=10, max_articles=50)


async def test_nine_recent_rows_is_a_miss(sessionmaker, seed_articles):
    await seed_articles(9, created_at=utc_now() - dt.timedelta(minutes=1))
    assert await check_cache(sessionmaker, POLICY) is None


async def test_ten_recent_rows_is_a_hit(sessionmaker, seed_articles):
    await seed_articles(10, created_at=utc_now() - dt.timedelta(minutes=1))
    cached = await check_cache(sessionmaker, POLICY)

    assert cached is not None
    assert len(cached) == 10
    assert set(cached[0]) == {"title", "summary", "link"}
    # Most recent first
    assert cached[0]["link"].endswith("/0.ghtml")


async def test_rows_outside_window_do_not_count(sessionmaker, seed_articles):
    await seed_articles(20, created_at=utc_now() - dt.timedelta(minutes=10), prefix="old")
    await seed_articles(5, created_at=utc_now() - dt.timedelta(minutes=1), prefix="new")
    assert await check_cache(sessionmaker, POLICY) is None


async def test_hit_is_capped(sessionmaker, seed_articles):
    await seed_articles(60, created_at=utc_now() - dt.timedelta(seconds=30))
    cached = await check_cache(sessionmaker, POLICY)
    assert len(cached) == 50


async def test_policy_is_configurable(sessionmaker, seed_articles):
    await seed_articles(3, created_at=utc_now() - dt.timedelta(minutes=1))
    assert await check_cache(sessionmaker, CachePolicy(window_seconds=300, min_articles=3)) is not None
    assert await check_cache(sessionmaker, CachePolicy(window_seconds=30, min_articles=3)) is None


async def test_store_error_is_a_miss(broken_sessionmaker):
    assert await check_cache(broken_sessionmaker, POLICY) is None


def test_policy_from_settings(settings):
    settings.cache_min_articles = 4
    policy = CachePolicy.from_settings(settings)
    assert policy.min_articles == 4
    assert policy.window_seconds == 300
    assert policy.max_articles == 50


async def test_store_written_rows_count_toward_window(sessionmaker):
    from app.services.extractor import ArticleRecord
    from app.services.storage import upsert_articles

    records = [ArticleRecord(f"T{i}", "S", f"https://g1.globo.com/w/{i}.ghtml", "G1") for i in range(10)]
    async with sessionmaker() as session:
        await upsert_articles(session, records)

    cached = await check_cache(sessionmaker, POLICY)
    assert cached is not None
    assert len(cached) == 10
