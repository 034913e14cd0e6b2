from __future__ import annotations

from dataclasses import dataclass, asdict
from typing import Iterable

from bs4 import BeautifulSoup
from bs4.builder import ParserRejectedMarkup

from app.core.errors import ExtractionError
from app.core.logging import get_logger
from app.services.normalize import absolute_link

logger = get_logger(__name__)

@dataclass(frozen=True)
class ArticleRecord:
    title: str
    summary: str
    link: str
    source: str

    def to_dict(self) -> dict:
        return asdict(self)

@dataclass(frozen=True)
class ExtractorConfig:
    site_url: str
    source_label: str
    post_selector: str = ".feed-post"
    title_selector: str = ".feed-post-link"
    summary_selector: str = ".feed-post-body-resumo"
    link_selector: str = "a"
    summary_placeholder: str = "No summary available"

    @classmethod
    def from_settings(cls, cfg) -> "ExtractorConfig":
        return cls(
            site_url=cfg.site_url,
            source_label=cfg.source_label,
            post_selector=cfg.post_selector,
            title_selector=cfg.title_selector,
            summary_selector=cfg.summary_selector,
            link_selector=cfg.link_selector,
            summary_placeholder=cfg.summary_placeholder,
        )

def _text(node, selector: str) -> str:
    # First match only; a post carries one title and one summary node
    found = node.select_one(selector)
    if found is None:
        return ""
    return found.get_text().strip()

def _href(node, selector: str) -> str:
    found = node.select_one(selector)
    if found is None:
        return ""
    href = found.get("href")
    if isinstance(href, list):
        href = href[0] if href else ""
    return (href or "").strip()

def dedupe_by_link(records: Iterable[ArticleRecord]) -> list[ArticleRecord]:
    seen: set[str] = set()
    unique = []
    for rec in records:
        if rec.link in seen:
            continue
        seen.add(rec.link)
        unique.append(rec)
    return unique

def extract_articles(html: str, config: ExtractorConfig) -> list[ArticleRecord]:
    try:
        soup = BeautifulSoup(html, "lxml")
    except ParserRejectedMarkup as exc:
        raise ExtractionError(f"Could not parse page markup: {exc}") from exc

    candidates = []
    for index, node in enumerate(soup.select(config.post_selector)):
        try:
            title = _text(node, config.title_selector)
            summary = _text(node, config.summary_selector)
            link = absolute_link(_href(node, config.link_selector), config.site_url)
        except Exception as exc:
            logger.warning("post_extraction_failed", index=index, error=str(exc))
            continue

        if not title or not link:
            continue
        candidates.append(
            ArticleRecord(
                title=title,
                summary=summary or config.summary_placeholder,
                link=link,
                source=config.source_label,
            )
        )

    articles = dedupe_by_link(candidates)
    logger.info("articles_extracted", candidates=len(candidates), unique=len(articles))
    return articles
