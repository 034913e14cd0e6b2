from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Query, Request
from fastapi.responses import JSONResponse

from app.core.errors import QueryError, ScrapeFailedError
from app.core.logging import get_logger
from app.services.query import ArticleQuery, search_articles

logger = get_logger(__name__)

router = APIRouter(tags=["public"])

def _error(status_code: int, message: str, error: str, details: str | None = None) -> JSONResponse:
    body = {"success": False, "message": message, "error": error}
    if details is not None:
        body["details"] = details
    return JSONResponse(status_code=status_code, content=body)

@router.get("/scrape")
async def scrape(request: Request):
    service = request.app.state.scrape_service
    try:
        return await service.scrape()
    except ScrapeFailedError as exc:
        details = None
        if not request.app.state.settings.is_production:
            details = repr(exc.__cause__) if exc.__cause__ else None
        return _error(500, exc.message, str(exc.cause), details)

@router.get("/articles")
async def list_articles(
    request: Request,
    search: Optional[str] = Query(default=None),
    from_date: Optional[str] = Query(default=None, alias="fromDate"),
    to_date: Optional[str] = Query(default=None, alias="toDate"),
    # Parsed leniently, bad values fall back to the defaults
    limit: Optional[str] = Query(default=None),
    offset: Optional[str] = Query(default=None),
):
    state = request.app.state
    try:
        query = ArticleQuery.from_params(
            search=search,
            from_date=from_date,
            to_date=to_date,
            limit=limit,
            offset=offset,
            default_limit=state.settings.default_page_limit,
        )
        return await search_articles(state.sessionmaker, query)
    except QueryError as exc:
        logger.error("articles_request_failed", error=exc.message)
        return _error(500, "Failed to fetch articles", exc.message)
