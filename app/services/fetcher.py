from __future__ import annotations

import httpx

from app.core.errors import FetchError
from app.core.logging import get_logger

logger = get_logger(__name__)

class Fetcher:
    def __init__(
        self,
        user_agent: str,
        timeout_s: float,
        accept_language: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._headers = {"User-Agent": user_agent}
        if accept_language:
            self._headers["Accept-Language"] = accept_language
        self._timeout = httpx.Timeout(timeout_s)
        self._transport = transport

    async def fetch_page_html(self, url: str) -> str:
        """GET ``url`` and return its body. Any transport error, timeout or
        non-2xx status is raised as :class:`FetchError`."""
        async with httpx.AsyncClient(
            headers=self._headers,
            timeout=self._timeout,
            follow_redirects=True,
            transport=self._transport,
        ) as client:
            try:
                resp = await client.get(url)
                resp.raise_for_status()
            except httpx.TimeoutException as exc:
                raise FetchError(f"Timeout fetching {url}") from exc
            except httpx.HTTPStatusError as exc:
                raise FetchError(f"HTTP {exc.response.status_code} for {url}") from exc
            except httpx.HTTPError as exc:
                raise FetchError(f"{type(exc).__name__} fetching {url}: {exc}") from exc
            logger.debug("page_fetched", url=url, status=resp.status_code, size=len(resp.content))
            return resp.text
