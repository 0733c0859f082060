"""Thin fetch layer over a shared ``httpx.AsyncClient``.

Centralises timeouts, default headers and structured error logging so
scrapers and resolvers only deal with ``FetchedPage`` values.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

import httpx
import structlog
from bs4 import BeautifulSoup

from .constants import DEFAULT_PAGE_TIMEOUT, DEFAULT_USER_AGENT
from .html_selectors import parse_html

log = structlog.get_logger(__name__)


@dataclass(frozen=True)
class FetchedPage:
    """Response body plus the final URL after server-side redirects."""

    text: str
    url: str
    status_code: int = 200

    def document(self) -> BeautifulSoup:
        return parse_html(self.text)


class HttpFetcher:
    """Performs GET/POST requests and returns ``FetchedPage`` values.

    ``fetch`` raises ``httpx.HTTPError`` subclasses; ``safe_fetch``
    logs and returns ``None`` instead.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        *,
        timeout: float = DEFAULT_PAGE_TIMEOUT,
        user_agent: str = DEFAULT_USER_AGENT,
    ) -> None:
        self._client = client
        self._timeout = timeout
        self._user_agent = user_agent

    @property
    def client(self) -> httpx.AsyncClient:
        return self._client

    async def fetch(
        self,
        url: str,
        *,
        method: str = "GET",
        headers: Mapping[str, str] | None = None,
        data: str | Mapping[str, Any] | None = None,
        timeout: float | None = None,
    ) -> FetchedPage:
        merged = {"User-Agent": self._user_agent}
        if headers:
            merged.update(headers)

        request_kwargs: dict[str, Any] = {
            "headers": merged,
            "timeout": timeout if timeout is not None else self._timeout,
            "follow_redirects": True,
        }
        if isinstance(data, str):
            request_kwargs["content"] = data.encode("utf-8")
        elif data is not None:
            request_kwargs["data"] = dict(data)

        resp = await self._client.request(method.upper(), url, **request_kwargs)
        resp.raise_for_status()
        return FetchedPage(text=resp.text, url=str(resp.url), status_code=resp.status_code)

    async def safe_fetch(
        self,
        url: str,
        *,
        context: str = "",
        **kwargs: Any,
    ) -> FetchedPage | None:
        """Fetch *url* with structured error logging.

        Returns ``None`` on failure instead of raising.
        """
        try:
            return await self.fetch(url, **kwargs)
        except httpx.TimeoutException:
            log.warning("fetch_timeout", url=url, context=context)
        except httpx.HTTPStatusError as exc:
            log.warning(
                "fetch_http_error",
                url=url,
                status=exc.response.status_code,
                context=context,
            )
        except httpx.HTTPError as exc:
            log.warning("fetch_error", url=url, error=str(exc), context=context)
        return None
