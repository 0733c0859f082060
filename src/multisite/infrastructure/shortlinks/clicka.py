"""Clicka short-link resolver: asks clicka's AJAX endpoint for the target.

Clicka wraps destinations behind an embed page whose JavaScript posts
the link identifier to an AJAX endpoint.  URLs follow the pattern:
    https://clicka.cc/delta/abc123/

The identifier is the second-to-last ``/`` segment of the URL.  The
endpoint answers with ``{"data": {"value": "<destination>"}}``.

Domains:
    clicka.cc  (current main)

Single request, no retries.
"""

from __future__ import annotations

import json

import httpx
import structlog

from multisite.domain.entities import FailureReason, ResolutionResult
from multisite.infrastructure.common.constants import (
    DEFAULT_RESOLVER_TIMEOUT,
    FIREFOX_USER_AGENT,
    is_absolute_http,
)

log = structlog.get_logger(__name__)

_DOMAINS = frozenset({"clicka"})
_ORIGIN = "https://clicka.cc"
_AJAX_ENDPOINT = f"{_ORIGIN}/ajax/linkEmbedView.php"
_FORM_CONTENT_TYPE = "application/x-www-form-urlencoded; charset=UTF-8"


def extract_link_id(url: str) -> str | None:
    """Second-to-last ``/`` segment of *url* (``".../abc123/"`` -> ``"abc123"``)."""
    parts = url.split("/")
    if len(parts) < 2:
        return None
    link_id = parts[-2].strip()
    return link_id or None


def extract_embed_value(payload: object) -> str | None:
    """Read ``data.value`` from the endpoint payload when it is an http URL."""
    if not isinstance(payload, dict):
        return None
    data = payload.get("data")
    if not isinstance(data, dict):
        return None
    value = data.get("value")
    if isinstance(value, str) and is_absolute_http(value):
        return value
    return None


class ClickaResolver:
    """Resolves clicka links with one form-encoded AJAX POST."""

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        *,
        timeout: float = DEFAULT_RESOLVER_TIMEOUT,
        origin: str = _ORIGIN,
        endpoint: str = _AJAX_ENDPOINT,
        domains: frozenset[str] = _DOMAINS,
    ) -> None:
        self._http = http_client
        self._timeout = timeout
        self._origin = origin
        self._endpoint = endpoint
        self._domains = domains

    @property
    def name(self) -> str:
        return "clicka"

    @property
    def supported_domains(self) -> frozenset[str]:
        return self._domains

    async def resolve(self, url: str, referer: str = "") -> ResolutionResult:
        link_id = extract_link_id(url)
        if not link_id:
            log.warning("clicka_invalid_url", url=url)
            return ResolutionResult.fail(FailureReason.NOT_FOUND, 0, "no link id")

        headers = {
            "origin": self._origin,
            "referer": url,
            "user-agent": FIREFOX_USER_AGENT,
            "x-requested-with": "XMLHttpRequest",
            "content-type": _FORM_CONTENT_TYPE,
        }
        try:
            resp = await self._http.post(
                self._endpoint,
                headers=headers,
                content=f"id={link_id}&ref=".encode(),
                timeout=self._timeout,
            )
        except httpx.TimeoutException:
            log.warning("clicka_timeout", url=url)
            return ResolutionResult.fail(FailureReason.NETWORK_FAILURE, 1, "timeout")
        except httpx.HTTPError as exc:
            log.warning("clicka_request_failed", url=url, error=str(exc))
            return ResolutionResult.fail(FailureReason.NETWORK_FAILURE, 1, str(exc))

        try:
            payload = json.loads(resp.text)
        except ValueError:
            log.warning(
                "clicka_invalid_json", url=url, status=resp.status_code
            )
            return ResolutionResult.fail(
                FailureReason.PARSE_FAILURE, 1, "response is not JSON"
            )

        final_url = extract_embed_value(payload)
        if final_url is None:
            log.warning("clicka_no_url_in_response", url=url)
            return ResolutionResult.fail(
                FailureReason.NOT_FOUND, 1, "data.value missing or not a URL"
            )

        log.debug("clicka_resolved", link_id=link_id, final_url=final_url)
        return ResolutionResult.success(final_url)
