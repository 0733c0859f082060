"""Uprot short-link resolver: escapes the uprot.net redirect wall.

Uprot hides the destination behind one or more interstitial pages.
Each page served to a desktop browser carries the next hop as its first
anchor, so the resolver keeps following first anchors until it lands
outside uprot.  URLs look like:
    https://uprot.net/msf/abc123
    https://uprot.net/mse/abc123

The ``msf`` path token is a rotating mirror of ``mse``; it is rewritten
before each fetch.

Domains:
    uprot.net  (current main)

Only the wall is handled here; the destination goes to the generic
extractor.
"""

from __future__ import annotations

from urllib.parse import urlparse, urlunparse

import httpx
import structlog

from multisite.domain.entities import FailureReason, ResolutionResult
from multisite.infrastructure.common.constants import (
    DEFAULT_MAX_REDIRECT_ATTEMPTS,
    DEFAULT_RESOLVER_TIMEOUT,
    DESKTOP_USER_AGENT,
    is_absolute_http,
)
from multisite.infrastructure.common.html_selectors import (
    absolute_url,
    extract_attr,
    parse_html,
)
from multisite.infrastructure.common.urls import host_matches

log = structlog.get_logger(__name__)

_DOMAINS = frozenset({"uprot"})

# mirror path token -> canonical path token
_MIRROR_TOKENS: dict[str, str] = {"msf": "mse"}


def substitute_mirror_token(url: str, mirror_tokens: dict[str, str] = _MIRROR_TOKENS) -> str:
    """Rewrite known mirror path segments to their canonical token."""
    parsed = urlparse(url)
    segments = parsed.path.split("/")
    replaced = [mirror_tokens.get(seg, seg) for seg in segments]
    if replaced == segments:
        return url
    return urlunparse(parsed._replace(path="/".join(replaced)))


def extract_next_hop(html: str, page_url: str) -> str | None:
    """First anchor's absolute href, or ``None`` if it is not an http URL."""
    href = extract_attr(parse_html(html), "a[href]", "href")
    next_url = absolute_url(href, page_url) if href else ""
    return next_url if is_absolute_http(next_url) else None


class UprotResolver:
    """Follows uprot's anchor chain with a bounded number of attempts."""

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        *,
        max_attempts: int = DEFAULT_MAX_REDIRECT_ATTEMPTS,
        timeout: float = DEFAULT_RESOLVER_TIMEOUT,
        domains: frozenset[str] = _DOMAINS,
        mirror_tokens: dict[str, str] | None = None,
    ) -> None:
        self._http = http_client
        self._max_attempts = max_attempts
        self._timeout = timeout
        self._domains = domains
        self._mirror_tokens = mirror_tokens if mirror_tokens is not None else _MIRROR_TOKENS

    @property
    def name(self) -> str:
        return "uprot"

    @property
    def supported_domains(self) -> frozenset[str]:
        return self._domains

    def _on_own_host(self, url: str) -> bool:
        return host_matches(url, self._domains)

    async def resolve(self, url: str, referer: str = "") -> ResolutionResult:
        """Follow the redirect wall until the URL leaves uprot."""
        current = url
        attempts = 0

        while self._on_own_host(current) and attempts < self._max_attempts:
            attempts += 1
            target = substitute_mirror_token(current, self._mirror_tokens)
            try:
                resp = await self._http.get(
                    target,
                    headers={"User-Agent": DESKTOP_USER_AGENT},
                    timeout=self._timeout,
                    follow_redirects=True,
                )
            except httpx.TimeoutException:
                log.warning("uprot_timeout", url=target, attempt=attempts)
                return ResolutionResult.fail(
                    FailureReason.NETWORK_FAILURE, attempts, "timeout"
                )
            except httpx.HTTPError as exc:
                log.warning(
                    "uprot_request_failed", url=target, attempt=attempts, error=str(exc)
                )
                return ResolutionResult.fail(
                    FailureReason.NETWORK_FAILURE, attempts, str(exc)
                )

            # A server-side redirect may already have left the wall.
            landed = str(resp.url)
            if not self._on_own_host(landed):
                current = landed
                break

            try:
                next_url = extract_next_hop(resp.text, landed)
            except Exception as exc:  # noqa: BLE001
                log.warning("uprot_parse_failed", url=landed, error=str(exc))
                return ResolutionResult.fail(
                    FailureReason.PARSE_FAILURE, attempts, str(exc)
                )

            if next_url is None:
                log.warning("uprot_no_anchor", url=landed, attempt=attempts)
                return ResolutionResult.fail(
                    FailureReason.NOT_FOUND, attempts, "no anchor in response"
                )

            log.debug("uprot_hop", attempt=attempts, next_url=next_url)
            current = next_url

        if self._on_own_host(current):
            log.warning("uprot_attempts_exhausted", url=url, attempts=attempts)
            return ResolutionResult.fail(
                FailureReason.ATTEMPTS_EXHAUSTED, attempts, current
            )

        log.debug("uprot_resolved", url=url, final_url=current, attempts=attempts)
        return ResolutionResult.success(current)
