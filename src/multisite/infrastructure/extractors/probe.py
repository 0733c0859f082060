"""Default generic extractor: host recognisers plus content-type probing."""

from __future__ import annotations

import httpx
import structlog

from multisite.domain.entities import MediaLink
from multisite.domain.ports import HostRecognizerPort, MediaLinkSink, SubtitleSink
from multisite.infrastructure.common.constants import DEFAULT_RESOLVER_TIMEOUT
from multisite.infrastructure.common.urls import extract_domain

log = structlog.get_logger(__name__)

_HLS_CONTENT_TYPES = ("application/vnd.apple.mpegurl", "application/x-mpegurl")
_DASH_CONTENT_TYPE = "application/dash+xml"


class ProbingExtractor:
    """Recognises hosters by domain and falls back to content-type probing.

    1. Try the recogniser registered for the URL's domain.
    2. If none, send a single HEAD (following redirects) and retry the
       recogniser lookup on the final domain.
    3. Otherwise judge that same response's content type: direct video,
       HLS and DASH URLs are emitted as-is.
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        recognizers: list[HostRecognizerPort] | None = None,
        timeout: float = DEFAULT_RESOLVER_TIMEOUT,
    ) -> None:
        self._http = http_client
        self._timeout = timeout
        self._domain_map: dict[str, HostRecognizerPort] = {}
        for recognizer in recognizers or []:
            self.register(recognizer)

    def register(self, recognizer: HostRecognizerPort) -> None:
        """Map the recogniser's name and every supported domain to it."""
        self._domain_map[recognizer.name] = recognizer
        for domain in recognizer.supported_domains:
            self._domain_map[domain] = recognizer
        log.debug("host_recognizer_registered", hoster=recognizer.name)

    @property
    def supported_hosters(self) -> list[str]:
        return sorted({r.name for r in self._domain_map.values()})

    async def try_extract(
        self,
        url: str,
        referer: str,
        on_subtitle: SubtitleSink,
        on_media_link: MediaLinkSink,
    ) -> bool:
        hoster = extract_domain(url)

        recognizer = self._domain_map.get(hoster)
        if recognizer is not None:
            link = await self._try_recognizer(recognizer, url, referer)
        else:
            # One HEAD serves both the redirect check and the content-type probe.
            resp = await self._head(url, hoster)
            if resp is None:
                return False
            final_url = str(resp.url)
            redirected = extract_domain(final_url)
            recognizer = self._domain_map.get(redirected) if final_url != url else None
            if recognizer is not None:
                log.info(
                    "extract_after_redirect",
                    original=hoster,
                    redirected=redirected,
                    url=final_url,
                )
                link = await self._try_recognizer(recognizer, final_url, referer)
            else:
                link = self._link_from_content_type(resp, hoster, referer)

        if link is None:
            return False
        on_media_link(link)
        return True

    async def _try_recognizer(
        self, recognizer: HostRecognizerPort, url: str, referer: str
    ) -> MediaLink | None:
        try:
            link = await recognizer.resolve(url, referer)
            if link is not None:
                log.info("extract_success", hoster=recognizer.name, is_hls=link.is_hls)
                return link
            log.warning("extract_failed", hoster=recognizer.name, url=url)
        except httpx.TimeoutException:
            log.warning("extract_timeout", hoster=recognizer.name, url=url)
        except httpx.HTTPError as exc:
            log.warning(
                "extract_http_error", hoster=recognizer.name, url=url, error=str(exc)
            )
        except Exception:
            log.exception("extract_error", hoster=recognizer.name, url=url)
        return None

    async def _head(self, url: str, hoster: str) -> httpx.Response | None:
        """HEAD *url* following redirects; ``None`` on network failure."""
        try:
            resp = await self._http.head(
                url, follow_redirects=True, timeout=self._timeout
            )
        except httpx.TimeoutException:
            log.debug("extract_probe_timeout", hoster=hoster, url=url)
            return None
        except httpx.HTTPError as exc:
            log.debug("extract_probe_http_error", hoster=hoster, url=url, error=str(exc))
            return None

        if str(resp.url) != url:
            log.debug("extract_redirect_followed", original=url, final=str(resp.url))
        return resp

    @staticmethod
    def _link_from_content_type(
        resp: httpx.Response, hoster: str, referer: str
    ) -> MediaLink | None:
        """Emit the final URL directly when it is a playable stream."""
        content_type = resp.headers.get("content-type", "").lower()
        final_url = str(resp.url)
        name = hoster or "direct"

        if content_type.startswith("video/") or _DASH_CONTENT_TYPE in content_type:
            log.info("extract_probe_direct_video", hoster=hoster, content_type=content_type)
            return MediaLink(source=name, name=name, url=final_url, referer=referer)

        if any(ct in content_type for ct in _HLS_CONTENT_TYPES):
            log.info("extract_probe_hls", hoster=hoster, content_type=content_type)
            return MediaLink(
                source=name, name=name, url=final_url, referer=referer, is_hls=True
            )

        return None
