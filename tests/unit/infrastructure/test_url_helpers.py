"""Tests for URL and selector helpers."""

from __future__ import annotations

from multisite.infrastructure.common.constants import is_absolute_http
from multisite.infrastructure.common.html_selectors import (
    absolute_url,
    extract_attr,
    extract_links,
    extract_text,
    parse_html,
    select_items,
)
from multisite.infrastructure.common.urls import (
    bare_host,
    extract_domain,
    host_matches,
    normalize_base_url,
    site_name_from_url,
)


class TestExtractDomain:
    def test_second_level(self) -> None:
        assert extract_domain("https://uprot.net/msf/abc") == "uprot"

    def test_www_prefix(self) -> None:
        assert extract_domain("https://www.mixdrop.co/e/x") == "mixdrop"

    def test_no_host(self) -> None:
        assert extract_domain("not-a-url") == ""


class TestHostMatches:
    def test_token_in_host(self) -> None:
        assert host_matches("https://uprot.net/msf/abc", {"uprot"})

    def test_token_only_in_path(self) -> None:
        assert not host_matches("https://site.example/uprot/abc", {"uprot"})

    def test_empty(self) -> None:
        assert not host_matches("", {"uprot"})


class TestSiteNameFromUrl:
    def test_display_name(self) -> None:
        assert site_name_from_url("https://www.eurostreaming.example/") == "Eurostreaming"

    def test_stable_fallback(self) -> None:
        assert site_name_from_url("https://") == site_name_from_url("https://")
        assert site_name_from_url("https://").startswith("Site")


class TestIsAbsoluteHttp:
    def test_http(self) -> None:
        assert is_absolute_http("https://a.example/")

    def test_relative(self) -> None:
        assert not is_absolute_http("/a")

    def test_none(self) -> None:
        assert not is_absolute_http(None)


class TestHtmlSelectors:
    _DOC = parse_html(
        '<div class="card"><h3> Titolo </h3><a href="/a">A</a><a href="/a">A2</a>'
        '<a href="https://b.example/">B</a></div>'
    )

    def test_select_items_fallback(self) -> None:
        assert len(select_items(self._DOC, ".missing", ".card")) == 1

    def test_extract_text_strips(self) -> None:
        assert extract_text(self._DOC, ".missing", "h3") == "Titolo"

    def test_extract_attr_default(self) -> None:
        assert extract_attr(self._DOC, "img", "src", default="none") == "none"

    def test_extract_links_dedup_and_absolute(self) -> None:
        assert extract_links(self._DOC, base_url="https://site.example/x/") == [
            "https://site.example/a",
            "https://b.example/",
        ]

    def test_absolute_url_without_base(self) -> None:
        assert absolute_url("/a") == "/a"


class TestNormalizeBaseUrl:
    def test_lowercases_host_and_strips_slash(self) -> None:
        assert normalize_base_url(" HTTPS://CB01.Uno/ ") == "https://cb01.uno"

    def test_keeps_path_prefix(self) -> None:
        assert normalize_base_url("https://site.example/it/") == "https://site.example/it"

    def test_drops_query(self) -> None:
        assert normalize_base_url("https://site.example/?ref=x") == "https://site.example"


class TestBareHost:
    def test_strips_www(self) -> None:
        assert bare_host("https://www.CB01.tips/film/") == "cb01.tips"

    def test_no_host(self) -> None:
        assert bare_host("not a url") == ""
