"""Tests for CSS-selector-based HTML extraction helpers."""

from __future__ import annotations

from multisite.infrastructure.common.html_selectors import (
    absolute_url,
    extract_attr,
    extract_links,
    extract_text,
    first_attr,
    parse_html,
    safe_select,
    select_first,
    select_items,
)

_BASE = "https://alpha.example"

_CARD_HTML = """\
<html><body>
<div class="movies">
  <div class="card">
    <a class="title" href="/film/il-nome-della-rosa/" title="Il nome della rosa">
      <h2>Il nome della rosa</h2>
    </a>
    <img data-src="/img/rosa.jpg" src="" alt="poster">
  </div>
  <div class="card">
    <a class="title" href="/film/la-vita-e-bella/" title="La vita è bella">
      <h2>La vita è bella</h2>
    </a>
    <img src="https://cdn.example/vita.jpg" alt="poster">
  </div>
  <div class="card empty">
    <a class="title" href="/film/vuoto/"></a>
  </div>
</div>
</body></html>
"""

_LINKS_HTML = """\
<div class="links">
  <a href="https://uprot.net/msf/a">Mixdrop</a>
  <a href="/go/b">Supervideo</a>
  <a>No href</a>
  <a href="https://uprot.net/msf/a">Mixdrop (dup)</a>
</div>
"""


class TestSafeSelect:
    def test_invalid_selector_is_no_match(self) -> None:
        soup = parse_html(_CARD_HTML)
        assert safe_select(soup, "div[[") == []

    def test_valid_selector(self) -> None:
        soup = parse_html(_CARD_HTML)
        assert len(safe_select(soup, "div.card")) == 3


class TestSelectItems:
    def test_fallback_selector_used(self) -> None:
        soup = parse_html(_CARD_HTML)
        assert len(select_items(soup, "div.nope", "div.card")) == 3

    def test_primary_preferred_over_fallback(self) -> None:
        soup = parse_html(_CARD_HTML)
        assert len(select_items(soup, "div.card", "a.title")) == 3

    def test_invalid_primary_falls_through(self) -> None:
        soup = parse_html(_CARD_HTML)
        assert len(select_items(soup, "::bogus", "div.card")) == 3

    def test_no_match(self) -> None:
        soup = parse_html(_CARD_HTML)
        assert select_items(soup, "div.nope", "span.nope") == []
        assert select_first(soup, "div.nope") is None


class TestExtractText:
    def test_fallback_selector(self) -> None:
        card = select_first(parse_html(_CARD_HTML), "div.card")
        assert card is not None
        assert extract_text(card, "h1", "h2") == "Il nome della rosa"

    def test_skips_empty_matches(self) -> None:
        empty = parse_html(_CARD_HTML).select("div.card")[2]
        assert extract_text(empty, "a", "h2", default="n/a") == "n/a"

    def test_empty_selector_returns_own_text(self) -> None:
        h2 = select_first(parse_html(_CARD_HTML), "h2")
        assert h2 is not None
        assert extract_text(h2, "") == "Il nome della rosa"


class TestExtractAttr:
    def test_title_attr(self) -> None:
        card = parse_html(_CARD_HTML).select("div.card")[1]
        assert extract_attr(card, "a[title]", "title") == "La vita è bella"

    def test_default_when_no_match(self) -> None:
        card = select_first(parse_html(_CARD_HTML), "div.card")
        assert card is not None
        assert extract_attr(card, "a.nope", "href", default="none") == "none"

    def test_empty_selector_reads_own_attr(self) -> None:
        img = select_first(parse_html(_CARD_HTML), "img")
        assert img is not None
        assert extract_attr(img, "", "data-src") == "/img/rosa.jpg"


class TestFirstAttr:
    def test_skips_empty_and_resolves_relative(self) -> None:
        img = select_first(parse_html(_CARD_HTML), "img")
        assert img is not None
        assert (
            first_attr(img, "src", "data-src", base_url=_BASE)
            == "https://alpha.example/img/rosa.jpg"
        )

    def test_absolute_kept(self) -> None:
        img = parse_html(_CARD_HTML).select("img")[1]
        assert first_attr(img, "data-src", "src", base_url=_BASE) == (
            "https://cdn.example/vita.jpg"
        )

    def test_nothing_found(self) -> None:
        img = select_first(parse_html(_CARD_HTML), "img")
        assert img is not None
        assert first_attr(img, "data-lazy") == ""


class TestAbsoluteUrl:
    def test_relative(self) -> None:
        assert absolute_url("/film/x/", _BASE) == "https://alpha.example/film/x/"

    def test_no_base(self) -> None:
        assert absolute_url(" /film/x/ ") == "/film/x/"


class TestExtractLinks:
    def test_dedups_and_skips_missing_href(self) -> None:
        container = select_first(parse_html(_LINKS_HTML), "div.links")
        assert container is not None
        assert extract_links(container, base_url=_BASE) == [
            "https://uprot.net/msf/a",
            "https://alpha.example/go/b",
        ]

    def test_no_links(self) -> None:
        assert extract_links(parse_html("<p>nothing</p>")) == []
