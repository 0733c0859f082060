"""Tests for catalog domain entities."""

from __future__ import annotations

import json

import pytest

from multisite.domain.entities import (
    DetailRecord,
    EpisodeRecord,
    HomePage,
    ListingRecord,
    MediaKind,
    encode_links,
)


def _episode(season: int, episode: int) -> EpisodeRecord:
    return EpisodeRecord(
        season=season,
        episode=episode,
        title=f"Episodio {episode}",
        candidate_links=(f"https://host.example/{season}x{episode}",),
    )


class TestEpisodeRecord:
    def test_key(self) -> None:
        assert _episode(2, 5).key == (2, 5)

    def test_rejects_zero_season(self) -> None:
        with pytest.raises(ValueError):
            EpisodeRecord(0, 1, "x", ("https://a.example/",))

    def test_rejects_zero_episode(self) -> None:
        with pytest.raises(ValueError):
            EpisodeRecord(1, 0, "x", ("https://a.example/",))

    def test_requires_links(self) -> None:
        with pytest.raises(ValueError, match="candidate link"):
            EpisodeRecord(1, 1, "x", ())

    def test_link_payload_is_json_array(self) -> None:
        assert json.loads(_episode(1, 1).link_payload) == ["https://host.example/1x1"]


class TestDetailRecord:
    def test_movie_with_links(self) -> None:
        record = DetailRecord(
            title="Film",
            url="https://site.example/film/",
            media_kind=MediaKind.MOVIE,
            links=("https://uprot.net/msf/a",),
        )
        assert record.is_movie
        assert record.link_payload == '["https://uprot.net/msf/a"]'

    def test_movie_without_links_payload_is_null(self) -> None:
        record = DetailRecord(
            title="Film", url="https://site.example/", media_kind=MediaKind.MOVIE
        )
        assert record.link_payload == "null"

    def test_movie_cannot_carry_episodes(self) -> None:
        with pytest.raises(ValueError, match="movie"):
            DetailRecord(
                title="Film",
                url="https://site.example/",
                media_kind=MediaKind.MOVIE,
                episodes=(_episode(1, 1),),
            )

    def test_series_cannot_carry_links(self) -> None:
        with pytest.raises(ValueError, match="series"):
            DetailRecord(
                title="Show",
                url="https://site.example/",
                media_kind=MediaKind.SERIES,
                links=("https://a.example/",),
            )

    def test_duplicate_episodes_rejected(self) -> None:
        with pytest.raises(ValueError, match="duplicate"):
            DetailRecord(
                title="Show",
                url="https://site.example/",
                media_kind=MediaKind.SERIES,
                episodes=(_episode(1, 1), _episode(1, 1)),
            )

    def test_unsorted_episodes_rejected(self) -> None:
        with pytest.raises(ValueError, match="sorted"):
            DetailRecord(
                title="Show",
                url="https://site.example/",
                media_kind=MediaKind.SERIES,
                episodes=(_episode(1, 2), _episode(1, 1)),
            )

    def test_series_with_sorted_episodes(self) -> None:
        record = DetailRecord(
            title="Show",
            url="https://site.example/",
            media_kind=MediaKind.SERIES,
            episodes=(_episode(1, 1), _episode(1, 2), _episode(2, 1)),
        )
        assert not record.is_movie
        assert [ep.key for ep in record.episodes] == [(1, 1), (1, 2), (2, 1)]


class TestHomePage:
    def test_empty_page(self) -> None:
        assert HomePage(name="Film").is_empty

    def test_non_empty_page(self) -> None:
        item = ListingRecord(title="Film", detail_url="https://site.example/film/")
        assert not HomePage(name="Film", items=(item,)).is_empty


class TestEncodeLinks:
    def test_empty_is_null(self) -> None:
        assert encode_links([]) == "null"

    def test_preserves_order(self) -> None:
        assert json.loads(encode_links(("b", "a"))) == ["b", "a"]
