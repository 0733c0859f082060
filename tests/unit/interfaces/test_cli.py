"""Tests for CLI argument parsing."""

from __future__ import annotations

import pytest

from multisite.interfaces.cli.cli import _cli_overrides, _parse_args


class TestParseArgs:
    def test_defaults(self) -> None:
        args = _parse_args([])
        assert args.host is None
        assert args.port is None
        assert args.config is None
        assert _cli_overrides(args) == {}

    def test_overrides(self) -> None:
        args = _parse_args(
            [
                "--port",
                "8000",
                "--site-list",
                "https://list.example/raw",
                "--log-level",
                "DEBUG",
                "--log-format",
                "json",
            ]
        )
        assert args.port == 8000
        assert _cli_overrides(args) == {
            "registry_source_url": "https://list.example/raw",
            "log_level": "DEBUG",
            "log_format": "json",
        }

    def test_denylist_passed_through(self) -> None:
        args = _parse_args(["--denylist", "1337x.to,torrent.example"])
        assert _cli_overrides(args) == {"registry_denylist": "1337x.to,torrent.example"}

    def test_empty_denylist_clears(self) -> None:
        assert _cli_overrides(_parse_args(["--denylist", ""])) == {"registry_denylist": ""}

    def test_rejects_unknown_level(self) -> None:
        with pytest.raises(SystemExit):
            _parse_args(["--log-level", "TRACE"])
