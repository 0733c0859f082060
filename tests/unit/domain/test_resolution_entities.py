"""Tests for resolution domain entities."""

from __future__ import annotations

import pytest

from multisite.domain.entities import FailureReason, ResolutionResult


class TestResolutionResult:
    def test_success(self) -> None:
        result = ResolutionResult.success("https://cdn.example/v.mp4")
        assert result.ok
        assert result.final_url == "https://cdn.example/v.mp4"
        assert result.failure is None

    def test_failure(self) -> None:
        result = ResolutionResult.fail(FailureReason.ATTEMPTS_EXHAUSTED, 5, "loop")
        assert not result.ok
        assert result.final_url is None
        assert result.failure is not None
        assert result.failure.reason is FailureReason.ATTEMPTS_EXHAUSTED
        assert result.failure.attempts_made == 5

    def test_neither_set_rejected(self) -> None:
        with pytest.raises(ValueError):
            ResolutionResult()

    def test_reason_values_are_snake_case(self) -> None:
        assert FailureReason.NO_ROUTE.value == "no_route"
