"""Unit tests for fetch metrics."""

from collections.abc import Generator

import pytest

from shutfetch.fetch.errors import FetchErrorClass
from shutfetch.fetch.metrics import FetchMetrics


@pytest.fixture(autouse=True)
def reset_metrics() -> Generator[None]:
    """Reset the metrics singleton around each test."""
    FetchMetrics.reset()
    yield
    FetchMetrics.reset()


class TestFetchMetrics:
    """Tests for FetchMetrics."""

    def test_singleton(self) -> None:
        """get_instance returns the same object until reset."""
        first = FetchMetrics.get_instance()

        assert FetchMetrics.get_instance() is first
        FetchMetrics.reset()
        assert FetchMetrics.get_instance() is not first

    def test_attempts_and_retries(self) -> None:
        """Retries are counted separately from first attempts."""
        metrics = FetchMetrics.get_instance()
        metrics.record_attempt(retry=False)
        metrics.record_attempt(retry=True)
        metrics.record_attempt(retry=True)

        data = metrics.to_dict()
        assert data["fetch_attempts_total"] == 3
        assert data["fetch_retries_total"] == 2

    def test_outcomes_and_failures(self) -> None:
        """Outcomes and failure classes are counted by key."""
        metrics = FetchMetrics.get_instance()
        metrics.record_outcome("SUCCEEDED")
        metrics.record_outcome("FAILED")
        metrics.record_failure(FetchErrorClass.TRANSIENT_IO)
        metrics.record_bytes(42)

        data = metrics.to_dict()
        assert data["fetch_outcomes_total"] == {"SUCCEEDED": 1, "FAILED": 1}
        assert data["fetch_failures_total"] == {"TRANSIENT_IO": 1}
        assert data["fetch_bytes_total"] == 42
