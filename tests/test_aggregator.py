# ============================================================================
# SERVICE AGGREGATOR TESTS
# ============================================================================
# STATUS: Tests - Downstream service health and caching
# PURPOSE: Verify check_all folding and the get_cached staleness policy
# CREATED: 10 OCT 2026
# ============================================================================
"""
Service Aggregator Tests

Uses an in-memory fake probe keyed by URL; no HTTP traffic.

Run with:
    pytest tests/test_aggregator.py -v
"""

import time
from datetime import datetime, timezone

import httpx
import pytest

from health.core import HealthStatus
from health.aggregator import HealthAggregator, ServiceHealth, NOT_REGISTERED_MESSAGE

H = HealthStatus.HEALTHY
D = HealthStatus.DEGRADED
U = HealthStatus.UNHEALTHY


class FakeProbe:
    """Probe returning canned outcomes per URL and recording calls."""

    def __init__(self, outcomes=None):
        self.outcomes = outcomes or {}
        self.calls = []

    def __call__(self, url, timeout_s):
        self.calls.append((url, timeout_s))
        outcome = self.outcomes.get(url, (H, ""))
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


@pytest.fixture
def probe():
    return FakeProbe()


@pytest.fixture
def aggregator(probe):
    return HealthAggregator(check_timeout_ms=2000, cache_duration_ms=10000, probe=probe)


# ============================================================================
# REGISTRY
# ============================================================================

class TestRegistry:
    """register / unregister."""

    def test_register_creates_fresh_record(self, aggregator):
        aggregator.register("orders", "http://orders/livez")
        record = aggregator.get("orders")
        assert record.status == H
        assert record.last_check_time is None
        assert len(aggregator) == 1
        assert "orders" in aggregator

    def test_reregister_discards_cached_status(self, aggregator, probe):
        probe.outcomes["http://orders/livez"] = (U, "HTTP 500")
        aggregator.register("orders", "http://orders/livez")
        aggregator.check_service("orders")
        assert aggregator.get("orders").status == U

        aggregator.register("orders", "http://orders-v2/livez")
        record = aggregator.get("orders")
        assert record.status == H
        assert record.url == "http://orders-v2/livez"
        assert record.last_check_time is None

    def test_unregister(self, aggregator):
        aggregator.register("orders", "http://orders/livez")
        aggregator.unregister("orders")
        assert "orders" not in aggregator

    def test_unregister_absent_is_noop(self, aggregator):
        aggregator.unregister("missing")
        assert len(aggregator) == 0


# ============================================================================
# CHECK SERVICE
# ============================================================================

class TestCheckService:
    """Single-service probe."""

    def test_unknown_service_is_synthetic_unhealthy(self, aggregator, probe):
        record = aggregator.check_service("ghost")
        assert record.status == U
        assert record.message == NOT_REGISTERED_MESSAGE
        assert "ghost" not in aggregator
        assert probe.calls == []

    def test_updates_record_in_place(self, aggregator, probe):
        probe.outcomes["http://b/"] = (U, "HTTP 503")
        aggregator.register("b", "http://b/")
        stored = aggregator.get("b")

        record = aggregator.check_service("b")

        assert record is stored
        assert record.status == U
        assert record.message == "HTTP 503"
        assert record.last_check_time is not None
        assert record.latency_ms >= 0.0

    def test_timeout_passed_in_seconds(self, aggregator, probe):
        aggregator.register("a", "http://a/")
        aggregator.check_service("a")
        assert probe.calls == [("http://a/", 2.0)]

    @pytest.mark.parametrize(
        "exc,fragment",
        [
            (httpx.ConnectTimeout("slow"), "Timeout after 2000ms"),
            (httpx.ConnectError("refused"), "refused"),
            (RuntimeError("kaboom"), "kaboom"),
        ],
    )
    def test_transport_errors_become_unhealthy(self, aggregator, probe, exc, fragment):
        probe.outcomes["http://a/"] = exc
        aggregator.register("a", "http://a/")

        record = aggregator.check_service("a")

        assert record.status == U
        assert fragment in record.message
        assert record.last_check_time is not None

    def test_recovery_clears_message(self, aggregator, probe):
        probe.outcomes["http://a/"] = (U, "HTTP 500")
        aggregator.register("a", "http://a/")
        aggregator.check_service("a")

        probe.outcomes["http://a/"] = (H, "")
        record = aggregator.check_service("a")
        assert record.status == H
        assert record.message == ""

    @pytest.mark.parametrize(
        "returned,expected",
        [
            (("degraded", "slow"), D),
            (("healthy", ""), H),
        ],
    )
    def test_string_status_is_converted(self, aggregator, probe, returned, expected):
        probe.outcomes["http://a/"] = returned
        aggregator.register("a", "http://a/")

        record = aggregator.check_service("a")

        assert record.status is expected
        assert record.to_dict()["status"] == expected.value

    @pytest.mark.parametrize("raw", [None, "fine", 42])
    def test_invalid_status_is_unhealthy(self, aggregator, probe, raw):
        probe.outcomes["http://a/"] = (raw, "")
        aggregator.register("a", "http://a/")

        record = aggregator.check_service("a")

        assert record.status == U
        assert "invalid status" in record.message
        assert repr(raw) in record.message


# ============================================================================
# CHECK ALL
# ============================================================================

class TestCheckAll:
    """Equal-weight fold across services."""

    def test_mixed_services(self, aggregator, probe):
        probe.outcomes["http://b/"] = (U, "HTTP 500")
        aggregator.register("A", "http://a/")
        aggregator.register("B", "http://b/")
        aggregator.register("C", "http://c/")

        report = aggregator.check_all()

        assert report.overall == U
        assert report.healthy == 2
        assert report.total == 3

    def test_degraded_without_unhealthy(self, aggregator, probe):
        probe.outcomes["http://b/"] = (D, "Service reports degraded")
        aggregator.register("A", "http://a/")
        aggregator.register("B", "http://b/")

        report = aggregator.check_all()

        assert report.overall == D
        assert report.healthy == 1

    def test_empty_is_healthy(self, aggregator):
        report = aggregator.check_all()
        assert report.overall == H
        assert (report.healthy, report.total) == (0, 0)

    def test_bypasses_cache(self, aggregator, probe):
        aggregator.register("A", "http://a/")
        aggregator.check_all()
        aggregator.check_all()
        assert len(probe.calls) == 2

    def test_to_dict(self, aggregator, probe):
        probe.outcomes["http://b/"] = (U, "HTTP 500")
        aggregator.register("A", "http://a/")
        aggregator.register("B", "http://b/")

        data = aggregator.check_all().to_dict()

        assert data["overall"] == "unhealthy"
        assert data["healthy"] == 1
        assert data["total"] == 2
        assert data["services"]["B"]["status"] == "unhealthy"
        assert data["services"]["B"]["message"] == "HTTP 500"
        assert set(data["services"]["A"]) == {"status", "latency_ms", "message"}

    def test_report_is_a_snapshot(self, aggregator, probe):
        aggregator.register("A", "http://a/")
        report = aggregator.check_all()

        probe.outcomes["http://a/"] = (U, "HTTP 500")
        aggregator.check_service("A")

        assert report.services["A"].status == H
        assert report.services["A"].message == ""
        assert report.services["A"] is not aggregator.get("A")


# ============================================================================
# CACHING
# ============================================================================

class TestGetCached:
    """Staleness policy."""

    def test_never_checked_is_checked_now(self, aggregator, probe):
        aggregator.register("A", "http://a/")
        aggregator.get_cached("A")
        assert len(probe.calls) == 1

    def test_never_checked_is_stale_even_with_huge_window(self, probe):
        aggregator = HealthAggregator(cache_duration_ms=10 ** 12, probe=probe)
        aggregator.register("A", "http://a/")
        aggregator.get_cached("A")
        assert len(probe.calls) == 1

    def test_fresh_record_returned_unchanged(self, aggregator, probe):
        aggregator.register("A", "http://a/")
        first = aggregator.get_cached("A")
        checked_at = first.last_check_time

        second = aggregator.get_cached("A")

        assert len(probe.calls) == 1
        assert second is first
        assert second.last_check_time == checked_at

    def test_stale_record_is_checked_again(self, aggregator, probe):
        aggregator.register("A", "http://a/")
        aggregator.get_cached("A")

        probe.outcomes["http://a/"] = (U, "HTTP 503")
        aggregator.get("A").checked_monotonic = time.monotonic() - 11

        record = aggregator.get_cached("A")

        assert len(probe.calls) == 2
        assert record.status == U

    def test_unknown_service(self, aggregator, probe):
        record = aggregator.get_cached("ghost")
        assert record.status == U
        assert record.message == NOT_REGISTERED_MESSAGE
        assert probe.calls == []

    def test_is_stale(self):
        now = 5000.0
        record = ServiceHealth(name="a", url="http://a/")
        assert record.is_stale(1000, now) is True

        record.checked_monotonic = now - 0.5
        assert record.is_stale(1000, now) is False

        record.checked_monotonic = now - 1.5
        assert record.is_stale(1000, now) is True

    def test_wall_clock_change_does_not_expire_record(self, aggregator, probe):
        aggregator.register("A", "http://a/")
        aggregator.get_cached("A")

        aggregator.get("A").last_check_time = datetime(2000, 1, 1, tzinfo=timezone.utc)

        aggregator.get_cached("A")
        assert len(probe.calls) == 1


class TestIsAllHealthy:
    """Cached all-healthy gate."""

    def test_all_healthy(self, aggregator):
        aggregator.register("A", "http://a/")
        aggregator.register("B", "http://b/")
        assert aggregator.is_all_healthy() is True

    def test_short_circuits_on_first_failure(self, aggregator, probe):
        probe.outcomes["http://a/"] = (U, "HTTP 500")
        aggregator.register("A", "http://a/")
        aggregator.register("B", "http://b/")

        assert aggregator.is_all_healthy() is False
        assert [url for url, _ in probe.calls] == ["http://a/"]

    def test_degraded_is_not_healthy(self, aggregator, probe):
        probe.outcomes["http://a/"] = (D, "")
        aggregator.register("A", "http://a/")
        assert aggregator.is_all_healthy() is False

    def test_uses_cache(self, aggregator, probe):
        aggregator.register("A", "http://a/")
        aggregator.is_all_healthy()
        aggregator.is_all_healthy()
        assert len(probe.calls) == 1

    def test_empty_is_healthy(self, aggregator):
        assert aggregator.is_all_healthy() is True
