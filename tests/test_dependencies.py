# ============================================================================
# DEPENDENCY GATE TESTS
# ============================================================================
# STATUS: Tests - Bounded-retry startup gate
# PURPOSE: Verify attempt counting, short-circuiting and delays
# CREATED: 11 OCT 2026
# ============================================================================
"""
Dependency Gate Tests

The probe and sleep functions are injected, so attempts are counted
directly and no test waits on wall-clock time.

Run with:
    pytest tests/test_dependencies.py -v
"""

import pytest

from core.config import HealthDefaults
from health.dependencies import DependencyChecker


class ScriptedProbe:
    """Probe whose outcome per target is a list consumed one call at a time."""

    def __init__(self, script=None, default=True):
        self.script = {k: list(v) for k, v in (script or {}).items()}
        self.default = default
        self.calls = []

    def __call__(self, target, timeout_s):
        self.calls.append(target)
        outcomes = self.script.get(target)
        outcome = outcomes.pop(0) if outcomes else self.default
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


class SleepRecorder:
    def __init__(self):
        self.delays = []

    def __call__(self, seconds):
        self.delays.append(seconds)


@pytest.fixture
def sleep():
    return SleepRecorder()


def _gate(deps, probe, sleep, **kwargs):
    return DependencyChecker(deps, probe=probe, sleep=sleep, **kwargs)


# ============================================================================
# WAIT FOR ALL
# ============================================================================

class TestWaitForAll:
    """Bounded retry loop."""

    def test_always_failing_exhausts_retries(self, sleep):
        probe = ScriptedProbe(default=False)
        gate = _gate(["db:5432"], probe, sleep, retry_count=3, retry_delay_ms=0)

        assert gate.wait_for_all() is False
        assert len(probe.calls) == 3

    def test_no_sleep_after_last_attempt(self, sleep):
        probe = ScriptedProbe(default=False)
        gate = _gate(["db:5432"], probe, sleep, retry_count=3, retry_delay_ms=250)

        gate.wait_for_all()

        assert sleep.delays == [0.25, 0.25]

    def test_success_on_first_attempt(self, sleep):
        probe = ScriptedProbe(default=True)
        gate = _gate(["db:5432", "http://auth/livez"], probe, sleep)

        assert gate.wait_for_all() is True
        assert probe.calls == ["db:5432", "http://auth/livez"]
        assert sleep.delays == []

    def test_stops_retrying_once_all_succeed(self, sleep):
        probe = ScriptedProbe({"db:5432": [False, True]})
        gate = _gate(["db:5432"], probe, sleep, retry_count=5)

        assert gate.wait_for_all() is True
        assert len(probe.calls) == 2
        assert len(sleep.delays) == 1

    def test_failure_short_circuits_attempt(self, sleep):
        probe = ScriptedProbe({"a": [True, True], "b": [False, True]})
        gate = _gate(["a", "b", "c"], probe, sleep, retry_count=3)

        assert gate.wait_for_all() is True
        # Attempt 1 stops at b; attempt 2 probes everything
        assert probe.calls == ["a", "b", "a", "b", "c"]

    def test_exception_counts_as_failure(self, sleep):
        probe = ScriptedProbe({"db": [ConnectionError("refused"), True]})
        gate = _gate(["db"], probe, sleep, retry_count=2)

        assert gate.wait_for_all() is True
        assert len(probe.calls) == 2

    def test_timeout_passed_in_seconds(self, sleep):
        seen = []
        gate = _gate(
            ["db"],
            lambda target, timeout_s: seen.append(timeout_s) or True,
            sleep,
            timeout_ms=1500,
        )
        gate.wait_for_all()
        assert seen == [1.5]

    def test_no_dependencies_passes(self, sleep):
        probe = ScriptedProbe()
        assert _gate([], probe, sleep).wait_for_all() is True
        assert probe.calls == []

    def test_zero_retry_count_fails_without_probing(self, sleep):
        probe = ScriptedProbe()
        gate = _gate(["db"], probe, sleep, retry_count=0)
        assert gate.wait_for_all() is False
        assert probe.calls == []

    def test_negative_delay_rejected(self, sleep):
        with pytest.raises(ValueError):
            _gate(["db"], ScriptedProbe(), sleep, retry_delay_ms=-1)


class TestFromDefaults:
    """Configuration wiring."""

    def test_uses_defaults(self, sleep):
        defaults = HealthDefaults(probe_timeout_ms=750, retry_count=7, retry_delay_ms=20)
        gate = DependencyChecker.from_defaults(["db"], defaults, sleep=sleep)

        assert gate.timeout_ms == 750
        assert gate.retry_count == 7
        assert gate.retry_delay_ms == 20
