# ============================================================================
# DEPENDENCY GATE
# ============================================================================
# STATUS: Core - Startup gating on dependency reachability
# PURPOSE: Block process startup until dependencies answer, bounded retries
# CREATED: 06 OCT 2026
# ============================================================================
"""
Dependency Gate

Runs once at process startup, before traffic is served:

    gate = DependencyChecker(
        ["postgres:5432", "http://auth:8080/livez"],
        retry_count=5,
        retry_delay_ms=2000,
    )
    if not gate.wait_for_all():
        sys.exit(1)

Algorithm, per attempt (retry_count attempts in total):
1. Probe each dependency in order.
2. The first failure (False or exception) ends the attempt; the remaining
   dependencies are not probed.
3. All succeeded -> return True immediately.
4. Otherwise sleep retry_delay_ms, unless this was the last attempt.
After the last failed attempt, return False. The caller decides whether
to abort startup.

Strictly sequential and blocking.
"""

import time
from typing import Callable, List, Optional, Sequence

from core.config import HealthDefaults, get_defaults
from core.logging import get_logger, log_context, log_checkpoint, ComponentType
from health.transport import probe_dependency

logger = get_logger(__name__, ComponentType.DEPENDENCY_GATE)

# (target, timeout_seconds) -> reachable
DependencyProbe = Callable[[str, float], bool]


class DependencyChecker:
    """
    Bounded-retry startup gate.

    Args:
        dependencies: Probe targets, "host:port" or http(s) URLs
        timeout_ms: Per-probe timeout
        retry_count: Number of attempts (not additional retries)
        retry_delay_ms: Sleep between failed attempts
        probe: Callable (target, timeout_seconds) -> bool
        sleep: Sleep function taking seconds
    """

    def __init__(
        self,
        dependencies: Sequence[str],
        timeout_ms: int = 5000,
        retry_count: int = 3,
        retry_delay_ms: int = 1000,
        probe: Optional[DependencyProbe] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        if timeout_ms < 0:
            raise ValueError("timeout_ms must be >= 0")
        if retry_delay_ms < 0:
            raise ValueError("retry_delay_ms must be >= 0")
        self.dependencies: List[str] = list(dependencies)
        self.timeout_ms = timeout_ms
        self.retry_count = retry_count
        self.retry_delay_ms = retry_delay_ms
        self._probe = probe or probe_dependency
        self._sleep = sleep

    @classmethod
    def from_defaults(
        cls,
        dependencies: Sequence[str],
        defaults: Optional[HealthDefaults] = None,
        **kwargs,
    ) -> "DependencyChecker":
        defaults = defaults or get_defaults()
        return cls(
            dependencies,
            timeout_ms=defaults.probe_timeout_ms,
            retry_count=defaults.retry_count,
            retry_delay_ms=defaults.retry_delay_ms,
            **kwargs,
        )

    def wait_for_all(self) -> bool:
        """
        Block until every dependency is reachable or attempts run out.

        Returns:
            True on the first fully successful attempt, False when all
            retry_count attempts failed
        """
        for attempt in range(self.retry_count):
            failed = self._first_failure()
            if failed is None:
                log_checkpoint(
                    "dependencies_ready",
                    {"attempt": attempt + 1, "dependencies": self.dependencies},
                    logger=logger,
                )
                logger.info(
                    f"All {len(self.dependencies)} dependencies reachable "
                    f"(attempt {attempt + 1}/{self.retry_count})"
                )
                return True

            logger.warning(
                f"Dependency {failed} unreachable "
                f"(attempt {attempt + 1}/{self.retry_count})"
            )
            if attempt < self.retry_count - 1:
                self._sleep(self.retry_delay_ms / 1000.0)

        log_checkpoint(
            "dependencies_unavailable",
            {"attempts": self.retry_count, "dependencies": self.dependencies},
            logger=logger,
        )
        logger.error(
            f"Dependencies not reachable after {self.retry_count} attempts"
        )
        return False

    def _first_failure(self) -> Optional[str]:
        """Probe in order; return the first failing target, or None."""
        timeout_s = self.timeout_ms / 1000.0
        for target in self.dependencies:
            with log_context(target=target, operation="wait_for_all"):
                try:
                    reachable = self._probe(target, timeout_s)
                except Exception as e:
                    logger.debug(f"Dependency probe for {target} raised: {e}")
                    reachable = False
            if not reachable:
                return target
        return None


__all__ = [
    "DependencyChecker",
]
