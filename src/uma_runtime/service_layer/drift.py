"""Tail-latency drift audit over recorded telemetry."""

import enum
import logging
import math
from collections.abc import Iterable
from dataclasses import dataclass

from uma_runtime.domain.errors import ConditionKind
from uma_runtime.interfaces.telemetry_store import LATENCY_METRIC, TelemetryStore

logger = logging.getLogger(__name__)

DEFAULT_TARGET_MS = 50.0


class DriftStatus(enum.StrEnum):
    """Outcome of a drift audit."""

    SKIPPED = "skipped"
    WITHIN = "within"
    DRIFT = "drift"


@dataclass(frozen=True, slots=True)
class DriftReport:
    """Result of comparing observed p99 latency with its target."""

    status: DriftStatus
    target: float
    count: int
    p99: float | None = None


def p99(values: Iterable[float]) -> float | None:
    """Return the 99th percentile of ``values``, or None if there are none.

    The sample at index ``max(0, floor(0.99 * n) - 1)`` of the ascending
    order is used.
    """
    ordered = sorted(values)
    if not ordered:
        return None
    index = max(0, math.floor(0.99 * len(ordered)) - 1)
    return ordered[index]


class DriftAuditor:
    """Compare recorded call latency with a target.

    Args:
        store: Telemetry store holding latency samples.
        target_ms: The p99 latency target in milliseconds.
    """

    def __init__(self, store: TelemetryStore, target_ms: float = DEFAULT_TARGET_MS) -> None:
        self.store = store
        self.target_ms = target_ms

    def audit(self) -> DriftReport:
        """Run the audit; never raises for drift or missing data."""
        values = [s.value for s in self.store.read_samples(LATENCY_METRIC)]
        observed = p99(values)
        if observed is None:
            logger.warning("drift.skipped no %s samples", LATENCY_METRIC)
            return DriftReport(DriftStatus.SKIPPED, self.target_ms, 0)

        if observed > self.target_ms:
            logger.warning(
                "%s p99=%.2fms > target=%.2fms over %d sample(s)",
                ConditionKind.DRIFT_WARNING,
                observed,
                self.target_ms,
                len(values),
            )
            status = DriftStatus.DRIFT
        else:
            logger.info(
                "drift.ok p99=%.2fms <= target=%.2fms over %d sample(s)",
                observed,
                self.target_ms,
                len(values),
            )
            status = DriftStatus.WITHIN
        return DriftReport(status, self.target_ms, len(values), observed)
