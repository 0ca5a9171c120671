"""Telemetry store port.

Samples are point-in-time metrics such as call latency. Stores are
append-only: samples are never rewritten, reordered or compacted.
"""

import abc
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

LATENCY_METRIC = "uma.qos.latency.ms"


@dataclass(frozen=True, slots=True)
class MetricSample:
    """A single metric sample, ``{"metric": ..., "value": ...}`` on disk."""

    metric: str
    value: float

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON form of the sample."""
        return {"metric": self.metric, "value": self.value}


class TelemetryStore(abc.ABC):
    """An append-only store of metric samples."""

    @abc.abstractmethod
    def append(self, sample: MetricSample) -> None:
        """Append one sample to the store."""

    @abc.abstractmethod
    def read_samples(self, metric: str | None = None) -> Iterable[MetricSample]:
        """Yield stored samples in append order.

        Args:
            metric: If given, only samples of this metric are yielded.
        """
