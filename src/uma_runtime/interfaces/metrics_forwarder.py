"""Metrics forwarder port.

Forwarders push samples to an external collector. Forwarding is
observability, never a correctness dependency: `forward` must not block the
caller and must not raise.
"""

import abc

from .telemetry_store import MetricSample


class MetricsForwarder(abc.ABC):
    """Best-effort, fire-and-forget push of metric samples."""

    @abc.abstractmethod
    def forward(self, sample: MetricSample) -> None:
        """Schedule ``sample`` for delivery; failures are discarded."""

    def close(self) -> None:
        """Release any resources held by the forwarder."""
