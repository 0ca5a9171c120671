"""Telemetry collection."""

import logging

from uma_runtime.adapters.forwarders import NullForwarder
from uma_runtime.interfaces.metrics_forwarder import MetricsForwarder
from uma_runtime.interfaces.telemetry_store import (
    LATENCY_METRIC,
    MetricSample,
    TelemetryStore,
)

logger = logging.getLogger(__name__)


class TelemetryCollector:
    """Append metric samples to a store and forward them externally.

    The store append is synchronous and part of the run; forwarding is handed
    to the forwarder, which never blocks and never raises.

    Args:
        store: Append-only sample store.
        forwarder: External push target. Defaults to a no-op forwarder.
    """

    def __init__(
        self, store: TelemetryStore, forwarder: MetricsForwarder | None = None
    ) -> None:
        self.store = store
        self.forwarder = forwarder or NullForwarder()

    def record(self, metric: str, value: float) -> MetricSample:
        """Record one sample of ``metric``."""
        sample = MetricSample(metric=metric, value=float(value))
        self.store.append(sample)
        self.forwarder.forward(sample)
        logger.debug("telemetry.recorded %s=%s", metric, sample.value)
        return sample

    def record_latency(self, ms: float) -> MetricSample:
        """Record one call latency, in milliseconds."""
        return self.record(LATENCY_METRIC, ms)

    def close(self) -> None:
        """Release the forwarder."""
        self.forwarder.close()
