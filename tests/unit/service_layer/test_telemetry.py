"""Unit tests for the telemetry collector."""

from uma_runtime.adapters.telemetry_store import InMemoryTelemetryStore
from uma_runtime.interfaces.metrics_forwarder import MetricsForwarder
from uma_runtime.interfaces.telemetry_store import LATENCY_METRIC, MetricSample
from uma_runtime.service_layer.telemetry import TelemetryCollector


class RecordingForwarder(MetricsForwarder):
    """Forwarder that keeps what it was given."""

    def __init__(self) -> None:
        self.samples: list[MetricSample] = []
        self.closed = False

    def forward(self, sample: MetricSample) -> None:
        self.samples.append(sample)

    def close(self) -> None:
        self.closed = True


def test_record_appends_then_forwards() -> None:
    """Each sample is stored and forwarded."""
    store = InMemoryTelemetryStore()
    forwarder = RecordingForwarder()
    collector = TelemetryCollector(store, forwarder)
    sample = collector.record("uma.custom", 3)
    assert sample == MetricSample("uma.custom", 3.0)
    assert list(store.read_samples()) == [sample]
    assert forwarder.samples == [sample]


def test_record_latency_uses_latency_metric() -> None:
    """Latency samples use the well-known metric name."""
    store = InMemoryTelemetryStore()
    TelemetryCollector(store).record_latency(12.5)
    assert list(store.read_samples(LATENCY_METRIC)) == [MetricSample(LATENCY_METRIC, 12.5)]


def test_close_closes_forwarder() -> None:
    """Closing the collector releases its forwarder."""
    forwarder = RecordingForwarder()
    TelemetryCollector(InMemoryTelemetryStore(), forwarder).close()
    assert forwarder.closed
