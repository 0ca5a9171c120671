"""In-memory telemetry store for tests and dry runs."""

from collections.abc import Iterable

from uma_runtime.interfaces.telemetry_store import MetricSample, TelemetryStore


class InMemoryTelemetryStore(TelemetryStore):
    """Non-durable TelemetryStore; samples are lost with the instance."""

    def __init__(self, samples: Iterable[MetricSample] = ()) -> None:
        self._samples: list[MetricSample] = list(samples)

    def append(self, sample: MetricSample) -> None:
        self._samples.append(sample)

    def read_samples(self, metric: str | None = None) -> Iterable[MetricSample]:
        for sample in list(self._samples):
            if metric is None or sample.metric == metric:
                yield sample
