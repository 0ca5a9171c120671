"""Metrics forwarders.

`OtlpHttpForwarder` pushes each sample to an OpenTelemetry-style HTTP
collector as a small OTLP/JSON ``resourceMetrics`` document. Delivery happens
on a single background worker so the run's critical path never waits on the
network, and every delivery failure is discarded.
"""

import logging
import time
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any

import httpx

from uma_runtime.interfaces.metrics_forwarder import MetricsForwarder
from uma_runtime.interfaces.telemetry_store import MetricSample

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_S = 2.0


class NullForwarder(MetricsForwarder):
    """Forwarder used when no external collector is configured."""

    def forward(self, sample: MetricSample) -> None:
        return None


def otlp_payload(sample: MetricSample, time_unix_nano: int) -> dict[str, Any]:
    """Build the OTLP/JSON document for a single sample."""
    return {
        "resourceMetrics": [
            {
                "scopeMetrics": [
                    {
                        "metrics": [
                            {
                                "name": sample.metric,
                                "sum": {
                                    "dataPoints": [
                                        {
                                            "asDouble": float(sample.value),
                                            "timeUnixNano": time_unix_nano,
                                        }
                                    ]
                                },
                            }
                        ]
                    }
                ]
            }
        ]
    }


class OtlpHttpForwarder(MetricsForwarder):
    """Fire-and-forget OTLP/HTTP metrics push.

    Args:
        endpoint: Collector URL samples are POSTed to.
        client: Optional preconfigured `httpx.Client` (tests inject one with a
            mock transport). A default client is created otherwise.
        timeout: Per-request timeout in seconds for the default client.
    """

    def __init__(
        self,
        endpoint: str,
        client: httpx.Client | None = None,
        timeout: float = DEFAULT_TIMEOUT_S,
    ) -> None:
        self._endpoint = endpoint
        self._client = client or httpx.Client(timeout=timeout)
        self._executor = ThreadPoolExecutor(
            max_workers=1, thread_name_prefix="uma-metrics"
        )
        self._pending: list[Future[None]] = []
        self._closed = False

    def forward(self, sample: MetricSample) -> None:
        payload = otlp_payload(sample, time.time_ns())
        self._pending = [f for f in self._pending if not f.done()]
        try:
            self._pending.append(self._executor.submit(self._send, payload))
        except RuntimeError:
            # executor already shut down
            logger.debug("metrics.forward dropped %s after close", sample.metric)

    def flush(self, timeout: float | None = None) -> None:
        """Wait for samples scheduled so far to be attempted."""
        pending, self._pending = self._pending, []
        for future in pending:
            future.exception(timeout=timeout)

    def close(self, wait: bool = False) -> None:
        """Stop accepting samples.

        Samples already scheduled are still delivered on the worker, which
        then closes the HTTP client. With ``wait`` the call blocks until that
        has happened; otherwise `flush` can be used to wait for it later.
        """
        if self._closed:
            return
        self._closed = True
        self._pending.append(self._executor.submit(self._client.close))
        self._executor.shutdown(wait=wait)

    def _send(self, payload: dict[str, Any]) -> None:
        try:
            response = self._client.post(self._endpoint, json=payload)
            response.raise_for_status()
        except Exception as e:  # pylint: disable=broad-except
            logger.debug("metrics.forward failed: %s", e)
