"""Newline-delimited JSON telemetry store.

Each sample is one ``{"metric": ..., "value": ...}`` object per line. The file
is only ever opened in append mode; it is never rewritten or compacted.
Lines that cannot be decoded are skipped on read with a warning, so one torn
write does not hide every other sample.
"""

import json
import logging
import os
from collections.abc import Iterable
from numbers import Real
from pathlib import Path

from uma_runtime.interfaces.telemetry_store import MetricSample, TelemetryStore

logger = logging.getLogger(__name__)


class JsonlTelemetryStore(TelemetryStore):
    """TelemetryStore backed by an append-only ``.jsonl`` file."""

    def __init__(self, path: str | os.PathLike[str]) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        """Location of the backing file."""
        return self._path

    def append(self, sample: MetricSample) -> None:
        line = json.dumps(sample.to_dict(), separators=(",", ":"))
        self._path.parent.mkdir(parents=True, exist_ok=True)
        with self._path.open("a", encoding="utf-8") as f:
            f.write(line + "\n")

    def read_samples(self, metric: str | None = None) -> Iterable[MetricSample]:
        if not self._path.exists():
            return
        with self._path.open(encoding="utf-8") as f:
            for lineno, line in enumerate(f, start=1):
                if not line.strip():
                    continue
                if (sample := self._decode(line, lineno)) is None:
                    continue
                if metric is None or sample.metric == metric:
                    yield sample

    def _decode(self, line: str, lineno: int) -> MetricSample | None:
        try:
            obj = json.loads(line)
            name, value = obj["metric"], obj["value"]
        except (json.JSONDecodeError, KeyError, TypeError):
            logger.warning("telemetry.skip %s:%d is not a metric sample", self._path, lineno)
            return None
        if not isinstance(name, str) or isinstance(value, bool) or not isinstance(value, Real):
            logger.warning("telemetry.skip %s:%d has an invalid metric or value", self._path, lineno)
            return None
        return MetricSample(metric=name, value=value)
