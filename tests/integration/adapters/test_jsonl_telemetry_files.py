"""Integration tests for the append-only telemetry file."""

import logging
from pathlib import Path

import pytest

from uma_runtime.adapters.telemetry_store import JsonlTelemetryStore
from uma_runtime.interfaces.telemetry_store import LATENCY_METRIC, MetricSample


def test_one_compact_line_per_sample(tmp_path: Path) -> None:
    """Samples are written as compact JSON lines."""
    store = JsonlTelemetryStore(tmp_path / "logs" / "telemetry.jsonl")
    store.append(MetricSample(LATENCY_METRIC, 12.5))
    store.append(MetricSample(LATENCY_METRIC, 3))
    assert store.path.read_text().splitlines() == [
        '{"metric":"uma.qos.latency.ms","value":12.5}',
        '{"metric":"uma.qos.latency.ms","value":3}',
    ]


def test_existing_content_kept(tmp_path: Path) -> None:
    """Appending never rewrites what is already in the file."""
    path = tmp_path / "telemetry.jsonl"
    path.write_text('{"metric":"uma.qos.latency.ms","value":1.0}\n')
    JsonlTelemetryStore(path).append(MetricSample(LATENCY_METRIC, 2.0))
    assert path.read_text().startswith('{"metric":"uma.qos.latency.ms","value":1.0}\n')
    assert [s.value for s in JsonlTelemetryStore(path).read_samples()] == [1.0, 2.0]


def test_missing_file_reads_empty(tmp_path: Path) -> None:
    """Reading before anything was written yields nothing."""
    store = JsonlTelemetryStore(tmp_path / "logs" / "telemetry.jsonl")
    assert list(store.read_samples()) == []
    assert not (tmp_path / "logs").exists()


def test_bad_lines_skipped(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    """Undecodable or ill-typed lines are skipped with a warning."""
    path = tmp_path / "telemetry.jsonl"
    path.write_text(
        "\n".join(
            [
                '{"metric":"uma.qos.latency.ms","value":4.0}',
                '{"metric":"uma.qos.latency.ms","val',
                "",
                '{"metric":"uma.qos.latency.ms","value":"fast"}',
                '{"metric":"uma.qos.latency.ms","value":true}',
                '{"value":1}',
                "[1, 2]",
                '{"metric":"uma.qos.latency.ms","value":6}',
            ]
        )
        + "\n"
    )
    with caplog.at_level(logging.WARNING):
        values = [s.value for s in JsonlTelemetryStore(path).read_samples()]
    assert values == [4.0, 6]
    assert caplog.text.count("telemetry.skip") == 5
