"""Fixtures for telemetry store contract tests."""

from collections.abc import Iterable
from pathlib import Path

import pytest

from uma_runtime.adapters.telemetry_store import InMemoryTelemetryStore, JsonlTelemetryStore
from uma_runtime.interfaces.telemetry_store import TelemetryStore


@pytest.fixture(params=["memory", "jsonl"])
def telemetry_backend(
    request: pytest.FixtureRequest, tmp_path: Path
) -> Iterable[TelemetryStore]:
    """Yield an empty TelemetryStore for each backend."""
    match request.param:
        case "memory":
            yield InMemoryTelemetryStore()
        case "jsonl":
            yield JsonlTelemetryStore(tmp_path / "logs" / "telemetry.jsonl")
        case _:
            raise ValueError(f"unknown telemetry store type: {request.param}")
