"""Global pytest fixtures for the UMA runtime tests."""

from __future__ import annotations

import pytest

from uma_runtime.adapters.audit_log import InMemoryAuditLog
from uma_runtime.adapters.id_generators import SequentialIdGenerator
from uma_runtime.adapters.telemetry_store import InMemoryTelemetryStore
from uma_runtime.service_layer.telemetry import TelemetryCollector

pytest_plugins = [
    "tests.fixtures.workspace",
]


@pytest.fixture
def ids() -> SequentialIdGenerator:
    """Deterministic id generator (``evt-000001``, ``evt-000002``, ...)."""
    return SequentialIdGenerator()


@pytest.fixture
def audit_log() -> InMemoryAuditLog:
    """Fresh in-memory audit log."""
    return InMemoryAuditLog()


@pytest.fixture
def telemetry_store() -> InMemoryTelemetryStore:
    """Fresh in-memory telemetry store."""
    return InMemoryTelemetryStore()


@pytest.fixture
def telemetry(telemetry_store: InMemoryTelemetryStore) -> TelemetryCollector:
    """Telemetry collector over the in-memory store, with no forwarding."""
    return TelemetryCollector(telemetry_store)
