"""Fixtures for audit log contract tests."""

from collections.abc import Iterable
from pathlib import Path

import pytest

from uma_runtime.adapters.audit_log import InMemoryAuditLog, LocalAuditLog
from uma_runtime.interfaces.audit_log import AuditLog


@pytest.fixture(params=["memory", "local"])
def audit_log_backend(request: pytest.FixtureRequest, tmp_path: Path) -> Iterable[AuditLog]:
    """Yield an empty AuditLog for each backend."""
    match request.param:
        case "memory":
            yield InMemoryAuditLog()
        case "local":
            yield LocalAuditLog(tmp_path / "logs")
        case _:
            raise ValueError(f"unknown audit log type: {request.param}")
