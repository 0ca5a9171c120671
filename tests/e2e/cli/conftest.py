"""Fixtures for end-to-end tests of the ``uma`` command.

Every test runs in an isolated working directory with the runtime's
environment variables cleared, and writes a run manifest whose
implementations are the plain functions in ``tests.fixtures.capabilities``.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from pathlib import Path
from typing import Any

import pytest
import yaml
from click.testing import CliRunner, Result

from uma_runtime.entrypoints.cli.main import uma

# pylint: disable=redefined-outer-name

RUNTIME_ENV = (
    "POLICY_FAIL_MODE",
    "OTLP_ENDPOINT",
    "UMA_ENABLE_RETRY",
    "UMA_ENABLE_CACHE",
    "UMA_RUNTIME_ID",
    "UMA_WORKSPACE",
    "UMA_LOG_PATH",
)

TARGET = "tests.fixtures.capabilities:{}"

PIPELINE: dict[str, Any] = {
    "producer": {"service": "image.tagger", "input": {"id": "img-001", "bytes": [0, 1, 2]}},
    "subscribers": [{"service": "telemetry.logger"}, {"service": "edge.cache"}],
    "implementations": {
        "image.tagger": [{"kind": "python", "target": TARGET.format("analyze")}],
        "telemetry.logger": [{"kind": "python", "target": TARGET.format("log_validation")}],
        "edge.cache": [{"kind": "python", "target": TARGET.format("persist")}],
    },
}


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in RUNTIME_ENV:
        monkeypatch.delenv(name, raising=False)
    # keep Rich from wrapping long log lines
    monkeypatch.setenv("COLUMNS", "400")


@pytest.fixture(autouse=True)
def _restore_logger_levels() -> Iterator[None]:
    # ``uma -L`` sets logger levels process-wide; undo them after each test
    saved = {
        name: logger.level
        for name, logger in logging.root.manager.loggerDict.items()
        if isinstance(logger, logging.Logger)
    }
    root_level = logging.root.level
    yield
    for name, logger in logging.root.manager.loggerDict.items():
        if isinstance(logger, logging.Logger):
            logger.setLevel(saved.get(name, logging.NOTSET))
    logging.root.setLevel(root_level)


@pytest.fixture
def runner() -> CliRunner:
    """Click runner keeping stdout and stderr apart."""
    return CliRunner()


@pytest.fixture
def write_manifest(tmp_path: Path) -> Callable[..., Path]:
    """Write a run manifest, starting from the sample pipeline."""

    def write(implementations: dict[str, Any] | None = None, **overrides: Any) -> Path:
        document = {**PIPELINE, **overrides}
        if implementations is not None:
            document["implementations"] = {**PIPELINE["implementations"], **implementations}
        path = tmp_path / "run.yaml"
        path.write_text(yaml.safe_dump(document, sort_keys=False), encoding="utf-8")
        return path

    return write


@pytest.fixture
def invoke(runner: CliRunner, tmp_path: Path) -> Callable[..., Result]:
    """Invoke ``uma`` with the flight recorder writing under ``tmp_path``."""

    def call(*args: str) -> Result:
        log_path = tmp_path / "uma.log"
        return runner.invoke(uma, ["--log-path", str(log_path), *args])

    return call
