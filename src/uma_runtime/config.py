"""Configuration utilities for the UMA runtime.

Runtime behaviour is configured through environment variables, read once
into a frozen `RuntimeSettings`. File locations are derived from a single
workspace root by `WorkspaceLayout`.
"""

import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from uma_runtime.domain.policy import FailMode

POLICY_FAIL_MODE_ENV = "POLICY_FAIL_MODE"  # pragma: no mutate
OTLP_ENDPOINT_ENV = "OTLP_ENDPOINT"  # pragma: no mutate
ENABLE_RETRY_ENV = "UMA_ENABLE_RETRY"  # pragma: no mutate
ENABLE_CACHE_ENV = "UMA_ENABLE_CACHE"  # pragma: no mutate
RUNTIME_ID_ENV = "UMA_RUNTIME_ID"  # pragma: no mutate
WORKSPACE_ENV = "UMA_WORKSPACE"  # pragma: no mutate

DEFAULT_RUNTIME_ID = "native-runner"

_FALSE_VALUES = frozenset({"", "0", "false", "no", "off"})


def env_flag(value: str | None) -> bool:
    """Interpret an on/off environment variable.

    Unset, empty, ``0``, ``false``, ``no`` and ``off`` (case-insensitive) are
    off; anything else is on.
    """
    return value is not None and value.strip().lower() not in _FALSE_VALUES


@dataclass(frozen=True, slots=True)
class RuntimeSettings:
    """Process-wide runtime settings."""

    fail_mode: FailMode = FailMode.CLOSED
    otlp_endpoint: str | None = None
    enable_retry: bool = False
    enable_cache: bool = False
    runtime_id: str = DEFAULT_RUNTIME_ID
    workspace: Path = Path(".")


def settings_from_env(environ: Mapping[str, str] | None = None) -> RuntimeSettings:
    """Read `RuntimeSettings` from the environment.

    Args:
        environ: Mapping to read from; defaults to ``os.environ``.
    """
    env = os.environ if environ is None else environ
    return RuntimeSettings(
        fail_mode=FailMode.parse(env.get(POLICY_FAIL_MODE_ENV)),
        otlp_endpoint=env.get(OTLP_ENDPOINT_ENV) or None,
        enable_retry=env_flag(env.get(ENABLE_RETRY_ENV)),
        enable_cache=env_flag(env.get(ENABLE_CACHE_ENV)),
        runtime_id=env.get(RUNTIME_ID_ENV) or DEFAULT_RUNTIME_ID,
        workspace=Path(env.get(WORKSPACE_ENV) or "."),
    )


@dataclass(frozen=True, slots=True)
class WorkspaceLayout:
    """Well-known paths under a workspace root.

    ::

        <root>/contracts/*.contract.yaml
        <root>/contracts/schemas/<ref>.json
        <root>/contracts/policies/policy.json
        <root>/logs/events/<envelope id>.json
        <root>/logs/lifecycle/<run id>.json
        <root>/logs/telemetry.jsonl
    """

    root: Path

    @property
    def contracts_dir(self) -> Path:
        """Directory of contract files."""
        return self.root / "contracts"

    @property
    def schemas_dir(self) -> Path:
        """Directory of payload schemas."""
        return self.contracts_dir / "schemas"

    @property
    def policy_path(self) -> Path:
        """The organization policy document."""
        return self.contracts_dir / "policies" / "policy.json"

    @property
    def logs_dir(self) -> Path:
        """Root of the audit log."""
        return self.root / "logs"

    @property
    def events_dir(self) -> Path:
        """Directory of persisted envelopes."""
        return self.logs_dir / "events"

    @property
    def lifecycle_dir(self) -> Path:
        """Directory of persisted lifecycle records."""
        return self.logs_dir / "lifecycle"

    @property
    def telemetry_path(self) -> Path:
        """The append-only telemetry file."""
        return self.logs_dir / "telemetry.jsonl"
