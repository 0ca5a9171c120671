"""Wire settings and a workspace into a ready-to-use runtime."""

from __future__ import annotations

from dataclasses import dataclass

from uma_runtime.adapters.audit_log import LocalAuditLog
from uma_runtime.adapters.contract_store import ContractStore
from uma_runtime.adapters.forwarders import NullForwarder, OtlpHttpForwarder
from uma_runtime.adapters.id_generators import ULIDGenerator
from uma_runtime.adapters.schema_validator import JsonSchemaValidator
from uma_runtime.adapters.telemetry_store import JsonlTelemetryStore
from uma_runtime.config import RuntimeSettings, WorkspaceLayout, settings_from_env
from uma_runtime.interfaces.audit_log import AuditLog
from uma_runtime.interfaces.id_generator import IdGenerator
from uma_runtime.interfaces.metrics_forwarder import MetricsForwarder
from uma_runtime.interfaces.telemetry_store import TelemetryStore
from uma_runtime.service_layer.decorators import decorator_chain
from uma_runtime.service_layer.drift import DriftAuditor
from uma_runtime.service_layer.orchestrator import Orchestrator
from uma_runtime.service_layer.policy_engine import PolicyEngine
from uma_runtime.service_layer.telemetry import TelemetryCollector
from uma_runtime.service_layer.workspace_check import WorkspaceReport, check_workspace


@dataclass(frozen=True)
class RuntimeContainer:
    """Holds the wired runtime for one process."""

    settings: RuntimeSettings
    layout: WorkspaceLayout
    contracts: ContractStore
    validator: JsonSchemaValidator
    policy: PolicyEngine
    telemetry: TelemetryCollector
    orchestrator: Orchestrator

    def check(self) -> WorkspaceReport:
        """Validate the workspace without running anything."""
        return check_workspace(self.contracts, self.validator, self.policy)

    def close(self) -> None:
        """Release background resources."""
        self.telemetry.close()


def build_forwarder(settings: RuntimeSettings) -> MetricsForwarder:
    """Return the metrics forwarder selected by the settings."""
    if settings.otlp_endpoint:
        return OtlpHttpForwarder(settings.otlp_endpoint)
    return NullForwarder()


def build_drift_auditor(layout: WorkspaceLayout, target_ms: float) -> DriftAuditor:
    """Build a drift auditor over the workspace telemetry file."""
    return DriftAuditor(JsonlTelemetryStore(layout.telemetry_path), target_ms=target_ms)


def bootstrap(  # pylint: disable=too-many-arguments
    settings: RuntimeSettings | None = None,
    *,
    id_generator: IdGenerator | None = None,
    audit_log: AuditLog | None = None,
    telemetry_store: TelemetryStore | None = None,
    forwarder: MetricsForwarder | None = None,
) -> RuntimeContainer:
    """Wire the runtime for the workspace named by ``settings``.

    Any adapter may be overridden; the defaults are the local-filesystem
    adapters under the workspace's ``logs/`` directory.

    Raises:
        MissingFileError: If the policy document does not exist.
        ContractMalformedError: If the policy document is malformed.
    """
    settings = settings or settings_from_env()
    layout = WorkspaceLayout(settings.workspace)

    contracts = ContractStore(layout.contracts_dir)
    validator = JsonSchemaValidator(layout.schemas_dir)
    policy = PolicyEngine.from_file(layout.policy_path, settings.fail_mode)
    telemetry = TelemetryCollector(
        telemetry_store or JsonlTelemetryStore(layout.telemetry_path),
        forwarder or build_forwarder(settings),
    )
    orchestrator = Orchestrator(
        contracts=contracts,
        validator=validator,
        policy=policy,
        audit_log=audit_log or LocalAuditLog(layout.logs_dir),
        telemetry=telemetry,
        id_generator=id_generator or ULIDGenerator(),
        runtime_id=settings.runtime_id,
        wrappers=decorator_chain(settings.enable_retry, settings.enable_cache),
    )
    return RuntimeContainer(
        settings=settings,
        layout=layout,
        contracts=contracts,
        validator=validator,
        policy=policy,
        telemetry=telemetry,
        orchestrator=orchestrator,
    )
