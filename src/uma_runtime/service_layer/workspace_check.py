"""Static validation of a contracts workspace.

Checks everything a run would check before invoking anything: the contracts
against their meta-schema, every referenced payload schema, the policy, and
the bindings (with version compatibility) between every pair of contracts.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from uma_runtime.domain.bindings import BindingReport, resolve_all
from uma_runtime.domain.contracts import Contract
from uma_runtime.domain.errors import ConditionKind

if TYPE_CHECKING:
    from uma_runtime.adapters.contract_store import ContractStore
    from uma_runtime.adapters.schema_validator import JsonSchemaValidator

    from .policy_engine import PolicyEngine, PolicyReport

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class WorkspaceReport:
    """Result of a workspace check that found nothing fatal."""

    contracts: tuple[Contract, ...]
    policy: PolicyReport
    bindings: tuple[BindingReport, ...]

    @property
    def binding_count(self) -> int:
        """Total number of bindings across all producers."""
        return sum(len(r.bindings) for r in self.bindings)

    @property
    def warnings(self) -> tuple[str, ...]:
        """Human-readable warnings (policy under fail-open, version mismatches)."""
        out = []
        if self.policy.violated:
            out.append(f"{ConditionKind.POLICY_VIOLATION}: {self.policy.verdict.reason}")
        for report in self.bindings:
            out.extend(
                f"{ConditionKind.VERSION_MISMATCH}: {report.producer} -> {name}"
                for name in report.version_mismatches
            )
        return tuple(out)


def check_workspace(
    contracts: ContractStore, validator: JsonSchemaValidator, policy: PolicyEngine
) -> WorkspaceReport:
    """Validate the workspace.

    Raises:
        RuntimeFault: On the first fatal condition found.
    """
    loaded = contracts.load_all()
    logger.info("contracts.valid %d contract(s)", len(loaded))

    for contract in loaded:
        validator.preload(contract.schema_refs)
        logger.info("schemas.compiled %s %s", contract.name, ", ".join(contract.schema_refs))

    policy_report = policy.enforce(loaded)

    reports = []
    for producer in loaded:
        if not producer.emits:
            continue
        report = resolve_all(producer, [c for c in loaded if c.name != producer.name])
        for binding in report.bindings:
            logger.info("binding.created %s -> %s", binding.event, binding.subscriber)
        for name in report.version_mismatches:
            logger.warning(
                "%s %s and %s differ in major version",
                ConditionKind.VERSION_MISMATCH,
                producer.name,
                name,
            )
        reports.append(report)

    return WorkspaceReport(contracts=loaded, policy=policy_report, bindings=tuple(reports))
