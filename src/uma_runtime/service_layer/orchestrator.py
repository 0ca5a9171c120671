"""Run orchestration.

A run takes one producer stage and any number of subscriber stages through
the same sequence, strictly one after another:

    contracts -> schemas -> policy -> bindings -> producer -> subscribers

Each stage resolves its capability, invokes it, validates the output against
the stage event's schema, wraps it in an envelope, appends it to the
lifecycle and persists it. Subscribers receive the producer's output as their
input. Bindings are informational: they are logged and checked for version
compatibility but do not decide which subscribers run.

Any `RuntimeFault` aborts the run; any other exception is wrapped in an
`InternalRuntimeError` first. The aborted lifecycle record is written to the
audit log and attached to the fault before it is raised.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from uma_runtime.domain.bindings import BindingReport, resolve_all
from uma_runtime.domain.contracts import Contract
from uma_runtime.domain.envelope import REASON_OK, EnvelopeBuilder, EventEnvelope, Phase
from uma_runtime.domain.errors import (
    ConditionKind,
    ContractMalformedError,
    InternalRuntimeError,
    PayloadValidationError,
    RuntimeFault,
)
from uma_runtime.domain.lifecycle import LifecycleRecord, LifecycleRecorder, RunState

from .adapter_manager import AdapterManager, Registry
from .decorators import DecoratorFactory

if TYPE_CHECKING:
    from uma_runtime.adapters.contract_store import ContractStore
    from uma_runtime.adapters.schema_validator import JsonSchemaValidator
    from uma_runtime.interfaces.audit_log import AuditLog
    from uma_runtime.interfaces.id_generator import IdGenerator

    from .policy_engine import PolicyEngine
    from .telemetry import TelemetryCollector

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class StageSpec:
    """One stage of a run.

    Attributes:
        service: The contract (and capability) name of the stage.
        event: The event the stage emits. Defaults to the first event the
            contract declares.
    """

    service: str
    event: str | None = None


@dataclass(frozen=True, slots=True)
class RunPlan:
    """Everything a single run needs beyond the wired services."""

    producer: StageSpec
    subscribers: tuple[StageSpec, ...] = ()
    payload: Any = None
    registry: Registry = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class RunResult:
    """A completed run: its lifecycle record and each stage's output."""

    record: LifecycleRecord
    outputs: Mapping[str, Any]


@dataclass(frozen=True, slots=True)
class _Stage:
    contract: Contract
    event: str
    schema: str


class Orchestrator:
    """Execute runs against a set of wired services.

    Args:
        contracts: Source of capability contracts.
        validator: Payload schema validator.
        policy: Policy engine enforced before binding.
        audit_log: Where envelopes and lifecycle records are persisted.
        telemetry: Collector for call latency.
        id_generator: Source of run and envelope identifiers.
        runtime_id: Identifier of this runtime host, stamped on envelopes.
        wrappers: Decorator classes applied to every resolved capability.
    """

    # pylint: disable=too-many-instance-attributes,too-many-arguments

    def __init__(
        self,
        *,
        contracts: ContractStore,
        validator: JsonSchemaValidator,
        policy: PolicyEngine,
        audit_log: AuditLog,
        telemetry: TelemetryCollector,
        id_generator: IdGenerator,
        runtime_id: str,
        wrappers: Sequence[DecoratorFactory] = (),
    ) -> None:
        self.contracts = contracts
        self.validator = validator
        self.policy = policy
        self.audit_log = audit_log
        self.telemetry = telemetry
        self.id_generator = id_generator
        self.runtime_id = runtime_id
        self.wrappers = tuple(wrappers)

    def run(self, plan: RunPlan) -> RunResult:
        """Execute ``plan`` once.

        Returns:
            The finalized lifecycle record and the output of every stage.

        Raises:
            RuntimeFault: If the run aborted; ``error.record`` holds the
                aborted lifecycle record.
        """
        recorder = LifecycleRecorder(self.id_generator.new_id(), plan.producer.service)
        logger.info("run.start %s producer=%s", recorder.run_id, plan.producer.service)
        try:
            outputs = self._execute(plan, recorder)
        except RuntimeFault as fault:
            self._abort(recorder, fault)
            raise
        except Exception as e:  # pylint: disable=broad-except
            logger.exception("run.unexpected %s", recorder.run_id)
            fault = InternalRuntimeError(e)
            self._abort(recorder, fault)
            raise fault from e

        record = recorder.finalize()
        self.audit_log.write_lifecycle(record.to_dict())
        logger.info(
            "run.finalized %s logical_clock=%d", record.run_id, record.logical_clock
        )
        return RunResult(record=record, outputs=outputs)

    def _abort(self, recorder: LifecycleRecorder, fault: RuntimeFault) -> None:
        fault.record = recorder.abort(fault.kind, fault.detail)
        self.audit_log.write_lifecycle(fault.record.to_dict())
        logger.error("run.aborted %s %s: %s", recorder.run_id, fault.kind, fault.detail)

    # --------------------------------------------------------------------- #
    # Phases
    # --------------------------------------------------------------------- #

    def _execute(self, plan: RunPlan, recorder: LifecycleRecorder) -> dict[str, Any]:
        contracts = self.contracts.load_all()
        producer = self._stage(plan.producer)
        subscribers = [self._stage(spec) for spec in plan.subscribers]
        recorder.version = str(producer.contract.version)

        for contract in contracts:
            self.validator.preload(contract.schema_refs)

        report = self.policy.enforce(contracts)
        recorder.policy_ref = report.digest
        recorder.advance(RunState.POLICY_CHECKED)

        self._log_bindings(
            resolve_all(producer.contract, [s.contract for s in subscribers])
        )
        recorder.advance(RunState.BOUND)

        manager = AdapterManager(plan.registry, self.wrappers, self.telemetry)
        builder = EnvelopeBuilder(self.id_generator, self.runtime_id)

        outputs: dict[str, Any] = {}
        published = self._run_stage(producer, plan.payload, recorder, manager, builder)
        outputs[producer.contract.name] = published
        for stage in subscribers:
            outputs[stage.contract.name] = self._run_stage(
                stage, published, recorder, manager, builder
            )
        return outputs

    def _stage(self, spec: StageSpec) -> _Stage:
        contract = self.contracts.get(spec.service)
        if spec.event is None:
            if not contract.emits:
                raise ContractMalformedError(
                    contract.source, f"{contract.name} emits no events to run as a stage"
                )
            emitted = contract.emits[0]
        elif (emitted := contract.emitted(spec.event)) is None:
            raise ContractMalformedError(
                contract.source, f"{contract.name} does not emit {spec.event}"
            )
        return _Stage(contract=contract, event=emitted.name, schema=emitted.schema)

    @staticmethod
    def _log_bindings(report: BindingReport) -> None:
        for binding in report.bindings:
            logger.info(
                "binding.created %s -> %s (pattern %s)",
                binding.event,
                binding.subscriber,
                binding.pattern,
            )
        for name in report.absent:
            logger.warning(
                "%s no binding from %s to %s",
                ConditionKind.BINDING_ABSENT,
                report.producer,
                name,
            )
        bound = dict.fromkeys(b.subscriber for b in report.bindings)
        for name in bound:
            if name in report.version_mismatches:
                logger.warning(
                    "%s %s and %s differ in major version",
                    ConditionKind.VERSION_MISMATCH,
                    report.producer,
                    name,
                )
            else:
                logger.info("version.compatible %s -> %s", report.producer, name)

    def _run_stage(  # pylint: disable=too-many-arguments
        self,
        stage: _Stage,
        request: Any,
        recorder: LifecycleRecorder,
        manager: AdapterManager,
        builder: EnvelopeBuilder,
    ) -> Any:
        service = stage.contract.name
        recorder.advance(RunState.INVOKING)
        resolved = manager.resolve(service)
        recorder.choose(resolved.choice)

        output = resolved.handle.invoke(request)

        result = self.validator.validate(stage.schema, output)
        if not result.ok:
            logger.error(
                "validation.failed event_schema=%s %s", stage.schema, result.reason
            )
            raise PayloadValidationError(service, stage.schema, result.reason)
        logger.info("validation.passed event_schema=%s", stage.schema)
        recorder.advance(RunState.VALIDATED)

        fallbacks = resolved.choice.fallbacks
        envelope = builder.build(
            source=service,
            event_type=stage.event,
            data=output,
            contract_version=str(stage.contract.version),
            phase=Phase.DEGRADED if fallbacks else Phase.NORMAL,
            reason_code=fallbacks[0].reason_code if fallbacks else REASON_OK,
        )
        self._record(envelope, recorder)
        return output

    def _record(self, envelope: EventEnvelope, recorder: LifecycleRecorder) -> None:
        entry = recorder.append(envelope)
        self.audit_log.append_envelope(envelope.to_wire())
        logger.info(
            "event.recorded t=%d %s %s %s",
            entry.t,
            envelope.type,
            envelope.id,
            envelope.phase,
        )
