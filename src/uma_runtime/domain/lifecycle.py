"""Run lifecycle recording.

A `LifecycleRecorder` is created once per run. It tracks the run state
machine, accumulates the ordered event log and the capability bindings chosen,
and is finalized exactly once into an immutable `LifecycleRecord`.

The logical clock always equals the number of entries in the event log, so two
runs of the same plan on different hosts produce the same ordering signature
even though their timestamps and identifiers differ.

State machine::

    Idle -> PolicyChecked -> Bound -> Invoking -> Validated -> Recorded
                                         ^                        |
                                         +------------------------+
    Recorded -> Finalized
    PolicyChecked | Invoking | Validated -> Aborted   (and any non-final state)
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from .errors import ConditionKind, InvalidTransitionError

if TYPE_CHECKING:
    from .envelope import EventEnvelope


class RunState(enum.StrEnum):
    """States of a single run."""

    IDLE = "Idle"
    POLICY_CHECKED = "PolicyChecked"
    BOUND = "Bound"
    INVOKING = "Invoking"
    VALIDATED = "Validated"
    RECORDED = "Recorded"
    FINALIZED = "Finalized"
    ABORTED = "Aborted"


TERMINAL_STATES = frozenset({RunState.FINALIZED, RunState.ABORTED})

_TRANSITIONS: dict[RunState, frozenset[RunState]] = {
    RunState.IDLE: frozenset({RunState.POLICY_CHECKED}),
    RunState.POLICY_CHECKED: frozenset({RunState.BOUND}),
    RunState.BOUND: frozenset({RunState.INVOKING}),
    RunState.INVOKING: frozenset({RunState.VALIDATED}),
    RunState.VALIDATED: frozenset({RunState.RECORDED}),
    RunState.RECORDED: frozenset({RunState.INVOKING, RunState.FINALIZED}),
}


@dataclass(frozen=True, slots=True)
class Fallback:
    """A capability implementation that was skipped during resolution."""

    implementation: str
    reason_code: str
    detail: str = ""


@dataclass(frozen=True, slots=True)
class BindingChoice:
    """The implementation chosen for a logical capability in one run."""

    capability: str
    implementation: str
    host: str
    fallbacks: tuple[Fallback, ...] = ()

    @property
    def degraded(self) -> bool:
        """True when the preferred implementation could not be used."""
        return bool(self.fallbacks)

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON form used in lifecycle records."""
        return {
            "capability": self.capability,
            "implementation": self.implementation,
            "host": self.host,
            "fallbacks": [
                {
                    "implementation": f.implementation,
                    "reasonCode": f.reason_code,
                    "detail": f.detail,
                }
                for f in self.fallbacks
            ],
        }


@dataclass(frozen=True, slots=True)
class LogEntry:
    """One event log entry: the logical time it was appended and its envelope."""

    t: int
    envelope: EventEnvelope

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON form used in lifecycle records."""
        return {"t": self.t, **self.envelope.to_wire()}


@dataclass(frozen=True, slots=True)
class AbortReason:
    """Why a run was aborted."""

    kind: ConditionKind
    detail: str


@dataclass(frozen=True, slots=True)
class LifecycleRecord:
    """The finalized, immutable account of one run."""

    # pylint: disable=too-many-instance-attributes

    run_id: str
    service: str
    version: str | None
    policy_ref: str | None
    bindings_chosen: tuple[BindingChoice, ...]
    final_state: RunState
    logical_clock: int
    event_log: tuple[LogEntry, ...] = field(default=())
    abort_reason: AbortReason | None = None

    @property
    def envelopes(self) -> tuple[EventEnvelope, ...]:
        """The envelopes of the event log, in order."""
        return tuple(entry.envelope for entry in self.event_log)

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON form of this record."""
        return {
            "runId": self.run_id,
            "service": self.service,
            "version": self.version,
            "policyRef": self.policy_ref,
            "bindingsChosen": [b.to_dict() for b in self.bindings_chosen],
            "finalState": str(self.final_state),
            "abortReason": (
                {"kind": str(self.abort_reason.kind), "detail": self.abort_reason.detail}
                if self.abort_reason
                else None
            ),
            "logicalClock": self.logical_clock,
            "eventLog": [entry.to_dict() for entry in self.event_log],
        }


class LifecycleRecorder:
    """Accumulate the lifecycle of a single run.

    Args:
        run_id: Identifier of the run.
        service: Name of the invoking (producer) service.
        version: Contract version of the invoking service, if already known.
    """

    def __init__(self, run_id: str, service: str, version: str | None = None) -> None:
        self.run_id = run_id
        self.service = service
        self.version = version
        self.policy_ref: str | None = None
        self._state = RunState.IDLE
        self._log: list[LogEntry] = []
        self._choices: list[BindingChoice] = []
        self._record: LifecycleRecord | None = None

    # --------------------------------------------------------------------- #
    # State machine
    # --------------------------------------------------------------------- #

    @property
    def state(self) -> RunState:
        """The current run state."""
        return self._state

    @property
    def logical_clock(self) -> int:
        """Number of events appended so far."""
        return len(self._log)

    def advance(self, target: RunState) -> None:
        """Move the run to ``target``.

        Raises:
            InvalidTransitionError: If ``target`` is not reachable from the
                current state.
        """
        if target not in _TRANSITIONS.get(self._state, frozenset()):
            raise InvalidTransitionError(str(self._state), str(target))
        self._state = target

    # --------------------------------------------------------------------- #
    # Accumulation
    # --------------------------------------------------------------------- #

    def choose(self, choice: BindingChoice) -> None:
        """Record the implementation chosen for a capability."""
        self._ensure_open()
        self._choices.append(choice)

    def append(self, envelope: EventEnvelope) -> LogEntry:
        """Append an envelope to the event log and advance the logical clock.

        The run must be in the ``Validated`` state; it moves to ``Recorded``.
        """
        self.advance(RunState.RECORDED)
        entry = LogEntry(t=self.logical_clock, envelope=envelope)
        self._log.append(entry)
        return entry

    @property
    def entries(self) -> tuple[LogEntry, ...]:
        """The event log accumulated so far."""
        return tuple(self._log)

    # --------------------------------------------------------------------- #
    # Finalization
    # --------------------------------------------------------------------- #

    def finalize(self) -> LifecycleRecord:
        """Close a completed run and return its record."""
        self.advance(RunState.FINALIZED)
        return self._seal(None)

    def abort(self, kind: ConditionKind, detail: str) -> LifecycleRecord:
        """Close the run as aborted and return its record.

        Raises:
            InvalidTransitionError: If the run has already been closed.
        """
        self._ensure_open()
        self._state = RunState.ABORTED
        return self._seal(AbortReason(kind=kind, detail=detail))

    @property
    def record(self) -> LifecycleRecord | None:
        """The sealed record, or None while the run is open."""
        return self._record

    def _seal(self, reason: AbortReason | None) -> LifecycleRecord:
        self._record = LifecycleRecord(
            run_id=self.run_id,
            service=self.service,
            version=self.version,
            policy_ref=self.policy_ref,
            bindings_chosen=tuple(self._choices),
            final_state=self._state,
            logical_clock=self.logical_clock,
            event_log=tuple(self._log),
            abort_reason=reason,
        )
        return self._record

    def _ensure_open(self) -> None:
        if self._state in TERMINAL_STATES:
            raise InvalidTransitionError(str(self._state), "any")
