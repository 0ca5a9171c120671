"""Event envelopes.

Every payload a stage produces is wrapped in an `EventEnvelope` carrying
identity, provenance and audit metadata. On the wire and in the audit log the
envelope is a CloudEvents 1.0 document with the ``uma.*`` extension
attributes plus ``phase`` and ``reasonCode``.
"""

from __future__ import annotations

import enum
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING, Any

from .errors import InvalidEnvelopeError

if TYPE_CHECKING:
    from uma_runtime.interfaces.id_generator import IdGenerator

SPEC_VERSION = "1.0"
DATA_CONTENT_TYPE = "application/json"
REASON_OK = "OK"


class Phase(enum.StrEnum):
    """Execution phase reported with each envelope."""

    NORMAL = "normal"
    DEGRADED = "degraded"


def utc_now() -> datetime:
    """Return the current UTC time (tz-aware)."""
    return datetime.now(timezone.utc)


def format_time(value: datetime) -> str:
    """Render a UTC datetime as ISO-8601 with a ``Z`` suffix."""
    return value.isoformat().replace("+00:00", "Z")


@dataclass(frozen=True, slots=True)
class EventEnvelope:
    """Structured wrapper around a produced payload.

    Notes:
      - ``data`` is the opaque, already validated payload; its schema is the
        source of truth and it is not interpreted here.
      - ``time`` must be tz-aware UTC.
    """

    # pylint: disable=too-many-instance-attributes

    id: str
    source: str
    type: str
    time: datetime
    data: Any
    contract_version: str
    runtime_id: str
    phase: Phase = Phase.NORMAL
    reason_code: str = REASON_OK

    def __post_init__(self) -> None:
        if not self.id.strip() or not self.source.strip() or not self.type.strip():
            raise InvalidEnvelopeError("id, source, and type must be non-empty.")
        if self.time.tzinfo is None or self.time.utcoffset() is None:
            raise InvalidEnvelopeError("time must be tz-aware.")
        if self.time.utcoffset() != timedelta(0):
            raise InvalidEnvelopeError("time must be UTC.")
        if not self.reason_code.strip():
            raise InvalidEnvelopeError("reason_code must be non-empty.")

    def to_wire(self) -> dict[str, Any]:
        """Return the envelope as a CloudEvents-style JSON document."""
        return {
            "specversion": SPEC_VERSION,
            "id": self.id,
            "source": self.source,
            "type": self.type,
            "time": format_time(self.time),
            "datacontenttype": DATA_CONTENT_TYPE,
            "data": self.data,
            "uma.serviceId": self.source,
            "uma.contractVersion": self.contract_version,
            "uma.runtimeId": self.runtime_id,
            "phase": str(self.phase),
            "reasonCode": self.reason_code,
        }

    @classmethod
    def from_wire(cls, document: dict[str, Any]) -> "EventEnvelope":
        """Rebuild an envelope from its wire form."""
        try:
            return cls(
                id=document["id"],
                source=document["source"],
                type=document["type"],
                time=datetime.fromisoformat(document["time"].replace("Z", "+00:00")),
                data=document.get("data"),
                contract_version=document["uma.contractVersion"],
                runtime_id=document["uma.runtimeId"],
                phase=Phase(document.get("phase", Phase.NORMAL)),
                reason_code=document.get("reasonCode", REASON_OK),
            )
        except (KeyError, ValueError) as e:
            raise InvalidEnvelopeError(f"malformed envelope document: {e}") from e


class EnvelopeBuilder:
    """Build envelopes with fresh identifiers and non-decreasing timestamps.

    Args:
        id_generator: Source of unique envelope identifiers.
        runtime_id: Static identifier of the runtime host.
        clock: Returns the current UTC time; injectable for tests.
    """

    def __init__(
        self,
        id_generator: IdGenerator,
        runtime_id: str,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._ids = id_generator
        self._runtime_id = runtime_id
        self._clock = clock
        self._last: datetime | None = None

    def build(  # pylint: disable=too-many-arguments
        self,
        *,
        source: str,
        event_type: str,
        data: Any,
        contract_version: str,
        phase: Phase = Phase.NORMAL,
        reason_code: str = REASON_OK,
    ) -> EventEnvelope:
        """Wrap ``data`` in a new envelope."""
        now = self._clock()
        if self._last is not None and now < self._last:
            now = self._last
        self._last = now
        return EventEnvelope(
            id=self._ids.new_id(),
            source=source,
            type=event_type,
            time=now,
            data=data,
            contract_version=contract_version,
            runtime_id=self._runtime_id,
            phase=phase,
            reason_code=reason_code,
        )
