"""Unit tests for event envelopes."""

from datetime import datetime, timedelta, timezone

import pytest

from uma_runtime.adapters.id_generators import SequentialIdGenerator
from uma_runtime.domain.envelope import EnvelopeBuilder, EventEnvelope, Phase
from uma_runtime.domain.errors import InvalidEnvelopeError

T0 = datetime(2025, 1, 2, 3, 4, 5, 123000, tzinfo=timezone.utc)


def make_envelope(**overrides) -> EventEnvelope:
    """Build a valid envelope, overriding selected fields."""
    fields = {
        "id": "evt-1",
        "source": "image.tagger",
        "type": "image.analyzed.v1",
        "time": T0,
        "data": {"id": "img-001"},
        "contract_version": "1.0.0",
        "runtime_id": "native-runner",
    }
    fields.update(overrides)
    return EventEnvelope(**fields)


class TestEventEnvelope:
    """Tests for EventEnvelope invariants and wire form."""

    @staticmethod
    def test_wire_form() -> None:
        """The wire form is a CloudEvents document with uma extensions."""
        assert make_envelope().to_wire() == {
            "specversion": "1.0",
            "id": "evt-1",
            "source": "image.tagger",
            "type": "image.analyzed.v1",
            "time": "2025-01-02T03:04:05.123000Z",
            "datacontenttype": "application/json",
            "data": {"id": "img-001"},
            "uma.serviceId": "image.tagger",
            "uma.contractVersion": "1.0.0",
            "uma.runtimeId": "native-runner",
            "phase": "normal",
            "reasonCode": "OK",
        }

    @staticmethod
    def test_from_wire_round_trip() -> None:
        """from_wire rebuilds an equal envelope."""
        envelope = make_envelope(phase=Phase.DEGRADED, reason_code="WASI_RUNTIME_MISSING")
        assert EventEnvelope.from_wire(envelope.to_wire()) == envelope

    @staticmethod
    def test_from_wire_malformed() -> None:
        """Missing attributes are reported as invalid envelopes."""
        document = make_envelope().to_wire()
        del document["uma.runtimeId"]
        with pytest.raises(InvalidEnvelopeError):
            EventEnvelope.from_wire(document)

    @staticmethod
    @pytest.mark.parametrize("field", ["id", "source", "type"])
    def test_required_text(field: str) -> None:
        """Identity fields must be non-empty."""
        with pytest.raises(InvalidEnvelopeError):
            make_envelope(**{field: " "})

    @staticmethod
    def test_naive_time_rejected() -> None:
        """Time must be tz-aware."""
        with pytest.raises(InvalidEnvelopeError, match="tz-aware"):
            make_envelope(time=datetime(2025, 1, 1))

    @staticmethod
    def test_non_utc_time_rejected() -> None:
        """Time must be UTC."""
        with pytest.raises(InvalidEnvelopeError, match="UTC"):
            make_envelope(time=T0.astimezone(timezone(timedelta(hours=2))))


class TestEnvelopeBuilder:
    """Tests for EnvelopeBuilder."""

    @staticmethod
    def test_fresh_ids_and_static_runtime() -> None:
        """Each envelope gets a new id and the builder's runtime id."""
        builder = EnvelopeBuilder(SequentialIdGenerator(), "edge-1", clock=lambda: T0)
        first = builder.build(source="a", event_type="x.v1", data={}, contract_version="1.0.0")
        second = builder.build(source="a", event_type="x.v1", data={}, contract_version="1.0.0")
        assert (first.id, second.id) == ("evt-000001", "evt-000002")
        assert first.runtime_id == second.runtime_id == "edge-1"
        assert first.phase is Phase.NORMAL
        assert first.reason_code == "OK"

    @staticmethod
    def test_timestamps_never_decrease() -> None:
        """A clock stepping backwards is clamped to the last timestamp."""
        times = iter([T0, T0 - timedelta(seconds=5), T0 + timedelta(seconds=1)])
        builder = EnvelopeBuilder(SequentialIdGenerator(), "r", clock=lambda: next(times))
        stamps = [
            builder.build(source="a", event_type="x.v1", data=None, contract_version="1.0.0").time
            for _ in range(3)
        ]
        assert stamps == [T0, T0, T0 + timedelta(seconds=1)]

    @staticmethod
    def test_degraded() -> None:
        """Phase and reason code are passed through."""
        builder = EnvelopeBuilder(SequentialIdGenerator(), "r", clock=lambda: T0)
        envelope = builder.build(
            source="a",
            event_type="x.v1",
            data=None,
            contract_version="1.0.0",
            phase=Phase.DEGRADED,
            reason_code="MODULE_MISSING",
        )
        assert envelope.to_wire()["phase"] == "degraded"
        assert envelope.to_wire()["reasonCode"] == "MODULE_MISSING"
