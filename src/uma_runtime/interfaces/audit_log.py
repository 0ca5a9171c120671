"""Audit log port.

The audit log is the append-only record of a run: one document per event
envelope, keyed by the envelope id, plus one lifecycle record per run.

Contract overview
-----------------
- `append_envelope` never overwrites: writing an id twice raises
  `DuplicateEnvelopeError`.
- `read_envelopes` yields every stored envelope document; order is not
  significant (ordering lives in the lifecycle record's event log).
- `write_lifecycle` stores the lifecycle record of a run, keyed by its
  ``runId``; `read_lifecycle` returns it or raises `KeyError`.
- Documents are plain JSON-compatible dicts.
"""

import abc
from collections.abc import Iterable
from typing import Any


class AuditLogError(Exception):
    """Base class for audit log errors."""


class DuplicateEnvelopeError(AuditLogError):
    """An envelope with the same id has already been written."""

    def __init__(self, envelope_id: str) -> None:
        super().__init__(f"envelope {envelope_id!r} already written")
        self.envelope_id = envelope_id


class AuditLog(abc.ABC):
    """Append-only store for envelopes and lifecycle records."""

    @abc.abstractmethod
    def append_envelope(self, document: dict[str, Any]) -> None:
        """Persist one envelope document keyed by its ``id``.

        Raises:
            DuplicateEnvelopeError: If an envelope with the same id exists.
            ValueError: If the document has no non-empty ``id``.
        """

    @abc.abstractmethod
    def read_envelopes(self) -> Iterable[dict[str, Any]]:
        """Yield every stored envelope document."""

    @abc.abstractmethod
    def write_lifecycle(self, document: dict[str, Any]) -> None:
        """Persist the lifecycle record of a run, keyed by its ``runId``.

        Raises:
            ValueError: If the document has no non-empty ``runId``.
        """

    @abc.abstractmethod
    def read_lifecycle(self, run_id: str) -> dict[str, Any]:
        """Return the lifecycle record of ``run_id``.

        Raises:
            KeyError: If no record exists for ``run_id``.
        """
