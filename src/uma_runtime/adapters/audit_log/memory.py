"""In-memory audit log.

All documents are kept in memory and lost when the instance is discarded.
Use for unit tests or dry runs where nothing should touch the disk.
"""

import copy
from collections.abc import Iterable
from typing import Any

from uma_runtime.interfaces.audit_log import AuditLog, DuplicateEnvelopeError


class InMemoryAuditLog(AuditLog):
    """Non-durable AuditLog; stores deep copies of the documents it receives."""

    def __init__(self) -> None:
        self._envelopes: dict[str, dict[str, Any]] = {}
        self._lifecycles: dict[str, dict[str, Any]] = {}

    def append_envelope(self, document: dict[str, Any]) -> None:
        envelope_id = require_document_key(document, "id")
        if envelope_id in self._envelopes:
            raise DuplicateEnvelopeError(envelope_id)
        self._envelopes[envelope_id] = copy.deepcopy(document)

    def read_envelopes(self) -> Iterable[dict[str, Any]]:
        for document in self._envelopes.values():
            yield copy.deepcopy(document)

    def write_lifecycle(self, document: dict[str, Any]) -> None:
        run_id = require_document_key(document, "runId")
        self._lifecycles[run_id] = copy.deepcopy(document)

    def read_lifecycle(self, run_id: str) -> dict[str, Any]:
        return copy.deepcopy(self._lifecycles[run_id])


def require_document_key(document: dict[str, Any], key: str) -> str:
    """Return the non-empty string ``document[key]`` or raise ValueError."""
    value = document.get(key)
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"document must carry a non-empty {key!r}")
    return value
