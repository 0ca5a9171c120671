"""Local filesystem audit log.

Layout under the root directory::

    events/<envelope id>.json     one pretty-printed envelope per file
    lifecycle/<run id>.json       one lifecycle record per run

Files are written to a temporary file in the target directory first and then
moved into place, so a reader never sees a half-written document.
"""

import json
import os
import tempfile
from collections.abc import Iterable
from pathlib import Path
from typing import Any

from uma_runtime.interfaces.audit_log import AuditLog, DuplicateEnvelopeError

from .memory import require_document_key

EVENTS_DIR = "events"
LIFECYCLE_DIR = "lifecycle"


class LocalAuditLog(AuditLog):
    """AuditLog implementation that writes JSON files under ``root``."""

    def __init__(self, root: str | os.PathLike[str]) -> None:
        self._root = Path(root)
        self._events = self._root / EVENTS_DIR
        self._lifecycle = self._root / LIFECYCLE_DIR
        self._events.mkdir(parents=True, exist_ok=True)
        self._lifecycle.mkdir(parents=True, exist_ok=True)

    # --- Envelopes ---

    def append_envelope(self, document: dict[str, Any]) -> None:
        envelope_id = require_document_key(document, "id")
        dest = self._events / f"{self._safe_name(envelope_id)}.json"
        if dest.exists():
            raise DuplicateEnvelopeError(envelope_id)
        self._write_atomic(dest, document)

    def read_envelopes(self) -> Iterable[dict[str, Any]]:
        for path in sorted(self._events.glob("*.json")):
            with path.open(encoding="utf-8") as f:
                yield json.load(f)

    # --- Lifecycle records ---

    def write_lifecycle(self, document: dict[str, Any]) -> None:
        run_id = require_document_key(document, "runId")
        self._write_atomic(
            self._lifecycle / f"{self._safe_name(run_id)}.json", document
        )

    def read_lifecycle(self, run_id: str) -> dict[str, Any]:
        path = self._lifecycle / f"{self._safe_name(run_id)}.json"
        try:
            with path.open(encoding="utf-8") as f:
                return json.load(f)
        except FileNotFoundError:
            raise KeyError(run_id) from None

    # --- Internal helpers ---

    def _write_atomic(self, dest: Path, document: dict[str, Any]) -> None:
        with tempfile.NamedTemporaryFile(
            "w", dir=dest.parent, suffix=".tmp", delete=False, encoding="utf-8"
        ) as tmp:
            tmp_path = Path(tmp.name)
            try:
                json.dump(document, tmp, indent=2)
            except BaseException:
                tmp.close()
                tmp_path.unlink(missing_ok=True)
                raise
        os.replace(tmp_path, dest)

    @staticmethod
    def _safe_name(key: str) -> str:
        """Reject keys that would escape the target directory."""
        if "/" in key or "\\" in key or key in {".", ".."}:
            raise ValueError(f"invalid audit log key {key!r}")
        return key
