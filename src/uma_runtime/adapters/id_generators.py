"""ID generators for envelopes and runs."""

import threading
import uuid

from ulid import monotonic

from uma_runtime.interfaces.id_generator import IdGenerator

# pylint: disable=too-few-public-methods


class ULIDGenerator(IdGenerator):
    """Thread-safe monotonic ULID generator (the default for envelope ids).

    ULIDs sort lexicographically by creation time, so envelope files written
    to the audit log list in the order they were produced. This generator
    uses the `ulid-py` library.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()

    def new_id(self) -> str:
        """Generate a new ULID (serialized across threads)."""
        with self._lock:
            return str(monotonic.new())


class UUIDv4Generator(IdGenerator):
    """Random UUIDv4 identifiers, as CloudEvents producers commonly use."""

    def new_id(self) -> str:
        """Generate a new UUID."""
        return str(uuid.uuid4())


class SequentialIdGenerator(IdGenerator):
    """Deterministic ``<prefix>-<n>`` identifiers.

    Note:
        Unique only within one instance; meant for tests and reproducible demos.
    """

    def __init__(self, prefix: str = "evt", width: int = 6) -> None:
        self._counter = 0
        self._prefix = prefix
        self._width = width
        self._lock = threading.Lock()

    def new_id(self) -> str:
        """Generate the next identifier in the sequence."""
        with self._lock:
            self._counter += 1
            n = self._counter
        return f"{self._prefix}-{n:0{self._width}d}"
