"""Capability ports.

A capability is a named unit of portable logic. Callers see it only as a
function from a JSON-compatible request to a JSON-compatible result; the
logic inside is opaque to the runtime.

- `Capability` is any invocable handle, including decorated ones.
- `Implementation` is a concrete, host-specific way of providing a
  capability. It can report that its preconditions are not met on the
  current host, in which case the adapter manager falls back to the next
  candidate.
"""

import abc
from dataclasses import dataclass
from typing import Any

# pylint: disable=too-few-public-methods


@dataclass(frozen=True, slots=True)
class Unavailable:
    """Why an implementation cannot run on this host."""

    reason_code: str
    detail: str = ""


class Capability(abc.ABC):
    """An invocable capability handle."""

    @abc.abstractmethod
    def invoke(self, request: Any) -> Any:
        """Invoke the capability.

        Args:
            request: The JSON-compatible input document.

        Returns:
            The JSON-compatible output document.

        Raises:
            CapabilityInvocationError: If the capability fails.
        """


class Implementation(Capability):
    """A concrete implementation of a capability."""

    #: Short implementation name recorded in lifecycle records (e.g. ``wasi``).
    name: str = "custom"

    #: The kind of host this implementation runs on.
    host: str = "native"

    @abc.abstractmethod
    def check_available(self) -> Unavailable | None:
        """Return None if this implementation can run here, else the reason."""
