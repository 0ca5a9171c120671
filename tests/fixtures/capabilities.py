"""Sample capability functions and implementations used across the tests.

The functions are importable as ``tests.fixtures.capabilities:<name>`` so run
manifests can reference them as ``python`` implementations.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from uma_runtime.domain.errors import CapabilityInvocationError
from uma_runtime.interfaces.capability import Implementation, Unavailable

# ---------------------------------------------------------------------------
# Module functions (JSON in, JSON out)
# ---------------------------------------------------------------------------


def analyze(request: dict[str, Any]) -> dict[str, Any]:
    """Tag an image: the producer of ``image.analyzed.v1``."""
    data = request.get("bytes", [])
    return {"id": request["id"], "tags": [f"bytes:{len(data)}"], "size": len(data)}


def log_validation(event: dict[str, Any]) -> dict[str, Any]:
    """Report that an analyzed image was seen: ``telemetry.validation.v1``."""
    return {"status": "passed", "eventId": event["id"]}


def persist(event: dict[str, Any]) -> dict[str, Any]:
    """Pretend to cache an analyzed image: ``cache.persisted.v1``."""
    return {"status": "passed", "key": f"cache:{event['id']}"}


def evaluate(event: dict[str, Any]) -> dict[str, Any]:
    """Score an analyzed image: ``inference.completed.v1``."""
    return {"model": "demo", "score": 0.5, "input": event["id"]}


def analyze_with_timestamp(request: dict[str, Any]) -> dict[str, Any]:
    """Tag an image and add a field that has no JSON form."""
    return {**analyze(request), "taggedAt": datetime(2024, 1, 1, tzinfo=timezone.utc)}


def broken_output(request: Any) -> dict[str, Any]:  # pylint: disable=unused-argument
    """Return a document that satisfies no schema used in the tests."""
    return {"unexpected": True}


def explode(request: Any) -> Any:
    """Always raise."""
    raise RuntimeError(f"cannot handle {request!r}")


NOT_CALLABLE = 42

# ---------------------------------------------------------------------------
# Implementations with controllable behaviour
# ---------------------------------------------------------------------------


class StubImplementation(Implementation):
    """Implementation returning a fixed result and counting its calls."""

    def __init__(
        self,
        result: Any = None,
        *,
        name: str = "stub",
        host: str = "native",
        unavailable: Unavailable | None = None,
    ) -> None:
        self.result = result
        self.name = name
        self.host = host
        self.unavailable = unavailable
        self.calls: list[Any] = []

    def check_available(self) -> Unavailable | None:
        return self.unavailable

    def invoke(self, request: Any) -> Any:
        self.calls.append(request)
        return self.result


class FlakyImplementation(StubImplementation):
    """Fail the first ``failures`` calls, then return ``result``."""

    def __init__(self, failures: int, result: Any = None, *, name: str = "flaky") -> None:
        super().__init__(result, name=name)
        self.failures = failures

    def invoke(self, request: Any) -> Any:
        self.calls.append(request)
        if len(self.calls) <= self.failures:
            raise CapabilityInvocationError(self.name, f"attempt {len(self.calls)} failed")
        return self.result


class FunctionImplementation(StubImplementation):
    """Delegate to a plain function, counting calls."""

    def __init__(self, func: Any, *, name: str = "python") -> None:
        super().__init__(name=name)
        self.func = func

    def invoke(self, request: Any) -> Any:
        self.calls.append(request)
        return self.func(request)
