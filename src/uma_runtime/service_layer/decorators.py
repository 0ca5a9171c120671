"""Reliability decorators for capability handles.

Decorators wrap a `Capability` and are themselves capabilities, so they
compose. The composition order is an explicit, ordered list of decorator
classes applied innermost first; with both enabled the chain is
``Cache(Retry(LatencyProbe(base)))``.
"""

import json
import logging
import time
from collections.abc import Callable, Iterable, Sequence
from typing import Any, ClassVar

from uma_runtime.domain.errors import CapabilityInvocationError
from uma_runtime.interfaces.capability import Capability

from .telemetry import TelemetryCollector

logger = logging.getLogger(__name__)

DEFAULT_MAX_ATTEMPTS = 3


def canonical_key(request: Any) -> str:
    """Return a stable cache key for a JSON-compatible request."""
    return json.dumps(request, sort_keys=True, separators=(",", ":"), default=str)


class CapabilityDecorator(Capability):
    """Base class for decorators that wrap another capability handle."""

    #: Prefix added to the implementation name when this decorator is applied.
    label: ClassVar[str] = "decorated"

    def __init__(self, inner: Capability) -> None:
        self.inner = inner

    def invoke(self, request: Any) -> Any:
        return self.inner.invoke(request)


class LatencyProbe(CapabilityDecorator):
    """Record the wall-clock latency of every call to the wrapped handle.

    Args:
        inner: The handle to time.
        telemetry: Collector that receives one latency sample per call,
            successful or not.
        clock: Monotonic clock returning seconds; injectable for tests.
    """

    label = "probe"

    def __init__(
        self,
        inner: Capability,
        telemetry: TelemetryCollector,
        clock: Callable[[], float] = time.perf_counter,
    ) -> None:
        super().__init__(inner)
        self._telemetry = telemetry
        self._clock = clock

    def invoke(self, request: Any) -> Any:
        start = self._clock()
        try:
            return self.inner.invoke(request)
        finally:
            self._telemetry.record_latency((self._clock() - start) * 1000.0)


class RetryDecorator(CapabilityDecorator):
    """Retry failed invocations a bounded number of times, without delay.

    Only `CapabilityInvocationError` is retried. After ``max_attempts``
    failed invocations the last error is re-raised.
    """

    label = "retry"

    def __init__(self, inner: Capability, max_attempts: int = DEFAULT_MAX_ATTEMPTS) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        super().__init__(inner)
        self.max_attempts = max_attempts

    def invoke(self, request: Any) -> Any:
        attempt = 1
        while True:
            try:
                return self.inner.invoke(request)
            except CapabilityInvocationError as e:
                if attempt >= self.max_attempts:
                    logger.warning(
                        "retry.exhausted after %d attempts: %s", attempt, e.reason
                    )
                    raise
                logger.info(
                    "retry.attempt %d/%d failed: %s", attempt, self.max_attempts, e.reason
                )
                attempt += 1


class CacheDecorator(CapabilityDecorator):
    """Memoize successful results by logical request key.

    A hit returns the stored result without calling the wrapped handle.
    Failures are not cached. Entries live as long as the decorator.
    """

    label = "cache"

    def __init__(
        self, inner: Capability, key: Callable[[Any], str] = canonical_key
    ) -> None:
        super().__init__(inner)
        self._key = key
        self._entries: dict[str, Any] = {}

    def invoke(self, request: Any) -> Any:
        key = self._key(request)
        if key in self._entries:
            logger.debug("cache.hit %s", key)
            return self._entries[key]
        result = self.inner.invoke(request)
        self._entries[key] = result
        return result

    def __len__(self) -> int:
        return len(self._entries)


DecoratorFactory = type[CapabilityDecorator]


def decorator_chain(enable_retry: bool, enable_cache: bool) -> tuple[DecoratorFactory, ...]:
    """Return the enabled decorators, innermost first."""
    chain: list[DecoratorFactory] = []
    if enable_retry:
        chain.append(RetryDecorator)
    if enable_cache:
        chain.append(CacheDecorator)
    return tuple(chain)


def apply_chain(base: Capability, chain: Iterable[DecoratorFactory]) -> Capability:
    """Wrap ``base`` with each decorator in ``chain``, innermost first."""
    handle = base
    for factory in chain:
        handle = factory(handle)
    return handle


def decorated_name(name: str, chain: Sequence[DecoratorFactory]) -> str:
    """Prefix ``name`` with the labels of ``chain``, outermost first.

    >>> decorated_name("wasi", (RetryDecorator, CacheDecorator))
    'cache-retry-wasi'
    """
    for factory in chain:
        name = f"{factory.label}-{name}"
    return name
