"""Capability resolution with fallback.

The adapter manager turns a logical capability name into an invocable handle:
it walks the capability's candidate implementations in preference order,
takes the first one available on this host, and wraps it in the configured
decorator chain. Skipped candidates are kept as fallbacks so the run can
report degraded execution.
"""

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass

from uma_runtime.domain.errors import CapabilityUnavailableError, ConditionKind
from uma_runtime.domain.lifecycle import BindingChoice, Fallback
from uma_runtime.interfaces.capability import Capability, Implementation

from .decorators import DecoratorFactory, LatencyProbe, apply_chain, decorated_name
from .telemetry import TelemetryCollector

logger = logging.getLogger(__name__)

Registry = Mapping[str, Sequence[Implementation]]


@dataclass(frozen=True, slots=True)
class ResolvedCapability:
    """A ready-to-invoke handle and how it was chosen."""

    handle: Capability
    choice: BindingChoice


class AdapterManager:
    """Resolve capabilities to decorated handles for a single run.

    Resolved handles are memoized, so a cache decorator keeps its entries for
    as long as this manager lives. Create one manager per run.

    Args:
        registry: Candidate implementations per capability name, most
            preferred first.
        wrappers: Decorator classes to apply, innermost first.
        telemetry: If given, every call to the chosen implementation is timed
            and recorded.
    """

    def __init__(
        self,
        registry: Registry,
        wrappers: Sequence[DecoratorFactory] = (),
        telemetry: TelemetryCollector | None = None,
    ) -> None:
        self._registry = registry
        self._wrappers = tuple(wrappers)
        self._telemetry = telemetry
        self._resolved: dict[str, ResolvedCapability] = {}

    def resolve(self, capability: str) -> ResolvedCapability:
        """Return the handle for ``capability``.

        Raises:
            CapabilityUnavailableError: If no candidate can run on this host.
        """
        if (resolved := self._resolved.get(capability)) is not None:
            return resolved

        fallbacks: list[Fallback] = []
        for candidate in self._registry.get(capability, ()):
            if (unavailable := candidate.check_available()) is None:
                resolved = self._bind(capability, candidate, tuple(fallbacks))
                self._resolved[capability] = resolved
                return resolved
            fallbacks.append(
                Fallback(candidate.name, unavailable.reason_code, unavailable.detail)
            )
            logger.warning(
                "%s %s via %s: %s %s",
                ConditionKind.CAPABILITY_UNAVAILABLE,
                capability,
                candidate.name,
                unavailable.reason_code,
                unavailable.detail,
            )

        raise CapabilityUnavailableError(
            capability, [f"{f.implementation}: {f.reason_code}" for f in fallbacks]
        )

    def _bind(
        self,
        capability: str,
        implementation: Implementation,
        fallbacks: tuple[Fallback, ...],
    ) -> ResolvedCapability:
        base: Capability = implementation
        if self._telemetry is not None:
            base = LatencyProbe(base, self._telemetry)
        handle = apply_chain(base, self._wrappers)
        choice = BindingChoice(
            capability=capability,
            implementation=decorated_name(implementation.name, self._wrappers),
            host=implementation.host,
            fallbacks=fallbacks,
        )
        logger.info(
            "adapter.bound %s -> %s (%s)", capability, choice.implementation, choice.host
        )
        return ResolvedCapability(handle=handle, choice=choice)
