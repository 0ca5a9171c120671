"""Producer → subscriber bindings.

Bindings are derived from contracts on every run and never persisted. For a
producer/subscriber pair, every emitted event is tried against every
subscription pattern, in declaration order, and every match becomes a binding.
Duplicates are kept: an event matched by two patterns of the same subscriber
yields two bindings, so fan-out stays visible in the audit trail.
"""

from collections.abc import Iterable
from dataclasses import dataclass

from .contracts import Contract, major_compatible


@dataclass(frozen=True, slots=True)
class Binding:
    """A resolved pairing of a producer event with a subscriber."""

    event: str
    schema: str
    producer: str
    subscriber: str
    pattern: str


def resolve_bindings(producer: Contract, subscriber: Contract) -> tuple[Binding, ...]:
    """Compute the bindings from ``producer`` to ``subscriber``.

    Args:
        producer: The publishing contract.
        subscriber: The subscribing contract.

    Returns:
        Bindings ordered by (emits order) × (subscribes order).
    """
    return tuple(
        Binding(
            event=emitted.name,
            schema=emitted.schema,
            producer=producer.name,
            subscriber=subscriber.name,
            pattern=subscription.pattern,
        )
        for emitted in producer.emits
        for subscription in subscriber.subscribes
        if subscription.matcher.matches(emitted.name)
    )


@dataclass(frozen=True, slots=True)
class BindingReport:
    """Bindings from one producer to a set of subscribers."""

    producer: str
    bindings: tuple[Binding, ...]
    absent: tuple[str, ...]
    version_mismatches: tuple[str, ...]

    def for_subscriber(self, subscriber: str) -> tuple[Binding, ...]:
        """Return the bindings that target ``subscriber``."""
        return tuple(b for b in self.bindings if b.subscriber == subscriber)


def resolve_all(producer: Contract, subscribers: Iterable[Contract]) -> BindingReport:
    """Resolve bindings from ``producer`` to each of ``subscribers``.

    Subscribers without any binding are listed in ``absent``; subscribers whose
    major version differs from the producer's are listed in
    ``version_mismatches``. Neither is an error.
    """
    bindings: list[Binding] = []
    absent: list[str] = []
    mismatches: list[str] = []
    for subscriber in subscribers:
        found = resolve_bindings(producer, subscriber)
        if not found:
            absent.append(subscriber.name)
        elif not major_compatible(producer.version, subscriber.version):
            mismatches.append(subscriber.name)
        bindings.extend(found)
    return BindingReport(
        producer=producer.name,
        bindings=tuple(bindings),
        absent=tuple(absent),
        version_mismatches=tuple(mismatches),
    )
