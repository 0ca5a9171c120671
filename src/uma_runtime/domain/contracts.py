"""Capability contracts.

A contract is the declarative document a capability module ships to describe
the events it emits, the event patterns it subscribes to, and where it may be
placed. Contracts are parsed from plain mappings (already checked against the
contract meta-schema by the contract store) into frozen value objects.
"""

import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from .errors import ContractMalformedError
from .matching import Matcher, compile_pattern

SEMVER_PATTERN = re.compile(r"^(0|[1-9]\d*)\.(0|[1-9]\d*)\.(0|[1-9]\d*)$")


@dataclass(frozen=True, slots=True, order=True)
class SemVer:
    """A ``MAJOR.MINOR.PATCH`` version."""

    major: int
    minor: int
    patch: int

    @classmethod
    def parse(cls, value: str) -> "SemVer":
        """Parse a version string.

        Raises:
            ValueError: If ``value`` is not of the form ``MAJOR.MINOR.PATCH``.
        """
        if not (m := SEMVER_PATTERN.match(str(value))):
            raise ValueError(f"version {value!r} is not MAJOR.MINOR.PATCH")
        return cls(*(int(part) for part in m.groups()))

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}"


@dataclass(frozen=True, slots=True)
class EmittedEvent:
    """An event a capability module publishes, with its payload schema."""

    name: str
    schema: str


@dataclass(frozen=True, slots=True)
class Subscription:
    """A subscription pattern, optionally pinned to a schema and policy."""

    pattern: str
    schema: str | None = None
    policy: str | None = None

    @property
    def matcher(self) -> Matcher:
        """The compiled matcher for this pattern."""
        return compile_pattern(self.pattern)


@dataclass(frozen=True, slots=True)
class Contract:
    """A parsed capability contract."""

    # pylint: disable=too-many-instance-attributes

    name: str
    version: SemVer
    emits: tuple[EmittedEvent, ...] = ()
    subscribes: tuple[Subscription, ...] = ()
    placement: frozenset[str] = field(default_factory=frozenset)
    requires: tuple[str, ...] = ()
    source: str = "<memory>"

    def emitted(self, event_name: str) -> EmittedEvent | None:
        """Return the declaration of ``event_name`` if this contract emits it."""
        return next((e for e in self.emits if e.name == event_name), None)

    @property
    def schema_refs(self) -> tuple[str, ...]:
        """Every schema reference named by this contract, in declaration order."""
        refs = [e.schema for e in self.emits]
        refs.extend(s.schema for s in self.subscribes if s.schema)
        return tuple(dict.fromkeys(refs))


def parse_contract(document: Mapping[str, Any], source: str = "<memory>") -> Contract:
    """Build a `Contract` from a contract document.

    Args:
        document: The decoded contract document.
        source: Where the document came from, used in error messages.

    Returns:
        The parsed contract.

    Raises:
        ContractMalformedError: If a required field is missing, has the wrong
            shape, or the version is not ``MAJOR.MINOR.PATCH``.
    """
    if not isinstance(document, Mapping):
        raise ContractMalformedError(source, "contract must be a mapping")
    try:
        name = str(document["name"]).strip()
        version = SemVer.parse(document["version"])
        events = document.get("events") or {}
        emits = tuple(
            EmittedEvent(name=str(e["name"]), schema=str(e["schema"]))
            for e in events.get("emits") or ()
        )
        subscribes = tuple(
            Subscription(
                pattern=str(s["pattern"]),
                schema=s.get("schema"),
                policy=s.get("policy"),
            )
            for s in events.get("subscribes") or ()
        )
        constraints = document.get("constraints") or {}
        placement = frozenset(str(p) for p in constraints.get("placement") or ())
        policies = document.get("policies") or {}
        requires = tuple(str(r) for r in policies.get("requires") or ())
    except KeyError as e:
        raise ContractMalformedError(source, f"missing required field {e}") from e
    except (AttributeError, TypeError, ValueError) as e:
        raise ContractMalformedError(source, str(e)) from e

    if not name:
        raise ContractMalformedError(source, "name must be non-empty")

    return Contract(
        name=name,
        version=version,
        emits=emits,
        subscribes=subscribes,
        placement=placement,
        requires=requires,
        source=source,
    )


def major_compatible(a: SemVer, b: SemVer) -> bool:
    """Return True if two versions share the same major component."""
    return a.major == b.major
