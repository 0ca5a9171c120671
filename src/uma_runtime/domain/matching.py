"""Subscription pattern matching.

A subscription pattern is either an exact event name (``image.analyzed.v1``)
or a namespace wildcard ending in ``.*`` (``image.*``). The variant is decided
once, by a suffix check, when the pattern is compiled. There is no regex and
no substring matching.
"""

import abc
from dataclasses import dataclass
from functools import lru_cache

WILDCARD_SUFFIX = ".*"

# pylint: disable=too-few-public-methods


class Matcher(abc.ABC):
    """A compiled subscription pattern."""

    @abc.abstractmethod
    def matches(self, name: str) -> bool:
        """Return True if the event ``name`` satisfies this pattern."""


@dataclass(frozen=True, slots=True)
class Exact(Matcher):
    """Matches only the identical event name."""

    name: str

    def matches(self, name: str) -> bool:
        return name == self.name


@dataclass(frozen=True, slots=True)
class PrefixWildcard(Matcher):
    """Matches every event name inside ``namespace``.

    The namespace is stored without its trailing dot; ``image.*`` compiles to
    ``PrefixWildcard("image")`` and matches ``image.analyzed.v1`` but neither
    ``image`` nor ``imagery.v1``.
    """

    namespace: str

    def matches(self, name: str) -> bool:
        return name.startswith(f"{self.namespace}.")


@lru_cache(maxsize=1024)
def compile_pattern(pattern: str) -> Matcher:
    """Compile a subscription pattern into its matcher variant.

    Args:
        pattern: The pattern as declared in a contract.

    Returns:
        `PrefixWildcard` if the pattern ends in ``.*``, otherwise `Exact`.
    """
    if pattern.endswith(WILDCARD_SUFFIX):
        return PrefixWildcard(pattern[: -len(WILDCARD_SUFFIX)])
    return Exact(pattern)


def matches(pattern: str, name: str) -> bool:
    """Return True if subscription ``pattern`` matches event ``name``."""
    return compile_pattern(pattern).matches(name)
