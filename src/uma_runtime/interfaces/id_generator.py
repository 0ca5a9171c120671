"""Interface for identifier generators (envelope and run ids)."""

import abc

# pylint: disable=too-few-public-methods


class IdGenerator(abc.ABC):
    """Contract for an ID generator.

    Every call must return an identifier that has never been returned before
    by any generator of the same kind, so envelope ids stay globally unique.
    """

    @abc.abstractmethod
    def new_id(self) -> str:
        """Generate a new unique identifier."""
