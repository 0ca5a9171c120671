"""Fixtures for id_generator contract tests."""

from collections.abc import Iterable

import pytest

from uma_runtime.adapters.id_generators import (
    SequentialIdGenerator,
    ULIDGenerator,
    UUIDv4Generator,
)
from uma_runtime.interfaces.id_generator import IdGenerator


@pytest.fixture(params=["ulid", "uuid4", "sequential"])
def id_generator(request: pytest.FixtureRequest) -> Iterable[IdGenerator]:
    """Yield a fresh IdGenerator for each backend."""
    match request.param:
        case "ulid":
            yield ULIDGenerator()
        case "uuid4":
            yield UUIDv4Generator()
        case "sequential":
            yield SequentialIdGenerator()
        case _:
            raise ValueError(f"unknown id generator type: {request.param}")


@pytest.fixture(params=["ulid"])
def monotonic_id_generator(request: pytest.FixtureRequest) -> Iterable[IdGenerator]:
    """Yield generators whose ids sort in creation order."""
    match request.param:
        case "ulid":
            yield ULIDGenerator()
        case _:
            raise ValueError(f"unknown monotonic id generator type: {request.param}")
