"""
SeedFuzz -- Fixture Contract

A fixture type provides ``setup()``, taking no arguments and returning a
fully initialised instance. A generated harness calls it once per
iteration and never reuses the result. No teardown contract is defined;
cleanup belongs to the fixture type.
"""

from __future__ import annotations

import inspect
from typing import Any, Protocol, runtime_checkable

from seedfuzz.harness.errors import InvalidFixture
from seedfuzz.primitives.common import SourceLocation


@runtime_checkable
class Fixture(Protocol):
    @classmethod
    def setup(cls) -> Any:
        ...


def check_fixture(fixture: Any, location: SourceLocation | None = None) -> None:
    """Raise InvalidFixture unless ``fixture`` satisfies the Fixture protocol."""
    if not isinstance(fixture, Fixture) or not callable(fixture.setup):
        raise InvalidFixture(
            f"fixture {_describe(fixture)} has no callable setup()",
            location,
        )


def resolve_setup(fixture: Any, location: SourceLocation | None = None) -> Any:
    """
    The zero-argument callable that creates a fixture instance.

    Classes are set up through their ``setup()``; any other callable (for
    example ``CounterTest.with_funds``) is used as the setup itself.
    """
    if inspect.isclass(fixture):
        check_fixture(fixture, location)
        return fixture.setup
    if callable(fixture):
        return fixture
    raise InvalidFixture(
        f"fixture {_describe(fixture)} is neither a type with setup() nor callable",
        location,
    )


def _describe(fixture: Any) -> str:
    return getattr(fixture, "__qualname__", None) or repr(fixture)
