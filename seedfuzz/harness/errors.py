"""
SeedFuzz -- Error Hierarchy

All exceptions raised by the harness generator and the generated harnesses.

Two families that must never be mixed:
  DefinitionError subclasses -> static, raised while a test definition is
                                parsed and compiled; no harness is produced
  FuzzFailure                -> runtime, raised by a generated harness when the
                                test body fails in some iteration

Generator precondition violations (degenerate or out-of-domain ranges, bad
seeds) live with the generators in seedfuzz.generator.errors.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from seedfuzz.harness.types import FailureReport
    from seedfuzz.primitives.common import SourceLocation


class SeedFuzzError(Exception):
    """Base for all SeedFuzz errors."""


# ── Definition errors (static) ───────────────────────────────────────────────


class DefinitionError(SeedFuzzError):
    """
    A decorated test definition is invalid.

    Carries the location of the offending construct. Raised at decoration
    time, so the test module fails to import instead of running a guessed
    harness.
    """

    def __init__(self, message: str, location: SourceLocation | None = None) -> None:
        self.message = message
        self.location = location
        super().__init__(f"{location}: {message}" if location is not None else message)


class MalformedDecorator(DefinitionError):
    """The decorator call itself has an unsupported shape."""


class MissingFixture(DefinitionError):
    """``@fuzz(...)`` was called without a fixture type."""


class UnknownOption(DefinitionError):
    """A named decorator argument other than ``runs`` / ``seed``."""


class InvalidOptionLiteral(DefinitionError):
    """``runs`` / ``seed`` given something other than a non-negative int literal."""


class MissingFixtureParameter(DefinitionError):
    """The decorated function does not declare its fixture parameter."""


class MalformedParameter(DefinitionError):
    """A generated parameter is not a single plain name."""


class UnsupportedParameterType(DefinitionError):
    """A generated parameter is unannotated or names an unknown integer domain."""


class IncompleteRange(DefinitionError):
    """A range modifier is not a closed ``start:end`` pair."""


class InvalidFixture(DefinitionError):
    """The fixture object does not satisfy the ``setup()`` contract."""


class SourceUnavailable(DefinitionError):
    """The decorated function's source cannot be retrieved for analysis."""


# ── Execution failures (runtime) ─────────────────────────────────────────────


class FuzzFailure(SeedFuzzError, AssertionError):
    """
    The test body failed during a generated harness run.

    Subclasses AssertionError so test runners report a failure rather than
    an error. ``report`` holds the seed, iteration and generated values.
    """

    def __init__(self, report: FailureReport) -> None:
        self.report = report
        super().__init__(
            f"Fuzz test failed at iteration {report.iteration}\n{report.render()}"
            f"\n  Error: {report.error}"
        )
