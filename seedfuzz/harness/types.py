"""
SeedFuzz -- Harness Types

Parsed, immutable descriptions of test definitions and the records a
generated harness produces while it runs.

  TestSpec          — one ``@fuzz`` definition: fixture, runs, seed, parameters
  ParamSpec         — one generated parameter: name, domain, optional range
  FixtureTestSpec   — one ``@fixture_test`` definition
  IterationOutcome  — result of running the body once inside the fault boundary
  FailureReport     — seed / iteration / values of the first failing iteration
"""

from __future__ import annotations

from dataclasses import dataclass

from pydantic import Field

from seedfuzz.generator.seeds import U64_MAX, derive_seed
from seedfuzz.primitives.common import FrozenModel, SeedFuzzModel, SourceLocation

DEFAULT_RUNS = 256


class RangeSpec(FrozenModel):
    """Half-open range [start, end). Bounds are source expressions, evaluated at run time."""

    start: str
    end: str


class ParamSpec(FrozenModel):
    name: str
    index: int = Field(ge=0)
    type_name: str
    range: RangeSpec | None = None
    keyword_only: bool = False
    location: SourceLocation = Field(default_factory=SourceLocation)

    @property
    def full_domain(self) -> bool:
        return self.range is None


class TestSpec(FrozenModel):
    """
    A validated generative test definition.

    Parameter order is the declaration order and is significant: it fixes
    both each parameter's derived seed and the order values are drawn in.
    """

    __test__ = False  # not a pytest test class

    name: str
    fixture_type: str
    run_count: int = Field(default=DEFAULT_RUNS, ge=0)
    base_seed: int = Field(ge=0, le=U64_MAX)
    seed_explicit: bool = False
    parameters: tuple[ParamSpec, ...] = ()
    location: SourceLocation = Field(default_factory=SourceLocation)

    def derived_seed(self, index: int) -> int:
        return derive_seed(self.base_seed, index)

    @property
    def parameter_names(self) -> tuple[str, ...]:
        return tuple(p.name for p in self.parameters)


class FixtureTestSpec(FrozenModel):
    """A single-shot test: optional fixture setup, then one call of the body."""

    __test__ = False

    name: str
    fixture_type: str | None = None
    fixture_param: str | None = None
    location: SourceLocation = Field(default_factory=SourceLocation)


@dataclass(frozen=True, slots=True)
class IterationOutcome:
    failed: bool
    error: Exception | None = None


class FailureReport(SeedFuzzModel):
    """Everything needed to replay the failing iteration."""

    test_name: str
    seed: int
    iteration: int
    run_count: int
    values: list[tuple[str, int]] = Field(default_factory=list)
    error: str = ""

    def render(self) -> str:
        lines = [
            "Fuzz test failed!",
            f"  Seed: {self.seed}",
            f"  Iteration: {self.iteration}",
        ]
        lines.extend(f"  {name}: {value!r}" for name, value in self.values)
        return "\n".join(lines)
