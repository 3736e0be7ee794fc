"""
SeedFuzz -- Harness Generator

Turns declarative test definitions into executable harness procedures.

Public API:
  fuzz              — seeded, generative, fail-fast harness decorator
  fixture_test      — single-shot fixture setup + run decorator
  Fixture           — the ``setup()`` contract fixture types satisfy
  TestSpec          — parsed generative definition
  ParamSpec         — one generated parameter
  FailureReport     — seed / iteration / values of a failing iteration
  render_fuzz_harness, parse_fuzz_definition — the codegen pipeline, for tooling
"""

from seedfuzz.harness.codegen import compile_harness, render_fixture_test, render_fuzz_harness
from seedfuzz.harness.decorators import fixture_test, fuzz
from seedfuzz.harness.errors import (
    DefinitionError,
    FuzzFailure,
    IncompleteRange,
    InvalidFixture,
    InvalidOptionLiteral,
    MalformedDecorator,
    MalformedParameter,
    MissingFixture,
    MissingFixtureParameter,
    SeedFuzzError,
    SourceUnavailable,
    UnknownOption,
    UnsupportedParameterType,
)
from seedfuzz.harness.fixture import Fixture
from seedfuzz.harness.parser import (
    Locator,
    iter_definitions,
    parse_fixture_test_definition,
    parse_fuzz_definition,
)
from seedfuzz.harness.types import (
    DEFAULT_RUNS,
    FailureReport,
    FixtureTestSpec,
    IterationOutcome,
    ParamSpec,
    RangeSpec,
    TestSpec,
)

__all__ = [
    "DEFAULT_RUNS",
    "DefinitionError",
    "FailureReport",
    "Fixture",
    "FixtureTestSpec",
    "FuzzFailure",
    "IncompleteRange",
    "InvalidFixture",
    "InvalidOptionLiteral",
    "IterationOutcome",
    "Locator",
    "MalformedDecorator",
    "MalformedParameter",
    "MissingFixture",
    "MissingFixtureParameter",
    "ParamSpec",
    "RangeSpec",
    "SeedFuzzError",
    "SourceUnavailable",
    "TestSpec",
    "UnknownOption",
    "UnsupportedParameterType",
    "compile_harness",
    "fixture_test",
    "fuzz",
    "iter_definitions",
    "parse_fixture_test_definition",
    "parse_fuzz_definition",
    "render_fixture_test",
    "render_fuzz_harness",
]
