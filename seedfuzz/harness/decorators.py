"""
SeedFuzz -- Test Decorators

  @fuzz(FixtureType, runs=..., seed=...)   generative, seeded, fail-fast
  @fixture_test(FixtureType)               one setup, one run, no generation

Both read the decorated function's source, validate it statically, render a
harness procedure and compile it. Validation happens at decoration time, i.e.
when the test module is imported, so a malformed definition never runs.

The returned harness takes no arguments and keeps the original name,
qualname, module and docstring, so pytest collects it like any other test.
``__wrapped__`` is never set; pytest would otherwise resolve the original
parameters as pytest fixtures. Definitions in a class body are rejected,
since pytest would call the harness with ``self``.
"""

from __future__ import annotations

import ast
import inspect
import textwrap
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

import structlog

from seedfuzz.config import HarnessConfig, get_config
from seedfuzz.generator.seeds import default_seed
from seedfuzz.harness.codegen import compile_harness, render_fixture_test, render_fuzz_harness
from seedfuzz.harness.errors import DefinitionError, MalformedDecorator, SourceUnavailable
from seedfuzz.harness.fixture import check_fixture, resolve_setup
from seedfuzz.harness.parser import (
    FIXTURE_TEST_DECORATOR,
    FUZZ_DECORATOR,
    Locator,
    find_decorator,
    parse_fixture_test_definition,
    parse_fuzz_definition,
)
from seedfuzz.harness.types import FixtureTestSpec, TestSpec

logger = structlog.get_logger(system="seedfuzz.harness.decorators")

Harness = Callable[[], None]


@dataclass(frozen=True)
class _Definition:
    function: ast.FunctionDef | ast.AsyncFunctionDef
    decorator: ast.Call
    locate: Locator


def _load_definition(func: Callable[..., Any], kind: str) -> _Definition:
    """Parse the source of ``func`` and find its ``@kind(...)`` decorator call."""
    qualname = getattr(func, "__qualname__", repr(func))
    try:
        lines, first_line = inspect.getsourcelines(func)
        filename = inspect.getsourcefile(func) or func.__code__.co_filename
    except (OSError, TypeError, AttributeError) as exc:
        raise SourceUnavailable(f"cannot read the source of {qualname!r}: {exc}") from exc

    raw = "".join(lines)
    dedented = textwrap.dedent(raw)
    stripped = (len(raw) - len(raw.lstrip(" \t"))) - (len(dedented) - len(dedented.lstrip(" \t")))
    locate = Locator(filename, line_offset=first_line - 1, column_offset=stripped)

    try:
        tree = ast.parse(dedented)
    except SyntaxError as exc:
        raise SourceUnavailable(
            f"source of {qualname!r} is not a standalone definition: {exc.msg}"
        ) from exc

    node = tree.body[0] if tree.body else None
    if not isinstance(node, (ast.FunctionDef, ast.AsyncFunctionDef)) or node.name != func.__name__:
        raise SourceUnavailable(f"cannot locate the definition of {qualname!r} in its source")

    decorator = find_decorator(node, kind)
    if decorator is None:
        raise MalformedDecorator(
            f"@{kind}(...) must be applied with decorator syntax on {node.name!r}",
            locate(node),
        )
    return _Definition(function=node, decorator=decorator, locate=locate)


def _defined_in_class(func: Callable[..., Any]) -> bool:
    owner, _, _ = getattr(func, "__qualname__", "").rpartition(".")
    return bool(owner) and not owner.endswith("<locals>")


def _seed_factory(config: HarnessConfig) -> Callable[[], int]:
    if config.replay_seed is not None:
        replay = config.replay_seed
        return lambda: replay
    return default_seed


def _finish(
    harness: Harness,
    func: Callable[..., Any],
    spec: TestSpec | FixtureTestSpec,
    source: str,
) -> Harness:
    harness.__name__ = func.__name__
    harness.__qualname__ = func.__qualname__
    harness.__module__ = func.__module__
    harness.__doc__ = func.__doc__
    # Carries marks applied below the decorator (pytest stores them in __dict__)
    attrs = {k: v for k, v in vars(func).items() if k != "__wrapped__"}
    harness.__dict__.update(attrs)
    harness.__fuzz_spec__ = spec  # type: ignore[attr-defined]
    harness.__fuzz_body__ = func  # type: ignore[attr-defined]
    harness.__harness_source__ = source  # type: ignore[attr-defined]
    return harness


def fuzz(
    fixture: Any = None, /, *extra: Any, **options: Any
) -> Callable[[Callable[..., Any]], Harness]:
    """
    Turn a test body into a seeded, generative, fail-fast harness.

        @fuzz(CounterTest, runs=50, seed=42)
        def fuzz_increment(ctx, amount: u32[1:100], multiplier: u8):
            ...

    Each iteration gets a fresh ``CounterTest.setup()`` and fresh values for
    every annotated parameter. ``runs`` defaults to 256 (configurable);
    ``seed`` defaults to the current time, so pass it to reproduce a run.
    Arguments are validated from the decorator's source, not from the
    values received here.
    """

    def decorate(func: Callable[..., Any]) -> Harness:
        try:
            definition = _load_definition(func, FUZZ_DECORATOR)
            config = get_config().harness
            spec = parse_fuzz_definition(
                definition.function,
                definition.decorator,
                locate=definition.locate,
                default_runs=config.default_runs,
                seed_factory=_seed_factory(config),
                method=_defined_in_class(func),
            )
            check_fixture(fixture, definition.locate(definition.decorator))
        except DefinitionError as exc:
            logger.warning("definition_rejected", test=func.__qualname__, error=str(exc))
            raise

        source = render_fuzz_harness(spec)
        harness = compile_harness(
            spec.name,
            source,
            module_globals=func.__globals__,
            fixture=fixture,
            body=func,
        )
        return _finish(harness, func, spec, source)

    return decorate


def fixture_test(
    fixture: Any = None, /, *extra: Any, **options: Any
) -> Callable[[Callable[..., Any]], Harness]:
    """
    Run a test body once against a freshly set-up fixture.

        @fixture_test(CounterTest)
        def test_starts_at_zero(ctx):
            assert ctx.count == 0

    A type is set up through ``setup()``; any other callable is used as the
    setup itself (``@fixture_test(CounterTest.with_funds)``). With no
    fixture, ``@fixture_test()`` just runs the body. Failures propagate
    unchanged; there is no generation and no diagnostics.
    """

    def decorate(func: Callable[..., Any]) -> Harness:
        try:
            definition = _load_definition(func, FIXTURE_TEST_DECORATOR)
            spec = parse_fixture_test_definition(
                definition.function,
                definition.decorator,
                locate=definition.locate,
                method=_defined_in_class(func),
            )
            setup = (
                resolve_setup(fixture, definition.locate(definition.decorator))
                if spec.fixture_type is not None
                else None
            )
        except DefinitionError as exc:
            logger.warning("definition_rejected", test=func.__qualname__, error=str(exc))
            raise

        source = render_fixture_test(spec)
        harness = compile_harness(
            spec.name,
            source,
            module_globals=func.__globals__,
            fixture=setup,
            body=func,
        )
        return _finish(harness, func, spec, source)

    return decorate
