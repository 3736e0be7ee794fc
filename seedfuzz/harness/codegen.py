"""
SeedFuzz -- Harness Code Generator

Renders the Python source of a harness procedure from a validated spec,
then compiles it against the test module's globals.

The rendered source is a factory:

    def _sf_build_<name>(_sf_fixture, _sf_body, _sf_rt):
        def <name>():
            ...
        return <name>

The factory receives the fixture object, the original (undecorated) body
and the runtime module, so generated code never depends on what the test
module imports. Because the factory runs with the module's globals, range
bounds such as ``u16[0:MAX_ITEMS]`` resolve against module-level names
when the procedure starts.

All locals introduced by the generator carry the reserved ``_sf_`` prefix;
the parser rejects test parameters that use it.
"""

from __future__ import annotations

import itertools
import linecache
import types
from collections.abc import Callable
from typing import Any

import structlog

from seedfuzz.harness import runtime
from seedfuzz.harness.types import FixtureTestSpec, ParamSpec, TestSpec

logger = structlog.get_logger(system="seedfuzz.harness.codegen")

_INDENT = "    "

# Distinguishes linecache entries of same-named harnesses
_harness_ids = itertools.count(1)


def factory_name(name: str) -> str:
    return f"_sf_build_{name}"


class _SourceWriter:
    """Accumulates indented lines."""

    def __init__(self) -> None:
        self._lines: list[str] = []
        self._depth = 0

    def line(self, text: str = "") -> None:
        self._lines.append(f"{_INDENT * self._depth}{text}" if text else "")

    def indent(self) -> None:
        self._depth += 1

    def dedent(self) -> None:
        self._depth -= 1

    def source(self) -> str:
        return "\n".join(self._lines) + "\n"


# ── Fuzz harness ─────────────────────────────────────────────────────────────


def _generator_init(param: ParamSpec) -> str:
    domain = f"_sf_rt.domain({param.type_name!r})"
    seed = f"_sf_rt.derive_seed(_sf_seed, {param.index})"
    if param.range is None:
        return f"_sf_gen_{param.index} = _sf_rt.FullRangeGenerator({domain}, {seed})"
    return (
        f"_sf_gen_{param.index} = _sf_rt.RangeGenerator("
        f"{domain}, {seed}, ({param.range.start}), ({param.range.end}))"
    )


def _body_call_args(spec: TestSpec) -> str:
    args = ["_sf_body", "_sf_ctx"]
    for param in spec.parameters:
        args.append(f"{param.name}={param.name}" if param.keyword_only else param.name)
    return ", ".join(args)


def render_fuzz_harness(spec: TestSpec) -> str:
    """
    Python source for the harness factory of a ``@fuzz`` definition.

    The procedure creates one generator per parameter (seed ``base + index``),
    then for each iteration sets up a fresh fixture, draws every parameter in
    declared order, runs the body inside the fault boundary, and on the first
    failure reports and raises. ``run_count == 0`` never touches the fixture.
    """
    name = spec.name
    runs = spec.run_count
    values = ", ".join(f"({p.name!r}, {p.name})" for p in spec.parameters)

    w = _SourceWriter()
    w.line(f"def {factory_name(name)}(_sf_fixture, _sf_body, _sf_rt):")
    w.indent()
    w.line(f"def {name}():")
    w.indent()
    w.line(f"_sf_seed = {spec.base_seed}")
    w.line(f"_sf_rt.run_started({name!r}, _sf_seed, {runs})")
    for param in spec.parameters:
        w.line(_generator_init(param))
    w.line(f"for _sf_iteration in _sf_rt.iterations({runs}):")
    w.indent()
    w.line("_sf_ctx = _sf_fixture.setup()")
    for param in spec.parameters:
        w.line(f"{param.name} = _sf_gen_{param.index}.generate()")
    w.line(f"_sf_outcome = _sf_rt.run_isolated({_body_call_args(spec)})")
    w.line("if _sf_outcome.failed:")
    w.indent()
    w.line("_sf_rt.raise_failure(")
    w.indent()
    w.line("_sf_outcome,")
    w.line(f"test_name={name!r},")
    w.line("seed=_sf_seed,")
    w.line("iteration=_sf_iteration,")
    w.line(f"run_count={runs},")
    w.line(f"values=({values}{',' if len(spec.parameters) == 1 else ''}),")
    w.dedent()
    w.line(")")
    w.dedent()
    w.dedent()
    w.line(f"_sf_rt.run_finished({name!r}, _sf_seed, {runs})")
    w.dedent()
    w.line(f"return {name}")
    return w.source()


# ── Fixture test ─────────────────────────────────────────────────────────────


def render_fixture_test(spec: FixtureTestSpec) -> str:
    """Python source for the factory of a ``@fixture_test`` definition: setup, one call."""
    w = _SourceWriter()
    w.line(f"def {factory_name(spec.name)}(_sf_setup, _sf_body, _sf_rt):")
    w.indent()
    w.line(f"def {spec.name}():")
    w.indent()
    if spec.fixture_type is None:
        w.line("_sf_body()")
    else:
        w.line("_sf_ctx = _sf_setup()")
        w.line("_sf_body(_sf_ctx)")
    w.dedent()
    w.line(f"return {spec.name}")
    return w.source()


# ── Compilation ──────────────────────────────────────────────────────────────


def compile_harness(
    name: str,
    source: str,
    *,
    module_globals: dict[str, Any],
    fixture: Any,
    body: Callable[..., Any],
) -> Callable[[], None]:
    """
    Compile rendered factory source and build the harness procedure.

    The factory is re-bound to ``module_globals`` so names in the generated
    code resolve exactly as they would in the test module. The source is
    registered with linecache under a filename unique to this compilation,
    so tracebacks through the harness show it.
    """
    module = module_globals.get("__name__", "?")
    filename = f"<seedfuzz harness {module}.{name} #{next(_harness_ids)}>"
    code = compile(source, filename, "exec")
    linecache.cache[filename] = (len(source), None, source.splitlines(True), filename)

    scratch: dict[str, Any] = {}
    exec(code, scratch)
    built = scratch[factory_name(name)]
    factory = types.FunctionType(built.__code__, module_globals, built.__name__)

    harness: Callable[[], None] = factory(fixture, body, runtime)
    logger.debug(
        "fuzz_harness_generated", test=name, filename=filename, lines=source.count("\n")
    )
    return harness
