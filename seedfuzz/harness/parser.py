"""
SeedFuzz -- Test-Definition Parser

Static analysis of decorated test functions. Works purely on the ``ast`` of
the function and its decorator call; nothing in the definition is executed.

Accepted shape:

    @fuzz(CounterTest, runs=10, seed=42)
    def fuzz_increment(ctx, increment_count: u32[1:100], multiplier: u8):
        ...

  - decorator: one positional fixture (name or dotted name), then only the
    ``runs`` and ``seed`` options, each a non-negative integer literal
  - first function parameter: the fixture, excluded from generation
  - every other parameter: a plain name annotated with an integer domain,
    optionally restricted with a ``start:end`` slice

Any violation raises a DefinitionError subclass located at the offending
node. Nothing partial is ever returned.
"""

from __future__ import annotations

import ast
from collections.abc import Callable, Iterator
from typing import NamedTuple

import structlog

from seedfuzz.generator.domains import is_domain, registered_domains
from seedfuzz.generator.seeds import U64_MAX, default_seed
from seedfuzz.harness.errors import (
    IncompleteRange,
    InvalidOptionLiteral,
    MalformedDecorator,
    MalformedParameter,
    MissingFixture,
    MissingFixtureParameter,
    UnknownOption,
    UnsupportedParameterType,
)
from seedfuzz.harness.types import (
    DEFAULT_RUNS,
    FixtureTestSpec,
    ParamSpec,
    RangeSpec,
    TestSpec,
)
from seedfuzz.primitives.common import SourceLocation

logger = structlog.get_logger(system="seedfuzz.harness.parser")

FUZZ_DECORATOR = "fuzz"
FIXTURE_TEST_DECORATOR = "fixture_test"
DECORATOR_KINDS = (FUZZ_DECORATOR, FIXTURE_TEST_DECORATOR)

# Generated harness locals use this prefix; test parameters may not.
RESERVED_PREFIX = "_sf_"

_OPTIONS = ("runs", "seed")
_OPTION_LIMITS = {"runs": None, "seed": U64_MAX}


class DecoratedDefinition(NamedTuple):
    kind: str
    function: ast.FunctionDef | ast.AsyncFunctionDef
    decorator: ast.Call
    # Defined directly in a class body
    method: bool = False


class Locator:
    """
    Turns node positions into absolute SourceLocations.

    Source fragments are parsed after ``inspect.getsource`` + dedent, so
    their positions are shifted by the fragment's first line and by the
    indentation that was stripped.
    """

    def __init__(self, filename: str, line_offset: int = 0, column_offset: int = 0) -> None:
        self.filename = filename
        self._line_offset = line_offset
        self._column_offset = column_offset

    def __call__(self, node: ast.AST) -> SourceLocation:
        return SourceLocation(
            filename=self.filename,
            line=getattr(node, "lineno", 0) + self._line_offset,
            column=getattr(node, "col_offset", -1) + 1 + self._column_offset,
        )


# ── Helpers ──────────────────────────────────────────────────────────────────


def dotted_name(node: ast.expr) -> str | None:
    """``a.b.c`` for Name/Attribute chains, else None."""
    if isinstance(node, ast.Name):
        return node.id
    if isinstance(node, ast.Attribute):
        base = dotted_name(node.value)
        return f"{base}.{node.attr}" if base is not None else None
    return None


def callee_name(decorator: ast.expr) -> str | None:
    """Final name segment of a decorator call's callee, e.g. ``fuzz`` for ``sf.fuzz(...)``."""
    if not isinstance(decorator, ast.Call):
        return None
    name = dotted_name(decorator.func)
    return name.rsplit(".", 1)[-1] if name else None


def _int_literal(node: ast.expr, option: str, locate: Locator) -> int:
    # bool is an int subclass but True is not a run count
    if (
        not isinstance(node, ast.Constant)
        or isinstance(node.value, bool)
        or not isinstance(node.value, int)
    ):
        raise InvalidOptionLiteral(
            f"{option!r} takes a non-negative integer literal, got `{ast.unparse(node)}`",
            locate(node),
        )
    limit = _OPTION_LIMITS[option]
    if limit is not None and node.value > limit:
        raise InvalidOptionLiteral(
            f"{option!r} must fit in 64 bits, got {node.value}", locate(node)
        )
    return node.value


def _fixture_arg(decorator: ast.Call, locate: Locator, *, required: bool) -> str | None:
    if not decorator.args:
        if required:
            raise MissingFixture(
                "fuzz definition needs a fixture type as its first argument",
                locate(decorator),
            )
        return None

    if len(decorator.args) > 1:
        raise MalformedDecorator(
            "only one positional argument (the fixture) is accepted",
            locate(decorator.args[1]),
        )

    fixture = decorator.args[0]
    name = dotted_name(fixture)
    if name is None:
        raise MalformedDecorator(
            f"fixture must be a type or setup name, got `{ast.unparse(fixture)}`",
            locate(fixture),
        )
    return name


def _reject_async(func: ast.FunctionDef | ast.AsyncFunctionDef, locate: Locator) -> None:
    if isinstance(func, ast.AsyncFunctionDef):
        raise MalformedDecorator(
            f"{func.name!r} is async; test bodies must be synchronous", locate(func)
        )


def _reject_method(
    func: ast.FunctionDef | ast.AsyncFunctionDef, locate: Locator, method: bool
) -> None:
    if method:
        raise MalformedDecorator(
            f"{func.name!r} is defined in a class body; define it at module level "
            "or inside a test function",
            locate(func),
        )


def _positional_params(func: ast.FunctionDef | ast.AsyncFunctionDef) -> list[ast.arg]:
    return [*func.args.posonlyargs, *func.args.args]


def _reject_variadics(func: ast.FunctionDef | ast.AsyncFunctionDef, locate: Locator) -> None:
    for variadic, prefix in ((func.args.vararg, "*"), (func.args.kwarg, "**")):
        if variadic is not None:
            raise MalformedParameter(
                f"`{prefix}{variadic.arg}` is not a single named parameter",
                locate(variadic),
            )


# ── Annotation / Range ───────────────────────────────────────────────────────


def _annotation_expr(param: ast.arg, locate: Locator) -> ast.expr:
    annotation = param.annotation
    if annotation is None:
        raise UnsupportedParameterType(
            f"parameter {param.arg!r} needs an integer domain annotation "
            f"(one of {', '.join(registered_domains())}), optionally with a range",
            locate(param),
        )

    if isinstance(annotation, ast.Constant) and isinstance(annotation.value, str):
        try:
            inner = ast.parse(annotation.value.strip(), mode="eval").body
        except SyntaxError:
            raise UnsupportedParameterType(
                f"cannot parse annotation {annotation.value!r} of parameter {param.arg!r}",
                locate(annotation),
            ) from None
        # Positions inside a string annotation are meaningless; pin them to the string
        for node in ast.walk(inner):
            ast.copy_location(node, annotation)
        return inner

    return annotation


def _domain_name(node: ast.expr, param: ast.arg, locate: Locator) -> str:
    name = dotted_name(node)
    type_name = name.rsplit(".", 1)[-1] if name else None
    if type_name is None or not is_domain(type_name):
        raise UnsupportedParameterType(
            f"parameter {param.arg!r} has unsupported type `{ast.unparse(node)}`; "
            f"expected one of {', '.join(registered_domains())}",
            locate(node),
        )
    return type_name


def _check_bound(
    bound: ast.expr, param: ast.arg, forbidden: frozenset[str], locate: Locator
) -> str:
    for node in ast.walk(bound):
        if isinstance(node, ast.Name) and (
            node.id in forbidden or node.id.startswith(RESERVED_PREFIX)
        ):
            raise MalformedParameter(
                f"range of {param.arg!r} refers to `{node.id}`; bounds are evaluated "
                "before any parameter exists",
                locate(node),
            )
    return ast.unparse(bound)


def _parse_param(
    param: ast.arg,
    index: int,
    forbidden: frozenset[str],
    locate: Locator,
    *,
    keyword_only: bool = False,
) -> ParamSpec:
    if param.arg.startswith(RESERVED_PREFIX):
        raise MalformedParameter(
            f"parameter names starting with {RESERVED_PREFIX!r} are reserved",
            locate(param),
        )

    annotation = _annotation_expr(param, locate)

    if not isinstance(annotation, ast.Subscript):
        return ParamSpec(
            name=param.arg,
            index=index,
            type_name=_domain_name(annotation, param, locate),
            keyword_only=keyword_only,
            location=locate(param),
        )

    type_name = _domain_name(annotation.value, param, locate)
    bounds = annotation.slice
    if not isinstance(bounds, ast.Slice):
        raise IncompleteRange(
            f"range of {param.arg!r} must be written {type_name}[start:end]",
            locate(bounds),
        )
    if bounds.lower is None or bounds.upper is None:
        raise IncompleteRange(
            f"range of {param.arg!r} needs both a start and an end, "
            f"got {type_name}[{ast.unparse(bounds)}]",
            locate(annotation),
        )
    if bounds.step is not None:
        raise IncompleteRange(
            f"range of {param.arg!r} takes no step, got {type_name}[{ast.unparse(bounds)}]",
            locate(bounds.step),
        )

    return ParamSpec(
        name=param.arg,
        index=index,
        type_name=type_name,
        range=RangeSpec(
            start=_check_bound(bounds.lower, param, forbidden, locate),
            end=_check_bound(bounds.upper, param, forbidden, locate),
        ),
        keyword_only=keyword_only,
        location=locate(param),
    )


# ── Entry Points ─────────────────────────────────────────────────────────────


def parse_fuzz_definition(
    func: ast.FunctionDef | ast.AsyncFunctionDef,
    decorator: ast.Call,
    *,
    locate: Locator | None = None,
    default_runs: int = DEFAULT_RUNS,
    seed_factory: Callable[[], int] = default_seed,
    method: bool = False,
) -> TestSpec:
    """
    Validate a ``@fuzz(...)`` definition and return its TestSpec.

    ``default_runs`` and ``seed_factory`` supply the values used when the
    decorator omits ``runs`` / ``seed``. The seed factory is only called
    when needed, so an explicit seed never consumes wall-clock time.
    ``method`` marks a definition written in a class body, which is rejected:
    the harness takes no arguments and could not receive ``self``.
    """
    locate = locate or Locator("<unknown>")
    _reject_async(func, locate)
    _reject_method(func, locate, method)
    fixture_type = _fixture_arg(decorator, locate, required=True)
    assert fixture_type is not None

    options: dict[str, int] = {}
    for keyword in decorator.keywords:
        if keyword.arg is None:
            raise UnknownOption(
                "`**` options are not supported; pass runs= and seed= directly",
                locate(keyword),
            )
        if keyword.arg not in _OPTIONS:
            raise UnknownOption(
                f"unknown option {keyword.arg!r}; expected 'runs' or 'seed'",
                locate(keyword),
            )
        options[keyword.arg] = _int_literal(keyword.value, keyword.arg, locate)

    positional = _positional_params(func)
    if not positional:
        raise MissingFixtureParameter(
            f"{func.name!r} must take the fixture as its first parameter",
            locate(func),
        )
    _reject_variadics(func, locate)

    generated = [*positional[1:], *func.args.kwonlyargs]
    defaulted = {a.arg for a in positional[len(positional) - len(func.args.defaults):]}
    defaulted |= {
        a.arg for a, d in zip(func.args.kwonlyargs, func.args.kw_defaults) if d is not None
    }

    keyword_only = {a.arg for a in func.args.kwonlyargs}
    forbidden = frozenset(a.arg for a in (*positional, *func.args.kwonlyargs))
    parameters: list[ParamSpec] = []
    for index, param in enumerate(generated):
        if param.arg in defaulted:
            raise MalformedParameter(
                f"generated parameter {param.arg!r} cannot have a default value",
                locate(param),
            )
        parameters.append(
            _parse_param(
                param, index, forbidden, locate, keyword_only=param.arg in keyword_only
            )
        )

    seed_explicit = "seed" in options
    spec = TestSpec(
        name=func.name,
        fixture_type=fixture_type,
        run_count=options.get("runs", default_runs),
        base_seed=options["seed"] if seed_explicit else seed_factory(),
        seed_explicit=seed_explicit,
        parameters=tuple(parameters),
        location=locate(func),
    )
    logger.debug(
        "fuzz_definition_parsed",
        test=spec.name,
        fixture=spec.fixture_type,
        runs=spec.run_count,
        seed=spec.base_seed,
        parameters=len(spec.parameters),
    )
    return spec


def parse_fixture_test_definition(
    func: ast.FunctionDef | ast.AsyncFunctionDef,
    decorator: ast.Call,
    *,
    locate: Locator | None = None,
    method: bool = False,
) -> FixtureTestSpec:
    """Validate a ``@fixture_test(...)`` definition (no generation, one run)."""
    locate = locate or Locator("<unknown>")
    _reject_async(func, locate)
    _reject_method(func, locate, method)
    fixture_type = _fixture_arg(decorator, locate, required=False)

    if decorator.keywords:
        keyword = decorator.keywords[0]
        raise UnknownOption(
            f"fixture_test takes no options, got {keyword.arg or '**'}=",
            locate(keyword),
        )

    _reject_variadics(func, locate)
    params = [*_positional_params(func), *func.args.kwonlyargs]

    if fixture_type is None:
        if params:
            raise MalformedParameter(
                f"{func.name!r} has no fixture, so it cannot take parameters",
                locate(params[0]),
            )
        return FixtureTestSpec(name=func.name, location=locate(func))

    if not params:
        raise MissingFixtureParameter(
            f"{func.name!r} must take exactly one parameter (the fixture)",
            locate(func),
        )
    if len(params) > 1:
        raise MalformedParameter(
            f"{func.name!r} must take exactly one parameter (the fixture); "
            "use @fuzz for generated inputs",
            locate(params[1]),
        )

    return FixtureTestSpec(
        name=func.name,
        fixture_type=fixture_type,
        fixture_param=params[0].arg,
        location=locate(func),
    )


def iter_definitions(tree: ast.AST) -> Iterator[DecoratedDefinition]:
    """
    Yield every function decorated with ``fuzz(...)`` or ``fixture_test(...)``,
    in source order, including ones nested in functions and classes.
    """
    yield from _walk_scope(tree, in_class=False)


def _walk_scope(node: ast.AST, *, in_class: bool) -> Iterator[DecoratedDefinition]:
    for child in ast.iter_child_nodes(node):
        if isinstance(child, (ast.FunctionDef, ast.AsyncFunctionDef)):
            for decorator in child.decorator_list:
                kind = callee_name(decorator)
                if kind not in DECORATOR_KINDS:
                    continue
                assert isinstance(decorator, ast.Call)
                yield DecoratedDefinition(kind, child, decorator, method=in_class)
                break
            yield from _walk_scope(child, in_class=False)
        elif isinstance(child, ast.ClassDef):
            yield from _walk_scope(child, in_class=True)
        else:
            yield from _walk_scope(child, in_class=in_class)


def find_decorator(func: ast.FunctionDef | ast.AsyncFunctionDef, kind: str) -> ast.Call | None:
    """The ``kind(...)`` decorator call on ``func``, if there is one."""
    calls = [d for d in func.decorator_list if isinstance(d, ast.Call)]
    for call in calls:
        if callee_name(call) == kind:
            return call
    # Imported under another name: accept it when it is the only call decorator
    if len(calls) == 1:
        return calls[0]
    return None
