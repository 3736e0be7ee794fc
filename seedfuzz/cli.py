"""
SeedFuzz — command-line code generation tool.

Runs the definition parser and harness generator over test modules without
importing them, so definition errors surface before any test executes.

Usage:
    seedfuzz check tests/test_counter.py tests/test_vault.py
    seedfuzz render tests/test_counter.py --name fuzz_increment
    SEEDFUZZ_SEED=1700000000 seedfuzz render tests/test_counter.py
"""

from __future__ import annotations

import argparse
import ast
import sys
from collections.abc import Iterator
from pathlib import Path

import structlog

from seedfuzz.config import SeedFuzzConfig, load_config
from seedfuzz.generator.seeds import default_seed
from seedfuzz.harness.codegen import render_fixture_test, render_fuzz_harness
from seedfuzz.harness.errors import DefinitionError
from seedfuzz.harness.parser import (
    FUZZ_DECORATOR,
    Locator,
    iter_definitions,
    parse_fixture_test_definition,
    parse_fuzz_definition,
)
from seedfuzz.harness.types import FixtureTestSpec, TestSpec
from seedfuzz.primitives.common import SourceLocation
from seedfuzz.telemetry.logging import setup_logging

logger = structlog.get_logger(system="seedfuzz.cli")


def _parse_file(
    path: Path, config: SeedFuzzConfig
) -> Iterator[TestSpec | FixtureTestSpec | DefinitionError]:
    """Yield a spec, or the error that rejected it, for every definition in ``path``."""
    filename = str(path)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        yield DefinitionError(
            f"cannot read file: {exc.strerror}", SourceLocation(filename=filename)
        )
        return
    try:
        tree = ast.parse(text, filename=filename)
    except SyntaxError as exc:
        yield DefinitionError(
            f"syntax error: {exc.msg}",
            SourceLocation(filename=filename, line=exc.lineno or 0, column=exc.offset or 0),
        )
        return

    harness = config.harness
    replay = harness.replay_seed
    locate = Locator(filename)
    for definition in iter_definitions(tree):
        try:
            if definition.kind == FUZZ_DECORATOR:
                yield parse_fuzz_definition(
                    definition.function,
                    definition.decorator,
                    locate=locate,
                    default_runs=harness.default_runs,
                    seed_factory=(lambda: replay) if replay is not None else default_seed,
                    method=definition.method,
                )
            else:
                yield parse_fixture_test_definition(
                    definition.function,
                    definition.decorator,
                    locate=locate,
                    method=definition.method,
                )
        except DefinitionError as exc:
            yield exc


def _report(exc: DefinitionError) -> None:
    where = f"{exc.location}: " if exc.location is not None else ""
    print(f"{where}error: {exc.message}", file=sys.stderr)


def cmd_check(args: argparse.Namespace, config: SeedFuzzConfig) -> int:
    checked = 0
    errors = 0
    for path in args.files:
        for result in _parse_file(path, config):
            if isinstance(result, DefinitionError):
                _report(result)
                errors += 1
            else:
                checked += 1

    logger.info("definitions_checked", files=len(args.files), valid=checked, errors=errors)
    print(f"{checked} definition(s) valid, {errors} error(s)")
    return 1 if errors else 0


def cmd_render(args: argparse.Namespace, config: SeedFuzzConfig) -> int:
    rendered = 0
    failed = False
    for result in _parse_file(args.file, config):
        if isinstance(result, DefinitionError):
            _report(result)
            failed = True
            continue
        if args.name and result.name != args.name:
            continue

        source = (
            render_fuzz_harness(result)
            if isinstance(result, TestSpec)
            else render_fixture_test(result)
        )
        print(f"# {result.location} {result.name}")
        print(source)
        rendered += 1

    if failed:
        return 1
    if args.name and rendered == 0:
        print(f"error: no definition named {args.name!r} in {args.file}", file=sys.stderr)
        return 1
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="seedfuzz",
        description="Validate and render seeded fuzz harnesses from test definitions.",
    )
    parser.add_argument("--config", type=Path, default=None, help="YAML config file")
    parser.add_argument("--log-level", default=None, help="override logging level")

    sub = parser.add_subparsers(dest="command", required=True)

    check = sub.add_parser("check", help="statically validate every definition")
    check.add_argument("files", nargs="+", type=Path)
    check.set_defaults(handler=cmd_check)

    render = sub.add_parser("render", help="print the generated harness source")
    render.add_argument("file", type=Path)
    render.add_argument("--name", default=None, help="only this definition")
    render.set_defaults(handler=cmd_render)

    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    config = load_config(args.config)
    if args.log_level:
        config.logging.level = args.log_level
    setup_logging(config.logging)

    return int(args.handler(args, config))


if __name__ == "__main__":
    sys.exit(main())
