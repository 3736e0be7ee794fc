"""
SeedFuzz -- Harness Runtime

The small surface generated harness code calls into. Generated source
refers to everything here through a single ``_sf_rt`` binding, so it never
depends on what the test module happens to import.
"""

from __future__ import annotations

import sys
from collections.abc import Callable, Sequence
from typing import Any, NoReturn

import structlog

from seedfuzz.config import get_config
from seedfuzz.generator.domains import get_domain as domain
from seedfuzz.generator.generators import FullRangeGenerator, RangeGenerator
from seedfuzz.generator.seeds import derive_seed
from seedfuzz.harness.errors import FuzzFailure
from seedfuzz.harness.types import FailureReport, IterationOutcome

logger = structlog.get_logger(system="seedfuzz.harness.runtime")

__all__ = [
    "FullRangeGenerator",
    "RangeGenerator",
    "derive_seed",
    "domain",
    "iterations",
    "raise_failure",
    "run_finished",
    "run_isolated",
    "run_started",
]

_PASSED = IterationOutcome(failed=False)


def iterations(run_count: int) -> range:
    """Zero-based iteration indices, immune to a module-level `range`."""
    return range(run_count)


def run_isolated(body: Callable[..., Any], /, *args: Any, **kwargs: Any) -> IterationOutcome:
    """
    Run one iteration of the body and turn any Exception into an outcome.

    Non-Exception BaseExceptions (KeyboardInterrupt, SystemExit, test
    runner skip/exit signals) are not failures of the body and propagate.
    """
    try:
        body(*args, **kwargs)
    except Exception as exc:
        return IterationOutcome(failed=True, error=exc)
    return _PASSED


def raise_failure(
    outcome: IterationOutcome,
    *,
    test_name: str,
    seed: int,
    iteration: int,
    run_count: int,
    values: Sequence[tuple[str, int]],
) -> NoReturn:
    """Report the failing iteration, then raise FuzzFailure chained to the body's error."""
    error = outcome.error
    report = FailureReport(
        test_name=test_name,
        seed=seed,
        iteration=iteration,
        run_count=run_count,
        values=list(values),
        error=f"{type(error).__name__}: {error}" if error is not None else "",
    )

    if get_config().harness.echo_diagnostics:
        print(report.render(), file=sys.stderr, flush=True)

    logger.error(
        "fuzz_iteration_failed",
        test=test_name,
        seed=seed,
        iteration=iteration,
        runs=run_count,
        values=dict(values),
        error=report.error,
    )
    raise FuzzFailure(report) from error


def run_started(test_name: str, seed: int, run_count: int) -> None:
    logger.debug("fuzz_run_started", test=test_name, seed=seed, runs=run_count)


def run_finished(test_name: str, seed: int, run_count: int) -> None:
    logger.debug("fuzz_run_passed", test=test_name, seed=seed, runs=run_count)
