"""
Unit tests for the @fuzz and @fixture_test decorators.

Decorated definitions live inside the test functions so that only the
harness under test is built (and only when that test runs). Range bounds
resolve against this module's globals, hence the module-level constants.
"""

from __future__ import annotations

import inspect
import time

import pytest

from seedfuzz import fixture_test, fuzz, i8, u8, u16, u32
from seedfuzz.config import get_config
from seedfuzz.generator import (
    DegenerateRangeError,
    FullRangeGenerator,
    RangeGenerator,
    derive_seed,
)
from seedfuzz.harness.errors import (
    FuzzFailure,
    InvalidFixture,
    MalformedDecorator,
    MissingFixture,
    SourceUnavailable,
    UnsupportedParameterType,
)
from seedfuzz.harness.fixture import Fixture, check_fixture, resolve_setup

LOW_BOUND = 100
HIGH_BOUND = 110


# ── Helpers ──────────────────────────────────────────────────────────────────


class Counter:
    setups = 0

    def __init__(self, count: int = 0) -> None:
        self.count = count

    @classmethod
    def setup(cls) -> Counter:
        cls.setups += 1
        return cls()

    @classmethod
    def with_count(cls) -> Counter:
        cls.setups += 1
        return cls(count=10)


class NotAFixture:
    pass


class UncallableSetup:
    setup = 3


@pytest.fixture(autouse=True)
def _reset_counter():
    Counter.setups = 0


def _stream(generator, n: int) -> list[int]:
    return [generator.generate() for _ in range(n)]


# ── @fuzz ────────────────────────────────────────────────────────────────────


class TestFuzzDeterminism:
    def test_same_seed_same_values(self):
        runs: list[list[tuple[int, int]]] = []

        for _ in range(2):
            seen: list[tuple[int, int]] = []

            @fuzz(Counter, runs=25, seed=7)
            def check(ctx, a: u8, b: u32[1:1000]):
                seen.append((a, b))

            check()
            runs.append(seen)

        assert runs[0] == runs[1]
        assert len(runs[0]) == 25

    def test_parameter_streams_use_base_plus_index(self):
        seen: list[tuple[int, int]] = []

        @fuzz(Counter, runs=30, seed=42)
        def check(ctx, x: u8[10:20], y: u32):
            seen.append((x, y))

        check()
        xs = _stream(RangeGenerator(u8, derive_seed(42, 0), 10, 20), 30)
        ys = _stream(FullRangeGenerator(u32, derive_seed(42, 1)), 30)
        assert seen == list(zip(xs, ys))

    def test_keyword_only_parameters_generated(self):
        seen: list[tuple[int, int]] = []

        @fuzz(Counter, runs=5, seed=3)
        def check(ctx, a: u8, *, b: i8[-4:4]):
            seen.append((a, b))

        check()
        assert len(seen) == 5
        assert all(-4 <= b < 4 for _, b in seen)

    def test_module_constants_as_bounds(self):
        seen: list[int] = []

        @fuzz(Counter, runs=200, seed=1)
        def check(ctx, x: u16[LOW_BOUND:HIGH_BOUND]):
            seen.append(x)

        check()
        assert set(seen) <= set(range(LOW_BOUND, HIGH_BOUND))


class TestFuzzExecution:
    def test_fresh_fixture_every_iteration(self):
        contexts: list[int] = []

        @fuzz(Counter, runs=8, seed=5)
        def check(ctx, amount: u8):
            assert ctx.count == 0
            ctx.count += amount
            contexts.append(id(ctx))

        check()
        assert Counter.setups == 8
        assert len(contexts) == 8

    def test_zero_runs_is_a_no_op(self):
        called: list[int] = []

        @fuzz(Counter, runs=0, seed=5)
        def check(ctx, amount: u8):
            called.append(amount)

        check()
        assert called == []
        assert Counter.setups == 0

    def test_range_scenario_seed_42(self):
        @fuzz(Counter, runs=3, seed=42)
        def check(ctx, x: u8[10:20]):
            assert x < 15

        assert _stream(RangeGenerator(u8, 42, 10, 20), 3) == [15, 19, 17]

        with pytest.raises(FuzzFailure) as exc_info:
            check()
        assert exc_info.value.report.iteration == 0
        assert exc_info.value.report.values == [("x", 15)]
        assert Counter.setups == 1

    def test_fail_fast_stops_at_first_failure(self):
        calls: list[tuple[int, int]] = []

        @fuzz(Counter, runs=50, seed=9)
        def check(ctx, a: u8, b: u16):
            calls.append((a, b))
            if len(calls) == 3:
                raise RuntimeError("third iteration breaks")

        with pytest.raises(FuzzFailure) as exc_info:
            check()

        report = exc_info.value.report
        assert len(calls) == 3
        assert Counter.setups == 3
        assert report.test_name == "check"
        assert report.seed == 9
        assert report.iteration == 2
        assert report.run_count == 50
        assert report.values == [("a", calls[2][0]), ("b", calls[2][1])]
        assert report.error == "RuntimeError: third iteration breaks"
        assert isinstance(exc_info.value.__cause__, RuntimeError)

    def test_failure_is_an_assertion_error(self):
        @fuzz(Counter, runs=5, seed=1)
        def check(ctx, a: u8):
            assert a > 255

        with pytest.raises(AssertionError):
            check()

    def test_diagnostics_printed_to_stderr(self, capsys):
        values = _stream(RangeGenerator(u8, 11, 10, 20), 1)

        @fuzz(Counter, runs=4, seed=11)
        def check(ctx, x: u8[10:20]):
            raise ValueError("always")

        with pytest.raises(FuzzFailure):
            check()

        err = capsys.readouterr().err
        assert "Fuzz test failed!\n  Seed: 11\n  Iteration: 0\n" in err
        assert f"  x: {values[0]}" in err

    def test_diagnostics_can_be_silenced(self, tmp_path, monkeypatch, capsys):
        config = tmp_path / "seedfuzz.yaml"
        config.write_text("harness:\n  echo_diagnostics: false\n")
        monkeypatch.setenv("SEEDFUZZ_CONFIG", str(config))
        get_config.cache_clear()

        @fuzz(Counter, runs=2, seed=1)
        def check(ctx, x: u8):
            raise ValueError("quiet")

        with pytest.raises(FuzzFailure) as exc_info:
            check()
        assert "Fuzz test failed!" not in capsys.readouterr().err
        assert exc_info.value.report.seed == 1
        assert exc_info.value.report.iteration == 0

    def test_base_exceptions_are_not_captured(self):
        @fuzz(Counter, runs=3, seed=1)
        def check(ctx, x: u8):
            raise KeyboardInterrupt

        with pytest.raises(KeyboardInterrupt):
            check()

    def test_degenerate_range_raised_before_any_setup(self):
        @fuzz(Counter, runs=3, seed=1)
        def check(ctx, x: u8[5:5]):
            pass

        with pytest.raises(DegenerateRangeError):
            check()
        assert Counter.setups == 0


class TestFuzzSeeds:
    def test_default_seed_is_wall_clock(self):
        before = int(time.time())

        @fuzz(Counter, runs=1)
        def check(ctx, x: u8):
            pass

        after = int(time.time())
        spec = check.__fuzz_spec__
        assert spec.seed_explicit is False
        assert before <= spec.base_seed <= after

    def test_replay_seed_from_environment(self, monkeypatch):
        monkeypatch.setenv("SEEDFUZZ_SEED", "1234")
        get_config.cache_clear()

        @fuzz(Counter, runs=1)
        def check(ctx, x: u8):
            pass

        assert check.__fuzz_spec__.base_seed == 1234

    def test_explicit_seed_beats_replay_seed(self, monkeypatch):
        monkeypatch.setenv("SEEDFUZZ_SEED", "1234")
        get_config.cache_clear()

        @fuzz(Counter, runs=1, seed=5)
        def check(ctx, x: u8):
            pass

        assert check.__fuzz_spec__.base_seed == 5

    def test_default_runs_from_environment(self, monkeypatch):
        monkeypatch.setenv("SEEDFUZZ_RUNS", "6")
        get_config.cache_clear()

        @fuzz(Counter, seed=5)
        def check(ctx, x: u8):
            pass

        assert check.__fuzz_spec__.run_count == 6
        check()
        assert Counter.setups == 6


class TestFuzzHarnessShape:
    def test_harness_takes_no_arguments(self):
        @fuzz(Counter, runs=1, seed=1)
        def check_shape(ctx, x: u8):
            """Docstring survives."""

        assert check_shape.__name__ == "check_shape"
        assert check_shape.__doc__ == "Docstring survives."
        assert check_shape.__module__ == __name__
        assert not hasattr(check_shape, "__wrapped__")
        assert inspect.signature(check_shape).parameters == {}

    def test_exposes_spec_body_and_source(self):
        @fuzz(Counter, runs=4, seed=2)
        def check(ctx, x: u8):
            pass

        assert check.__fuzz_spec__.parameter_names == ("x",)
        assert check.__fuzz_body__.__name__ == "check"
        assert check.__harness_source__.startswith("def _sf_build_check(")

    def test_marks_applied_below_are_kept(self):
        @fuzz(Counter, runs=1, seed=1)
        @pytest.mark.slow
        def check(ctx, x: u8):
            pass

        assert [m.name for m in check.pytestmark] == ["slow"]

    def test_location_points_into_this_file(self):
        @fuzz(Counter, runs=1, seed=1)
        def check(ctx, x: u8):
            pass

        location = check.__fuzz_spec__.location
        assert location.filename.endswith("test_decorators.py")
        assert location.line == inspect.getsourcelines(check.__fuzz_body__)[1] + 1


class TestFuzzDefinitionErrors:
    def test_missing_fixture(self):
        with pytest.raises(MissingFixture):

            @fuzz()
            def check(ctx, x: u8):
                pass

    def test_fixture_without_setup(self):
        with pytest.raises(InvalidFixture, match="setup"):

            @fuzz(NotAFixture, runs=1, seed=1)
            def check(ctx, x: u8):
                pass

    def test_unsupported_type_located_in_this_file(self):
        with pytest.raises(UnsupportedParameterType) as exc_info:

            @fuzz(Counter, runs=1, seed=1)
            def check(ctx, x: float):
                pass

        assert exc_info.value.location.filename.endswith("test_decorators.py")

    def test_requires_decorator_syntax(self):
        def check(ctx, x: u8):
            pass

        with pytest.raises(MalformedDecorator):
            fuzz(Counter)(check)

    def test_source_must_be_a_function_definition(self):
        with pytest.raises(SourceUnavailable):
            fuzz(Counter)(lambda ctx: None)

    def test_uncallable_setup_rejected(self):
        with pytest.raises(InvalidFixture, match="setup"):

            @fuzz(UncallableSetup, runs=1, seed=1)
            def check(ctx, x: u8):
                pass

    def test_class_body_definition_rejected(self):
        with pytest.raises(MalformedDecorator, match="class body"):

            class TestGrouped:
                @fuzz(Counter, runs=1, seed=1)
                def test_method(self, x: u8):
                    pass

    def test_nested_definition_is_not_a_method(self):
        class Holder:
            @staticmethod
            def build():
                @fuzz(Counter, runs=2, seed=1)
                def check(ctx, x: u8):
                    pass

                return check

        Holder.build()()
        assert Counter.setups == 2


# ── @fixture_test ────────────────────────────────────────────────────────────


class TestFixtureTest:
    def test_runs_once_with_fresh_fixture(self):
        seen: list[int] = []

        @fixture_test(Counter)
        def check(ctx):
            seen.append(ctx.count)

        check()
        assert seen == [0]
        assert Counter.setups == 1

    def test_custom_setup_callable(self):
        seen: list[int] = []

        @fixture_test(Counter.with_count)
        def check(ctx):
            seen.append(ctx.count)

        check()
        assert seen == [10]

    def test_without_fixture(self):
        called: list[bool] = []

        @fixture_test()
        def check():
            called.append(True)

        check()
        assert called == [True]
        assert Counter.setups == 0

    def test_failure_propagates_unchanged(self):
        @fixture_test(Counter)
        def check(ctx):
            raise ValueError("plain")

        with pytest.raises(ValueError, match="plain"):
            check()

    def test_rejects_type_without_setup(self):
        with pytest.raises(InvalidFixture):

            @fixture_test(NotAFixture)
            def check(ctx):
                pass

    def test_class_body_definition_rejected(self):
        with pytest.raises(MalformedDecorator, match="class body"):

            class TestGrouped:
                @fixture_test(Counter)
                def test_method(self):
                    pass


class TestFixtureContract:
    def test_setup_types_satisfy_the_protocol(self):
        assert isinstance(Counter, Fixture)
        assert not isinstance(NotAFixture, Fixture)
        check_fixture(Counter)

    @pytest.mark.parametrize("fixture", [NotAFixture, UncallableSetup, None, 3])
    def test_check_fixture_rejects(self, fixture):
        with pytest.raises(InvalidFixture, match="no callable setup"):
            check_fixture(fixture)

    def test_resolve_setup(self):
        assert resolve_setup(Counter)().count == 0
        assert resolve_setup(Counter.with_count)().count == 10
        with pytest.raises(InvalidFixture):
            resolve_setup(UncallableSetup)
