"""
SeedFuzz — deterministic, seed-reproducible fuzz harnesses for plain Python tests.

    from seedfuzz import fuzz, u8, u32

    @fuzz(CounterTest, runs=50, seed=42)
    def fuzz_increment(ctx, amount: u32[1:100], multiplier: u8):
        ...
"""

from seedfuzz.generator import (
    FullRangeGenerator,
    InputGenerator,
    IntegerDomain,
    RangeGenerator,
    i8,
    i16,
    i32,
    i64,
    register_domain,
    u8,
    u16,
    u32,
    u64,
)
from seedfuzz.harness import (
    DefinitionError,
    FailureReport,
    Fixture,
    FuzzFailure,
    SeedFuzzError,
    fixture_test,
    fuzz,
)

__version__ = "0.1.0"

__all__ = [
    "DefinitionError",
    "FailureReport",
    "Fixture",
    "FullRangeGenerator",
    "FuzzFailure",
    "InputGenerator",
    "IntegerDomain",
    "RangeGenerator",
    "SeedFuzzError",
    "fixture_test",
    "fuzz",
    "i8",
    "i16",
    "i32",
    "i64",
    "register_domain",
    "u8",
    "u16",
    "u32",
    "u64",
]
