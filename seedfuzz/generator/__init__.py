"""
SeedFuzz -- Seeded Value Generator Library

Public API:
  InputGenerator       — abstract ``generate() -> T`` source
  RangeGenerator       — uniform over [low, high) of an integer domain
  FullRangeGenerator   — uniform over an entire integer domain
  IntegerDomain        — named integer type backed by a numpy dtype
  register_domain      — add a new sampleable integer width
  derive_seed          — per-parameter seed: base + index, wrapping at 2**64
"""

from seedfuzz.generator.domains import (
    IntegerDomain,
    RangedDomain,
    get_domain,
    i8,
    i16,
    i32,
    i64,
    is_domain,
    register_domain,
    registered_domains,
    u8,
    u16,
    u32,
    u64,
)
from seedfuzz.generator.errors import (
    DegenerateRangeError,
    GeneratorError,
    InvalidRangeError,
    InvalidSeedError,
    UnknownDomainError,
)
from seedfuzz.generator.generators import (
    FullRangeGenerator,
    InputGenerator,
    RangeGenerator,
)
from seedfuzz.generator.seeds import U64_MAX, default_seed, derive_seed, validate_seed

__all__ = [
    "DegenerateRangeError",
    "FullRangeGenerator",
    "GeneratorError",
    "InputGenerator",
    "IntegerDomain",
    "InvalidRangeError",
    "InvalidSeedError",
    "RangeGenerator",
    "RangedDomain",
    "U64_MAX",
    "UnknownDomainError",
    "default_seed",
    "derive_seed",
    "get_domain",
    "i8",
    "i16",
    "i32",
    "i64",
    "is_domain",
    "register_domain",
    "registered_domains",
    "u8",
    "u16",
    "u32",
    "u64",
    "validate_seed",
]
