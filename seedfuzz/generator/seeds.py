"""
SeedFuzz -- Seed Handling

Base seeds are unsigned 64-bit values. Each generated parameter gets its own
stream seeded with ``base_seed + index`` (wrapping), where ``index`` is the
parameter's position among the generated parameters.
"""

from __future__ import annotations

import operator
import time

from seedfuzz.generator.errors import InvalidSeedError

U64_MAX = 2**64 - 1
_U64_MASK = U64_MAX


def validate_seed(seed: int) -> int:
    """Return ``seed`` as a plain int, or raise InvalidSeedError."""
    if isinstance(seed, bool):
        raise InvalidSeedError(f"seed must be an integer, got {seed!r}")
    try:
        value = operator.index(seed)
    except TypeError:
        raise InvalidSeedError(f"seed must be an integer, got {seed!r}") from None
    if not 0 <= value <= U64_MAX:
        raise InvalidSeedError(f"seed must be in [0, 2**64), got {value}")
    return value


def derive_seed(base_seed: int, index: int) -> int:
    """Seed for the generated parameter at ``index``. Wraps at 2**64."""
    return (validate_seed(base_seed) + index) & _U64_MASK


def default_seed() -> int:
    """Wall-clock seed (Unix seconds). Not reproducible; report it on failure."""
    return int(time.time())
