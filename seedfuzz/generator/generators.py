"""
SeedFuzz -- Seeded Value Generators

Each generator owns an independent numpy ``Generator`` (PCG64) seeded from
a single 64-bit integer. Given the same kind, seed and bounds, two
generators yield the same sequence for the same sequence of calls, in any
process.

  RangeGenerator       uniform over [low, high)
  FullRangeGenerator   uniform over the whole domain, both ends included

Both are one implementation over IntegerDomain; the domain's dtype picks
the sampling width.
"""

from __future__ import annotations

import operator
from abc import ABC, abstractmethod
from typing import Any, Generic, TypeVar

import numpy as np

from seedfuzz.generator.domains import IntegerDomain, get_domain
from seedfuzz.generator.errors import DegenerateRangeError, InvalidRangeError
from seedfuzz.generator.seeds import validate_seed

T = TypeVar("T")


class InputGenerator(ABC, Generic[T]):
    """Produces one value of type T per call. Each call advances the stream."""

    @abstractmethod
    def generate(self) -> T:
        ...


def _resolve_domain(domain: IntegerDomain | str) -> IntegerDomain:
    return get_domain(domain) if isinstance(domain, str) else domain


def _as_bound(value: Any, label: str) -> int:
    if isinstance(value, bool):
        raise InvalidRangeError(f"range {label} must be an integer, got {value!r}")
    try:
        return operator.index(value)
    except TypeError:
        raise InvalidRangeError(
            f"range {label} must be an integer, got {type(value).__name__} {value!r}"
        ) from None


class _SeededIntegerGenerator(InputGenerator[int]):
    """Shared state: domain, validated seed, and the private random stream."""

    def __init__(self, domain: IntegerDomain | str, seed: int) -> None:
        self._domain = _resolve_domain(domain)
        self._seed = validate_seed(seed)
        self._rng = np.random.default_rng(self._seed)

    @property
    def domain(self) -> IntegerDomain:
        return self._domain

    @property
    def seed(self) -> int:
        return self._seed

    def _draw(self, low: int, last: int) -> int:
        # Inclusive upper bound so the full 64-bit domain never needs 2**64
        return int(self._rng.integers(low, last, endpoint=True, dtype=self._domain.dtype))


class RangeGenerator(_SeededIntegerGenerator):
    """
    Uniform draws from the half-open range [low, high).

    ``low == high`` is an empty range and raises DegenerateRangeError.
    Reversed bounds, or bounds outside the domain, raise InvalidRangeError.
    """

    def __init__(
        self,
        domain: IntegerDomain | str,
        seed: int,
        low: int,
        high: int,
    ) -> None:
        super().__init__(domain, seed)
        lo = _as_bound(low, "start")
        hi = _as_bound(high, "end")

        if lo == hi:
            raise DegenerateRangeError(
                f"empty range [{lo}, {hi}) for {self._domain.name}: start must be below end"
            )
        if lo > hi:
            raise InvalidRangeError(
                f"reversed range [{lo}, {hi}) for {self._domain.name}"
            )
        if lo < self._domain.min or hi > self._domain.max + 1:
            raise InvalidRangeError(
                f"range [{lo}, {hi}) does not fit {self._domain.name} "
                f"[{self._domain.min}, {self._domain.max}]"
            )

        self._low = lo
        self._high = hi

    @property
    def low(self) -> int:
        return self._low

    @property
    def high(self) -> int:
        return self._high

    def generate(self) -> int:
        return self._draw(self._low, self._high - 1)

    def __repr__(self) -> str:
        return (
            f"RangeGenerator({self._domain.name}, seed={self._seed}, "
            f"[{self._low}, {self._high}))"
        )


class FullRangeGenerator(_SeededIntegerGenerator):
    """Uniform draws from every value of the domain, min and max included."""

    def generate(self) -> int:
        return self._draw(self._domain.min, self._domain.max)

    def __repr__(self) -> str:
        return f"FullRangeGenerator({self._domain.name}, seed={self._seed})"
