"""
SeedFuzz -- Integer Domains

A domain is a named, uniformly sampleable integer type backed by a numpy
integer dtype. The dtype supplies both the bounds (``np.iinfo``) and the
sampling width, so every generator works over every registered domain with
a single implementation.

Built in: u8 u16 u32 u64 and i8 i16 i32 i64. New widths are one call:

    register_domain("usize", np.uintp)

Domains double as annotations in test definitions. ``u8`` means the full
domain; ``u8[10:20]`` restricts it to the half-open range [10, 20).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import numpy as np

from seedfuzz.generator.errors import UnknownDomainError


@dataclass(frozen=True)
class IntegerDomain:
    """The full value space of one integer type."""

    name: str
    dtype: np.dtype[Any]

    @property
    def min(self) -> int:
        return int(np.iinfo(self.dtype).min)

    @property
    def max(self) -> int:
        return int(np.iinfo(self.dtype).max)

    @property
    def bits(self) -> int:
        return int(np.iinfo(self.dtype).bits)

    @property
    def signed(self) -> bool:
        return self.dtype.kind == "i"

    def contains(self, value: int) -> bool:
        return self.min <= value <= self.max

    def __getitem__(self, bounds: slice) -> RangedDomain:
        # Only a marker so annotations evaluate; the definition parser does
        # the validation, statically, from source.
        if isinstance(bounds, slice):
            return RangedDomain(self, bounds.start, bounds.stop)
        return RangedDomain(self, None, bounds)

    def __repr__(self) -> str:
        return self.name


@dataclass(frozen=True)
class RangedDomain:
    """Annotation marker for ``domain[start:stop]``."""

    domain: IntegerDomain
    start: Any
    stop: Any

    def __repr__(self) -> str:
        return f"{self.domain.name}[{self.start!r}:{self.stop!r}]"


# ── Registry ─────────────────────────────────────────────────────────────────

_DOMAINS: dict[str, IntegerDomain] = {}


def register_domain(name: str, dtype: Any) -> IntegerDomain:
    """
    Register an integer domain under ``name`` and return it.

    Re-registering a name with the same dtype is a no-op; with a different
    dtype it is an error.
    """
    if not name.isidentifier():
        raise ValueError(f"domain name must be an identifier, got {name!r}")
    resolved = np.dtype(dtype)
    if resolved.kind not in ("u", "i"):
        raise TypeError(f"domain {name!r} needs an integer dtype, got {resolved}")

    existing = _DOMAINS.get(name)
    if existing is not None:
        if existing.dtype != resolved:
            raise ValueError(
                f"domain {name!r} already registered as {existing.dtype}, not {resolved}"
            )
        return existing

    domain = IntegerDomain(name=name, dtype=resolved)
    _DOMAINS[name] = domain
    return domain


def get_domain(name: str) -> IntegerDomain:
    try:
        return _DOMAINS[name]
    except KeyError:
        raise UnknownDomainError(name) from None


def is_domain(name: str) -> bool:
    return name in _DOMAINS


def registered_domains() -> tuple[str, ...]:
    return tuple(_DOMAINS)


u8 = register_domain("u8", np.uint8)
u16 = register_domain("u16", np.uint16)
u32 = register_domain("u32", np.uint32)
u64 = register_domain("u64", np.uint64)
i8 = register_domain("i8", np.int8)
i16 = register_domain("i16", np.int16)
i32 = register_domain("i32", np.int32)
i64 = register_domain("i64", np.int64)
