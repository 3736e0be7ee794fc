"""
SeedFuzz -- Generator Precondition Errors

Raised at generator construction, never on draw. A generator that could
not be built correctly must not exist, so a bad range or seed fails loudly
before the first iteration instead of hanging or yielding a fixed value.
"""

from __future__ import annotations


class GeneratorError(ValueError):
    """Base for generator construction failures."""


class InvalidSeedError(GeneratorError):
    """Seed is not an integer in [0, 2**64)."""


class InvalidRangeError(GeneratorError):
    """Range bounds are not integers, are reversed, or fall outside the domain."""


class DegenerateRangeError(InvalidRangeError):
    """Range has zero width (``min == max``): there is nothing to draw."""


class UnknownDomainError(KeyError):
    """No integer domain is registered under the requested name."""
