"""SeedFuzz shared primitives."""

from seedfuzz.primitives.common import FrozenModel, SeedFuzzModel, SourceLocation

__all__ = ["FrozenModel", "SeedFuzzModel", "SourceLocation"]
