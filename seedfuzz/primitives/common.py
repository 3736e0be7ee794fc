"""
SeedFuzz — Common Primitives

Shared base models and source-location types used across the generator
library, the definition parser and the harness code generator.
"""

from __future__ import annotations

from pydantic import BaseModel


# ─── Base Models ──────────────────────────────────────────────────


class SeedFuzzModel(BaseModel):
    """Base model for all SeedFuzz primitives."""

    model_config = {"populate_by_name": True, "from_attributes": True}


class FrozenModel(SeedFuzzModel):
    """Immutable model. Specs are produced once and never mutated."""

    model_config = {
        "populate_by_name": True,
        "from_attributes": True,
        "frozen": True,
    }


class SourceLocation(FrozenModel):
    """Where in a test module a definition (or a piece of one) lives."""

    filename: str = "<unknown>"
    line: int = 0
    column: int = 0   # 1-based, 0 when unknown

    def __str__(self) -> str:
        return f"{self.filename}:{self.line}:{self.column}"
