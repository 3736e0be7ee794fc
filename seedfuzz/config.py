"""
SeedFuzz — Configuration System

All configuration is Pydantic-validated and loaded from:
1. A YAML file (defaults), pointed to by ``--config`` or SEEDFUZZ_CONFIG
2. Environment variables (overrides)

Only ambient behaviour lives here. Anything a test definition states
explicitly (``runs=``, ``seed=``) always wins over configuration.
"""

from __future__ import annotations

import functools
import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_U64_MAX = 2**64 - 1

# ─── Sub-configs ──────────────────────────────────────────────────


class HarnessConfig(BaseModel):
    default_runs: int = Field(default=256, ge=0)
    # Replaces the wall-clock default for definitions without seed=
    replay_seed: int | None = Field(default=None, ge=0, le=_U64_MAX)
    echo_diagnostics: bool = True  # print the failure report to stderr; false opts out


class LoggingConfig(BaseModel):
    level: str = "WARNING"
    format: str = "console"  # "console" | "json"

    @field_validator("format")
    @classmethod
    def _check_format(cls, v: str) -> str:
        if v not in ("console", "json"):
            raise ValueError(f"logging format must be 'console' or 'json', got {v!r}")
        return v


# ─── Root Config ──────────────────────────────────────────────────


class SeedFuzzConfig(BaseSettings):
    """
    Root configuration. Loads from YAML, overridable by env vars.
    """

    model_config = SettingsConfigDict(
        env_prefix="SEEDFUZZ_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    harness: HarnessConfig = Field(default_factory=HarnessConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


def load_config(config_path: str | Path | None = None) -> SeedFuzzConfig:
    """
    Load configuration from YAML file, then apply environment variable overrides.
    """
    raw: dict[str, Any] = {}

    if config_path:
        path = Path(config_path)
        if path.exists():
            with open(path) as f:
                raw = yaml.safe_load(f) or {}

    # Short-form overrides for the knobs people reach for from a shell
    if runs := os.environ.get("SEEDFUZZ_RUNS"):
        raw.setdefault("harness", {})["default_runs"] = int(runs)
    if seed := os.environ.get("SEEDFUZZ_SEED"):
        raw.setdefault("harness", {})["replay_seed"] = int(seed, 0)
    if level := os.environ.get("SEEDFUZZ_LOG_LEVEL"):
        raw.setdefault("logging", {})["level"] = level

    return SeedFuzzConfig(**raw)


@functools.lru_cache(maxsize=1)
def get_config() -> SeedFuzzConfig:
    """Process-wide config, loaded once. Call ``get_config.cache_clear()`` to reload."""
    return load_config(os.environ.get("SEEDFUZZ_CONFIG"))
