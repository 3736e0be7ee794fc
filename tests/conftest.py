"""
Shared test setup: quiet structured logging and a fresh config per test.
"""

from __future__ import annotations

import pytest

from seedfuzz.config import LoggingConfig, get_config
from seedfuzz.telemetry.logging import setup_logging


def pytest_configure(config):
    # Before collection: module-level @fuzz definitions log while they compile
    setup_logging(LoggingConfig(level="WARNING"))


@pytest.fixture(autouse=True)
def _fresh_config(monkeypatch):
    for var in ("SEEDFUZZ_CONFIG", "SEEDFUZZ_RUNS", "SEEDFUZZ_SEED", "SEEDFUZZ_LOG_LEVEL"):
        monkeypatch.delenv(var, raising=False)
    get_config.cache_clear()
    yield
    get_config.cache_clear()


@pytest.fixture(autouse=True)
def _restore_logging():
    # The CLI reconfigures logging against the (captured) stderr of its test
    yield
    setup_logging(LoggingConfig(level="WARNING"))
