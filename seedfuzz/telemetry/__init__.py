"""SeedFuzz telemetry: structured logging setup."""

from seedfuzz.telemetry.logging import setup_logging

__all__ = ["setup_logging"]
