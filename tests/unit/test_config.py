"""
Unit tests for configuration loading and logging setup.
"""

from __future__ import annotations

import logging

import pytest
from pydantic import ValidationError

from seedfuzz.config import LoggingConfig, SeedFuzzConfig, get_config, load_config
from seedfuzz.telemetry.logging import setup_logging


class TestLoadConfig:
    def test_defaults(self):
        config = load_config()
        assert config.harness.default_runs == 256
        assert config.harness.replay_seed is None
        assert config.harness.echo_diagnostics is True
        assert config.logging.level == "WARNING"
        assert config.logging.format == "console"

    def test_missing_file_uses_defaults(self, tmp_path):
        config = load_config(tmp_path / "absent.yaml")
        assert config.harness.default_runs == 256

    def test_yaml_values(self, tmp_path):
        path = tmp_path / "seedfuzz.yaml"
        path.write_text(
            "harness:\n"
            "  default_runs: 32\n"
            "  replay_seed: 99\n"
            "logging:\n"
            "  level: DEBUG\n"
            "  format: json\n"
        )
        config = load_config(path)
        assert config.harness.default_runs == 32
        assert config.harness.replay_seed == 99
        assert config.logging.level == "DEBUG"
        assert config.logging.format == "json"

    def test_empty_yaml(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert load_config(path).harness.default_runs == 256

    def test_environment_overrides_yaml(self, tmp_path, monkeypatch):
        path = tmp_path / "seedfuzz.yaml"
        path.write_text("harness:\n  default_runs: 32\n")
        monkeypatch.setenv("SEEDFUZZ_RUNS", "8")
        monkeypatch.setenv("SEEDFUZZ_LOG_LEVEL", "INFO")
        config = load_config(path)
        assert config.harness.default_runs == 8
        assert config.logging.level == "INFO"

    @pytest.mark.parametrize(("raw", "expected"), [("1700000000", 1700000000), ("0x2a", 42)])
    def test_replay_seed_from_environment(self, monkeypatch, raw, expected):
        monkeypatch.setenv("SEEDFUZZ_SEED", raw)
        assert load_config().harness.replay_seed == expected


class TestValidation:
    def test_negative_runs_rejected(self):
        with pytest.raises(ValidationError):
            SeedFuzzConfig(harness={"default_runs": -1})

    def test_replay_seed_must_fit_64_bits(self):
        with pytest.raises(ValidationError):
            SeedFuzzConfig(harness={"replay_seed": 2**64})

    def test_unknown_log_format_rejected(self):
        with pytest.raises(ValidationError):
            LoggingConfig(format="xml")


class TestGetConfig:
    def test_cached_until_cleared(self, tmp_path, monkeypatch):
        assert get_config() is get_config()

        path = tmp_path / "seedfuzz.yaml"
        path.write_text("harness:\n  default_runs: 3\n")
        monkeypatch.setenv("SEEDFUZZ_CONFIG", str(path))
        assert get_config().harness.default_runs == 256

        get_config.cache_clear()
        assert get_config().harness.default_runs == 3


class TestSetupLogging:
    def test_sets_root_level(self):
        try:
            setup_logging(LoggingConfig(level="DEBUG", format="json"))
            assert logging.getLogger().level == logging.DEBUG
        finally:
            setup_logging(LoggingConfig(level="WARNING"))
        assert logging.getLogger().level == logging.WARNING
