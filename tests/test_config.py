r"""
Tests for graph_harness.config module.
"""

from pathlib import Path

import pytest

from graph_harness.config import DEFAULT_WORK_DIR, ENV_PREFIX, RunnerConfig, get_env, load_config


class TestRunnerConfig:
    def test_defaults(self):
        config = RunnerConfig()
        assert config.work_dir == DEFAULT_WORK_DIR
        assert config.timeout_seconds == 3600
        assert config.startup_allowance_seconds == 60.0
        assert config.termination_grace_seconds == 2.0
        assert config.drain_timeout_seconds == 10.0
        assert config.log_level == "INFO"


class TestLoadConfig:
    @pytest.fixture(autouse=True)
    def clean_env(self, monkeypatch):
        for name in ("WORK_DIR", "TIMEOUT_SECONDS", "TERMINATION_GRACE_SECONDS", "LOG_LEVEL"):
            monkeypatch.delenv(f"{ENV_PREFIX}{name}", raising=False)

    def test_overrides(self, tmp_path):
        config = load_config(work_dir=str(tmp_path), timeout_seconds=5)
        assert config.work_dir == tmp_path
        assert config.timeout_seconds == 5

    def test_none_override_is_ignored(self):
        assert load_config(timeout_seconds=None).timeout_seconds == 3600

    def test_environment(self, monkeypatch, tmp_path):
        monkeypatch.setenv(f"{ENV_PREFIX}WORK_DIR", str(tmp_path))
        monkeypatch.setenv(f"{ENV_PREFIX}TIMEOUT_SECONDS", "120")
        monkeypatch.setenv(f"{ENV_PREFIX}TERMINATION_GRACE_SECONDS", "0.5")
        config = load_config()
        assert config.work_dir == Path(tmp_path)
        assert config.timeout_seconds == 120
        assert config.termination_grace_seconds == 0.5

    def test_override_beats_environment(self, monkeypatch):
        monkeypatch.setenv(f"{ENV_PREFIX}LOG_LEVEL", "DEBUG")
        assert load_config(log_level="WARNING").log_level == "WARNING"

    def test_invalid_environment_value(self, monkeypatch):
        monkeypatch.setenv(f"{ENV_PREFIX}TIMEOUT_SECONDS", "soon")
        with pytest.raises(ValueError, match="TIMEOUT_SECONDS"):
            load_config()

    def test_unknown_override(self):
        with pytest.raises(ValueError, match="Unknown config option"):
            load_config(retries=3)


class TestGetEnv:
    def test_get_env_not_set(self):
        result = get_env("TEST_NOT_SET")
        assert result is None

    def test_get_env_with_default(self):
        result = get_env("TEST_NOT_SET", default="default_value")
        assert result == "default_value"

    def test_get_env_set(self, monkeypatch):
        monkeypatch.setenv(f"{ENV_PREFIX}TEST_VAR", "test_value")
        result = get_env("TEST_VAR")
        assert result == "test_value"

    def test_env_prefix(self):
        assert ENV_PREFIX == "GRAPH_HARNESS_"
