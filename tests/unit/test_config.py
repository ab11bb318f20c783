"""Unit tests for decree.config environment overrides."""

import pytest

from decree import config
from decree.parameters import DEFAULT_MAX_DECISIONS, DEFAULT_SEED, DEFAULT_TRACE_DIR

ENV_VARS = ["DECREE_SCENARIO_PATH", "DECREE_SEED", "DECREE_MAX_DECISIONS", "DECREE_TRACE_DIR"]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


class TestDefaults:
    def test_defaults_without_environment(self) -> None:
        assert config.get_scenario_path() is None
        assert config.get_seed() == DEFAULT_SEED
        assert config.get_max_decisions() == DEFAULT_MAX_DECISIONS
        assert config.get_trace_dir() == DEFAULT_TRACE_DIR

    def test_blank_values_fall_back(self, monkeypatch) -> None:
        monkeypatch.setenv("DECREE_SEED", "  ")
        monkeypatch.setenv("DECREE_SCENARIO_PATH", "")

        assert config.get_seed() == DEFAULT_SEED
        assert config.get_scenario_path() is None


class TestOverrides:
    def test_environment_values(self, monkeypatch) -> None:
        monkeypatch.setenv("DECREE_SCENARIO_PATH", "/tmp/coup.json")
        monkeypatch.setenv("DECREE_SEED", "42")
        monkeypatch.setenv("DECREE_MAX_DECISIONS", "0")
        monkeypatch.setenv("DECREE_TRACE_DIR", "/tmp/traces")

        assert config.get_scenario_path() == "/tmp/coup.json"
        assert config.get_seed() == 42
        assert config.get_max_decisions() == 0
        assert config.get_trace_dir() == "/tmp/traces"

    def test_non_integer_rejected(self, monkeypatch) -> None:
        monkeypatch.setenv("DECREE_SEED", "lucky")
        with pytest.raises(ValueError, match="DECREE_SEED"):
            config.get_seed()

    def test_negative_cap_rejected(self, monkeypatch) -> None:
        monkeypatch.setenv("DECREE_MAX_DECISIONS", "-1")
        with pytest.raises(ValueError, match="DECREE_MAX_DECISIONS"):
            config.get_max_decisions()
