from __future__ import annotations

from pathlib import Path

import pytest

from core import config_loader
from core.config_loader import SimulationSettings, get_config, get_nested, load_settings

ENV_VARS = list(config_loader.ENV_TO_CFG)

BASE_YAML = """
environment:
  log_level: debug
  log_dir: logs
simulation:
  initial_cash: 5000
  history_length: 20
  tick_interval_seconds: 2
  tick_mode: relative
  seed: 7
  catalog: tracker
backtest:
  days: 10
  delay_seconds: 0.5
  strategies: [momentum]
"""


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for var in ENV_VARS:
        monkeypatch.delenv(var, raising=False)


def write_cfg(tmp_path: Path, text: str = BASE_YAML) -> Path:
    path = tmp_path / "config.yaml"
    path.write_text(text, encoding="utf-8")
    return path


def test_default_config_loads():
    cfg = get_config(config_loader.DEFAULT_CONFIG_PATH)
    assert cfg["simulation"]["tick_mode"] in ("absolute", "relative")
    settings = SimulationSettings.from_config(cfg)
    assert settings.initial_cash == 100_000.0
    assert settings.strategies == ["moving_avg", "momentum", "mean_reversion"]


def test_settings_from_yaml(tmp_path):
    settings = load_settings(write_cfg(tmp_path))
    assert settings.initial_cash == 5000.0
    assert settings.history_length == 20
    assert settings.tick_mode == "relative"
    assert settings.seed == 7
    assert settings.catalog == "tracker"
    assert settings.backtest_days == 10
    assert settings.strategies == ["momentum"]
    assert settings.log_level == "DEBUG"


def test_env_overrides(tmp_path, monkeypatch):
    monkeypatch.setenv("INITIAL_CASH", "250.5")
    monkeypatch.setenv("RANDOM_SEED", "99")
    monkeypatch.setenv("TICK_MODE", "absolute")
    monkeypatch.setenv("BACKTEST_DAYS", "not-a-number")
    settings = load_settings(write_cfg(tmp_path))
    assert settings.initial_cash == 250.5
    assert settings.seed == 99
    assert settings.tick_mode == "absolute"
    assert settings.backtest_days == 10


def test_missing_keys_raise(tmp_path):
    path = write_cfg(tmp_path, "environment:\n  log_level: INFO\n")
    with pytest.raises(ValueError):
        get_config(path)


def test_invalid_tick_mode_raises(tmp_path):
    path = write_cfg(tmp_path, BASE_YAML.replace("tick_mode: relative", "tick_mode: sideways"))
    with pytest.raises(ValueError):
        get_config(path)


def test_invalid_catalog_raises(tmp_path):
    path = write_cfg(tmp_path, BASE_YAML.replace("catalog: tracker", "catalog: crypto"))
    with pytest.raises(ValueError):
        load_settings(path)


def test_get_nested():
    cfg = {"a": {"b": {"c": 1}}}
    assert get_nested(cfg, "a", "b", "c") == 1
    assert get_nested(cfg, "a", "x", default="d") == "d"
