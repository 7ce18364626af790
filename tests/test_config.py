import json

import pytest

from crypto_signals.config.loader import ConfigError, load_config
from crypto_signals.config.models import DEFAULT_SYMBOLS, DEFAULT_TIMEFRAMES

ENV_KEYS = [
    "SIGNALS_SYMBOLS",
    "SIGNALS_TIMEFRAMES",
    "SIGNALS_DATA_SOURCE",
    "SIGNALS_INTERVAL_SECONDS",
    "SIGNALS_LOG_LEVEL",
    "TELEGRAM_TOKEN",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for key in ENV_KEYS:
        monkeypatch.delenv(key, raising=False)


def test_defaults():
    config = load_config(use_dotenv=False)
    assert config.market.symbols == DEFAULT_SYMBOLS
    assert config.market.timeframes == DEFAULT_TIMEFRAMES
    assert config.indicators.min_history == 20
    assert config.scheduler.interval_seconds == 1800
    assert config.telegram.token is None


def test_yaml_file(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(
        "market:\n  symbols: [BTC, ETH]\n  timeframes: [1d]\n"
        "data:\n  source: binance\n  history_limit: 250\n"
    )
    config = load_config(path, use_dotenv=False)
    assert config.market.symbols == ["BTC", "ETH"]
    assert config.market.timeframes == ["1d"]
    assert config.data.source == "binance"
    assert config.data.history_limit == 250
    assert config.indicators.rsi_period == 14


def test_json_file(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"scheduler": {"interval_seconds": 60}}))
    assert load_config(path, use_dotenv=False).scheduler.interval_seconds == 60


def test_env_overrides(monkeypatch):
    monkeypatch.setenv("SIGNALS_SYMBOLS", "btc, sol")
    monkeypatch.setenv("SIGNALS_INTERVAL_SECONDS", "600")
    monkeypatch.setenv("SIGNALS_LOG_LEVEL", "debug")
    monkeypatch.setenv("TELEGRAM_TOKEN", "123:abc")
    config = load_config(use_dotenv=False)
    assert config.market.symbols == ["BTC", "SOL"]
    assert config.scheduler.interval_seconds == 600
    assert config.log_level == "DEBUG"
    assert config.telegram.token == "123:abc"


def test_bad_env_values_ignored(monkeypatch):
    monkeypatch.setenv("SIGNALS_INTERVAL_SECONDS", "soon")
    monkeypatch.setenv("SIGNALS_DATA_SOURCE", "ftp")
    config = load_config(use_dotenv=False)
    assert config.scheduler.interval_seconds == 1800
    assert config.data.source == "mock"


def test_missing_and_invalid_files(tmp_path):
    with pytest.raises(ConfigError):
        load_config(tmp_path / "absent.yaml", use_dotenv=False)
    ini = tmp_path / "config.ini"
    ini.write_text("[market]")
    with pytest.raises(ConfigError):
        load_config(ini, use_dotenv=False)
    bad = tmp_path / "bad.yaml"
    bad.write_text("data:\n  source: carrier-pigeon\n")
    with pytest.raises(ConfigError):
        load_config(bad, use_dotenv=False)


def test_file_symbols_are_upper_cased(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("market:\n  symbols: [btc, ' eth ']\n")
    assert load_config(path, use_dotenv=False).market.symbols == ["BTC", "ETH"]
