from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Mapping

import yaml
from dotenv import load_dotenv
from pydantic import ValidationError

from crypto_signals.config.models import AppConfig, MarketConfig, default_config

logger = logging.getLogger(__name__)

CONFIG_ENV_PREFIX = "SIGNALS_"


class ConfigError(Exception):
    """Raised when a configuration file cannot be read or validated."""


def load_config(
    path: str | Path | None = None,
    env_prefix: str = CONFIG_ENV_PREFIX,
    use_dotenv: bool = True,
) -> AppConfig:
    if use_dotenv:
        load_dotenv()
    config = default_config()
    if path:
        payload = _read_file(Path(path))
        try:
            config = AppConfig.model_validate(payload)
        except ValidationError as exc:
            raise ConfigError(f"Invalid config file {path}: {exc}") from exc
    return _apply_env_overrides(config, env_prefix=env_prefix)


def _read_file(path: Path) -> Mapping[str, Any]:
    if not path.exists():
        raise ConfigError(f"Config file not found: {path}")
    suffix = path.suffix.lower()
    if suffix in {".yaml", ".yml"}:
        payload = yaml.safe_load(path.read_text(encoding="utf-8"))
    elif suffix == ".json":
        with path.open("r", encoding="utf-8") as fh:
            payload = json.load(fh)
    else:
        raise ConfigError(f"Unsupported config format: {path.suffix}")
    return payload or {}


def _apply_env_overrides(config: AppConfig, env_prefix: str) -> AppConfig:
    market_updates: dict[str, Any] = {}
    symbols = _get_env_list(f"{env_prefix}SYMBOLS")
    if symbols:
        market_updates["symbols"] = symbols
    timeframes = _get_env_list(f"{env_prefix}TIMEFRAMES")
    if timeframes:
        market_updates["timeframes"] = timeframes

    data_updates: dict[str, Any] = {}
    source = os.getenv(f"{env_prefix}DATA_SOURCE")
    if source in {"mock", "binance"}:
        data_updates["source"] = source
    elif source:
        logger.warning("Ignoring unknown data source %r", source)

    sched_updates: dict[str, Any] = {}
    interval = _get_env_int(f"{env_prefix}INTERVAL_SECONDS")
    if interval is not None:
        sched_updates["interval_seconds"] = interval

    telegram_updates: dict[str, Any] = {}
    token = os.getenv("TELEGRAM_TOKEN")
    if token:
        telegram_updates["token"] = token

    updates: dict[str, Any] = {}
    if market_updates:
        updates["market"] = MarketConfig(**{**config.market.model_dump(), **market_updates})
    if data_updates:
        updates["data"] = config.data.model_copy(update=data_updates)
    if sched_updates:
        updates["scheduler"] = config.scheduler.model_copy(update=sched_updates)
    if telegram_updates:
        updates["telegram"] = config.telegram.model_copy(update=telegram_updates)
    log_level = os.getenv(f"{env_prefix}LOG_LEVEL")
    if log_level:
        updates["log_level"] = log_level.upper()
    return config.model_copy(update=updates) if updates else config


def _get_env_list(key: str) -> list[str]:
    raw = os.getenv(key)
    if not raw:
        return []
    return [item.strip() for item in raw.split(",") if item.strip()]


def _get_env_int(key: str) -> int | None:
    raw = os.getenv(key)
    if raw is None:
        return None
    try:
        return int(raw)
    except ValueError:
        return None
