"""Configuration models for the signal bot."""

from __future__ import annotations

from typing import List, Literal

from pydantic import BaseModel, Field, field_validator

DEFAULT_SYMBOLS = [
    "BTC",
    "ETH",
    "SUI",
    "AVAX",
    "ASTER",
    "MOVE",
    "KAS",
    "SOL",
    "MINA",
    "ZEC",
    "XMR",
    "HYPE",
]
DEFAULT_TIMEFRAMES = ["5m", "15m", "30m", "4h", "1d", "3d", "1w", "1M"]


class MarketConfig(BaseModel):
    symbols: List[str] = Field(default_factory=lambda: list(DEFAULT_SYMBOLS))
    timeframes: List[str] = Field(default_factory=lambda: list(DEFAULT_TIMEFRAMES))

    @field_validator("symbols")
    @classmethod
    def normalise_symbols(cls, symbols: List[str]) -> List[str]:
        # Chat commands look symbols up in upper case.
        return [symbol.strip().upper() for symbol in symbols]


class IndicatorConfig(BaseModel):
    ma_fast: int = 20
    ma_slow: int = 50
    ema_fast: int = 12
    ema_slow: int = 26
    macd_signal: int = 9
    rsi_period: int = 14
    bollinger_period: int = 20
    bollinger_std: float = 2.0
    swing_window: int = 5
    min_history: int = 20  # below this no indicator is computed


class DataConfig(BaseModel):
    source: Literal["mock", "binance"] = "mock"
    base_url: str = "https://api.binance.com"
    quote_asset: str = "USDT"
    history_limit: int = 100
    timeout_seconds: float = 10.0
    retry_attempts: int = 3
    fetch_timeout_seconds: float = 30.0
    max_concurrency: int = 8
    seed: int | None = None


class SchedulerConfig(BaseModel):
    initial_delay_seconds: float = 300
    interval_seconds: float = 1800


class TelegramConfig(BaseModel):
    token: str | None = None
    sessions_path: str = "data.json"
    details_signal_limit: int = 3


class AppConfig(BaseModel):
    market: MarketConfig = Field(default_factory=MarketConfig)
    indicators: IndicatorConfig = Field(default_factory=IndicatorConfig)
    data: DataConfig = Field(default_factory=DataConfig)
    scheduler: SchedulerConfig = Field(default_factory=SchedulerConfig)
    telegram: TelegramConfig = Field(default_factory=TelegramConfig)
    log_level: str = "INFO"


def default_config() -> AppConfig:
    return AppConfig()
