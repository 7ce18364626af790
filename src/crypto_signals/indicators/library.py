"""Indicator calculation helpers built on top of pandas.

Every function returns ``None`` when the series is shorter than the
indicator's minimum input length.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Dict, Sequence

import pandas as pd

FIBONACCI_RATIOS = (0.236, 0.382, 0.5, 0.618, 0.786)


@dataclass(frozen=True, slots=True)
class BollingerBands:
    upper: float
    middle: float
    lower: float


@dataclass(frozen=True, slots=True)
class MacdReading:
    macd: float
    # No MACD history is retained, so these stay unavailable.
    signal: float | None = None
    histogram: float | None = None


@dataclass(frozen=True, slots=True)
class FibonacciLevels:
    level_236: float
    level_382: float
    level_500: float
    level_618: float
    level_786: float

    def as_dict(self) -> Dict[str, float]:
        return asdict(self)


def _as_series(prices: Sequence[float]) -> pd.Series:
    return pd.Series(list(prices), dtype="float64")


def _check_period(period: int) -> None:
    if period < 1:
        raise ValueError(f"period must be positive, got {period}")


def moving_average(prices: Sequence[float], period: int) -> float | None:
    _check_period(period)
    if len(prices) < period:
        return None
    return float(_as_series(prices).iloc[-period:].mean())


def exponential_moving_average(prices: Sequence[float], period: int) -> float | None:
    """EMA seeded with the first price and smoothed over the full history."""
    _check_period(period)
    if len(prices) < period:
        return None
    ema = _as_series(prices).ewm(span=period, adjust=False).mean()
    return float(ema.iloc[-1])


def rsi(prices: Sequence[float], period: int = 14) -> float | None:
    """RSI over the oldest ``period + 1`` samples of the series."""
    _check_period(period)
    if len(prices) < period + 1:
        return None
    deltas = _as_series(prices).iloc[: period + 1].diff().iloc[1:]
    avg_gain = float(deltas.clip(lower=0).sum()) / period
    avg_loss = float(-deltas.clip(upper=0).sum()) / period
    if avg_loss == 0:
        return 100.0
    rs = avg_gain / avg_loss
    return 100 - (100 / (1 + rs))


def macd(
    prices: Sequence[float], fast: int = 12, slow: int = 26, signal: int = 9
) -> MacdReading | None:
    _check_period(signal)
    if len(prices) < slow:
        return None
    fast_ema = exponential_moving_average(prices, fast)
    slow_ema = exponential_moving_average(prices, slow)
    if fast_ema is None or slow_ema is None:
        return None
    return MacdReading(macd=fast_ema - slow_ema)


def bollinger_bands(
    prices: Sequence[float], period: int = 20, std_dev: float = 2
) -> BollingerBands | None:
    _check_period(period)
    if len(prices) < period:
        return None
    window = _as_series(prices).iloc[-period:]
    middle = float(window.mean())
    std = float(window.std(ddof=0))
    return BollingerBands(
        upper=middle + std_dev * std,
        middle=middle,
        lower=middle - std_dev * std,
    )


def fibonacci_levels(high: float, low: float) -> FibonacciLevels:
    diff = high - low
    return FibonacciLevels(*(high - diff * ratio for ratio in FIBONACCI_RATIOS))
