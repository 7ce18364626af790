from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Sequence

from crypto_signals.config.models import IndicatorConfig
from crypto_signals.indicators import library
from crypto_signals.indicators.library import BollingerBands, FibonacciLevels, MacdReading


@dataclass(frozen=True, slots=True)
class IndicatorReadings:
    ma20: float | None
    ma50: float | None
    rsi: float | None
    ema12: float | None
    ema26: float | None
    bollinger: BollingerBands | None
    macd: MacdReading | None
    fibonacci: FibonacciLevels | None = None

    def as_dict(self) -> Dict[str, Any]:
        return {
            "ma20": self.ma20,
            "ma50": self.ma50,
            "rsi": self.rsi,
            "ema12": self.ema12,
            "ema26": self.ema26,
            "bb": self.bollinger,
            "macd": self.macd,
            "fibonacci": self.fibonacci,
        }


@dataclass(slots=True)
class IndicatorEngine:
    ma_windows: tuple[int, int] = (20, 50)
    ema_windows: tuple[int, int] = (12, 26)
    macd_signal: int = 9
    rsi_period: int = 14
    bollinger_period: int = 20
    bollinger_std: float = 2.0

    @classmethod
    def from_config(cls, config: IndicatorConfig) -> "IndicatorEngine":
        return cls(
            ma_windows=(config.ma_fast, config.ma_slow),
            ema_windows=(config.ema_fast, config.ema_slow),
            macd_signal=config.macd_signal,
            rsi_period=config.rsi_period,
            bollinger_period=config.bollinger_period,
            bollinger_std=config.bollinger_std,
        )

    def compute(self, prices: Sequence[float]) -> IndicatorReadings:
        ma_fast, ma_slow = self.ma_windows
        ema_fast, ema_slow = self.ema_windows
        fibonacci = library.fibonacci_levels(max(prices), min(prices)) if prices else None
        return IndicatorReadings(
            ma20=library.moving_average(prices, ma_fast),
            ma50=library.moving_average(prices, ma_slow),
            rsi=library.rsi(prices, self.rsi_period),
            ema12=library.exponential_moving_average(prices, ema_fast),
            ema26=library.exponential_moving_average(prices, ema_slow),
            bollinger=library.bollinger_bands(
                prices, self.bollinger_period, self.bollinger_std
            ),
            macd=library.macd(prices, ema_fast, ema_slow, self.macd_signal),
            fibonacci=fibonacci,
        )
