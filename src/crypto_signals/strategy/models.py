"""Value objects produced by the decision engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Mapping

from crypto_signals.indicators.engine import IndicatorReadings
from crypto_signals.structure.analyzer import StructureReport


class Decision(str, Enum):
    BUY = "BUY"
    SELL = "SELL"
    HOLD = "HOLD"
    INSUFFICIENT_DATA = "INSUFFICIENT_DATA"


class Confidence(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


class Polarity(str, Enum):
    BULLISH = "bullish"
    BEARISH = "bearish"
    NEUTRAL = "neutral"


class SignalTag(str, Enum):
    BULLISH_TREND = "BULLISH_TREND"
    BEARISH_TREND = "BEARISH_TREND"
    OVERSOLD = "OVERSOLD"
    OVERBOUGHT = "OVERBOUGHT"
    NEUTRAL_RSI = "NEUTRAL_RSI"
    BULLISH_MACD = "BULLISH_MACD"
    BEARISH_MACD = "BEARISH_MACD"
    RESISTANCE_TOUCH = "RESISTANCE_TOUCH"
    SUPPORT_TOUCH = "SUPPORT_TOUCH"
    WITHIN_BANDS = "WITHIN_BANDS"

    @property
    def polarity(self) -> Polarity:
        return _TAG_POLARITY.get(self, Polarity.NEUTRAL)


_TAG_POLARITY: Dict[SignalTag, Polarity] = {
    SignalTag.BULLISH_TREND: Polarity.BULLISH,
    SignalTag.BULLISH_MACD: Polarity.BULLISH,
    SignalTag.OVERSOLD: Polarity.BULLISH,
    SignalTag.BEARISH_TREND: Polarity.BEARISH,
    SignalTag.BEARISH_MACD: Polarity.BEARISH,
    SignalTag.OVERBOUGHT: Polarity.BEARISH,
}


@dataclass(frozen=True, slots=True)
class Analysis:
    instrument: str
    timeframe: str
    decision: Decision
    confidence: Confidence | None = None
    current_price: float | None = None
    signals: tuple[SignalTag, ...] = field(default_factory=tuple)
    indicators: IndicatorReadings | None = None
    structure: StructureReport | None = None
    reason: str = ""

    @property
    def is_valid(self) -> bool:
        return self.decision is not Decision.INSUFFICIENT_DATA


@dataclass(frozen=True, slots=True)
class AggregatedDecision:
    instrument: str
    decision: Decision
    valid_timeframe_count: int
    total_timeframe_count: int


@dataclass(frozen=True, slots=True)
class Alert:
    instrument: str
    timeframe: str
    analysis: Analysis


AnalysisGrid = Mapping[str, Mapping[str, Analysis]]
