"""Rule-based decisions per timeframe, across timeframes and across markets."""

from __future__ import annotations

import asyncio
import logging
from collections import Counter
from typing import Dict, Iterable, List, Mapping, Sequence

from crypto_signals.config.models import IndicatorConfig
from crypto_signals.data.provider_base import DataUnavailable, PriceSource
from crypto_signals.indicators.engine import IndicatorEngine, IndicatorReadings
from crypto_signals.strategy.models import (
    AggregatedDecision,
    Alert,
    Analysis,
    AnalysisGrid,
    Confidence,
    Decision,
    Polarity,
    SignalTag,
)
from crypto_signals.structure.analyzer import analyze_structure

logger = logging.getLogger(__name__)

HIGH_CONFIDENCE_COUNT = 4


def build_signals(price: float, readings: IndicatorReadings) -> tuple[SignalTag, ...]:
    """Evaluate the rule groups in order: trend, momentum, MACD, bands."""
    signals: List[SignalTag] = []

    if readings.ma20 is not None and readings.ma50 is not None:
        signals.append(
            SignalTag.BULLISH_TREND if readings.ma20 > readings.ma50 else SignalTag.BEARISH_TREND
        )

    if readings.rsi is not None:
        if readings.rsi < 30:
            signals.append(SignalTag.OVERSOLD)
        elif readings.rsi > 70:
            signals.append(SignalTag.OVERBOUGHT)
        else:
            signals.append(SignalTag.NEUTRAL_RSI)

    # Compares the EMAs directly rather than the MACD line.
    if readings.macd is not None:
        ema_fast, ema_slow = readings.ema12, readings.ema26
        if ema_fast is not None and ema_slow is not None and ema_fast > ema_slow:
            signals.append(SignalTag.BULLISH_MACD)
        else:
            signals.append(SignalTag.BEARISH_MACD)

    bands = readings.bollinger
    if bands is not None:
        if price > bands.upper:
            signals.append(SignalTag.RESISTANCE_TOUCH)
        elif price < bands.lower:
            signals.append(SignalTag.SUPPORT_TOUCH)
        else:
            signals.append(SignalTag.WITHIN_BANDS)

    return tuple(signals)


def count_polarity(signals: Iterable[SignalTag]) -> tuple[int, int]:
    polarities = Counter(tag.polarity for tag in signals)
    return polarities[Polarity.BULLISH], polarities[Polarity.BEARISH]


def decide(bullish_count: int, bearish_count: int) -> tuple[Decision, Confidence]:
    if bullish_count > bearish_count + 1:
        return Decision.BUY, _confidence_for(bullish_count)
    if bearish_count > bullish_count + 1:
        return Decision.SELL, _confidence_for(bearish_count)
    return Decision.HOLD, Confidence.LOW


def _confidence_for(winning_count: int) -> Confidence:
    return Confidence.HIGH if winning_count >= HIGH_CONFIDENCE_COUNT else Confidence.MEDIUM


class DecisionEngine:
    def __init__(
        self,
        price_source: PriceSource,
        indicator_engine: IndicatorEngine | None = None,
        min_history: int = 20,
        swing_window: int = 5,
        fetch_timeout: float | None = None,
        max_concurrency: int = 8,
    ) -> None:
        self._source = price_source
        self._indicators = indicator_engine or IndicatorEngine()
        self._min_history = min_history
        self._swing_window = swing_window
        self._fetch_timeout = fetch_timeout
        self._max_concurrency = max(max_concurrency, 1)

    @classmethod
    def from_config(
        cls,
        price_source: PriceSource,
        config: IndicatorConfig,
        fetch_timeout: float | None = None,
        max_concurrency: int = 8,
    ) -> "DecisionEngine":
        return cls(
            price_source,
            indicator_engine=IndicatorEngine.from_config(config),
            min_history=config.min_history,
            swing_window=config.swing_window,
            fetch_timeout=fetch_timeout,
            max_concurrency=max_concurrency,
        )

    def evaluate(self, instrument: str, timeframe: str, prices: Sequence[float]) -> Analysis:
        if not prices or len(prices) < self._min_history:
            return _insufficient(instrument, timeframe, "Not enough historical data")

        current_price = prices[-1]
        readings = self._indicators.compute(prices)
        signals = build_signals(current_price, readings)
        decision, confidence = decide(*count_polarity(signals))
        return Analysis(
            instrument=instrument,
            timeframe=timeframe,
            decision=decision,
            confidence=confidence,
            current_price=current_price,
            signals=signals,
            indicators=readings,
            structure=analyze_structure(prices, self._swing_window),
        )

    async def analyze_one(self, instrument: str, timeframe: str) -> Analysis:
        try:
            prices = await asyncio.wait_for(
                self._source.fetch(instrument, timeframe), timeout=self._fetch_timeout
            )
        except DataUnavailable as exc:
            logger.warning("No data for %s %s: %s", instrument, timeframe, exc.reason)
            return _insufficient(instrument, timeframe, exc.reason)
        except asyncio.TimeoutError:
            logger.warning("Timed out fetching %s %s", instrument, timeframe)
            return _insufficient(instrument, timeframe, "Price source timed out")
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            logger.exception("Price source failed for %s %s: %s", instrument, timeframe, exc)
            return _insufficient(instrument, timeframe, "Price source failed")
        return self.evaluate(instrument, timeframe, prices)

    async def analyze_all(
        self, instruments: Sequence[str], timeframes: Sequence[str]
    ) -> Dict[str, Dict[str, Analysis]]:
        semaphore = asyncio.Semaphore(self._max_concurrency)

        async def _bounded(instrument: str, timeframe: str) -> Analysis:
            async with semaphore:
                return await self.analyze_one(instrument, timeframe)

        pairs = [(instrument, timeframe) for instrument in instruments for timeframe in timeframes]
        analyses = await asyncio.gather(*(_bounded(i, tf) for i, tf in pairs))

        results: Dict[str, Dict[str, Analysis]] = {instrument: {} for instrument in instruments}
        for (instrument, timeframe), analysis in zip(pairs, analyses):
            results[instrument][timeframe] = analysis
        return results

    async def close(self) -> None:
        await self._source.aclose()

    @staticmethod
    def aggregate(
        instrument: str,
        analyses_by_timeframe: Mapping[str, Analysis],
        total_timeframes: int | None = None,
    ) -> AggregatedDecision:
        """Majority vote; anything short of a strict plurality is HOLD."""
        votes = Counter(analysis.decision for analysis in analyses_by_timeframe.values())
        buys, sells, holds = votes[Decision.BUY], votes[Decision.SELL], votes[Decision.HOLD]
        if buys > sells and buys > holds:
            decision = Decision.BUY
        elif sells > buys and sells > holds:
            decision = Decision.SELL
        else:
            decision = Decision.HOLD
        valid = sum(1 for analysis in analyses_by_timeframe.values() if analysis.is_valid)
        total = total_timeframes if total_timeframes is not None else len(analyses_by_timeframe)
        return AggregatedDecision(
            instrument=instrument,
            decision=decision,
            valid_timeframe_count=valid,
            total_timeframe_count=total,
        )

    @staticmethod
    def scan_for_alerts(all_analyses: AnalysisGrid) -> List[Alert]:
        return [
            Alert(instrument=instrument, timeframe=timeframe, analysis=analysis)
            for instrument, by_timeframe in all_analyses.items()
            for timeframe, analysis in by_timeframe.items()
            if analysis.confidence is Confidence.HIGH
        ]

    @staticmethod
    def group_alerts(alerts: Iterable[Alert]) -> Dict[str, List[Alert]]:
        grouped: Dict[str, List[Alert]] = {}
        for alert in alerts:
            grouped.setdefault(alert.instrument, []).append(alert)
        return grouped


def _insufficient(instrument: str, timeframe: str, reason: str) -> Analysis:
    return Analysis(
        instrument=instrument,
        timeframe=timeframe,
        decision=Decision.INSUFFICIENT_DATA,
        reason=reason,
    )
