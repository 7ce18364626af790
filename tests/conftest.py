import pytest

from crypto_signals.data.providers import StaticPriceSource
from crypto_signals.strategy.decision_engine import DecisionEngine
from crypto_signals.strategy.models import Analysis, Confidence, Decision


def make_analysis(instrument="BTC", timeframe="1d", decision=Decision.HOLD, confidence=None):
    if confidence is None and decision is not Decision.INSUFFICIENT_DATA:
        confidence = Confidence.LOW
    return Analysis(instrument=instrument, timeframe=timeframe, decision=decision, confidence=confidence)


def rising_then_falling(length=60):
    """Oldest 15 samples rise (RSI 100), the rest fall steadily."""
    head = [100.0 + i for i in range(15)]
    tail = [114.0 - 2 * j for j in range(1, length - 14)]
    return head + tail


def falling_then_rising(length=60):
    """Oldest 15 samples fall (RSI 0), the rest rise steadily."""
    head = [200.0 - i for i in range(15)]
    tail = [186.0 + 2 * j for j in range(1, length - 14)]
    return head + tail


@pytest.fixture
def ascending_20():
    return [float(i) for i in range(1, 21)]


@pytest.fixture
def static_engine():
    def _build(series, **kwargs):
        return DecisionEngine(StaticPriceSource(series), **kwargs)

    return _build
