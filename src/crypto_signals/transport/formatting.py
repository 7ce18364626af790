"""Markdown message bodies for chat replies."""

from __future__ import annotations

from typing import Mapping, Sequence

from crypto_signals.strategy.decision_engine import DecisionEngine
from crypto_signals.strategy.models import Alert, Analysis, AnalysisGrid

INDICATOR_NAMES = (
    "Moving Averages (MA)",
    "Exponential Moving Averages (EMA)",
    "Relative Strength Index (RSI)",
    "MACD",
    "Bollinger Bands",
    "Fibonacci Retracement",
    "Market Structure",
    "Smart Money Concepts",
)


def welcome_text(symbols: Sequence[str]) -> str:
    return (
        "Welcome to the Crypto Decision Bot! I provide trading signals for "
        f"{', '.join(symbols)} based on technical analysis."
    )


def help_text(symbols: Sequence[str], timeframes: Sequence[str]) -> str:
    lines = [
        "*Crypto Decision Bot Commands:*",
        "",
        "/start - Start the bot and subscribe to signals",
        "/stop - Unsubscribe from market alerts",
        "/signals - Get aggregated trading signals for all coins",
        "/details <SYMBOL> - Get detailed analysis for a specific coin",
        "/help - Show this help message",
        "",
        f"Supported coins: {', '.join(symbols)}",
        f"Timeframes analyzed: {', '.join(timeframes)}",
        "",
        "The bot analyzes multiple technical indicators including:",
    ]
    lines.extend(f"- {name}" for name in INDICATOR_NAMES)
    return "\n".join(lines)


def signals_summary(
    results: AnalysisGrid, symbols: Sequence[str], timeframes: Sequence[str]
) -> str:
    parts = ["*Crypto Trading Signals*\n\n"]
    for symbol in symbols:
        aggregated = DecisionEngine.aggregate(
            symbol, results.get(symbol, {}), total_timeframes=len(timeframes)
        )
        parts.append(f"*{symbol.upper()}*\n")
        parts.append(f"Aggregated: *{aggregated.decision.value}*\n")
        parts.append(
            f"Timeframes: {aggregated.valid_timeframe_count}/"
            f"{aggregated.total_timeframe_count} valid\n\n"
        )
    parts.append("\nFor detailed analysis per timeframe, use /details <SYMBOL>")
    return "".join(parts)


def details_text(
    symbol: str, analyses: Mapping[str, Analysis], signal_limit: int = 3
) -> str:
    parts = [f"*{symbol} Detailed Analysis*\n\n"]
    for timeframe, analysis in analyses.items():
        confidence = analysis.confidence.value if analysis.confidence else "N/A"
        parts.append(f"_{timeframe}_: {analysis.decision.value} ({confidence})\n")
        if analysis.signals:
            shown = ", ".join(tag.value for tag in analysis.signals[:signal_limit])
            parts.append(f"Signals: {shown}\n")
        if analysis.current_price:
            parts.append(f"Price: ${analysis.current_price:.2f}\n")
        parts.append("\n")
    return "".join(parts)


def alert_text(alerts: Sequence[Alert]) -> str:
    lines = ["*Market Alert*", ""]
    for alert in alerts:
        analysis = alert.analysis
        confidence = analysis.confidence.value if analysis.confidence else "N/A"
        lines.append(
            f"{alert.instrument} ({alert.timeframe}): {analysis.decision.value}"
            f" - Confidence: {confidence}"
        )
    return "\n".join(lines)
