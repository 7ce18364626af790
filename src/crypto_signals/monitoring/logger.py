"""Console rendering of analyses and alerts using Rich."""

from __future__ import annotations

from typing import Sequence

from rich.console import Console
from rich.table import Table

from crypto_signals.scheduler.orchestrator import AlertSink
from crypto_signals.strategy.models import (
    AggregatedDecision,
    Alert,
    Analysis,
    Decision,
)


def _fmt(value: float | None, digits: int = 2) -> str:
    return "n/a" if value is None else f"{value:.{digits}f}"


class AnalysisLogger:
    _DECISION_STYLES = {
        Decision.BUY: "green",
        Decision.SELL: "red",
        Decision.HOLD: "yellow",
        Decision.INSUFFICIENT_DATA: "dim",
    }

    def __init__(self, console: Console | None = None) -> None:
        self._console = console or Console()

    def log_analysis(self, analysis: Analysis) -> None:
        style = self._DECISION_STYLES[analysis.decision]
        table = Table(title=f"{analysis.instrument} ({analysis.timeframe})", show_lines=True)
        table.add_column("Field")
        table.add_column("Value")
        table.add_row("Decision", f"[{style}]{analysis.decision.value}[/{style}]")
        if not analysis.is_valid:
            table.add_row("Reason", analysis.reason)
            self._console.print(table)
            return
        table.add_row("Confidence", analysis.confidence.value if analysis.confidence else "n/a")
        table.add_row("Price", _fmt(analysis.current_price))
        table.add_row("Signals", ", ".join(tag.value for tag in analysis.signals) or "-")
        readings = analysis.indicators
        if readings is not None:
            table.add_row("MA20 / MA50", f"{_fmt(readings.ma20)} / {_fmt(readings.ma50)}")
            table.add_row("EMA12 / EMA26", f"{_fmt(readings.ema12)} / {_fmt(readings.ema26)}")
            table.add_row("RSI", _fmt(readings.rsi))
            table.add_row("MACD", _fmt(readings.macd.macd if readings.macd else None, 4))
            bands = readings.bollinger
            if bands is not None:
                table.add_row(
                    "Bollinger",
                    f"{_fmt(bands.lower)} / {_fmt(bands.middle)} / {_fmt(bands.upper)}",
                )
        if analysis.structure is not None:
            table.add_row(
                "Structure",
                f"{len(analysis.structure.swings)} swings, "
                f"{len(analysis.structure.order_blocks)} order blocks",
            )
        self._console.print(table)

    def log_aggregates(self, aggregates: Sequence[AggregatedDecision]) -> None:
        table = Table(title="Aggregated Signals", show_lines=True)
        table.add_column("Symbol")
        table.add_column("Decision")
        table.add_column("Valid timeframes")
        for item in aggregates:
            style = self._DECISION_STYLES[item.decision]
            table.add_row(
                item.instrument,
                f"[{style}]{item.decision.value}[/{style}]",
                f"{item.valid_timeframe_count}/{item.total_timeframe_count}",
            )
        self._console.print(table)

    def log_alerts(self, alerts: Sequence[Alert]) -> None:
        if not alerts:
            self._console.print("[bold cyan]No high-confidence alerts[/bold cyan]")
            return
        table = Table(title="Market Alert", show_lines=True)
        table.add_column("Symbol")
        table.add_column("Timeframe")
        table.add_column("Decision")
        for alert in alerts:
            table.add_row(alert.instrument, alert.timeframe, alert.analysis.decision.value)
        self._console.print(table)


class ConsoleAlertSink(AlertSink):
    def __init__(self, reporter: AnalysisLogger | None = None) -> None:
        self._reporter = reporter or AnalysisLogger()

    async def deliver(self, alerts: Sequence[Alert]) -> None:
        self._reporter.log_alerts(alerts)
