from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Sequence

from crypto_signals.config.models import AppConfig
from crypto_signals.strategy.decision_engine import DecisionEngine
from crypto_signals.strategy.models import Alert

logger = logging.getLogger(__name__)


class AlertSink(ABC):
    @abstractmethod
    async def deliver(self, alerts: Sequence[Alert]) -> None:
        raise NotImplementedError


class AlertOrchestrator:
    """Runs ``analyze_all`` + ``scan_for_alerts`` on a fixed interval.

    Each cycle is its own task, so a slow cycle never delays the next tick.
    """

    def __init__(
        self,
        config: AppConfig,
        engine: DecisionEngine,
        sinks: Sequence[AlertSink] = (),
    ) -> None:
        self._config = config
        self._engine = engine
        self._sinks = list(sinks)
        self._ticker: asyncio.Task | None = None
        self._cycles: set[asyncio.Task] = set()
        self._running = False

    @property
    def running(self) -> bool:
        return self._running

    async def start(self) -> None:
        if self._running:
            return
        self._running = True
        self._ticker = asyncio.create_task(self._tick_loop(), name="alert-ticker")

    async def stop(self) -> None:
        self._running = False
        tasks = [*self._cycles]
        if self._ticker is not None:
            tasks.append(self._ticker)
        for task in tasks:
            task.cancel()
        try:
            await asyncio.gather(*tasks, return_exceptions=True)
        finally:
            self._cycles.clear()
            self._ticker = None

    async def wait_until_stopped(self) -> None:
        if self._ticker is None:
            return
        try:
            await asyncio.gather(self._ticker, return_exceptions=True)
        except asyncio.CancelledError:
            pass

    async def _tick_loop(self) -> None:
        scheduling = self._config.scheduler
        await asyncio.sleep(scheduling.initial_delay_seconds)
        while self._running:
            task = asyncio.create_task(self._guarded_cycle(), name="alert-cycle")
            self._cycles.add(task)
            task.add_done_callback(self._cycles.discard)
            await asyncio.sleep(scheduling.interval_seconds)

    async def _guarded_cycle(self) -> None:
        try:
            await self.run_cycle()
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            logger.exception("Alert cycle failed: %s", exc)

    async def run_cycle(self) -> list[Alert]:
        logger.info("Running periodic analysis...")
        market = self._config.market
        analyses = await self._engine.analyze_all(market.symbols, market.timeframes)
        alerts = self._engine.scan_for_alerts(analyses)
        if not alerts:
            logger.info("No high-confidence signals this cycle")
            return alerts
        logger.info("Delivering %d alert(s) to %d sink(s)", len(alerts), len(self._sinks))
        for sink in self._sinks:
            try:
                await sink.deliver(alerts)
            except Exception as exc:
                logger.exception("Alert sink %s failed: %s", type(sink).__name__, exc)
        return alerts
