from __future__ import annotations

import argparse
import asyncio
import logging

from crypto_signals.config.loader import load_config
from crypto_signals.config.models import AppConfig
from crypto_signals.data.providers import build_price_source
from crypto_signals.monitoring.logger import AnalysisLogger, ConsoleAlertSink
from crypto_signals.scheduler.orchestrator import AlertOrchestrator
from crypto_signals.sessions.repository import JsonSubscriptionRepository
from crypto_signals.strategy.decision_engine import DecisionEngine
from crypto_signals.transport.telegram_bot import SignalBot

logger = logging.getLogger(__name__)


def build_engine(config: AppConfig) -> DecisionEngine:
    return DecisionEngine.from_config(
        build_price_source(config.data),
        config.indicators,
        fetch_timeout=config.data.fetch_timeout_seconds,
        max_concurrency=config.data.max_concurrency,
    )


async def run_analyze(config: AppConfig, symbol: str, timeframe: str) -> None:
    engine = build_engine(config)
    try:
        analysis = await engine.analyze_one(symbol.upper(), timeframe)
    finally:
        await engine.close()
    AnalysisLogger().log_analysis(analysis)


async def run_scan(config: AppConfig) -> None:
    engine = build_engine(config)
    market = config.market
    try:
        results = await engine.analyze_all(market.symbols, market.timeframes)
    finally:
        await engine.close()
    reporter = AnalysisLogger()
    reporter.log_aggregates(
        [
            engine.aggregate(symbol, results[symbol], total_timeframes=len(market.timeframes))
            for symbol in market.symbols
        ]
    )
    reporter.log_alerts(engine.scan_for_alerts(results))


async def run_bot(config: AppConfig) -> None:
    engine = build_engine(config)
    repository = JsonSubscriptionRepository(config.telegram.sessions_path)
    bot = SignalBot(config, engine, repository)
    orchestrator = AlertOrchestrator(config, engine, sinks=[bot, ConsoleAlertSink()])

    logger.info("Supported coins: %s", ", ".join(config.market.symbols))
    logger.info("Timeframes analyzed: %s", ", ".join(config.market.timeframes))
    application = bot.application
    async with application:
        await application.start()
        await application.updater.start_polling()
        await orchestrator.start()
        logger.info("Crypto Decision Bot is running...")
        try:
            await orchestrator.wait_until_stopped()
        finally:
            await orchestrator.stop()
            await application.updater.stop()
            await application.stop()
            await engine.close()


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Multi-timeframe crypto signal bot")
    parser.add_argument("--config", type=str, help="Path to YAML or JSON config", default=None)
    parser.add_argument(
        "--task", type=str, choices=["analyze", "scan", "bot"], default="analyze"
    )
    parser.add_argument("--symbol", type=str, default="BTC", help="Symbol for --task analyze")
    parser.add_argument("--timeframe", type=str, default="1d", help="Timeframe for --task analyze")
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    config = load_config(args.config)
    logging.basicConfig(
        level=config.log_level,
        format="%(asctime)s %(levelname)s %(name)s - %(message)s",
    )
    if args.task == "analyze":
        asyncio.run(run_analyze(config, args.symbol, args.timeframe))
    elif args.task == "scan":
        asyncio.run(run_scan(config))
    else:
        if not config.telegram.token:
            logger.error("TELEGRAM_TOKEN environment variable is required")
            raise SystemExit(1)
        try:
            asyncio.run(run_bot(config))
        except KeyboardInterrupt:
            logger.info("Shutting down")


if __name__ == "__main__":
    main()
