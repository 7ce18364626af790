import asyncio
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest
from telegram.error import NetworkError

from conftest import falling_then_rising, make_analysis
from crypto_signals.config.models import AppConfig, MarketConfig
from crypto_signals.data.providers import StaticPriceSource
from crypto_signals.sessions.repository import InMemorySubscriptionRepository, Subscription
from crypto_signals.strategy.decision_engine import DecisionEngine
from crypto_signals.strategy.models import Alert, Confidence, Decision
from crypto_signals.transport.telegram_bot import SignalBot


def _update(chat_id=42, title=None, first_name="Sam"):
    return SimpleNamespace(
        effective_chat=SimpleNamespace(id=chat_id, title=title),
        effective_user=SimpleNamespace(first_name=first_name),
        message=SimpleNamespace(reply_text=AsyncMock()),
    )


@pytest.fixture
def bot():
    config = AppConfig(market=MarketConfig(symbols=["BTC", "ETH"], timeframes=["1d", "4h"]))
    engine = DecisionEngine(StaticPriceSource({("BTC", "1d"): falling_then_rising()}))
    application = MagicMock()
    application.bot.send_message = AsyncMock()
    return SignalBot(config, engine, InMemorySubscriptionRepository(), application=application)


def test_handlers_registered(bot):
    assert bot.application.add_handler.call_count == 5


def test_missing_token_rejected():
    with pytest.raises(ValueError):
        SignalBot(AppConfig(), DecisionEngine(StaticPriceSource({})), InMemorySubscriptionRepository())


def test_start_and_stop_toggle_subscription(bot):
    update = _update(title="Traders")
    asyncio.run(bot.cmd_start(update, SimpleNamespace(args=[])))
    assert bot._repository.get(42).name == "Traders"
    assert "BTC, ETH" in update.message.reply_text.await_args.args[0]

    asyncio.run(bot.cmd_stop(update, SimpleNamespace(args=[])))
    assert bot._repository.get(42).subscribed is False
    asyncio.run(bot.cmd_start(update, SimpleNamespace(args=[])))
    assert bot._repository.get(42).subscribed is True


def test_details_rejects_unknown_symbol(bot):
    update = _update()
    asyncio.run(bot.cmd_details(update, SimpleNamespace(args=["doge"])))
    assert update.message.reply_text.await_args.args[0].startswith("Invalid symbol")


def test_details_reports_each_timeframe(bot):
    update = _update()
    asyncio.run(bot.cmd_details(update, SimpleNamespace(args=["btc"])))
    reply = update.message.reply_text.await_args.args[0]
    assert reply.startswith("*BTC Detailed Analysis*")
    assert "_1d_: BUY (MEDIUM)" in reply
    assert "_4h_: INSUFFICIENT_DATA (N/A)" in reply


def test_signals_replies_with_summary(bot):
    update = _update()
    asyncio.run(bot.cmd_signals(update, SimpleNamespace(args=[])))
    reply = update.message.reply_text.await_args.args[0]
    assert "*BTC*\nAggregated: *BUY*\nTimeframes: 1/2 valid" in reply
    assert "*ETH*\nAggregated: *HOLD*\nTimeframes: 0/2 valid" in reply


def test_deliver_sends_to_subscribers_only(bot):
    bot._repository.put(Subscription(chat_id=1))
    bot._repository.put(Subscription(chat_id=2, subscribed=False))
    bot._repository.put(Subscription(chat_id=3))
    bot.application.bot.send_message.side_effect = [NetworkError("flaky"), None]
    alert = Alert("BTC", "1d", make_analysis("BTC", "1d", Decision.BUY, Confidence.HIGH))

    asyncio.run(bot.deliver([alert]))

    chat_ids = [call.kwargs["chat_id"] for call in bot.application.bot.send_message.await_args_list]
    assert chat_ids == [1, 3]
    assert "BTC (1d): BUY" in bot.application.bot.send_message.await_args.kwargs["text"]
