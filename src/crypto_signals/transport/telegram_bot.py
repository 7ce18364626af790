from __future__ import annotations

import logging
from typing import Sequence

from telegram import Update
from telegram.constants import ParseMode
from telegram.error import TelegramError
from telegram.ext import Application, CommandHandler, ContextTypes

from crypto_signals.config.models import AppConfig
from crypto_signals.scheduler.orchestrator import AlertSink
from crypto_signals.sessions.repository import Subscription, SubscriptionRepository
from crypto_signals.strategy.decision_engine import DecisionEngine
from crypto_signals.strategy.models import Alert
from crypto_signals.transport import formatting

logger = logging.getLogger(__name__)


class SignalBot(AlertSink):
    """Telegram command handlers plus alert delivery to subscribed chats."""

    def __init__(
        self,
        config: AppConfig,
        engine: DecisionEngine,
        repository: SubscriptionRepository,
        application: Application | None = None,
    ) -> None:
        self._config = config
        self._engine = engine
        self._repository = repository
        if application is None:
            if not config.telegram.token:
                raise ValueError("TELEGRAM_TOKEN is required to run the bot")
            application = Application.builder().token(config.telegram.token).build()
        self._application = application
        self._register_handlers()

    @property
    def application(self) -> Application:
        return self._application

    def _register_handlers(self) -> None:
        self._application.add_handler(CommandHandler("start", self.cmd_start))
        self._application.add_handler(CommandHandler("stop", self.cmd_stop))
        self._application.add_handler(CommandHandler("signals", self.cmd_signals))
        self._application.add_handler(CommandHandler("details", self.cmd_details))
        self._application.add_handler(CommandHandler("help", self.cmd_help))

    @property
    def _symbols(self) -> list[str]:
        return self._config.market.symbols

    @property
    def _timeframes(self) -> list[str]:
        return self._config.market.timeframes

    async def cmd_start(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        chat = update.effective_chat
        existing = self._repository.get(chat.id)
        if existing is None:
            user = update.effective_user
            name = chat.title or (user.first_name if user else "") or ""
            self._repository.put(Subscription(chat_id=chat.id, name=name))
        elif not existing.subscribed:
            existing.subscribed = True
            self._repository.put(existing)
        await update.message.reply_text(formatting.welcome_text(self._symbols))

    async def cmd_stop(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        chat = update.effective_chat
        existing = self._repository.get(chat.id)
        if existing is not None and existing.subscribed:
            existing.subscribed = False
            self._repository.put(existing)
        await update.message.reply_text("You will no longer receive market alerts.")

    async def cmd_help(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        await update.message.reply_text(
            formatting.help_text(self._symbols, self._timeframes),
            parse_mode=ParseMode.MARKDOWN,
        )

    async def cmd_signals(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        message = update.message
        try:
            await message.reply_text("Analyzing market conditions... This may take a moment.")
            results = await self._engine.analyze_all(self._symbols, self._timeframes)
            await message.reply_text(
                formatting.signals_summary(results, self._symbols, self._timeframes),
                parse_mode=ParseMode.MARKDOWN,
            )
        except Exception as exc:
            logger.exception("Error generating signals: %s", exc)
            await message.reply_text("Error generating signals. Please try again later.")

    async def cmd_details(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        message = update.message
        if not context.args:
            await message.reply_text("Usage: /details <SYMBOL>")
            return
        symbol = context.args[0].upper()
        if symbol not in self._symbols:
            await message.reply_text(
                f"Invalid symbol. Supported symbols: {', '.join(self._symbols)}"
            )
            return
        try:
            await message.reply_text(f"Analyzing {symbol} across all timeframes...")
            results = await self._engine.analyze_all([symbol], self._timeframes)
            await message.reply_text(
                formatting.details_text(
                    symbol, results[symbol], self._config.telegram.details_signal_limit
                ),
                parse_mode=ParseMode.MARKDOWN,
            )
        except Exception as exc:
            logger.exception("Error analyzing %s: %s", symbol, exc)
            await message.reply_text(f"Error analyzing {symbol}. Please try again later.")

    async def deliver(self, alerts: Sequence[Alert]) -> None:
        if not alerts:
            return
        text = formatting.alert_text(alerts)
        for subscription in self._repository.subscribers():
            try:
                await self._application.bot.send_message(
                    chat_id=subscription.chat_id, text=text, parse_mode=ParseMode.MARKDOWN
                )
            except TelegramError as exc:
                logger.warning("Alert delivery to %s failed: %s", subscription.chat_id, exc)
