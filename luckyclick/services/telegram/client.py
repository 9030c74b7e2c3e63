"""Telegram notification client."""

from __future__ import annotations

import asyncio
import logging

from telegram import Bot
from telegram.error import Forbidden, TelegramError

from luckyclick.notify import NotificationSink

from .config import TelegramConfig
from .exceptions import TelegramConfigError, TelegramDeliveryError
from .models import NotificationResult

logger = logging.getLogger(__name__)


class TelegramNotifier(NotificationSink):
    """Delivers game notifications through a python-telegram-bot ``Bot``."""

    def __init__(self, bot: Bot, config: TelegramConfig | None = None):
        self.config = config or TelegramConfig()
        self._bot = bot
        logger.info("Initialized TelegramNotifier")

    @property
    def bot(self) -> Bot:
        return self._bot

    async def send_message(self, chat_id: int | str, text: str) -> NotificationResult:
        """Send a message with a single retry."""
        attempts = max(1, self.config.send_attempts)
        retry_count = 0
        last_error: str | None = None

        for attempt in range(attempts):
            try:
                telegram_message = await self.bot.send_message(
                    chat_id=chat_id,
                    text=text,
                    parse_mode=self.config.parse_mode,
                )
                logger.debug(
                    f"Message sent to {chat_id} "
                    f"(message_id: {telegram_message.message_id})"
                )
                return NotificationResult(
                    success=True,
                    message_id=telegram_message.message_id,
                    recipient=str(chat_id),
                    retry_count=retry_count,
                )

            except Forbidden as e:
                # User blocked the bot; retrying will not help
                last_error = e.message or "Forbidden"
                break
            except TelegramError as e:
                last_error = e.message or "Telegram error"
                logger.warning(
                    f"Telegram send to {chat_id} failed "
                    f"(attempt {attempt + 1}/{attempts}): {last_error}"
                )

            if attempt < attempts - 1:
                await asyncio.sleep(self.config.retry_delay_seconds)
                retry_count += 1

        return NotificationResult(
            success=False,
            recipient=str(chat_id),
            error=last_error or "Message send failed",
            retry_count=retry_count,
        )

    async def deliver(self, chat_id: int | str, text: str) -> None:
        result = await self.send_message(chat_id, text)
        if not result.success:
            raise TelegramDeliveryError(str(result), chat_id=chat_id)


def create_telegram_notifier(
    bot: Bot | None = None,
    bot_token: str | None = None,
    config: TelegramConfig | None = None,
) -> TelegramNotifier:
    """Create a TelegramNotifier from an existing Bot or a token."""
    config = config or TelegramConfig()
    if bot_token:
        config.bot_token = bot_token

    if bot is None:
        if not config.bot_token:
            raise TelegramConfigError(
                "bot_token is required. Provide via config or constructor."
            )
        bot = Bot(token=config.bot_token)

    return TelegramNotifier(bot, config)
