"""Telegram service config."""

from pydantic import BaseModel


class TelegramConfig(BaseModel):
    """Telegram config."""

    bot_token: str = ""
    send_attempts: int = 2
    retry_delay_seconds: float = 1.0
    parse_mode: str | None = None
