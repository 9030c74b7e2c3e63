"""Telegram notification service."""

from .client import TelegramNotifier, create_telegram_notifier
from .config import TelegramConfig
from .exceptions import (
    TelegramConfigError,
    TelegramDeliveryError,
    TelegramServiceError,
)
from .models import NotificationResult

__all__ = [
    "TelegramNotifier",
    "create_telegram_notifier",
    "TelegramConfig",
    "NotificationResult",
    "TelegramServiceError",
    "TelegramConfigError",
    "TelegramDeliveryError",
]
