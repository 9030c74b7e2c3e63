"""Telegram chat surface."""

from .app import build_application
from .handlers import BotHandlers

__all__ = ["build_application", "BotHandlers"]
