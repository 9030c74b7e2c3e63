"""Telegram service exceptions."""


class TelegramServiceError(Exception):
    """Base Telegram service exception."""

    def __init__(self, message: str, chat_id: int | str | None = None):
        super().__init__(message)
        self.chat_id = chat_id


class TelegramConfigError(TelegramServiceError):
    """Config error."""

    pass


class TelegramDeliveryError(TelegramServiceError):
    """Message could not be delivered after all attempts."""

    pass
