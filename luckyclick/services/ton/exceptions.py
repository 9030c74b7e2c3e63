class TonAPIError(Exception):
    """Base exception for TON HTTP API errors."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class TonRateLimitError(TonAPIError):
    """Rate limit exceeded."""

    pass
