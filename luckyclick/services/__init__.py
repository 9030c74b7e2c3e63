"""External service clients (Telegram, TON)."""
