from .client import TonClient, create_ton_client
from .config import TonClientConfig
from .exceptions import TonAPIError, TonRateLimitError
from .models import NANOTONS_PER_TON, TonMessage, TonTransaction

__all__ = [
    "TonClient",
    "create_ton_client",
    "TonClientConfig",
    "TonAPIError",
    "TonRateLimitError",
    "NANOTONS_PER_TON",
    "TonMessage",
    "TonTransaction",
]
