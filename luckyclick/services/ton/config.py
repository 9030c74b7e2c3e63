from pydantic import BaseModel


class TonClientConfig(BaseModel):
    """Configuration for the TON HTTP API client."""

    base_url: str = "https://toncenter.com/api/v2"
    api_key: str = ""
    timeout_seconds: float = 15.0
    max_retries: int = 3
    max_connections: int = 20
