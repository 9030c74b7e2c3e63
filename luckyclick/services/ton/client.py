from __future__ import annotations

import asyncio
import logging
from typing import Any

import httpx

from .config import TonClientConfig
from .exceptions import TonAPIError, TonRateLimitError
from .models import TonTransaction

logger = logging.getLogger(__name__)


class TonClient:
    def __init__(
        self,
        config: TonClientConfig | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.config = config or TonClientConfig()
        self._transport = transport
        self._client: httpx.AsyncClient | None = None
        logger.info(f"Initialized TonClient (base_url={self.config.base_url})")

    async def __aenter__(self) -> TonClient:
        headers = {"X-API-Key": self.config.api_key} if self.config.api_key else {}
        self._client = httpx.AsyncClient(
            base_url=self.config.base_url,
            timeout=self.config.timeout_seconds,
            limits=httpx.Limits(max_connections=self.config.max_connections),
            headers=headers,
            transport=self._transport,
        )
        return self

    async def __aexit__(
        self,
        exc_type: type | None,
        exc_val: Exception | None,
        exc_tb: Any,
    ) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None
            logger.info("Closed TonClient")

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            raise RuntimeError("TonClient must be used as async context manager")
        return self._client

    async def _request(
        self,
        method: str,
        endpoint: str,
        params: dict[str, Any] | None = None,
    ) -> Any:
        retry_count = 0
        last_error: Exception | None = None

        while retry_count < self.config.max_retries:
            try:
                response = await self.client.request(method, endpoint, params=params)

                if response.status_code == 429:
                    wait_time = 2 ** retry_count
                    logger.warning(f"TON API rate limited, waiting {wait_time}s...")
                    last_error = TonRateLimitError("Rate limited", status_code=429)
                    await asyncio.sleep(wait_time)
                    retry_count += 1
                    continue
                elif response.status_code >= 500:
                    wait_time = 2 ** retry_count
                    logger.warning(
                        f"TON API error {response.status_code}, "
                        f"retrying in {wait_time}s..."
                    )
                    last_error = TonAPIError(
                        f"Server error {response.status_code}",
                        status_code=response.status_code,
                    )
                    await asyncio.sleep(wait_time)
                    retry_count += 1
                    continue

                response.raise_for_status()
                data = response.json()
                if isinstance(data, dict) and data.get("ok") is False:
                    raise TonAPIError(
                        f"TON API error: {data.get('error', 'unknown')}",
                        status_code=response.status_code,
                    )
                return data.get("result") if isinstance(data, dict) else data

            except httpx.TimeoutException as e:
                last_error = e
                retry_count += 1
                if retry_count < self.config.max_retries:
                    logger.warning(f"TON API timeout, retrying ({retry_count})...")
                    await asyncio.sleep(1)

            except httpx.HTTPStatusError as e:
                raise TonAPIError(
                    f"TON API request failed: {e}",
                    status_code=e.response.status_code,
                ) from e

            except httpx.RequestError as e:
                last_error = e
                logger.error(f"TON API network error: {e}")
                break

        raise TonAPIError(f"Request failed after {retry_count} retries: {last_error}")

    async def get_transactions(self, address: str, limit: int = 20) -> list[TonTransaction]:
        """Most recent transactions of ``address``, newest first."""
        result = await self._request(
            "GET", "getTransactions", params={"address": address, "limit": limit}
        )
        transactions = [TonTransaction.from_api(raw) for raw in result or []]
        logger.debug(f"Fetched {len(transactions)} transactions for {address}")
        return transactions


def create_ton_client(
    base_url: str | None = None,
    api_key: str | None = None,
    config: TonClientConfig | None = None,
) -> TonClient:
    config = config or TonClientConfig()
    if base_url:
        config.base_url = base_url
    if api_key:
        config.api_key = api_key
    return TonClient(config)
