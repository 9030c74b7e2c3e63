"""Tests for TonClient against a mocked toncenter API."""

import asyncio

import httpx
import pytest

from luckyclick.services.ton import TonAPIError, TonClient, TonClientConfig
from luckyclick.services.ton import client as ton_client_module

TRANSACTIONS = {
    "ok": True,
    "result": [
        {
            "utime": 1767268800,
            "transaction_id": {"lt": "47000000000001", "hash": "abc="},
            "in_msg": {
                "source": "UQsender",
                "destination": "EQhouse",
                "value": "1500000000",
                "message": "123456",
            },
        },
        {
            "utime": 1767268700,
            "transaction_id": {"lt": "47000000000000", "hash": "def="},
            "in_msg": None,
        },
    ],
}


@pytest.fixture(autouse=True)
def no_backoff(monkeypatch):
    async def instant(_seconds):
        return None

    monkeypatch.setattr(ton_client_module.asyncio, "sleep", instant)


def _client(handler, **config) -> TonClient:
    return TonClient(
        TonClientConfig(base_url="https://ton.test/api/v2", **config),
        transport=httpx.MockTransport(handler),
    )


def test_get_transactions_parses_payload() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=TRANSACTIONS)

    async def run():
        async with _client(handler, api_key="secret") as client:
            return await client.get_transactions("EQhouse", limit=5)

    transactions = asyncio.run(run())

    assert [tx.hash for tx in transactions] == ["abc=", "def="]
    assert transactions[0].in_msg.value == 1_500_000_000
    assert transactions[0].in_msg.ton == 1.5
    assert transactions[0].mentions_user(123456)
    assert not transactions[1].mentions_user(123456)
    assert seen[0].url.path == "/api/v2/getTransactions"
    assert seen[0].url.params["limit"] == "5"
    assert seen[0].headers["X-API-Key"] == "secret"


def test_retries_server_errors() -> None:
    responses = iter(
        [httpx.Response(502), httpx.Response(429), httpx.Response(200, json=TRANSACTIONS)]
    )

    async def run():
        async with _client(lambda request: next(responses), max_retries=3) as client:
            return await client.get_transactions("EQhouse")

    assert len(asyncio.run(run())) == 2


def test_gives_up_after_max_retries() -> None:
    async def run():
        async with _client(lambda request: httpx.Response(503), max_retries=2) as client:
            await client.get_transactions("EQhouse")

    with pytest.raises(TonAPIError):
        asyncio.run(run())


def test_api_level_error_raised() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"ok": False, "error": "invalid address"})

    async def run():
        async with _client(handler) as client:
            await client.get_transactions("bogus")

    with pytest.raises(TonAPIError, match="invalid address"):
        asyncio.run(run())


def test_client_requires_context_manager() -> None:
    with pytest.raises(RuntimeError):
        _client(lambda request: httpx.Response(200)).client
