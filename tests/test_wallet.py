"""Tests for deposit crediting and the withdrawal flow."""

import asyncio

import pytest

from luckyclick.config import WalletConfig
from luckyclick.errors import (
    AlreadyProcessed,
    DepositNotFound,
    InsufficientBalance,
    InvalidAddress,
    InvalidAmount,
    Unavailable,
)
from luckyclick.ledger import InMemoryLedger
from luckyclick.services.ton import TonAPIError, TonMessage, TonTransaction
from luckyclick.wallet import (
    DepositChecker,
    WithdrawalDesk,
    WithdrawalSessions,
    WithdrawalStep,
    parse_amount,
    validate_ton_address,
)

from tests.conftest import FakeClock, FlakyLedger, RecordingNotifier

WALLET = "EQD" + "a" * 45
USER_ADDRESS = "UQ" + "b" * 46
RAW_ADDRESS = "0:" + "c" * 64


def _tx(tx_hash: str, nanotons: int, comment: str) -> TonTransaction:
    return TonTransaction(
        hash=tx_hash, in_msg=TonMessage(value=nanotons, message=comment)
    )


class FakeTon:
    def __init__(self, transactions=None, error: Exception | None = None):
        self.transactions = transactions or []
        self.error = error
        self.calls: list[tuple[str, int]] = []

    async def get_transactions(self, address: str, limit: int = 20):
        self.calls.append((address, limit))
        if self.error:
            raise self.error
        return list(self.transactions)


def _checker(ton: FakeTon, ledger: InMemoryLedger) -> DepositChecker:
    return DepositChecker(ton, ledger, ledger, WALLET, WalletConfig())


def test_deposit_credited_once() -> None:
    ledger = InMemoryLedger()
    ton = FakeTon([_tx("h1", 500_000_000, "42")])
    checker = _checker(ton, ledger)

    async def run() -> None:
        receipt = await checker.check_deposit(42)
        assert receipt.credited == 500
        assert receipt.balance == 500
        assert receipt.tx_hash == "h1"
        with pytest.raises(AlreadyProcessed):
            await checker.check_deposit(42)

    asyncio.run(run())

    assert ledger.snapshot() == {42: 500}
    assert ton.calls[0] == (WALLET, 20)


def test_newest_uncredited_deposit_wins() -> None:
    ledger = InMemoryLedger()
    ton = FakeTon(
        [
            _tx("new", 2_000_000_000, "id 42"),
            _tx("old", 1_000_000_000, "42"),
        ]
    )
    checker = _checker(ton, ledger)

    async def run() -> None:
        first = await checker.check_deposit(42)
        second = await checker.check_deposit(42)
        assert (first.tx_hash, second.tx_hash) == ("new", "old")

    asyncio.run(run())

    assert ledger.snapshot() == {42: 3000}


def test_comment_must_match_whole_number() -> None:
    ledger = InMemoryLedger()
    checker = _checker(FakeTon([_tx("h1", 500_000_000, "4242")]), ledger)

    with pytest.raises(DepositNotFound):
        asyncio.run(checker.check_deposit(42))


def test_deposit_below_minimum_rejected() -> None:
    ledger = InMemoryLedger()
    checker = _checker(FakeTon([_tx("h1", 50_000_000, "42")]), ledger)

    with pytest.raises(InvalidAmount) as exc_info:
        asyncio.run(checker.check_deposit(42))

    assert "0.1 TON" in exc_info.value.message
    assert ledger.snapshot() == {}


def test_ton_outage_is_unavailable() -> None:
    checker = _checker(FakeTon(error=TonAPIError("boom", status_code=503)), InMemoryLedger())

    with pytest.raises(Unavailable):
        asyncio.run(checker.check_deposit(42))


def test_address_and_amount_validation() -> None:
    assert validate_ton_address(f"  {USER_ADDRESS} ") == USER_ADDRESS
    assert validate_ton_address(RAW_ADDRESS) == RAW_ADDRESS
    with pytest.raises(InvalidAddress):
        validate_ton_address("not-an-address")

    assert parse_amount(" 250 ") == 250
    for bad in ("0", "-5", "1.5", "lots"):
        with pytest.raises(InvalidAmount):
            parse_amount(bad)


def test_withdrawal_debits_and_notifies_admin() -> None:
    ledger = InMemoryLedger({7: 1500})
    notifier = RecordingNotifier()
    desk = WithdrawalDesk(ledger, notifier, admin_chat_id="-100", config=WalletConfig())

    request = asyncio.run(desk.request_withdrawal(7, "1000", USER_ADDRESS, display_name="Ann"))

    assert request.amount == 1000
    assert request.ton == 1.0
    assert request.balance == 500
    assert ledger.snapshot() == {7: 500}
    [admin_text] = notifier.texts("-100")
    assert "Ann (7)" in admin_text
    assert USER_ADDRESS in admin_text


def test_withdrawal_over_balance_rejected() -> None:
    ledger = InMemoryLedger({7: 100})
    desk = WithdrawalDesk(ledger, RecordingNotifier(), admin_chat_id="-100")

    with pytest.raises(InsufficientBalance):
        asyncio.run(desk.request_withdrawal(7, 101, USER_ADDRESS))

    assert ledger.snapshot() == {7: 100}


def test_withdrawal_dialog_steps() -> None:
    ledger = InMemoryLedger({7: 800})
    desk = WithdrawalDesk(ledger, RecordingNotifier(), admin_chat_id="-100")
    sessions = WithdrawalSessions(desk, ttl_seconds=300, timer=FakeClock())

    sessions.start(7)
    assert asyncio.run(sessions.submit_amount(7, "100")) is None

    with pytest.raises(InvalidAddress):
        sessions.submit_address(7, "nope")
    assert sessions.get(7).step is WithdrawalStep.AWAITING_ADDRESS

    session = sessions.submit_address(7, RAW_ADDRESS)
    assert session.step is WithdrawalStep.AWAITING_AMOUNT

    with pytest.raises(InvalidAmount):
        asyncio.run(sessions.submit_amount(7, "zero"))
    assert sessions.get(7) is not None

    request = asyncio.run(sessions.submit_amount(7, "300"))
    assert request.address == RAW_ADDRESS
    assert ledger.snapshot() == {7: 500}
    assert sessions.get(7) is None


def test_withdrawal_dialog_expires_and_cancels() -> None:
    clock = FakeClock()
    desk = WithdrawalDesk(InMemoryLedger(), RecordingNotifier())
    sessions = WithdrawalSessions(desk, ttl_seconds=300, timer=clock)

    sessions.start(7)
    clock.advance(301)
    assert sessions.get(7) is None

    sessions.start(8)
    assert sessions.cancel(8)
    assert not sessions.cancel(8)
    assert len(sessions) == 0


def test_failed_credit_leaves_deposit_claimable() -> None:
    ledger = FlakyLedger(failing={42})
    checker = _checker(FakeTon([_tx("h1", 500_000_000, "42")]), ledger)

    async def run() -> None:
        with pytest.raises(Unavailable):
            await checker.check_deposit(42)
        ledger.failing.clear()
        receipt = await checker.check_deposit(42)
        assert receipt.tx_hash == "h1"
        with pytest.raises(AlreadyProcessed):
            await checker.check_deposit(42)

    asyncio.run(run())

    assert ledger.snapshot() == {42: 500}
