"""Withdrawal requests and the multi-step withdrawal dialog."""

from __future__ import annotations

import logging
import re
import time
from typing import Callable

from cachetools import TTLCache

from luckyclick import messages
from luckyclick.config import WalletConfig
from luckyclick.errors import InsufficientBalance, InvalidAddress, InvalidAmount
from luckyclick.ledger import BalanceLedger
from luckyclick.notify import NotificationSink

from .models import WithdrawalRequest, WithdrawalSession, WithdrawalStep

logger = logging.getLogger(__name__)

# User-friendly (base64/base64url, 48 chars) or raw "<workchain>:<64 hex>" form
_FRIENDLY_ADDRESS = re.compile(r"^[A-Za-z0-9_\-+/]{48}$")
_RAW_ADDRESS = re.compile(r"^-?\d+:[0-9a-fA-F]{64}$")


def validate_ton_address(address: str) -> str:
    address = (address or "").strip()
    if _FRIENDLY_ADDRESS.match(address) or _RAW_ADDRESS.match(address):
        return address
    raise InvalidAddress()


def parse_amount(text: str | int) -> int:
    """Parse a positive whole number of coins."""
    try:
        amount = int(str(text).strip())
    except (TypeError, ValueError):
        raise InvalidAmount() from None
    if amount <= 0:
        raise InvalidAmount()
    return amount


class WithdrawalDesk:
    """Debits the balance and forwards the request to the admin chat."""

    def __init__(
        self,
        ledger: BalanceLedger,
        notifier: NotificationSink,
        admin_chat_id: str = "",
        config: WalletConfig | None = None,
    ):
        self.ledger = ledger
        self.notifier = notifier
        self.admin_chat_id = admin_chat_id
        self.config = config or WalletConfig()

    async def request_withdrawal(
        self,
        user_id: int,
        amount: int | str,
        address: str,
        display_name: str = "",
    ) -> WithdrawalRequest:
        amount = parse_amount(amount)
        address = validate_ton_address(address)

        balance = await self.ledger.get(user_id)
        if balance < amount:
            raise InsufficientBalance(required=amount, available=balance)
        new_balance = await self.ledger.adjust(user_id, -amount)

        request = WithdrawalRequest(
            user_id=user_id,
            amount=amount,
            ton=amount / self.config.coins_per_ton,
            address=address,
            balance=new_balance,
        )
        logger.info(f"Withdrawal of {amount} coins by {user_id} to {address}")

        if self.admin_chat_id:
            await self.notifier.notify_chat(
                self.admin_chat_id,
                messages.WITHDRAW_ADMIN.format(
                    display_name=display_name or user_id,
                    user_id=user_id,
                    amount=amount,
                    ton=request.ton,
                    address=address,
                ),
            )
        else:
            logger.warning("admin_chat_id not configured; withdrawal not forwarded")
        return request


class WithdrawalSessions:
    """AWAITING_ADDRESS -> AWAITING_AMOUNT -> DONE, with idle sessions expiring."""

    def __init__(
        self,
        desk: WithdrawalDesk,
        ttl_seconds: float = 300.0,
        maxsize: int = 10000,
        timer: Callable[[], float] = time.monotonic,
    ):
        self.desk = desk
        self._sessions: TTLCache[int, WithdrawalSession] = TTLCache(
            maxsize=maxsize, ttl=ttl_seconds, timer=timer
        )

    def start(self, user_id: int) -> WithdrawalSession:
        session = WithdrawalSession(user_id=user_id)
        self._sessions[user_id] = session
        return session

    def get(self, user_id: int) -> WithdrawalSession | None:
        return self._sessions.get(user_id)

    def cancel(self, user_id: int) -> bool:
        return self._sessions.pop(user_id, None) is not None

    def submit_address(self, user_id: int, text: str) -> WithdrawalSession | None:
        """Record the address. An invalid address keeps the session waiting."""
        session = self.get(user_id)
        if session is None or session.step is not WithdrawalStep.AWAITING_ADDRESS:
            return None
        address = validate_ton_address(text)
        session = session.model_copy(
            update={"address": address, "step": WithdrawalStep.AWAITING_AMOUNT}
        )
        # Re-inserting refreshes the expiry
        self._sessions[user_id] = session
        return session

    async def submit_amount(
        self, user_id: int, text: str, display_name: str = ""
    ) -> WithdrawalRequest | None:
        """Finish the dialog. Validation errors keep the session waiting for an amount."""
        session = self.get(user_id)
        if session is None or session.step is not WithdrawalStep.AWAITING_AMOUNT:
            return None
        request = await self.desk.request_withdrawal(
            user_id, text, session.address or "", display_name=display_name
        )
        session.step = WithdrawalStep.DONE
        self._sessions.pop(user_id, None)
        return request

    def __len__(self) -> int:
        return len(self._sessions)
