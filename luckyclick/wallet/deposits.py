"""Deposit detection against the house TON wallet."""

from __future__ import annotations

import logging

from luckyclick import messages
from luckyclick.config import WalletConfig
from luckyclick.errors import (
    AlreadyProcessed,
    DepositNotFound,
    InvalidAmount,
    Unavailable,
)
from luckyclick.ledger import BalanceLedger, TxLedger
from luckyclick.services.ton import NANOTONS_PER_TON, TonAPIError, TonClient

from .models import DepositReceipt

logger = logging.getLogger(__name__)


class DepositChecker:
    """Credits incoming transfers whose comment carries the user's id."""

    def __init__(
        self,
        ton: TonClient,
        ledger: BalanceLedger,
        tx_ledger: TxLedger,
        wallet_address: str,
        config: WalletConfig | None = None,
    ):
        self.ton = ton
        self.ledger = ledger
        self.tx_ledger = tx_ledger
        self.wallet_address = wallet_address
        self.config = config or WalletConfig()

    @property
    def min_deposit_nanotons(self) -> int:
        return round(self.config.min_deposit_ton * NANOTONS_PER_TON)

    def to_coins(self, nanotons: int) -> int:
        return nanotons * self.config.coins_per_ton // NANOTONS_PER_TON

    async def check_deposit(self, user_id: int) -> DepositReceipt:
        """Credit the newest uncredited transfer tagged with ``user_id``."""
        try:
            transactions = await self.ton.get_transactions(
                self.wallet_address, limit=self.config.deposit_scan_limit
            )
        except TonAPIError as e:
            logger.error(f"Deposit scan failed for {user_id}: {e}")
            raise Unavailable() from e

        matches = [tx for tx in transactions if tx.mentions_user(user_id)]
        if not matches:
            raise DepositNotFound()

        eligible = [
            tx for tx in matches if tx.in_msg.value >= self.min_deposit_nanotons
        ]
        if not eligible:
            raise InvalidAmount(
                messages.DEPOSIT_BELOW_MINIMUM.format(minimum=self.config.min_deposit_ton)
            )

        for tx in eligible:
            if not await self.tx_ledger.mark_processed_if_new(user_id, tx.hash):
                continue

            credited = self.to_coins(tx.in_msg.value)
            try:
                balance = await self.ledger.adjust(user_id, credited)
            except Unavailable:
                logger.error(f"Credit for deposit {tx.hash} of {user_id} failed; releasing it")
                await self.tx_ledger.unmark(user_id, tx.hash)
                raise
            logger.info(
                f"Credited deposit {tx.hash} for {user_id}: "
                f"{tx.in_msg.ton} TON -> {credited} coins"
            )
            return DepositReceipt(
                user_id=user_id,
                tx_hash=tx.hash,
                ton=tx.in_msg.ton,
                credited=credited,
                balance=balance,
            )

        raise AlreadyProcessed()
