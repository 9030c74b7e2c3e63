"""Process-local ledger used for tests and the ``--memory-ledger`` run mode."""

import logging

from .base import BalanceLedger, TxLedger

logger = logging.getLogger(__name__)


class InMemoryLedger(BalanceLedger, TxLedger):
    """Dict-backed ledger.

    Nothing awaits between the read and the write in ``adjust``, so each call
    is atomic on the event loop.
    """

    def __init__(self, balances: dict[int, int] | None = None):
        self._balances: dict[int, int] = dict(balances or {})
        self._processed: set[tuple[int, str]] = set()

    async def get(self, user_id: int) -> int:
        return self._balances.get(user_id, 0)

    async def adjust(self, user_id: int, delta: int) -> int:
        new_balance = self._balances.get(user_id, 0) + delta
        self._balances[user_id] = new_balance
        logger.debug(f"Adjusted {user_id} by {delta:+d} -> {new_balance}")
        return new_balance

    async def mark_processed_if_new(self, user_id: int, tx_hash: str) -> bool:
        key = (user_id, tx_hash)
        if key in self._processed:
            return False
        self._processed.add(key)
        return True

    async def unmark(self, user_id: int, tx_hash: str) -> None:
        self._processed.discard((user_id, tx_hash))

    def snapshot(self) -> dict[int, int]:
        """Copy of all balances."""
        return dict(self._balances)
