"""Ledger interfaces consumed by the game core."""

from abc import ABC, abstractmethod


class BalanceLedger(ABC):
    """Per-user integer balances.

    ``adjust`` is the only way balances change and must be atomic per call:
    it upserts the user at 0 when unseen and applies ``delta`` in one step.
    """

    @abstractmethod
    async def get(self, user_id: int) -> int:
        """Current balance, 0 for unknown users. Raises Unavailable."""

    @abstractmethod
    async def adjust(self, user_id: int, delta: int) -> int:
        """Apply ``delta`` and return the new balance. Raises Unavailable."""


class TxLedger(ABC):
    """De-duplication of credited deposit transactions."""

    @abstractmethod
    async def mark_processed_if_new(self, user_id: int, tx_hash: str) -> bool:
        """Record ``tx_hash`` for ``user_id``; True only the first time."""

    @abstractmethod
    async def unmark(self, user_id: int, tx_hash: str) -> None:
        """Forget ``tx_hash`` so a deposit whose credit failed can be retried."""
