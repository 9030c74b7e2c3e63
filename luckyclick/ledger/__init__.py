"""Balance ledger backends."""

from .base import BalanceLedger, TxLedger
from .memory import InMemoryLedger

__all__ = [
    "BalanceLedger",
    "TxLedger",
    "InMemoryLedger",
]
