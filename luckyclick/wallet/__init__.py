"""Deposits and withdrawals."""

from .deposits import DepositChecker
from .models import (
    DepositReceipt,
    WithdrawalRequest,
    WithdrawalSession,
    WithdrawalStep,
)
from .withdrawals import (
    WithdrawalDesk,
    WithdrawalSessions,
    parse_amount,
    validate_ton_address,
)

__all__ = [
    "DepositChecker",
    "DepositReceipt",
    "WithdrawalRequest",
    "WithdrawalSession",
    "WithdrawalStep",
    "WithdrawalDesk",
    "WithdrawalSessions",
    "parse_amount",
    "validate_ton_address",
]
