"""Wallet models."""

from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, Field


class DepositReceipt(BaseModel):
    """A credited deposit."""

    user_id: int
    tx_hash: str
    ton: float
    credited: int
    balance: int


class WithdrawalRequest(BaseModel):
    """A debited withdrawal awaiting manual payout."""

    user_id: int
    amount: int
    ton: float
    address: str
    balance: int
    requested_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )


class WithdrawalStep(str, Enum):
    AWAITING_ADDRESS = "awaiting_address"
    AWAITING_AMOUNT = "awaiting_amount"
    DONE = "done"


class WithdrawalSession(BaseModel):
    """Per-user state of the withdrawal dialog."""

    user_id: int
    step: WithdrawalStep = WithdrawalStep.AWAITING_ADDRESS
    address: str | None = None
