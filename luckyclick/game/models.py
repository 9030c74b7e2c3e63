"""Game data models."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field


class Side(str, Enum):
    """Betting side. Membership in a side is final for the round."""

    GREEN = "green"
    RED = "red"

    @property
    def label(self) -> str:
        return "🟢 Green" if self is Side.GREEN else "🔴 Red"


class RoomState(str, Enum):
    """Room lifecycle.

    OPEN -> AWAITING_QUORUM -> TIMER_RUNNING -> SETTLING -> CLOSED, after which
    the room is recycled back to OPEN with empty membership.
    """

    OPEN = "open"
    AWAITING_QUORUM = "awaiting_quorum"
    TIMER_RUNNING = "timer_running"
    SETTLING = "settling"
    CLOSED = "closed"


AVAILABLE_STATES = frozenset({RoomState.OPEN, RoomState.AWAITING_QUORUM})


class RealParticipant(BaseModel):
    """A chat user backed by a ledger account."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["real"] = "real"
    user_id: int

    @property
    def is_synthetic(self) -> bool:
        return False

    def __str__(self) -> str:
        return f"user:{self.user_id}"


class SyntheticParticipant(BaseModel):
    """A filler injected to reach quorum. Never touches the ledger or the chat."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["synthetic"] = "synthetic"
    filler_id: str

    @property
    def is_synthetic(self) -> bool:
        return True

    def __str__(self) -> str:
        return f"filler:{self.filler_id}"


Participant = Annotated[
    RealParticipant | SyntheticParticipant, Field(discriminator="kind")
]


class JoinResult(BaseModel):
    """Outcome of a successful join, rendered by the chat layer."""

    room_id: str
    stake_tier: int
    state: RoomState
    member_count: int
    seconds_left: int | None = None
    late_join: bool = False


class BetReceipt(BaseModel):
    """Outcome of a successful bet."""

    room_id: str
    side: Side
    stake: int
    balance: int | None = None


class LeaveResult(BaseModel):
    """Outcome of a leave request."""

    room_id: str
    was_member: bool
    forfeited_stake: int = 0


class BalanceView(BaseModel):
    """User balance in coins with its TON equivalent."""

    user_id: int
    coins: int
    ton: float


class SettlementOutcome(BaseModel):
    """Pure result of applying the minority-wins rule to a room's sides."""

    green_count: int
    red_count: int
    stake: int
    total: int
    rake: int
    pool: int
    winning_side: Side | None = None
    reward: int = 0

    @property
    def is_tie(self) -> bool:
        return self.winning_side is None


class SettlementReport(BaseModel):
    """What a settlement actually did to the ledger."""

    room_id: str
    round_number: int
    outcome: SettlementOutcome
    credited: dict[int, int] = Field(default_factory=dict)
    failed_credits: list[int] = Field(default_factory=list)
    real_winner_count: int = 0
    settled_at: datetime
