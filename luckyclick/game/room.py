"""Room state machine: membership, side commitments, lifecycle and timers."""

from __future__ import annotations

import asyncio
import logging
import math
from datetime import datetime

from pydantic import BaseModel, Field, PrivateAttr

from luckyclick.errors import (
    AlreadyCommitted,
    AlreadyJoined,
    GameInProgress,
    InsufficientBalance,
    NotInRoom,
)
from luckyclick.ledger import BalanceLedger
from luckyclick.timers import TimerHandle

from .models import (
    AVAILABLE_STATES,
    Participant,
    RealParticipant,
    RoomState,
    Side,
)

logger = logging.getLogger(__name__)


class Room(BaseModel):
    """One recyclable game slot within a stake tier.

    Invariants: ``green`` and ``red`` are disjoint subsets of ``members``;
    ``deadline`` is set only while ``TIMER_RUNNING``; at most one grace timer
    and one betting window are outstanding.
    """

    id: str
    stake_tier: int
    members: list[Participant] = Field(default_factory=list)
    green: list[Participant] = Field(default_factory=list)
    red: list[Participant] = Field(default_factory=list)
    state: RoomState = RoomState.OPEN
    deadline: datetime | None = None
    round_number: int = 0

    _lock: asyncio.Lock | None = PrivateAttr(default=None)
    _grace_timer: TimerHandle | None = PrivateAttr(default=None)
    _window_timers: list[TimerHandle] = PrivateAttr(default_factory=list)

    @property
    def lock(self) -> asyncio.Lock:
        """Serializes every operation on this room, including ledger awaits."""
        if self._lock is None:
            self._lock = asyncio.Lock()
        return self._lock

    @property
    def is_available(self) -> bool:
        return self.state in AVAILABLE_STATES

    @property
    def real_members(self) -> list[RealParticipant]:
        return [m for m in self.members if isinstance(m, RealParticipant)]

    @property
    def grace_pending(self) -> bool:
        return self._grace_timer is not None and not self._grace_timer.cancelled

    @property
    def window_armed(self) -> bool:
        return bool(self._window_timers)

    def has_member(self, participant: Participant) -> bool:
        return participant in self.members

    def side_of(self, participant: Participant) -> Side | None:
        if participant in self.green:
            return Side.GREEN
        if participant in self.red:
            return Side.RED
        return None

    def bettors(self) -> list[Participant]:
        return [*self.green, *self.red]

    def seconds_left(self, now: datetime) -> int | None:
        if self.deadline is None:
            return None
        return max(0, math.ceil((self.deadline - now).total_seconds()))

    def window_closed(self, now: datetime) -> bool:
        return self.deadline is not None and now >= self.deadline

    def set_grace_timer(self, handle: TimerHandle) -> None:
        self.cancel_grace_timer()
        self._grace_timer = handle

    def cancel_grace_timer(self) -> None:
        if self._grace_timer is not None:
            self._grace_timer.cancel()
            self._grace_timer = None

    def set_window_timers(self, handles: list[TimerHandle]) -> None:
        self.cancel_window_timers()
        self._window_timers = list(handles)

    def cancel_window_timers(self) -> None:
        for handle in self._window_timers:
            handle.cancel()
        self._window_timers = []

    def cancel_timers(self) -> None:
        self.cancel_grace_timer()
        self.cancel_window_timers()

    def reset(self) -> None:
        """Recycle the slot: empty membership, no timers, back to OPEN."""
        self.cancel_timers()
        self.green = []
        self.red = []
        self.members = []
        self.deadline = None
        self.state = RoomState.OPEN


def join(room: Room, participant: Participant) -> bool:
    """Add ``participant`` to the room.

    Returns True when the join is a late join into a running betting window.
    """
    if room.has_member(participant):
        raise AlreadyJoined(room_id=room.id)
    if room.state in (RoomState.SETTLING, RoomState.CLOSED):
        raise GameInProgress()

    room.members.append(participant)
    late = room.state is RoomState.TIMER_RUNNING
    logger.info(
        f"{participant} joined {room.id} "
        f"({len(room.members)} members{', late' if late else ''})"
    )
    return late


async def place_bet(
    room: Room,
    participant: Participant,
    side: Side,
    ledger: BalanceLedger,
    now: datetime,
) -> int | None:
    """Debit the stake and commit ``participant`` to ``side``.

    The debit happens before the side is recorded. If the ledger raises,
    nothing in the room changes. Returns the new balance (None for fillers).
    """
    if not room.has_member(participant):
        raise NotInRoom()
    if room.state in (RoomState.SETTLING, RoomState.CLOSED):
        raise GameInProgress()
    if room.state is RoomState.TIMER_RUNNING and room.window_closed(now):
        raise GameInProgress()
    committed = room.side_of(participant)
    if committed is not None:
        raise AlreadyCommitted(committed.value)

    new_balance: int | None = None
    if isinstance(participant, RealParticipant):
        balance = await ledger.get(participant.user_id)
        if balance < room.stake_tier:
            raise InsufficientBalance(required=room.stake_tier, available=balance)
        new_balance = await ledger.adjust(participant.user_id, -room.stake_tier)

    (room.green if side is Side.GREEN else room.red).append(participant)
    logger.info(f"{participant} bet {side.value} in {room.id}")
    return new_balance


def leave(room: Room, participant: Participant) -> Side | None:
    """Remove ``participant`` everywhere. Any debited stake is forfeited.

    Returns the side the participant had committed to, if any.
    """
    side = room.side_of(participant)
    room.members = [m for m in room.members if m != participant]
    room.green = [m for m in room.green if m != participant]
    room.red = [m for m in room.red if m != participant]
    if side is not None:
        logger.info(f"{participant} left {room.id} after betting {side.value}; stake forfeited")
    return side
