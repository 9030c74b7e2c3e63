"""GameService: the operations the chat layer calls."""

from __future__ import annotations

import logging
import random
from typing import Awaitable, Callable

from luckyclick.config import CooldownConfig, GameConfig
from luckyclick.errors import AlreadyJoined, NotInRoom
from luckyclick.ledger import BalanceLedger
from luckyclick.notify import NotificationSink
from luckyclick.timers import TimerService

from . import room as room_ops
from .cooldown import CooldownTracker
from .models import (
    BalanceView,
    BetReceipt,
    JoinResult,
    LeaveResult,
    RealParticipant,
    SettlementReport,
    Side,
)
from .quorum import QuorumScheduler
from .registry import RoomRegistry
from .room import Room
from .settlement import SettlementEngine

logger = logging.getLogger(__name__)

JoinedCallback = Callable[[Room], Awaitable[object]]


class GameService:
    """Wires registry, quorum scheduling, settlement, ledger and cooldowns.

    Every room mutation happens under ``room.lock`` so operations on one room
    run to completion in arrival order.
    """

    def __init__(
        self,
        config: GameConfig,
        ledger: BalanceLedger,
        notifier: NotificationSink,
        timers: TimerService,
        cooldowns: CooldownTracker | None = None,
        registry: RoomRegistry | None = None,
        rng: random.Random | None = None,
        coins_per_ton: int = 1000,
    ):
        self.config = config
        self.ledger = ledger
        self.notifier = notifier
        self.timers = timers
        self.cooldowns = cooldowns or CooldownTracker(CooldownConfig())
        self.registry = registry or RoomRegistry(config.stake_tiers)
        self.coins_per_ton = coins_per_ton
        self.settlement = SettlementEngine(ledger, notifier, config.rake_percent)
        self.quorum = QuorumScheduler(
            timers, notifier, config, on_deadline=self.on_deadline, rng=rng
        )

    async def join_room(
        self,
        stake_tier: int,
        user_id: int,
        on_joined: JoinedCallback | None = None,
    ) -> JoinResult:
        """Join the first open room of ``stake_tier`` (creating one if needed).

        ``on_joined`` runs once membership is recorded and before any quorum
        or late-join notification goes out.
        """
        participant = RealParticipant(user_id=user_id)
        current = self.registry.room_of(participant)
        if current is not None:
            raise AlreadyJoined(room_id=current.id)

        room = self.registry.find_or_create_room(stake_tier)
        return await self._join(room, participant, on_joined)

    async def join_room_by_id(
        self,
        room_id: str,
        user_id: int,
        on_joined: JoinedCallback | None = None,
    ) -> JoinResult:
        """Join a specific room, including one whose betting window is running."""
        room = self._require_room(room_id)
        participant = RealParticipant(user_id=user_id)
        current = self.registry.room_of(participant)
        if current is not None:
            raise AlreadyJoined(room_id=current.id)
        return await self._join(room, participant, on_joined)

    async def _join(
        self,
        room: Room,
        participant: RealParticipant,
        on_joined: JoinedCallback | None = None,
    ) -> JoinResult:
        async with room.lock:
            late = room_ops.join(room, participant)
            if on_joined is not None:
                try:
                    await on_joined(room)
                except Exception as e:
                    logger.warning(f"Join callback for {participant} in {room.id} failed: {e}")
            await self.quorum.on_join(room, participant)
            return JoinResult(
                room_id=room.id,
                stake_tier=room.stake_tier,
                state=room.state,
                member_count=len(room.members),
                seconds_left=room.seconds_left(self.timers.now()),
                late_join=late,
            )

    async def place_bet(self, room_id: str, user_id: int, side: Side | str) -> BetReceipt:
        side = Side(side)
        room = self._require_room(room_id)
        participant = RealParticipant(user_id=user_id)
        async with room.lock:
            balance = await room_ops.place_bet(
                room, participant, side, self.ledger, self.timers.now()
            )
            return BetReceipt(
                room_id=room.id, side=side, stake=room.stake_tier, balance=balance
            )

    async def leave_room(self, room_id: str, user_id: int) -> LeaveResult:
        room = self._require_room(room_id)
        participant = RealParticipant(user_id=user_id)
        async with room.lock:
            was_member = room.has_member(participant)
            side = room_ops.leave(room, participant)
            return LeaveResult(
                room_id=room.id,
                was_member=was_member,
                forfeited_stake=room.stake_tier if side is not None else 0,
            )

    async def get_balance_view(self, user_id: int) -> BalanceView:
        coins = await self.ledger.get(user_id)
        return BalanceView(
            user_id=user_id, coins=coins, ton=coins / self.coins_per_ton
        )

    def check_cooldown(self, user_id: int, action: str) -> bool:
        return self.cooldowns.check(user_id, action)

    def require_cooldown(self, user_id: int, action: str) -> None:
        self.cooldowns.require(user_id, action)

    def release_cooldown(self, user_id: int, action: str) -> None:
        """Forget the window opened by an attempt that was then rejected."""
        self.cooldowns.clear(user_id, action)

    async def on_deadline(self, room: Room, round_number: int | None = None) -> SettlementReport | None:
        """Betting-window timer callback."""
        async with room.lock:
            return await self.settlement.settle(room, self.timers.now(), round_number)

    def _require_room(self, room_id: str) -> Room:
        room = self.registry.get_room(room_id)
        if room is None:
            raise NotInRoom(f"Room {room_id} not found.")
        return room
