"""Quorum policy and betting-window orchestration.

A room needs ``quorum`` participants before its betting window opens. The
first join below quorum starts a grace timer; when it fires with quorum still
unmet, fillers with random sides make up the difference.
"""

from __future__ import annotations

import logging
import random
from datetime import timedelta
from typing import Awaitable, Callable
from uuid import uuid4

from luckyclick import messages
from luckyclick.config import GameConfig
from luckyclick.notify import NotificationSink
from luckyclick.timers import TimerService

from .models import AVAILABLE_STATES, Participant, RoomState, Side, SyntheticParticipant
from .room import Room

logger = logging.getLogger(__name__)

DeadlineCallback = Callable[[Room, int], Awaitable[object]]


class QuorumScheduler:
    """Arms grace timers and betting windows for rooms."""

    def __init__(
        self,
        timers: TimerService,
        notifier: NotificationSink,
        config: GameConfig,
        on_deadline: DeadlineCallback,
        rng: random.Random | None = None,
    ):
        self.timers = timers
        self.notifier = notifier
        self.config = config
        self.on_deadline = on_deadline
        self.rng = rng or random.Random()

    async def on_join(self, room: Room, participant: Participant) -> None:
        """Run the quorum transition after ``participant`` joined. Caller holds the lock."""
        if room.state is RoomState.TIMER_RUNNING:
            await self.notifier.send(
                participant,
                messages.LATE_JOIN.format(
                    room_id=room.id,
                    seconds_left=room.seconds_left(self.timers.now()),
                ),
            )
            return

        if len(room.members) >= self.config.quorum:
            await self.arm_betting_window(room)
            return

        if not room.grace_pending:
            room.set_grace_timer(
                self.timers.call_later(
                    self.config.grace_seconds,
                    self._grace_fired,
                    room,
                    room.round_number,
                    name=f"grace-{room.id}",
                )
            )
            room.state = RoomState.AWAITING_QUORUM
            logger.info(
                f"{room.id} awaiting quorum ({len(room.members)}/{self.config.quorum}), "
                f"grace {self.config.grace_seconds}s"
            )

        await self.notifier.send(
            participant,
            messages.WAITING_FOR_PLAYERS.format(room_id=room.id, quorum=self.config.quorum),
        )

    async def _grace_fired(self, room: Room, round_number: int) -> None:
        async with room.lock:
            await self.on_grace_expired(room, round_number)

    async def on_grace_expired(
        self, room: Room, round_number: int | None = None
    ) -> list[SyntheticParticipant]:
        """Fill the room with synthetic participants and start the round.

        Returns the fillers added (empty when the room no longer needs them).
        """
        if round_number is not None and round_number != room.round_number:
            return []
        room.cancel_grace_timer()
        if room.state not in AVAILABLE_STATES or room.window_armed:
            return []

        if not room.real_members:
            logger.info(f"{room.id} grace expired with no players; resetting")
            room.reset()
            return []

        missing = self.config.quorum - len(room.members)
        if missing <= 0:
            await self.arm_betting_window(room)
            return []

        fillers = self.fill_with_synthetic(room, missing)
        await self.arm_betting_window(room)
        return fillers

    def fill_with_synthetic(self, room: Room, count: int) -> list[SyntheticParticipant]:
        """Add ``count`` fillers, each committed to a uniformly random side."""
        fillers = []
        for _ in range(count):
            filler = SyntheticParticipant(filler_id=f"{room.id}-{uuid4().hex[:8]}")
            side = self.rng.choice([Side.GREEN, Side.RED])
            room.members.append(filler)
            (room.green if side is Side.GREEN else room.red).append(filler)
            fillers.append(filler)
            logger.debug(f"{filler} filled {room.id} on {side.value}")
        logger.info(f"Added {count} fillers to {room.id}")
        return fillers

    async def arm_betting_window(self, room: Room) -> None:
        """Open the betting window: deadline, settlement timer, countdown reminders."""
        if room.window_armed:
            return
        room.cancel_grace_timer()

        window = self.config.betting_window_seconds
        room.round_number += 1
        room.state = RoomState.TIMER_RUNNING
        room.deadline = self.timers.now() + timedelta(seconds=window)

        handles = [
            self.timers.call_later(
                window,
                self.on_deadline,
                room,
                room.round_number,
                name=f"settle-{room.id}",
            )
        ]
        for seconds_left in sorted(set(self.config.countdown_checkpoints), reverse=True):
            if 0 < seconds_left < window:
                handles.append(
                    self.timers.call_later(
                        window - seconds_left,
                        self.send_reminder,
                        room,
                        room.round_number,
                        seconds_left,
                        name=f"countdown-{room.id}-{seconds_left}",
                    )
                )
        room.set_window_timers(handles)

        logger.info(
            f"{room.id} round {room.round_number} started with "
            f"{len(room.members)} members, deadline {room.deadline.isoformat()}"
        )
        await self.notifier.broadcast(
            room.members,
            messages.TIMER_STARTED.format(room_id=room.id, seconds=round(window)),
        )

    async def send_reminder(self, room: Room, round_number: int, seconds_left: int) -> None:
        if room.state is not RoomState.TIMER_RUNNING or room.round_number != round_number:
            return
        await self.notifier.broadcast(
            room.members,
            messages.COUNTDOWN.format(room_id=room.id, seconds_left=seconds_left),
        )
