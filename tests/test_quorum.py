"""Tests for grace timers, filler injection and the betting window."""

import asyncio
import random

from luckyclick.config import GameConfig
from luckyclick.game import QuorumScheduler, RealParticipant, Room, RoomState
from luckyclick.game import room as room_ops

from tests.conftest import ManualTimers, RecordingNotifier


def _scheduler(timers: ManualTimers, notifier: RecordingNotifier, deadlines: list):
    async def on_deadline(room: Room, round_number: int) -> None:
        deadlines.append((room.id, round_number, timers.now()))

    return QuorumScheduler(
        timers, notifier, GameConfig(), on_deadline=on_deadline, rng=random.Random(1)
    )


async def _join(scheduler: QuorumScheduler, room: Room, user_id: int) -> RealParticipant:
    participant = RealParticipant(user_id=user_id)
    room_ops.join(room, participant)
    await scheduler.on_join(room, participant)
    return participant


def test_grace_expiry_fills_missing_slots(timers, notifier) -> None:
    deadlines: list = []
    scheduler = _scheduler(timers, notifier, deadlines)
    room = Room(id="100_room_1", stake_tier=100)

    async def run() -> None:
        await _join(scheduler, room, 1)
        assert room.state is RoomState.AWAITING_QUORUM
        assert room.grace_pending

        await timers.advance(9)
        assert room.state is RoomState.AWAITING_QUORUM

        await timers.advance(1)

    asyncio.run(run())

    fillers = [m for m in room.members if m.is_synthetic]
    assert len(fillers) == 2
    assert room.state is RoomState.TIMER_RUNNING
    assert room.round_number == 1
    assert len(room.green) + len(room.red) == 2
    assert not set(room.green) & set(room.red)
    assert "Timer: 30 s" in notifier.texts(1)[-1]


def test_second_join_does_not_restart_grace(timers, notifier) -> None:
    scheduler = _scheduler(timers, notifier, [])
    room = Room(id="100_room_1", stake_tier=100)

    async def run() -> None:
        await _join(scheduler, room, 1)
        await timers.advance(6)
        await _join(scheduler, room, 2)
        await timers.advance(4)

    asyncio.run(run())

    assert room.state is RoomState.TIMER_RUNNING
    assert len(room.members) == 3
    assert len(timers.pending("grace")) == 0


def test_quorum_arms_window_and_cancels_grace(timers, notifier) -> None:
    deadlines: list = []
    scheduler = _scheduler(timers, notifier, deadlines)
    room = Room(id="100_room_1", stake_tier=100)

    async def run() -> None:
        for user_id in (1, 2, 3):
            await _join(scheduler, room, user_id)
        assert room.state is RoomState.TIMER_RUNNING
        assert timers.pending("grace") == []

        await timers.advance(10)
        assert all(not m.is_synthetic for m in room.members)

        await timers.advance(20)

    asyncio.run(run())

    assert deadlines == [("100_room_1", 1, room.deadline)]
    countdown = [t for t in notifier.texts(1) if t.endswith("...")]
    assert countdown == [f"[100_room_1] {s}..." for s in (5, 4, 3, 2, 1)]


def test_late_join_is_told_remaining_time(timers, notifier) -> None:
    scheduler = _scheduler(timers, notifier, [])
    room = Room(id="100_room_1", stake_tier=100)

    async def run() -> None:
        for user_id in (1, 2, 3):
            await _join(scheduler, room, user_id)
        await timers.advance(12)
        await _join(scheduler, room, 4)

    asyncio.run(run())

    assert notifier.texts(4) == [
        "[100_room_1] Betting closes in 18 s. Bet now or you will sit this round out."
    ]
    assert len(timers.pending("settle")) == 1


def test_grace_with_nobody_left_resets_room(timers, notifier) -> None:
    scheduler = _scheduler(timers, notifier, [])
    room = Room(id="100_room_1", stake_tier=100)

    async def run() -> None:
        alice = await _join(scheduler, room, 1)
        room_ops.leave(room, alice)
        await timers.advance(10)

    asyncio.run(run())

    assert room.state is RoomState.OPEN
    assert room.members == []
    assert timers.pending() == []


def test_stale_grace_callback_is_ignored(timers, notifier) -> None:
    scheduler = _scheduler(timers, notifier, [])
    room = Room(id="100_room_1", stake_tier=100)

    async def run() -> None:
        await _join(scheduler, room, 1)
        room.round_number = 5
        return await scheduler.on_grace_expired(room, round_number=0)

    assert asyncio.run(run()) == []
    assert room.state is RoomState.AWAITING_QUORUM
