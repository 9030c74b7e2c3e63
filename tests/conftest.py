"""Shared fixtures: a hand-driven clock, a recording notifier, a game wired to both."""

import random
from datetime import datetime, timedelta, timezone
from typing import Any

import pytest

from luckyclick.config import CooldownConfig, GameConfig
from luckyclick.errors import Unavailable
from luckyclick.game import CooldownTracker, GameService
from luckyclick.ledger import InMemoryLedger
from luckyclick.notify import NotificationSink
from luckyclick.timers import TimerCallback, TimerHandle, TimerService

START = datetime(2026, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


class ManualHandle(TimerHandle):
    def __init__(self, due: datetime, callback: TimerCallback, args: tuple, name: str):
        self.due = due
        self.callback = callback
        self.args = args
        self.name = name
        self.fired = False
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled


class ManualTimers(TimerService):
    """Callbacks run only when the test advances the clock."""

    def __init__(self, start: datetime = START):
        self._now = start
        self.handles: list[ManualHandle] = []

    def now(self) -> datetime:
        return self._now

    def call_later(
        self, delay: float, callback: TimerCallback, *args: Any, name: str = ""
    ) -> ManualHandle:
        handle = ManualHandle(self._now + timedelta(seconds=delay), callback, args, name)
        self.handles.append(handle)
        return handle

    def pending(self, prefix: str = "") -> list[ManualHandle]:
        return [
            h
            for h in self.handles
            if not h.cancelled and not h.fired and h.name.startswith(prefix)
        ]

    async def advance(self, seconds: float) -> None:
        """Move the clock forward, firing due callbacks in deadline order."""
        target = self._now + timedelta(seconds=seconds)
        while True:
            due = [h for h in self.pending() if h.due <= target]
            if not due:
                break
            handle = min(due, key=lambda h: h.due)
            self._now = max(self._now, handle.due)
            handle.fired = True
            await handle.callback(*handle.args)
        self._now = target


class RecordingNotifier(NotificationSink):
    def __init__(self, failing: set[int | str] | None = None):
        self.sent: list[tuple[int | str, str]] = []
        self.failing = set(failing or ())

    async def deliver(self, chat_id: int | str, text: str) -> None:
        if chat_id in self.failing:
            raise RuntimeError(f"chat {chat_id} unreachable")
        self.sent.append((chat_id, text))

    def texts(self, chat_id: int | str) -> list[str]:
        return [text for cid, text in self.sent if cid == chat_id]


class FlakyLedger(InMemoryLedger):
    """InMemoryLedger whose adjust fails for selected users."""

    def __init__(self, balances: dict[int, int] | None = None, failing: set[int] | None = None):
        super().__init__(balances)
        self.failing = set(failing or ())

    async def adjust(self, user_id: int, delta: int) -> int:
        if user_id in self.failing:
            raise Unavailable()
        return await super().adjust(user_id, delta)


class FakeClock:
    def __init__(self, start: float = 1000.0):
        self.value = start

    def __call__(self) -> float:
        return self.value

    def advance(self, seconds: float) -> None:
        self.value += seconds


@pytest.fixture
def timers() -> ManualTimers:
    return ManualTimers()


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def ledger() -> InMemoryLedger:
    return InMemoryLedger({1: 1000, 2: 1000, 3: 1000, 4: 1000, 5: 1000})


@pytest.fixture
def game_config() -> GameConfig:
    return GameConfig()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def game(game_config, ledger, notifier, timers, clock) -> GameService:
    return GameService(
        game_config,
        ledger,
        notifier,
        timers,
        cooldowns=CooldownTracker(CooldownConfig(), clock=clock),
        rng=random.Random(7),
    )
