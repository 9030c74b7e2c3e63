"""Tests for per-user action cooldowns."""

import pytest

from luckyclick.config import CooldownConfig
from luckyclick.errors import RateLimited
from luckyclick.game import CooldownTracker

from tests.conftest import FakeClock


def test_check_opens_window_per_action() -> None:
    clock = FakeClock()
    tracker = CooldownTracker(CooldownConfig(), clock=clock)

    assert tracker.check(1, "withdraw")
    assert not tracker.check(1, "withdraw")
    assert tracker.check(1, "bet")
    assert tracker.check(2, "withdraw")

    clock.advance(59)
    assert not tracker.check(1, "withdraw")
    clock.advance(1)
    assert tracker.check(1, "withdraw")


def test_unknown_action_uses_default_window() -> None:
    clock = FakeClock()
    tracker = CooldownTracker(CooldownConfig(default_seconds=5, actions={}), clock=clock)

    assert tracker.window("anything") == 5
    tracker.require(1, "anything")
    clock.advance(2)
    assert tracker.remaining(1, "anything") == 3


def test_require_reports_retry_after() -> None:
    clock = FakeClock()
    tracker = CooldownTracker(CooldownConfig(), clock=clock)

    tracker.require(1, "check_deposit")
    clock.advance(15)
    with pytest.raises(RateLimited) as exc_info:
        tracker.require(1, "check_deposit")

    assert exc_info.value.retry_after == 45
    assert exc_info.value.message == "Please wait 45 s before trying again."


def test_clear_resets_user() -> None:
    tracker = CooldownTracker(CooldownConfig(), clock=FakeClock())
    tracker.require(1, "bet")
    tracker.require(1, "withdraw")

    tracker.clear(1, "bet")
    assert tracker.remaining(1, "bet") == 0
    assert tracker.remaining(1, "withdraw") > 0

    tracker.clear(1)
    assert tracker.remaining(1, "withdraw") == 0
