"""Tests for callback-data round trips through the bot keyboards."""

from luckyclick.bot import keyboards
from luckyclick.game import Room, RoomState


def _callback_data(markup) -> list[str]:
    return [button.callback_data for row in markup.inline_keyboard for button in row]


def test_stake_and_bet_buttons_match_handler_patterns() -> None:
    stakes = _callback_data(keyboards.stake_menu([100, 300]))
    assert stakes == ["join_100", "join_300"]
    assert keyboards.JOIN_PATTERN.match(stakes[1]).group(1) == "300"

    bets = _callback_data(keyboards.bet_menu("100_room_2"))
    match = keyboards.BET_PATTERN.match(bets[1])
    assert match.groups() == ("red", "100_room_2")
    assert keyboards.LEAVE_PATTERN.match(bets[2]).group(1) == "100_room_2"


def test_rooms_menu_lists_joinable_rooms() -> None:
    running = Room(id="100_room_1", stake_tier=100, state=RoomState.TIMER_RUNNING)
    settling = Room(id="100_room_2", stake_tier=100, state=RoomState.SETTLING)

    markup = keyboards.rooms_menu([running, settling])

    assert _callback_data(markup) == ["watch_100_room_1"]
    assert keyboards.rooms_menu([settling]) is None
