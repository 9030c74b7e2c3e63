"""Reply and inline keyboards, and the callback-data formats they use."""

import re

from telegram import InlineKeyboardButton, InlineKeyboardMarkup, ReplyKeyboardMarkup

from luckyclick.game import Room, RoomState, Side

BTN_JOIN = "🟢 Join room"
BTN_BALANCE = "💰 Balance"
BTN_DEPOSIT = "➕ Deposit"
BTN_WITHDRAW = "📤 Withdraw"

JOIN_PATTERN = re.compile(r"^join_(\d+)$")
WATCH_PATTERN = re.compile(r"^watch_(\d+_room_\d+)$")
BET_PATTERN = re.compile(r"^bet_(green|red)_(\d+_room_\d+)$")
LEAVE_PATTERN = re.compile(r"^leave_(\d+_room_\d+)$")


def main_menu() -> ReplyKeyboardMarkup:
    return ReplyKeyboardMarkup(
        [[BTN_JOIN, BTN_BALANCE], [BTN_DEPOSIT, BTN_WITHDRAW]],
        resize_keyboard=True,
    )


def stake_menu(stake_tiers: list[int]) -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup(
        [
            [InlineKeyboardButton(f"{tier} coins", callback_data=f"join_{tier}")]
            for tier in stake_tiers
        ]
    )


def bet_menu(room_id: str) -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup(
        [
            [InlineKeyboardButton(Side.GREEN.label, callback_data=f"bet_green_{room_id}")],
            [InlineKeyboardButton(Side.RED.label, callback_data=f"bet_red_{room_id}")],
            [InlineKeyboardButton("🚪 Leave", callback_data=f"leave_{room_id}")],
        ]
    )


def rooms_menu(rooms: list[Room]) -> InlineKeyboardMarkup | None:
    """One join button per room that still accepts members."""
    buttons = [
        [
            InlineKeyboardButton(
                f"{room.id} · {len(room.members)} in · {room.state.value}",
                callback_data=f"watch_{room.id}",
            )
        ]
        for room in rooms
        if room.state not in (RoomState.SETTLING, RoomState.CLOSED)
    ]
    return InlineKeyboardMarkup(buttons) if buttons else None
