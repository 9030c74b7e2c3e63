"""Telegram command and callback handlers.

Thin layer: parse the update, apply the cooldown gate, call the game or
wallet service, render the result or the error message.
"""

from __future__ import annotations

import logging

from telegram import Update
from telegram.ext import (
    Application,
    CallbackQueryHandler,
    CommandHandler,
    ContextTypes,
    MessageHandler,
    filters,
)

from luckyclick import messages
from luckyclick.config import Settings
from luckyclick.errors import AlreadyJoined, LuckyClickError, RateLimited
from luckyclick.game import GameService, Room, Side
from luckyclick.wallet import DepositChecker, WithdrawalSessions, WithdrawalStep

from . import keyboards

logger = logging.getLogger(__name__)


class BotHandlers:
    """Handlers bound to the running game and wallet services."""

    def __init__(
        self,
        game: GameService,
        deposits: DepositChecker,
        withdrawals: WithdrawalSessions,
        settings: Settings,
    ):
        self.game = game
        self.deposits = deposits
        self.withdrawals = withdrawals
        self.settings = settings

    def register(self, application: Application) -> None:
        application.add_handler(CommandHandler("start", self.start))
        application.add_handler(CommandHandler("balance", self.balance))
        application.add_handler(CommandHandler("play", self.choose_stake))
        application.add_handler(CommandHandler("rooms", self.list_rooms))
        application.add_handler(CommandHandler("checkton", self.check_deposit))
        application.add_handler(CommandHandler("withdraw", self.withdraw))
        application.add_handler(CommandHandler("cancel", self.cancel))
        application.add_handler(
            MessageHandler(filters.Text([keyboards.BTN_JOIN]), self.choose_stake)
        )
        application.add_handler(
            MessageHandler(filters.Text([keyboards.BTN_BALANCE]), self.balance)
        )
        application.add_handler(
            MessageHandler(filters.Text([keyboards.BTN_DEPOSIT]), self.deposit_instructions)
        )
        application.add_handler(
            MessageHandler(filters.Text([keyboards.BTN_WITHDRAW]), self.withdraw)
        )
        application.add_handler(
            CallbackQueryHandler(self.join, pattern=keyboards.JOIN_PATTERN)
        )
        application.add_handler(
            CallbackQueryHandler(self.watch, pattern=keyboards.WATCH_PATTERN)
        )
        application.add_handler(
            CallbackQueryHandler(self.bet, pattern=keyboards.BET_PATTERN)
        )
        application.add_handler(
            CallbackQueryHandler(self.leave, pattern=keyboards.LEAVE_PATTERN)
        )
        application.add_handler(
            MessageHandler(filters.TEXT & ~filters.COMMAND, self.dialog_text)
        )
        application.add_error_handler(self.on_error)

    async def start(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        await update.effective_message.reply_text(
            messages.WELCOME.format(coins_per_ton=self.settings.wallet.coins_per_ton),
            reply_markup=keyboards.main_menu(),
        )

    async def balance(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        try:
            view = await self.game.get_balance_view(update.effective_user.id)
        except LuckyClickError as e:
            await update.effective_message.reply_text(e.message)
            return
        await update.effective_message.reply_text(
            messages.BALANCE.format(
                coins=view.coins,
                ton=view.ton,
                coins_per_ton=self.settings.wallet.coins_per_ton,
            )
        )

    async def choose_stake(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        await update.effective_message.reply_text(
            messages.CHOOSE_STAKE,
            reply_markup=keyboards.stake_menu(self.game.registry.stake_tiers),
        )

    async def list_rooms(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        markup = keyboards.rooms_menu(self.game.registry.rooms())
        if markup is None:
            await self.choose_stake(update, context)
            return
        await update.effective_message.reply_text(messages.ROOMS, reply_markup=markup)

    async def join(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        query = update.callback_query
        stake_tier = int(context.matches[0].group(1))
        try:
            await self.game.join_room(
                stake_tier, update.effective_user.id, on_joined=self._room_entered(update)
            )
        except AlreadyJoined as e:
            await query.answer(e.message)
            return
        except LuckyClickError as e:
            await query.answer(e.message, show_alert=True)
            return
        await query.answer()

    async def watch(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        query = update.callback_query
        room_id = context.matches[0].group(1)
        try:
            await self.game.join_room_by_id(
                room_id, update.effective_user.id, on_joined=self._room_entered(update)
            )
        except LuckyClickError as e:
            await query.answer(e.message, show_alert=True)
            return
        await query.answer()

    def _room_entered(self, update: Update):
        """Room greeting with the bet keyboard, sent ahead of the quorum notices."""

        async def send(room: Room) -> None:
            await update.effective_chat.send_message(
                messages.JOINED_ROOM.format(room_id=room.id),
                reply_markup=keyboards.bet_menu(room.id),
            )

        return send

    async def bet(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        query = update.callback_query
        match = context.matches[0]
        side, room_id = Side(match.group(1)), match.group(2)
        user_id = update.effective_user.id
        await query.answer()
        try:
            self.game.require_cooldown(user_id, "bet")
            receipt = await self.game.place_bet(room_id, user_id, side)
        except RateLimited as e:
            await update.effective_chat.send_message(e.message)
            return
        except LuckyClickError as e:
            self.game.release_cooldown(user_id, "bet")
            await update.effective_chat.send_message(e.message)
            return
        await update.effective_chat.send_message(
            messages.BET_ACCEPTED.format(room_id=receipt.room_id, side=receipt.side.label)
        )

    async def leave(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        query = update.callback_query
        room_id = context.matches[0].group(1)
        await query.answer()
        try:
            result = await self.game.leave_room(room_id, update.effective_user.id)
        except LuckyClickError as e:
            await update.effective_chat.send_message(e.message)
            return
        await update.effective_chat.send_message(
            messages.LEFT_ROOM.format(room_id=result.room_id)
        )

    async def deposit_instructions(
        self, update: Update, context: ContextTypes.DEFAULT_TYPE
    ) -> None:
        message = update.effective_message
        await message.reply_text(messages.DEPOSIT_INSTRUCTIONS)
        await message.reply_text(self.settings.ton_wallet or "(wallet not configured)")
        await message.reply_text(
            messages.DEPOSIT_COMMENT.format(user_id=update.effective_user.id)
        )

    async def check_deposit(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        user_id = update.effective_user.id
        try:
            self.game.require_cooldown(user_id, "check_deposit")
            receipt = await self.deposits.check_deposit(user_id)
        except LuckyClickError as e:
            await update.effective_message.reply_text(e.message)
            return
        await update.effective_message.reply_text(
            messages.DEPOSIT_CREDITED.format(credited=receipt.credited, balance=receipt.balance)
        )

    async def withdraw(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        user = update.effective_user
        args = context.args or []
        if len(args) >= 2:
            try:
                self.game.require_cooldown(user.id, "withdraw")
                request = await self.withdrawals.desk.request_withdrawal(
                    user.id, args[0], args[1], display_name=user.first_name or ""
                )
            except RateLimited as e:
                await update.effective_message.reply_text(e.message)
                return
            except LuckyClickError as e:
                self.game.release_cooldown(user.id, "withdraw")
                await update.effective_message.reply_text(e.message)
                return
            await update.effective_message.reply_text(
                messages.WITHDRAW_ACCEPTED.format(ton=request.ton)
            )
            return

        self.withdrawals.start(user.id)
        await update.effective_message.reply_text(messages.WITHDRAW_ASK_ADDRESS)

    async def cancel(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        if self.withdrawals.cancel(update.effective_user.id):
            await update.effective_message.reply_text(messages.WITHDRAW_CANCELLED)

    async def dialog_text(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        """Free text only matters while a withdrawal dialog is open."""
        user = update.effective_user
        session = self.withdrawals.get(user.id)
        if session is None:
            return

        text = update.effective_message.text or ""
        try:
            if session.step is WithdrawalStep.AWAITING_ADDRESS:
                self.withdrawals.submit_address(user.id, text)
                view = await self.game.get_balance_view(user.id)
                await update.effective_message.reply_text(
                    messages.WITHDRAW_ASK_AMOUNT.format(balance=view.coins)
                )
                return

            self.game.require_cooldown(user.id, "withdraw")
            try:
                request = await self.withdrawals.submit_amount(
                    user.id, text, display_name=user.first_name or ""
                )
            except LuckyClickError:
                self.game.release_cooldown(user.id, "withdraw")
                raise
        except LuckyClickError as e:
            await update.effective_message.reply_text(e.message)
            return

        if request is not None:
            await update.effective_message.reply_text(
                messages.WITHDRAW_ACCEPTED.format(ton=request.ton)
            )

    async def on_error(self, update: object, context: ContextTypes.DEFAULT_TYPE) -> None:
        logger.error(
            f"Unhandled error while processing {update}: {context.error}",
            exc_info=context.error,
        )
