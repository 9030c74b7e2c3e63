"""User-facing message templates."""

WELCOME = (
    "🎮 Welcome to LuckyClick!\n"
    "1 TON = {coins_per_ton} coins\n"
    "Choose an action:"
)

CHOOSE_STAKE = "Choose the stake for your game:"
ROOMS = "Rooms you can join:"
JOINED_ROOM = "You entered room [{room_id}]. Place your bet:"
LATE_JOIN = (
    "[{room_id}] Betting closes in {seconds_left} s. "
    "Bet now or you will sit this round out."
)
WAITING_FOR_PLAYERS = (
    "[{room_id}] Waiting for other players. "
    "The round starts with {quorum} participants."
)
TIMER_STARTED = "[{room_id}] Timer: {seconds} s until betting closes!"
COUNTDOWN = "[{room_id}] {seconds_left}..."
BET_ACCEPTED = "[{room_id}] Bet accepted: {side}"
TIE = "[{room_id}] It's a tie! Stakes have been returned."
RESULT = (
    "[{room_id}] Team {side} wins. Reward: {reward} coins each. "
    "Winners: {winner_count}"
)
LEFT_ROOM = "You left room [{room_id}]."

BALANCE = "Your balance: {coins} coins (≈ {ton:.3f} TON, 1 TON = {coins_per_ton} coins)"

DEPOSIT_INSTRUCTIONS = "Send TON to this address:"
DEPOSIT_COMMENT = "Put this in the transfer comment: {user_id}\nAfter paying, send /checkton"
DEPOSIT_CREDITED = "Balance topped up by {credited} coins. Current balance: {balance}"
DEPOSIT_BELOW_MINIMUM = "Minimum deposit is {minimum} TON."

WITHDRAW_ASK_ADDRESS = "Send the TON address to withdraw to (or /cancel):"
WITHDRAW_ASK_AMOUNT = "How many coins do you want to withdraw? Balance: {balance}"
WITHDRAW_ACCEPTED = "Withdrawal of {ton} TON accepted. Please wait for the transfer."
WITHDRAW_CANCELLED = "Withdrawal cancelled."
WITHDRAW_ADMIN = (
    "📤 Withdrawal request:\n"
    "👤 {display_name} ({user_id})\n"
    "💸 {amount} coins (≈ {ton} TON)\n"
    "📮 {address}"
)
