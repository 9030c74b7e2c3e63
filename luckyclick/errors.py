"""Game and wallet exceptions.

Every error here is recoverable by the user and is shown to them as-is by
the chat layer.
"""


class LuckyClickError(Exception):
    """Base LuckyClick exception."""

    code = "error"
    default_message = "Something went wrong."

    def __init__(self, message: str | None = None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message


class AlreadyJoined(LuckyClickError):
    """Participant is already a member of the room."""

    code = "already_joined"
    default_message = "You are already in this room."

    def __init__(self, message: str | None = None, room_id: str | None = None):
        super().__init__(message)
        self.room_id = room_id


class NotInRoom(LuckyClickError):
    """Participant is not a member of the room (or the room does not exist)."""

    code = "not_in_room"
    default_message = "You are not in this room."


class GameInProgress(LuckyClickError):
    """Room is settling or the betting window already closed."""

    code = "game_in_progress"
    default_message = "The game has already started."


class AlreadyCommitted(LuckyClickError):
    """Participant already placed a bet in this room."""

    code = "already_committed"

    def __init__(self, side: str):
        super().__init__(f"You already chose {side}.")
        self.side = side


class InsufficientBalance(LuckyClickError):
    """Balance is lower than the required amount."""

    code = "insufficient_balance"
    default_message = "Not enough coins."

    def __init__(self, required: int, available: int):
        super().__init__(f"Not enough coins: need {required}, have {available}.")
        self.required = required
        self.available = available


class InvalidAmount(LuckyClickError):
    """Amount or stake tier is not acceptable."""

    code = "invalid_amount"
    default_message = "Invalid amount."


class InvalidAddress(LuckyClickError):
    """Malformed TON wallet address."""

    code = "invalid_address"
    default_message = "Invalid TON address."


class Unavailable(LuckyClickError):
    """Storage or network backend could not be reached."""

    code = "unavailable"
    default_message = "Service temporarily unavailable, try again later."


class RateLimited(LuckyClickError):
    """Action invoked again inside its cooldown window."""

    code = "rate_limited"
    default_message = "Please wait a little before trying again."

    def __init__(self, action: str, retry_after: float):
        super().__init__(
            f"Please wait {max(1, round(retry_after))} s before trying again."
        )
        self.action = action
        self.retry_after = retry_after


class DepositNotFound(LuckyClickError):
    """No incoming transfer tagged with the user id was found."""

    code = "deposit_not_found"
    default_message = "Transfer not found."


class AlreadyProcessed(LuckyClickError):
    """Deposit transaction was already credited."""

    code = "already_processed"
    default_message = "This transfer has already been credited."
