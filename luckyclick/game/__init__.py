"""Room lifecycle and settlement engine."""

from .models import (
    BalanceView,
    BetReceipt,
    JoinResult,
    LeaveResult,
    Participant,
    RealParticipant,
    RoomState,
    SettlementOutcome,
    SettlementReport,
    Side,
    SyntheticParticipant,
)
from .room import Room
from .registry import RoomRegistry
from .cooldown import CooldownTracker
from .settlement import SettlementEngine, compute_outcome
from .quorum import QuorumScheduler
from .service import GameService

__all__ = [
    "BalanceView",
    "BetReceipt",
    "JoinResult",
    "LeaveResult",
    "Participant",
    "RealParticipant",
    "SyntheticParticipant",
    "RoomState",
    "Side",
    "SettlementOutcome",
    "SettlementReport",
    "Room",
    "RoomRegistry",
    "CooldownTracker",
    "SettlementEngine",
    "compute_outcome",
    "QuorumScheduler",
    "GameService",
]
