"""Settlement: minority side wins the pool minus the rake.

Formulas:
- total = (green + red) * stake
- rake = floor(total * rake_percent / 100)
- pool = total - rake
- reward = floor(pool / winners), winners counting fillers
- Tie (including 0 vs 0): every real bettor gets the stake back, no rake
"""

from __future__ import annotations

import logging
from datetime import datetime

from luckyclick import messages
from luckyclick.ledger import BalanceLedger
from luckyclick.notify import NotificationSink

from .models import (
    Participant,
    RealParticipant,
    RoomState,
    SettlementOutcome,
    SettlementReport,
    Side,
)
from .room import Room

logger = logging.getLogger(__name__)

DEFAULT_RAKE_PERCENT = 20


def compute_outcome(
    green_count: int,
    red_count: int,
    stake: int,
    rake_percent: int = DEFAULT_RAKE_PERCENT,
) -> SettlementOutcome:
    """Apply the minority-wins rule to side counts."""
    total = (green_count + red_count) * stake
    rake = total * rake_percent // 100
    pool = total - rake

    if green_count < red_count:
        winning_side, winners = Side.GREEN, green_count
    elif red_count < green_count:
        winning_side, winners = Side.RED, red_count
    else:
        return SettlementOutcome(
            green_count=green_count,
            red_count=red_count,
            stake=stake,
            total=total,
            rake=0,
            pool=total,
        )

    return SettlementOutcome(
        green_count=green_count,
        red_count=red_count,
        stake=stake,
        total=total,
        rake=rake,
        pool=pool,
        winning_side=winning_side,
        reward=pool // winners,
    )


class SettlementEngine:
    """Settles a room at its deadline and recycles it."""

    def __init__(
        self,
        ledger: BalanceLedger,
        notifier: NotificationSink,
        rake_percent: int = DEFAULT_RAKE_PERCENT,
    ):
        self.ledger = ledger
        self.notifier = notifier
        self.rake_percent = rake_percent

    async def settle(
        self,
        room: Room,
        now: datetime,
        round_number: int | None = None,
    ) -> SettlementReport | None:
        """Settle ``room`` once.

        A room that is not TIMER_RUNNING, or whose round has moved on since the
        timer was armed, is left untouched and None is returned.
        """
        if room.state is not RoomState.TIMER_RUNNING:
            logger.debug(f"Ignoring settlement for {room.id} in state {room.state.value}")
            return None
        if round_number is not None and round_number != room.round_number:
            logger.warning(
                f"Ignoring stale settlement for {room.id} "
                f"(round {round_number}, current {room.round_number})"
            )
            return None

        room.state = RoomState.SETTLING
        outcome = compute_outcome(
            len(room.green), len(room.red), room.stake_tier, self.rake_percent
        )
        report = SettlementReport(
            room_id=room.id,
            round_number=room.round_number,
            outcome=outcome,
            settled_at=now,
        )

        if outcome.is_tie:
            await self._credit_all(room.bettors(), room.stake_tier, report)
            logger.info(
                f"{room.id} round {room.round_number}: tie "
                f"{outcome.green_count}-{outcome.red_count}, refunded {len(report.credited)}"
            )
            await self.notifier.broadcast(
                room.members, messages.TIE.format(room_id=room.id)
            )
        else:
            winners = room.green if outcome.winning_side is Side.GREEN else room.red
            await self._credit_all(winners, outcome.reward, report)
            report.real_winner_count = sum(
                1 for w in winners if isinstance(w, RealParticipant)
            )
            logger.info(
                f"{room.id} round {room.round_number}: {outcome.winning_side.value} wins "
                f"{outcome.green_count}-{outcome.red_count}, total={outcome.total} "
                f"rake={outcome.rake} reward={outcome.reward} "
                f"real_winners={report.real_winner_count}"
            )
            await self.notifier.broadcast(
                room.members,
                messages.RESULT.format(
                    room_id=room.id,
                    side=outcome.winning_side.label,
                    reward=outcome.reward,
                    winner_count=report.real_winner_count or 1,
                ),
            )

        await self._close(room)
        return report

    async def _credit_all(
        self,
        participants: list[Participant],
        amount: int,
        report: SettlementReport,
    ) -> None:
        """Credit every real participant; one failure does not stop the rest."""
        for participant in list(participants):
            if not isinstance(participant, RealParticipant):
                continue
            try:
                await self.ledger.adjust(participant.user_id, amount)
                report.credited[participant.user_id] = amount
            except Exception as e:
                logger.error(
                    f"Credit of {amount} to {participant.user_id} "
                    f"in {report.room_id} failed: {e}"
                )
                report.failed_credits.append(participant.user_id)

    async def _close(self, room: Room) -> None:
        former = room.real_members
        room.state = RoomState.CLOSED
        room.reset()
        left = messages.LEFT_ROOM.format(room_id=room.id)
        for participant in former:
            await self.notifier.send(participant, left)
