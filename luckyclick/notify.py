"""Outbound notifications: best-effort, never raised into game logic."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Iterable

if TYPE_CHECKING:
    from luckyclick.game.models import RealParticipant, SyntheticParticipant

logger = logging.getLogger(__name__)


class NotificationSink(ABC):
    """Delivers text to chats. Synthetic participants are filtered out here."""

    @abstractmethod
    async def deliver(self, chat_id: int | str, text: str) -> None:
        """Transport-specific delivery. May raise; callers go through notify_chat."""

    async def notify_chat(self, chat_id: int | str, text: str) -> bool:
        """Deliver to a raw chat id, logging instead of raising on failure."""
        try:
            await self.deliver(chat_id, text)
            return True
        except Exception as e:
            logger.warning(f"Notification to {chat_id} failed: {e}")
            return False

    async def send(
        self, participant: RealParticipant | SyntheticParticipant, text: str
    ) -> bool:
        if participant.is_synthetic:
            return False
        return await self.notify_chat(participant.user_id, text)

    async def broadcast(
        self,
        participants: Iterable[RealParticipant | SyntheticParticipant],
        text: str,
    ) -> int:
        """Send to every real participant. Returns how many deliveries succeeded."""
        delivered = 0
        for participant in list(participants):
            if await self.send(participant, text):
                delivered += 1
        return delivered

