"""Room registry: per-tier pools of recyclable rooms."""

from __future__ import annotations

import logging
from typing import Iterable, Iterator

from luckyclick.errors import InvalidAmount

from .models import Participant
from .room import Room

logger = logging.getLogger(__name__)


class RoomRegistry:
    """Owns every room, partitioned by stake tier in creation order.

    Rooms are never removed; settled rooms are reset in place and reused.
    """

    def __init__(self, stake_tiers: Iterable[int]):
        self._tiers: dict[int, list[Room]] = {int(t): [] for t in stake_tiers}
        self._by_id: dict[str, Room] = {}

    @property
    def stake_tiers(self) -> list[int]:
        return sorted(self._tiers)

    def _tier_rooms(self, stake_tier: int) -> list[Room]:
        rooms = self._tiers.get(stake_tier)
        if rooms is None:
            raise InvalidAmount(f"Unknown stake tier: {stake_tier}")
        return rooms

    def find_or_create_room(self, stake_tier: int) -> Room:
        """First available room of the tier, or a freshly created one."""
        rooms = self._tier_rooms(stake_tier)
        for room in rooms:
            if room.is_available:
                return room

        room = Room(id=f"{stake_tier}_room_{len(rooms) + 1}", stake_tier=stake_tier)
        rooms.append(room)
        self._by_id[room.id] = room
        logger.info(f"Created room {room.id}")
        return room

    def get_room(self, room_id: str) -> Room | None:
        return self._by_id.get(room_id)

    def room_of(self, participant: Participant) -> Room | None:
        """The room ``participant`` is currently a member of, if any."""
        for room in self:
            if room.has_member(participant):
                return room
        return None

    def rooms(self, stake_tier: int | None = None) -> list[Room]:
        if stake_tier is None:
            return list(self)
        return list(self._tier_rooms(stake_tier))

    def __iter__(self) -> Iterator[Room]:
        for tier in self.stake_tiers:
            yield from self._tiers[tier]

    def __len__(self) -> int:
        return len(self._by_id)
