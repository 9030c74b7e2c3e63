"""Per-user, per-action rate limiting for ledger-mutating commands."""

from __future__ import annotations

import logging
import time
from typing import Callable

from luckyclick.config import CooldownConfig
from luckyclick.errors import RateLimited

logger = logging.getLogger(__name__)


class CooldownTracker:
    """Remembers when each (user, action) was last allowed.

    Process-local and unsynchronized: each user's commands are handled one at
    a time on the event loop.
    """

    def __init__(
        self,
        config: CooldownConfig | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.config = config or CooldownConfig()
        self._clock = clock
        self._last: dict[tuple[int, str], float] = {}

    def window(self, action: str) -> float:
        return self.config.actions.get(action, self.config.default_seconds)

    def remaining(self, user_id: int, action: str) -> float:
        last = self._last.get((user_id, action))
        if last is None:
            return 0.0
        return max(0.0, self.window(action) - (self._clock() - last))

    def check(self, user_id: int, action: str) -> bool:
        """True (and start a new window) if the action is allowed now."""
        if self.remaining(user_id, action) > 0:
            logger.debug(f"Cooldown hit: user={user_id} action={action}")
            return False
        self._last[(user_id, action)] = self._clock()
        return True

    def require(self, user_id: int, action: str) -> None:
        """Like ``check`` but raises RateLimited."""
        retry_after = self.remaining(user_id, action)
        if retry_after > 0:
            raise RateLimited(action, retry_after)
        self._last[(user_id, action)] = self._clock()

    def clear(self, user_id: int, action: str | None = None) -> None:
        if action is not None:
            self._last.pop((user_id, action), None)
            return
        for key in [k for k in self._last if k[0] == user_id]:
            del self._last[key]
