"""Cancellable one-shot timers on top of APScheduler."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone
from typing import Any, Awaitable, Callable
from uuid import uuid4

from apscheduler.jobstores.base import JobLookupError
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.date import DateTrigger

logger = logging.getLogger(__name__)

TimerCallback = Callable[..., Awaitable[Any]]


class TimerHandle(ABC):
    """Handle to a scheduled callback. Cancelling twice is harmless."""

    @abstractmethod
    def cancel(self) -> None: ...

    @property
    @abstractmethod
    def cancelled(self) -> bool: ...


class TimerService(ABC):
    """Clock plus one-shot scheduling, injected into the game core."""

    @abstractmethod
    def now(self) -> datetime: ...

    @abstractmethod
    def call_later(
        self,
        delay: float,
        callback: TimerCallback,
        *args: Any,
        name: str = "",
    ) -> TimerHandle: ...


class _JobHandle(TimerHandle):
    def __init__(self, scheduler: AsyncIOScheduler, job_id: str):
        self._scheduler = scheduler
        self._job_id = job_id
        self._cancelled = False

    def cancel(self) -> None:
        if self._cancelled:
            return
        self._cancelled = True
        try:
            self._scheduler.remove_job(self._job_id)
        except JobLookupError:
            # Already fired or removed
            pass

    @property
    def cancelled(self) -> bool:
        return self._cancelled


class SchedulerTimerService(TimerService):
    """TimerService backed by an APScheduler AsyncIOScheduler.

    Must be started from inside the running event loop (the bot does this in
    its post_init hook).
    """

    def __init__(self, scheduler: AsyncIOScheduler | None = None):
        self.scheduler = scheduler or AsyncIOScheduler(timezone=timezone.utc)

    def start(self) -> None:
        if not self.scheduler.running:
            self.scheduler.start()
            logger.info("✓ Timer scheduler started")

    def shutdown(self) -> None:
        if self.scheduler.running:
            self.scheduler.shutdown(wait=False)
            logger.info("✓ Timer scheduler stopped")

    def now(self) -> datetime:
        return datetime.now(timezone.utc)

    def call_later(
        self,
        delay: float,
        callback: TimerCallback,
        *args: Any,
        name: str = "",
    ) -> TimerHandle:
        run_at = self.now() + timedelta(seconds=max(0.0, delay))
        job_id = f"{name or callback.__name__}-{uuid4().hex[:8]}"
        self.scheduler.add_job(
            callback,
            DateTrigger(run_date=run_at),
            args=list(args),
            id=job_id,
            name=name or job_id,
            misfire_grace_time=None,
        )
        logger.debug(f"Scheduled {job_id} at {run_at.isoformat()}")
        return _JobHandle(self.scheduler, job_id)
