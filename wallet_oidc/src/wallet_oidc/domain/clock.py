"""Clock abstraction for issued-at timestamps and polling delays"""

import asyncio
from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone


class Clock(ABC):
    """Abstract clock for time operations"""

    @abstractmethod
    def now(self) -> datetime:
        """Get current time as timezone-aware UTC datetime"""
        pass

    @abstractmethod
    async def sleep(self, seconds: float) -> None:
        """Suspend the current flow for the given number of seconds"""
        pass

    def timestamp(self) -> int:
        """Current time as integer seconds since the epoch (JWT NumericDate)"""
        return int(self.now().timestamp())


class SystemClock(Clock):
    """Production clock using system time and the running event loop"""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)

    async def sleep(self, seconds: float) -> None:
        await asyncio.sleep(seconds)


class FixedClock(Clock):
    """
    Test clock with controllable time.

    sleep() never blocks: it advances the clock and records the requested
    delay, so polling loops run instantly under test.
    """

    def __init__(self, fixed_time: datetime):
        self._current_time = self._as_utc(fixed_time)
        self.sleeps: list[float] = []

    def now(self) -> datetime:
        return self._current_time

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self._current_time += timedelta(seconds=seconds)
        # Yield so that cancellation can reach a task parked here
        await asyncio.sleep(0)

    def advance(self, delta: timedelta) -> None:
        self._current_time += delta

    def set(self, new_time: datetime) -> None:
        self._current_time = self._as_utc(new_time)

    @staticmethod
    def _as_utc(value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)
