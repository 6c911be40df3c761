from datetime import datetime, timezone


class Clock:
    """Source of the current time. Services take one in their constructor."""

    def now(self) -> datetime:
        raise NotImplementedError


class SystemClock(Clock):
    """Wall clock, naive UTC to match the stored DateTime columns"""

    def now(self) -> datetime:
        return datetime.now(timezone.utc).replace(tzinfo=None)


def get_clock() -> Clock:
    """FastAPI dependency; tests override it with a fixed clock"""
    return SystemClock()
