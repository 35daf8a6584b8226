"""
Clock sources for event timestamps and date partitions.

Event timestamps are ISO-8601 UTC strings with millisecond precision, so
they order correctly under plain string comparison.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional


def to_iso(moment: datetime) -> str:
    """Format an aware datetime as ``YYYY-MM-DDTHH:MM:SS.mmmZ``."""
    utc = moment.astimezone(timezone.utc)
    return utc.strftime("%Y-%m-%dT%H:%M:%S.") + f"{utc.microsecond // 1000:03d}Z"


class SystemClock:
    """
    Wall-clock time source.

    ``date_key`` pins the date partition (e.g. to inspect a past day of a
    dated list); timestamps still come from the wall clock.
    """

    def __init__(self, date_key: Optional[str] = None) -> None:
        self.date_key = date_key

    def now_iso(self) -> str:
        return to_iso(datetime.now(timezone.utc))

    def today_key(self) -> str:
        """Local calendar date, recomputed on every call."""
        if self.date_key:
            return self.date_key
        return datetime.now().strftime("%Y-%m-%d")


class DeterministicClock:
    """
    Deterministic time source.

    Every call to now_iso() returns the current instant and then advances it
    by ``step_ms``, so successive events get strictly increasing timestamps.
    The date key is fixed unless set explicitly.
    """

    def __init__(
        self,
        start: datetime = datetime(2024, 1, 1, tzinfo=timezone.utc),
        step_ms: int = 1,
        date_key: str = "2024-01-01",
    ) -> None:
        self.current = start
        self.step = timedelta(milliseconds=step_ms)
        self.date_key = date_key

    def now_iso(self) -> str:
        stamp = to_iso(self.current)
        self.current = self.current + self.step
        return stamp

    def today_key(self) -> str:
        return self.date_key
