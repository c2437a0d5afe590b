"""Clock abstraction - the only place the dashboard reads the current time."""
from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone, tzinfo
from typing import Optional


class Clock(ABC):
    """Supplies "now" in UTC and in local wall-clock time."""

    def __init__(self, local_tz: Optional[tzinfo] = None):
        """
        Args:
            local_tz: Display timezone. None means the host's local zone.
        """
        self.local_tz = local_tz

    @abstractmethod
    def now_utc(self) -> datetime:
        """Current time as an aware UTC datetime."""
        pass

    def to_local(self, moment: datetime) -> datetime:
        """Convert an aware datetime into the clock's local zone."""
        if self.local_tz is None:
            return moment.astimezone()
        return moment.astimezone(self.local_tz)

    def now_local(self) -> datetime:
        return self.to_local(self.now_utc())

    def next_local_midnight(self, moment: datetime) -> datetime:
        """
        First local midnight after `moment`.

        The host zone is only available as a fixed offset per instant, so in
        that case midnight is taken from the wall-clock date and given its
        own offset, which may differ from the offset of `moment` on a DST change.
        """
        local = self.to_local(moment)
        midnight = local.replace(hour=0, minute=0, second=0, microsecond=0) + timedelta(days=1)
        if self.local_tz is None:
            return midnight.replace(tzinfo=None).astimezone()
        return midnight


class SystemClock(Clock):
    """Clock backed by the system wall clock."""

    def now_utc(self) -> datetime:
        return datetime.now(timezone.utc)


class FixedClock(Clock):
    """Clock frozen at an explicit instant, for simulation and tests."""

    def __init__(self, moment: datetime, local_tz: Optional[tzinfo] = None):
        super().__init__(local_tz)
        if moment.tzinfo is None:
            raise ValueError("FixedClock needs a timezone-aware datetime")
        self._moment = moment.astimezone(timezone.utc)

    @classmethod
    def from_isoformat(cls, value: str, local_tz: Optional[tzinfo] = None) -> "FixedClock":
        """
        Build a fixed clock from an ISO-8601 timestamp such as "2025-10-09T22:00:00Z".

        A timestamp without an offset is taken as UTC.
        """
        if value.endswith("Z"):
            value = value[:-1] + "+00:00"
        moment = datetime.fromisoformat(value)
        if moment.tzinfo is None:
            moment = moment.replace(tzinfo=timezone.utc)
        return cls(moment, local_tz)

    def now_utc(self) -> datetime:
        return self._moment
