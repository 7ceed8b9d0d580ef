"""Ledger types (Pydantic models persisted as the ledger JSON document)."""

import bisect
from datetime import date, datetime, timedelta, timezone
from enum import Enum

from pydantic import BaseModel, Field, field_validator

SCHEMA_VERSION = 2
BREAK_DURATION = timedelta(minutes=30)


class EventKind(str, Enum):
    """What the user did."""
    IN = "in"
    OUT = "out"
    BREAK = "break"


class ClockEvent(BaseModel):
    """One timestamped user action, stored in UTC."""

    timestamp: datetime
    kind: EventKind
    project: str | None = None  # None is "no project", never equal to a named one

    @field_validator("timestamp")
    @classmethod
    def _to_utc(cls, value: datetime) -> datetime:
        if value.tzinfo is None or value.utcoffset() is None:
            raise ValueError("timestamp must be timezone-aware")
        return value.astimezone(timezone.utc)


class DayBucket(BaseModel):
    """Events whose local calendar date is `date`, ordered by timestamp."""

    date: date
    events: list[ClockEvent] = Field(default_factory=list)

    def add(self, event: ClockEvent) -> None:
        """Insert keeping timestamp order; ties go after existing events."""
        index = bisect.bisect_right(self.events, event.timestamp, key=lambda e: e.timestamp)
        self.events.insert(index, event)

    def contains(self, event: ClockEvent) -> bool:
        return any(e is event for e in self.events)


class Ledger(BaseModel):
    """The whole persisted state: day buckets in chronological order."""

    version: int = SCHEMA_VERSION
    days: list[DayBucket] = Field(default_factory=list)

    def bucket_for(self, day: date) -> DayBucket | None:
        for bucket in self.days:
            if bucket.date == day:
                return bucket
        return None

    def ensure_bucket(self, day: date) -> DayBucket:
        """Find or create the bucket for `day`, keeping days sorted."""
        bucket = self.bucket_for(day)
        if bucket is not None:
            return bucket
        bucket = DayBucket(date=day)
        index = bisect.bisect_right(self.days, day, key=lambda b: b.date)
        self.days.insert(index, bucket)
        return bucket
