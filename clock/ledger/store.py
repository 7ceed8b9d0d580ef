"""In-memory ledger store: lookup and mutation of day buckets."""

from datetime import date, datetime, tzinfo
from typing import Iterator

from loguru import logger

from clock.errors import (
    ClockOutAfterNextClockInError,
    ClockOutBeforeClockInError,
    NoMatchingDayError,
    NoOpenEntryError,
)
from clock.ledger.aggregator import pair_events
from clock.ledger.timeutil import Clock, format_clock, local_date, utc_now
from clock.ledger.types import ClockEvent, DayBucket, EventKind, Ledger


class LedgerStore:
    """Operations over a loaded `Ledger`.

    Every write lands in the bucket of the event's local date, and every read
    looks up buckets by the same key.
    """

    def __init__(self, ledger: Ledger, tz: tzinfo | None = None, clock: Clock = utc_now):
        self.ledger = ledger
        self.tz = tz
        self.clock = clock

    def today(self) -> date:
        return local_date(self.clock(), self.tz)

    def insert(self, event: ClockEvent) -> ClockEvent:
        """Place an event in its local-date bucket, creating the bucket if needed."""
        bucket = self.ledger.ensure_bucket(local_date(event.timestamp, self.tz))
        bucket.add(event)
        logger.debug(f"Recorded {event.kind.value} at {event.timestamp.isoformat()} in {bucket.date}")
        return event

    def find_open_entry(self, project: str | None, on: date) -> ClockEvent | None:
        """Most recent open clock-in for `project` on `on`.

        `None` only matches entries without a project.
        """
        bucket = self.ledger.bucket_for(on)
        if bucket is None:
            return None
        candidates = [e for e in pair_events(bucket.events).still_open if e.project == project]
        return candidates[-1] if candidates else None

    def open(self, project: str | None, at: datetime | None = None) -> ClockEvent:
        """Clock in. Does not check for an already-open session."""
        at = at or self.clock()
        return self.insert(ClockEvent(timestamp=at, kind=EventKind.IN, project=project))

    def close(self, project: str | None, at: datetime | None = None) -> ClockEvent:
        """Clock out the open session for `project` on `at`'s local date.

        Raises:
            NoOpenEntryError: Nothing is clocked in for that project that day.
            ClockOutBeforeClockInError: `at` is not after the clock-in, or not
                before a later clock-in of the same project.
        """
        at = at or self.clock()
        entry = self.find_open_entry(project, local_date(at, self.tz))
        if entry is None:
            raise NoOpenEntryError(project)
        return self.resolve_entry(entry, at)

    def record_break(
        self,
        project: str | None,
        on: date | None = None,
        at: datetime | None = None,
    ) -> ClockEvent:
        """Add a break marker to the bucket of `on` (default: today).

        The bucket must already hold a clock-in for `project`.

        Raises:
            NoMatchingDayError: No clock-in for that project on that day.
        """
        at = at or self.clock()
        on = on or local_date(at, self.tz)
        bucket = self.ledger.bucket_for(on)
        if bucket is None or not any(
            e.kind is EventKind.IN and e.project == project for e in bucket.events
        ):
            raise NoMatchingDayError(project)

        event = ClockEvent(timestamp=at, kind=EventKind.BREAK, project=project)
        bucket.add(event)
        logger.debug(f"Recorded break in {bucket.date} for project={project}")
        return event

    def next_clock_in(self, entry: ClockEvent) -> ClockEvent | None:
        """The first later clock-in of the same project in `entry`'s bucket."""
        bucket = self._bucket_of(entry)
        return next(
            (
                e for e in bucket.events
                if e.kind is EventKind.IN and e.project == entry.project and e.timestamp > entry.timestamp
            ),
            None,
        )

    def resolve_entry(self, entry: ClockEvent, at: datetime) -> ClockEvent:
        """Record the clock-out for a specific open clock-in.

        The clock-out must fall before the next clock-in of the same project,
        otherwise it would pair with that one instead.

        Raises:
            ClockOutBeforeClockInError: `at` is not after the clock-in.
            ClockOutAfterNextClockInError: `at` is not before the next clock-in.
        """
        if at <= entry.timestamp:
            raise ClockOutBeforeClockInError()

        bucket = self._bucket_of(entry)
        following = self.next_clock_in(entry)
        if following is not None and at >= following.timestamp:
            raise ClockOutAfterNextClockInError(format_clock(following.timestamp, self.tz))

        event = ClockEvent(timestamp=at, kind=EventKind.OUT, project=entry.project)
        bucket.add(event)
        logger.debug(f"Closed session from {entry.timestamp.isoformat()} at {at.isoformat()}")
        return event

    def _bucket_of(self, entry: ClockEvent) -> DayBucket:
        bucket = next((b for b in self.ledger.days if b.contains(entry)), None)
        if bucket is None:
            raise ValueError("clock-in does not belong to this ledger")
        return bucket

    def open_entries(self) -> list[tuple[DayBucket, ClockEvent]]:
        """Every open clock-in across all days and projects, in storage order."""
        return [
            (bucket, entry)
            for bucket in self.ledger.days
            for entry in pair_events(bucket.events).still_open
        ]

    def filter_by_project(self, project: str | None = None) -> Iterator[DayBucket]:
        """Lazy view of buckets; a named project narrows each bucket to its events."""
        for bucket in self.ledger.days:
            if project is None:
                yield bucket
                continue
            events = [e for e in bucket.events if e.project == project]
            if events:
                yield DayBucket(date=bucket.date, events=events)

    def recent(self, limit: int, project: str | None = None) -> list[DayBucket]:
        """The last `limit` buckets, most recent first."""
        if limit <= 0:
            return []
        days = list(self.filter_by_project(project))
        return days[-limit:][::-1]
