"""Per-day aggregation: worked time, break time and open sessions."""

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, tzinfo
from typing import Iterable

from loguru import logger

from clock.ledger.timeutil import format_clock, format_duration, local_date
from clock.ledger.types import BREAK_DURATION, ClockEvent, DayBucket, EventKind

_KIND_LABELS = {
    EventKind.IN: "clocked in ",
    EventKind.OUT: "clocked out",
    EventKind.BREAK: "break",
}


@dataclass
class SessionFold:
    """Result of pairing one day's events per project."""
    pairs: list[tuple[ClockEvent, ClockEvent]] = field(default_factory=list)
    still_open: list[ClockEvent] = field(default_factory=list)
    unmatched_outs: list[ClockEvent] = field(default_factory=list)


@dataclass
class OpenSession:
    clock_in: ClockEvent
    elapsed: timedelta | None  # only known when the day is today


@dataclass
class DaySummary:
    date: date
    worked: timedelta
    breaks: timedelta
    open_sessions: list[OpenSession]
    unmatched_outs: int = 0


def pair_events(events: Iterable[ClockEvent]) -> SessionFold:
    """Pair each clock-out with the latest open clock-in of the same project.

    A second clock-in while one is open supersedes it for pairing; the earlier
    one stays open so it can be resolved. Clock-outs with nothing to close are
    collected in `unmatched_outs`.
    """
    fold = SessionFold()
    last_in: dict[str | None, ClockEvent] = {}

    for event in events:
        if event.kind is EventKind.IN:
            previous = last_in.get(event.project)
            if previous is not None:
                logger.debug(f"Clock-in at {event.timestamp} re-enters open session from {previous.timestamp}")
                fold.still_open.append(previous)
            last_in[event.project] = event
        elif event.kind is EventKind.OUT:
            clock_in = last_in.pop(event.project, None)
            if clock_in is None:
                fold.unmatched_outs.append(event)
            else:
                fold.pairs.append((clock_in, event))

    fold.still_open.extend(last_in.values())
    fold.still_open.sort(key=lambda e: e.timestamp)
    return fold


def _matches(event: ClockEvent, project: str | None) -> bool:
    return project is None or event.project == project


def summarize_day(
    bucket: DayBucket,
    project: str | None = None,
    *,
    now: datetime,
    tz: tzinfo | None = None,
    break_duration: timedelta = BREAK_DURATION,
) -> DaySummary:
    """Compute worked and break totals for one day.

    Args:
        bucket: The day to summarize.
        project: Only count this project; None counts every project.
        now: Current instant, used for the elapsed time of today's open sessions.
        tz: Display zone deciding what "today" is.
        break_duration: Fixed deduction per break marker.
    """
    fold = pair_events(bucket.events)

    worked = timedelta()
    for clock_in, clock_out in fold.pairs:
        if _matches(clock_in, project):
            worked += clock_out.timestamp - clock_in.timestamp

    for event in fold.unmatched_outs:
        logger.warning(
            f"Ignoring clock-out at {event.timestamp.isoformat()} on {bucket.date}: no open clock-in"
        )

    breaks = sum(1 for e in bucket.events if e.kind is EventKind.BREAK and _matches(e, project))

    is_today = local_date(now, tz) == bucket.date
    open_sessions = [
        OpenSession(
            clock_in=e,
            elapsed=max(now - e.timestamp, timedelta()) if is_today else None,
        )
        for e in fold.still_open
        if _matches(e, project)
    ]

    return DaySummary(
        date=bucket.date,
        worked=worked,
        breaks=break_duration * breaks,
        open_sessions=open_sessions,
        unmatched_outs=len(fold.unmatched_outs),
    )


def _project_suffix(project: str | None) -> str:
    return f" - project: {project}" if project is not None else ""


def render_day(summary: DaySummary, events: Iterable[ClockEvent], tz: tzinfo | None = None) -> str:
    """Text block for `list`."""
    header = f"{summary.date.isoformat()}: {format_duration(summary.worked)}"
    if summary.breaks:
        header += f", break: {int(summary.breaks.total_seconds() // 60)} mins"

    lines = [header]
    for event in events:
        lines.append(
            f"  {format_clock(event.timestamp, tz)} - {_KIND_LABELS[event.kind]}{_project_suffix(event.project)}"
        )
    for session in summary.open_sessions:
        status = "unclosed"
        if session.elapsed is not None:
            status += f", current elapsed {format_duration(session.elapsed)}"
        lines.append(
            f"  {format_clock(session.clock_in.timestamp, tz)} - {status}{_project_suffix(session.clock_in.project)}"
        )
    return "\n".join(lines)
