"""Upgrade ledger files written by earlier versions of the tool.

Two older layouts exist, both keyed by "days" without a version:

- session records: {"clock_in", "clock_out", "breaks": [{}...], "project"}
- flat event log:  {"timestamp", "type": "In" | "Out" | "Break", "project"}

Both are rebuilt into day buckets of typed events.
"""

import re
from datetime import tzinfo
from typing import Any

from loguru import logger

from clock.errors import LedgerStorageError
from clock.ledger.store import LedgerStore
from clock.ledger.types import ClockEvent, EventKind, Ledger

# Older files carry nanosecond fractions; datetimes hold microseconds.
_FRACTION = re.compile(r"(\.\d{6})\d+")


def _timestamp(value: str) -> str:
    return _FRACTION.sub(r"\1", value)


def detect_layout(payload: dict[str, Any]) -> str:
    """Return "current", "sessions" or "events"."""
    if "version" in payload:
        return "current"
    days = payload.get("days") or []
    if not days:
        return "current"
    first = days[0]
    if not isinstance(first, dict):
        raise LedgerStorageError("unrecognized ledger format")
    if "events" in first and "date" in first:
        return "current"
    if "clock_in" in first:
        return "sessions"
    if "timestamp" in first and "type" in first:
        return "events"
    raise LedgerStorageError("unrecognized ledger format")


def _session_events(record: dict[str, Any]) -> list[ClockEvent]:
    project = record.get("project")
    clock_in = _timestamp(record["clock_in"])
    events = [ClockEvent(timestamp=clock_in, kind=EventKind.IN, project=project)]
    if record.get("clock_out"):
        events.append(
            ClockEvent(timestamp=_timestamp(record["clock_out"]), kind=EventKind.OUT, project=project)
        )
    # Break markers had no time of their own.
    for _ in record.get("breaks") or []:
        events.append(ClockEvent(timestamp=clock_in, kind=EventKind.BREAK, project=project))
    return events


def _log_event(record: dict[str, Any]) -> list[ClockEvent]:
    return [
        ClockEvent(
            timestamp=_timestamp(record["timestamp"]),
            kind=EventKind(str(record["type"]).lower()),
            project=record.get("project"),
        )
    ]


def upgrade(payload: dict[str, Any], tz: tzinfo | None = None) -> Ledger:
    """Validate `payload` into a `Ledger`, converting older layouts.

    Raises:
        LedgerStorageError: The payload matches no known layout or has bad records.
    """
    layout = detect_layout(payload)
    if layout == "current":
        return Ledger.model_validate(payload)

    convert = _session_events if layout == "sessions" else _log_event
    store = LedgerStore(Ledger(), tz=tz)
    try:
        for record in payload["days"]:
            for event in convert(record):
                store.insert(event)
    except (KeyError, TypeError, ValueError) as e:
        raise LedgerStorageError(f"invalid {layout} record: {e}") from e

    logger.warning(f"Upgraded ledger from the old '{layout}' layout ({len(payload['days'])} records)")
    return store.ledger
