"""Ledger package.

`ledger.types` is the persisted contract (Pydantic models).
Lookup/mutation lives in `ledger.store`, reporting in `ledger.aggregator`.
"""

from clock.ledger.types import BREAK_DURATION, ClockEvent, DayBucket, EventKind, Ledger

__all__ = ["BREAK_DURATION", "ClockEvent", "DayBucket", "EventKind", "Ledger"]
