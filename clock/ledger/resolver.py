"""Interactive reconciliation of sessions that were never clocked out."""

from dataclasses import dataclass
from datetime import datetime, time
from typing import Callable

from loguru import logger

from clock.errors import ClockOutAfterNextClockInError, ClockOutBeforeClockInError
from clock.ledger.store import LedgerStore
from clock.ledger.timeutil import format_clock, from_local, parse_clock_time, to_local
from clock.ledger.types import ClockEvent

PROMPT = "When did you clock out (16 or 16:30)"
NOTHING_TO_RESOLVE = "Nothing to resolve, good job... :)"

Validator = Callable[[str], time]
# Ask the user for a line of text, re-asking until `validate` accepts it.
Ask = Callable[[str, Validator], str]


@dataclass
class ResolvedEntry:
    clock_in: ClockEvent
    clock_out: ClockEvent


def clock_out_validator(clock_in_local: datetime, next_clock_in_local: datetime | None = None) -> Validator:
    """Build a validator accepting only times after `clock_in_local` on the same day.

    With `next_clock_in_local`, the time must also fall before that later
    clock-in of the same project. The validator raises `TimeParseError`,
    `ClockOutBeforeClockInError` or `ClockOutAfterNextClockInError`.
    """
    def validate(text: str) -> time:
        parsed = parse_clock_time(text)
        if parsed <= clock_in_local.time():
            raise ClockOutBeforeClockInError()
        if next_clock_in_local is not None and parsed >= next_clock_in_local.time():
            raise ClockOutAfterNextClockInError(next_clock_in_local.strftime("%H:%M"))
        return parsed

    return validate


class Resolver:
    """Walks every open session and asks for its clock-out time."""

    def __init__(self, store: LedgerStore, ask: Ask, echo: Callable[[str], None] = print):
        self.store = store
        self.ask = ask
        self.echo = echo

    def describe(self, entry: ClockEvent) -> str:
        local = to_local(entry.timestamp, self.store.tz)
        text = f"Resolve day: {local.strftime('%Y/%m/%d')}"
        if entry.project is not None:
            text += f"\n  project: {entry.project}"
        text += f"\n  clocked in: {local.strftime('%H:%M')}"
        return text

    def resolve_one(self, entry: ClockEvent) -> ResolvedEntry:
        local = to_local(entry.timestamp, self.store.tz)
        following = self.store.next_clock_in(entry)
        validate = clock_out_validator(
            local,
            to_local(following.timestamp, self.store.tz) if following is not None else None,
        )

        self.echo(self.describe(entry))
        answer = self.ask(PROMPT, validate)
        clock_out_time = validate(answer)

        # Same local day as the clock-in; overnight sessions are not supported.
        at = from_local(local.date(), clock_out_time, self.store.tz)
        clock_out = self.store.resolve_entry(entry, at)
        self.echo(f"  clocked out: {format_clock(at, self.store.tz)}")
        return ResolvedEntry(clock_in=entry, clock_out=clock_out)

    def run(self) -> list[ResolvedEntry]:
        """Resolve all open sessions in storage order."""
        pending = self.store.open_entries()
        if not pending:
            self.echo(NOTHING_TO_RESOLVE)
            return []

        logger.debug(f"{len(pending)} open session(s) to resolve")
        return [self.resolve_one(entry) for _, entry in pending]
