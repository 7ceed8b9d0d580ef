"""Tests for the interactive resolve flow."""

import json
from datetime import datetime, timezone

import pytest

from clock.errors import (
    ClockError,
    ClockOutAfterNextClockInError,
    ClockOutBeforeClockInError,
    TimeParseError,
)
from clock.ledger.resolver import NOTHING_TO_RESOLVE, PROMPT, Resolver, clock_out_validator
from clock.ledger.storage import LedgerStorage
from clock.ledger.store import LedgerStore
from clock.ledger.types import EventKind


def scripted_ask(answers, rejections):
    """Feed answers in order, re-asking on rejection like an interactive prompt."""
    remaining = iter(answers)

    def ask(message, validate):
        assert message == PROMPT
        for answer in remaining:
            try:
                validate(answer)
            except ClockError as e:
                rejections.append(str(e))
                continue
            return answer
        raise AssertionError("ran out of scripted answers")

    return ask


class TestValidator:

    def test_rejects_time_before_clock_in(self, tz):
        validate = clock_out_validator(datetime(2026, 3, 10, 9, 0, tzinfo=tz))
        with pytest.raises(ClockOutBeforeClockInError, match="clock out has to be after clock in"):
            validate("07")

    def test_rejects_equal_time(self, tz):
        validate = clock_out_validator(datetime(2026, 3, 10, 9, 0, tzinfo=tz))
        with pytest.raises(ClockOutBeforeClockInError):
            validate("9:00")

    def test_rejects_unparseable(self, tz):
        validate = clock_out_validator(datetime(2026, 3, 10, 9, 0, tzinfo=tz))
        with pytest.raises(TimeParseError):
            validate("five")

    def test_seconds_of_clock_in_count(self, tz):
        validate = clock_out_validator(datetime(2026, 3, 10, 9, 0, 30, tzinfo=tz))
        with pytest.raises(ClockOutBeforeClockInError):
            validate("9:00")
        assert validate("9:01").minute == 1

    def test_rejects_time_at_or_after_next_clock_in(self, tz):
        validate = clock_out_validator(
            datetime(2026, 3, 10, 9, 0, tzinfo=tz),
            datetime(2026, 3, 10, 13, 0, tzinfo=tz),
        )
        with pytest.raises(ClockOutAfterNextClockInError, match="before the next clock in at 13:00"):
            validate("18")
        with pytest.raises(ClockOutAfterNextClockInError):
            validate("13:00")
        assert validate("12:59").hour == 12


class TestResolver:

    def test_nothing_to_resolve(self, store):
        output = []
        resolver = Resolver(store, ask=scripted_ask([], []), echo=output.append)

        assert resolver.run() == []
        assert output == [NOTHING_TO_RESOLVE]
        assert store.ledger.days == []

    def test_rejects_then_accepts(self, store, local):
        store.open(None, local(10, 9))
        rejections, output = [], []
        resolver = Resolver(store, ask=scripted_ask(["07", "17"], rejections), echo=output.append)

        resolved = resolver.run()

        assert rejections == ["clock out has to be after clock in"]
        assert len(resolved) == 1
        clock_out = resolved[0].clock_out
        assert clock_out.kind is EventKind.OUT
        # 17:00 at UTC+2
        assert clock_out.timestamp == datetime(2026, 3, 10, 15, 0, tzinfo=timezone.utc)
        assert store.open_entries() == []
        assert "Resolve day: 2026/03/10" in output[0]
        assert "clocked in: 09:00" in output[0]
        assert output[-1] == "  clocked out: 17:00"

    def test_each_open_entry_in_storage_order(self, store, local):
        store.open("a", local(8, 9))
        store.open("b", local(10, 13))
        output = []
        resolver = Resolver(store, ask=scripted_ask(["17", "18:15"], []), echo=output.append)

        resolved = resolver.run()

        assert [r.clock_in.project for r in resolved] == ["a", "b"]
        assert resolved[0].clock_out.timestamp == local(8, 17)
        assert resolved[1].clock_out.timestamp == local(10, 18, 15)
        assert "project: a" in output[0]

    def test_clock_out_stays_on_clock_in_local_day(self, store, tz):
        # 23:30 UTC on the 9th is 01:30 local on the 10th
        store.open(None, datetime(2026, 3, 9, 23, 30, tzinfo=timezone.utc))
        resolver = Resolver(store, ask=scripted_ask(["1", "2"], []), echo=lambda _: None)

        resolved = resolver.run()

        assert resolved[0].clock_out.timestamp == datetime(2026, 3, 10, 0, 0, tzinfo=timezone.utc)
        assert store.ledger.days[0].events[-1] is resolved[0].clock_out

    def test_superseded_clock_in_closes_before_the_next_one(self, store, local):
        store.open(None, local(10, 9))
        store.open(None, local(10, 13))
        rejections, output = [], []
        resolver = Resolver(store, ask=scripted_ask(["18", "12", "17"], rejections), echo=output.append)

        resolved = resolver.run()

        assert rejections == ["clock out has to be before the next clock in at 13:00"]
        assert [r.clock_out.timestamp for r in resolved] == [local(10, 12), local(10, 17)]
        assert store.open_entries() == []
        assert "  clocked out: 12:00" in output

    def test_upgraded_session_file_with_two_open_records(self, tmp_path, tz, fake_clock, local):
        path = tmp_path / "timetable.json"
        path.write_text(json.dumps({"days": [
            {"clock_in": "2026-03-10T07:00:00Z", "clock_out": None, "breaks": [], "project": "demo"},
            {"clock_in": "2026-03-10T11:00:00Z", "clock_out": None, "breaks": [{}], "project": "demo"},
        ]}))
        storage = LedgerStorage(path, tz=tz)
        store = LedgerStore(storage.load(), tz=tz, clock=fake_clock)
        rejections = []

        resolved = Resolver(store, ask=scripted_ask(["14", "11:30", "16"], rejections), echo=lambda _: None).run()
        storage.save(store.ledger)

        assert rejections == ["clock out has to be before the next clock in at 13:00"]
        assert len(resolved) == 2
        reloaded = LedgerStore(storage.load(), tz=tz)
        assert reloaded.open_entries() == []
        assert [e.kind for e in reloaded.ledger.days[0].events] == [
            EventKind.IN, EventKind.OUT, EventKind.IN, EventKind.BREAK, EventKind.OUT,
        ]
        assert reloaded.ledger.days[0].events[-1].timestamp == local(10, 16)
