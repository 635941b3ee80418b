from __future__ import annotations

import pytest

from seat_ledger.core.exceptions import RejectReason, TableRuleError
from seat_ledger.models.entities import PendingConfirmation
from seat_ledger.services.clock_service import TableClock
from seat_ledger.services.seat_service import SeatService

from .conftest import T0, at, seated


def test_start_opens_the_table(table):
    t = TableClock.start_or_resume(table, T0)
    assert t.is_running is True
    assert t.last_start_time == T0
    assert t.opened_at == "2023-11-14 22:13:20"
    assert t.closed_at is None


def test_start_is_idempotent_while_running(running):
    assert TableClock.start_or_resume(running, at(30)) is running


def test_pause_freezes_elapsed_and_resume_keeps_opened_at(running):
    paused = TableClock.pause(running, at(90))
    assert paused.is_running is False
    assert paused.last_start_time is None
    assert paused.elapsed_seconds == 90
    assert TableClock.elapsed(paused, at(500)) == 90

    resumed = TableClock.start_or_resume(paused, at(600))
    assert resumed.opened_at == running.opened_at
    assert TableClock.elapsed(resumed, at(610)) == 100


def test_pause_when_stopped_is_a_noop(table):
    assert TableClock.pause(table, T0) is table


def test_pause_rejected_while_a_seat_is_seated(running):
    t = seated(running, 2, "M1")
    with pytest.raises(TableRuleError) as exc:
        TableClock.pause(t, at(60))
    assert exc.value.reason == RejectReason.TABLE_HAS_ACTIVE_PLAYERS
    assert t.is_running is True
    assert t.last_start_time == T0


def test_pause_allowed_with_resting_seats(running):
    t = SeatService.rest(seated(running, 2, "M1"), 2, at(10))
    paused = TableClock.pause(t, at(20))
    assert paused.is_running is False
    assert paused.seat(2).status == "rest"


def test_stop_stamps_close_and_exports_frozen_state(running):
    t = seated(running, 1, "M1")
    t = SeatService.leave(t, 1, at(40))
    stopped, export = TableClock.stop(t, at(125))

    assert stopped.is_running is False
    assert stopped.elapsed_seconds == 125
    assert stopped.closed_at == "2023-11-14 22:15:25"

    header = dict((row[0], row[1]) for row in export.header_rows if len(row) == 2)
    assert header["Closed At"] == stopped.closed_at
    assert header["Table Time"] == "00:02:05"
    assert header["Total Sessions"] == "1"
    assert len(export.rows) == 1


def test_stop_rejected_while_a_seat_is_seated(running):
    t = seated(running, 1, "M1")
    with pytest.raises(TableRuleError):
        TableClock.stop(t, at(10))


def test_reset_requires_confirmation_and_keeps_name(running):
    t = seated(running, 1, "M1")
    t = SeatService.leave(t, 1, at(10))
    pending = TableClock.reset(t, at(20))

    assert isinstance(pending, PendingConfirmation)
    assert pending.kind == "reset"
    assert pending.export is not None
    assert len(pending.export.rows) == 1

    fresh = pending.commit()
    assert fresh.id == t.id
    assert fresh.name == t.name
    assert fresh.sessions == ()
    assert fresh.is_running is False
    assert all(s.status == "idle" for s in fresh.seats)
    # not committing leaves the original table untouched
    assert len(t.sessions) == 1


def test_reset_of_an_empty_ledger_skips_export(table):
    assert TableClock.reset(table, T0).export is None


def test_reset_export_shows_the_projected_table_time(running):
    t = seated(running, 1, "M1")
    t = SeatService.leave(t, 1, at(10))
    export = TableClock.reset(t, at(90)).export

    header = dict((row[0], row[1]) for row in export.header_rows if len(row) == 2)
    assert header["Table Time"] == "00:01:30"
    assert header["Closed At"] == ""
