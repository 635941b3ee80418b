"""
Shared fixtures for the seat ledger tests.

Rendered timestamps are pinned to UTC and exports go to a per-test
directory. ``T0`` is 2023-11-14 22:13:20 UTC in epoch milliseconds.
"""
from __future__ import annotations

from dataclasses import replace

import pytest

from seat_ledger.core.config import settings
from seat_ledger.models.entities import TableEntity, initial_table
from seat_ledger.services.clock_service import TableClock
from seat_ledger.services.seat_service import SeatService

T0 = 1_700_000_000_000


def at(seconds: float) -> int:
    """Epoch ms ``seconds`` after T0."""
    return T0 + int(seconds * 1000)


@pytest.fixture(autouse=True)
def pinned_settings(monkeypatch, tmp_path):
    monkeypatch.setattr(settings, "TIMEZONE", "UTC")
    monkeypatch.setattr(settings, "EXPORT_DIR", str(tmp_path / "exports"))
    monkeypatch.setattr(settings, "TABLE_COUNT", 4)
    yield settings


@pytest.fixture
def table() -> TableEntity:
    return initial_table(1)


@pytest.fixture
def running(table) -> TableEntity:
    return TableClock.start_or_resume(table, T0)


def with_members(table: TableEntity, **members: str) -> TableEntity:
    """with_members(t, s1="M1", s3="M3") types member ids at idle seats."""
    for key, member_id in members.items():
        table = SeatService.set_member_id(table, int(key[1:]), member_id)
    return table


def seated(table: TableEntity, seat_no: int, member_id: str, now: int = T0) -> TableEntity:
    table = SeatService.set_member_id(table, seat_no, member_id)
    result = SeatService.seat_up(table, seat_no, now)
    assert isinstance(result, TableEntity)
    return result


def selected(table: TableEntity, *seat_nos: int) -> TableEntity:
    seats = tuple(replace(s, selected=s.seat_no in seat_nos) for s in table.seats)
    return replace(table, seats=seats)
