from __future__ import annotations

from dataclasses import replace

import pytest

from seat_ledger.models.entities import SeatEntity, initial_table
from seat_ledger.services.timing import (
    elapsed_since,
    format_amount,
    format_date,
    format_datetime,
    format_hms,
    seat_active_seconds,
    seat_rest_seconds,
    table_elapsed_seconds,
)

from .conftest import T0, at


@pytest.mark.parametrize(
    "seconds, expected",
    [
        (0, "00:00:00"),
        (59.9, "00:00:59"),
        (3661, "01:01:01"),
        (100 * 3600 + 5, "100:00:05"),
        (-20, "00:00:00"),
    ],
)
def test_format_hms(seconds, expected):
    assert format_hms(seconds) == expected


def test_rendered_timestamps_use_configured_zone():
    assert format_datetime(T0) == "2023-11-14 22:13:20"
    assert format_date(T0) == "2023-11-14"


def test_format_amount_drops_integral_fraction():
    assert format_amount(100.0) == "100"
    assert format_amount(0) == "0"
    assert format_amount(12.5) == "12.5"


def test_elapsed_since_floors_and_clamps():
    assert elapsed_since(T0, at(1.999)) == 1
    assert elapsed_since(T0, T0 - 5000) == 0
    assert elapsed_since(None, T0) == 0


def test_table_projection_is_monotonic_while_running_and_frozen_when_stopped():
    running = replace(initial_table(1), is_running=True, last_start_time=T0, elapsed_seconds=10)
    samples = [table_elapsed_seconds(running, at(s)) for s in (0, 0.5, 1, 30, 30, 3600)]
    assert samples == sorted(samples)
    assert samples[-1] == 3610

    stopped = replace(running, is_running=False, last_start_time=None)
    assert table_elapsed_seconds(stopped, at(3600)) == 10


def test_clock_skew_never_subtracts_time():
    running = replace(initial_table(1), is_running=True, last_start_time=at(60), elapsed_seconds=42)
    assert table_elapsed_seconds(running, T0) == 42


def test_seat_projection_only_counts_the_open_interval():
    seat = SeatEntity(seat_no=1, member_id="M1", status="seated", active_seconds=5, rest_seconds=7, last_active_start=T0)
    assert seat_active_seconds(seat, at(10)) == 15
    assert seat_rest_seconds(seat, at(10)) == 7

    resting = SeatEntity(seat_no=1, member_id="M1", status="rest", active_seconds=5, rest_seconds=7, last_rest_start=T0)
    assert seat_active_seconds(resting, at(10)) == 5
    assert seat_rest_seconds(resting, at(10)) == 17
