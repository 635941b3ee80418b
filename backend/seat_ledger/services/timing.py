"""
Elapsed-time projection and time rendering.

All timestamps handled by the core are epoch milliseconds supplied by the
caller. Projections never read the wall clock and never return less than
the frozen snapshot, so a clock that jumps backwards contributes nothing.
"""
from __future__ import annotations

import datetime as dt
import math
import time
from zoneinfo import ZoneInfo

from ..core.config import settings
from ..models.entities import SeatEntity, TableEntity


def now_ms() -> int:
    return int(time.time() * 1000)


def elapsed_since(anchor: int | None, now: int) -> int:
    """Whole seconds from ``anchor`` to ``now``, clamped at zero."""
    if anchor is None:
        return 0
    return max(0, math.floor((now - anchor) / 1000))


def table_elapsed_seconds(table: TableEntity, now: int) -> int:
    if table.is_running and table.last_start_time is not None:
        return table.elapsed_seconds + elapsed_since(table.last_start_time, now)
    return table.elapsed_seconds


def seat_active_seconds(seat: SeatEntity, now: int) -> int:
    if seat.status == "seated" and seat.last_active_start is not None:
        return seat.active_seconds + elapsed_since(seat.last_active_start, now)
    return seat.active_seconds


def seat_rest_seconds(seat: SeatEntity, now: int) -> int:
    if seat.status == "rest" and seat.last_rest_start is not None:
        return seat.rest_seconds + elapsed_since(seat.last_rest_start, now)
    return seat.rest_seconds


def format_hms(total_seconds: float) -> str:
    s = max(0, math.floor(total_seconds))
    h, rem = divmod(s, 3600)
    m, sec = divmod(rem, 60)
    return f"{h:02d}:{m:02d}:{sec:02d}"


def _tz() -> dt.tzinfo | None:
    name = settings.TIMEZONE.strip()
    if not name:
        return None
    if name.upper() == "UTC":
        return dt.timezone.utc
    return ZoneInfo(name)


def _as_datetime(ms: int) -> dt.datetime:
    tz = _tz()
    if tz is None:
        return dt.datetime.fromtimestamp(ms / 1000)
    return dt.datetime.fromtimestamp(ms / 1000, tz)


def format_datetime(ms: int) -> str:
    return _as_datetime(ms).strftime("%Y-%m-%d %H:%M:%S")


def format_date(ms: int) -> str:
    return _as_datetime(ms).strftime("%Y-%m-%d")


def format_amount(amount: float) -> str:
    if float(amount).is_integer():
        return str(int(amount))
    return str(amount)
