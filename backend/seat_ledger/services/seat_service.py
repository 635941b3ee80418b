from __future__ import annotations

import logging
import math
from dataclasses import replace
from typing import Any

from ..core.exceptions import RejectReason, TableRuleError
from ..models.entities import SEATS_PER_TABLE, PendingConfirmation, SeatEntity, TableEntity
from .ledger_service import LedgerService, transfer_note_for
from .timing import format_datetime, seat_active_seconds, seat_rest_seconds

logger = logging.getLogger(__name__)


def _with_seats(table: TableEntity, *updated: SeatEntity) -> TableEntity:
    by_no = {s.seat_no: s for s in updated}
    return replace(table, seats=tuple(by_no.get(s.seat_no, s) for s in table.seats))


def _buy_in_delta(amount: Any) -> float:
    """Validate a buy-in amount; negative amounts contribute nothing."""
    try:
        value = float(amount)
    except (TypeError, ValueError):
        raise TableRuleError(RejectReason.INVALID_NUMBER)
    if not math.isfinite(value):
        raise TableRuleError(RejectReason.INVALID_NUMBER)
    return max(0.0, value)


def _seated(seat: SeatEntity, now: int) -> SeatEntity:
    """Standard transition of an idle or resting seat into an open active interval."""
    active = seat.active_seconds
    rest = seat.rest_seconds
    session_start = seat.session_start
    if seat.status == "rest":
        rest = seat_rest_seconds(seat, now)
    if seat.status == "idle":
        active = 0
        rest = 0
        session_start = format_datetime(now)
    return replace(
        seat,
        status="seated",
        last_active_start=now,
        last_rest_start=None,
        active_seconds=active,
        rest_seconds=rest,
        session_start=session_start,
    )


class SeatService:
    @staticmethod
    def get_seat(table: TableEntity, seat_no: int) -> SeatEntity:
        if not 1 <= seat_no <= SEATS_PER_TABLE:
            raise TableRuleError(RejectReason.INVALID_SEAT)
        return table.seat(seat_no)

    @staticmethod
    def find_seat_by_member(table: TableEntity, member_id: str) -> SeatEntity | None:
        """The occupied (seated or resting) seat holding ``member_id``, if any."""
        mid = member_id.strip()
        if not mid:
            return None
        return next((s for s in table.seats if s.member_id == mid and s.occupied), None)

    @staticmethod
    def set_member_id(table: TableEntity, seat_no: int, member_id: str) -> TableEntity:
        seat = SeatService.get_seat(table, seat_no)
        mid = (member_id or "").strip()
        if mid == seat.member_id:
            return table
        if seat.occupied:
            raise TableRuleError(RejectReason.SEAT_OCCUPIED)
        return _with_seats(table, replace(seat, member_id=mid))

    @staticmethod
    def toggle_selection(table: TableEntity, seat_no: int) -> TableEntity:
        seat = SeatService.get_seat(table, seat_no)
        return _with_seats(table, replace(seat, selected=not seat.selected))

    @staticmethod
    def seat_up(table: TableEntity, seat_no: int, now: int) -> TableEntity | PendingConfirmation:
        """
        Put the member typed at ``seat_no`` into an active interval.

        If the same member already occupies another seat of this table the
        move is returned as a pending ``transfer`` confirmation: committing it
        closes the source session (annotated with the source seat) and opens
        a fresh annotated session at ``seat_no``.
        """
        if not table.is_running:
            raise TableRuleError(RejectReason.TABLE_NOT_RUNNING)
        seat = SeatService.get_seat(table, seat_no)
        if not seat.member_id.strip():
            raise TableRuleError(RejectReason.MEMBER_ID_REQUIRED)
        if seat.status == "seated":
            return table

        existing = SeatService.find_seat_by_member(table, seat.member_id)
        if existing is not None and existing.seat_no != seat_no:
            return SeatService._transfer(table, existing, seat, now)

        logger.info(f"Table {table.id} seat {seat_no}: {seat.member_id} seated ({seat.status} -> seated)")
        return _with_seats(table, _seated(seat, now))

    @staticmethod
    def _transfer(
        table: TableEntity,
        source: SeatEntity,
        target: SeatEntity,
        now: int,
    ) -> PendingConfirmation:
        note = transfer_note_for(source.seat_no)
        vacated = LedgerService.vacate(table, [source.seat_no], now, transfer_note=note)
        moved = replace(
            vacated.seat(target.seat_no),
            status="seated",
            last_active_start=now,
            last_rest_start=None,
            active_seconds=0,
            rest_seconds=0,
            session_start=format_datetime(now),
            transfer_note=note,
        )
        return PendingConfirmation(
            kind="transfer",
            message=(
                f"Member {target.member_id} is currently seated at Seat {source.seat_no}. "
                f"Move to Seat {target.seat_no}?"
            ),
            result=_with_seats(vacated, moved),
            seat_nos=(source.seat_no, target.seat_no),
        )

    @staticmethod
    def rest(table: TableEntity, seat_no: int, now: int) -> TableEntity:
        seat = SeatService.get_seat(table, seat_no)
        if seat.status != "seated":
            return table
        resting = replace(
            seat,
            status="rest",
            active_seconds=seat_active_seconds(seat, now),
            last_active_start=None,
            last_rest_start=now,
        )
        return _with_seats(table, resting)

    @staticmethod
    def leave(table: TableEntity, seat_no: int, now: int) -> TableEntity:
        seat = SeatService.get_seat(table, seat_no)
        if not seat.occupied:
            return table
        logger.info(f"Table {table.id} seat {seat_no}: {seat.member_id} left")
        return LedgerService.vacate(table, [seat_no], now)

    @staticmethod
    def add_buy_in(table: TableEntity, seat_no: int, amount: Any) -> TableEntity:
        seat = SeatService.get_seat(table, seat_no)
        delta = _buy_in_delta(amount)
        return _with_seats(table, replace(seat, buy_in=seat.buy_in + delta))

    @staticmethod
    def selected_seat_nos(table: TableEntity) -> list[int]:
        return [s.seat_no for s in table.seats if s.selected]

    @staticmethod
    def batch_seat(
        table: TableEntity,
        seat_nos: list[int] | None,
        amount: Any,
        now: int,
    ) -> TableEntity:
        """
        Seat every selected seat and add ``amount`` to each one's buy-in.

        All checks run before anything changes, so one bad seat rejects the
        whole batch.
        """
        if not table.is_running:
            raise TableRuleError(RejectReason.TABLE_NOT_RUNNING)
        nos = SeatService.selected_seat_nos(table) if seat_nos is None else sorted(set(seat_nos))
        if not nos:
            raise TableRuleError(RejectReason.NOTHING_SELECTED)
        selected = [SeatService.get_seat(table, n) for n in nos]
        if any(not s.member_id.strip() for s in selected):
            raise TableRuleError(RejectReason.BATCH_MISSING_MEMBER)

        seen: set[str] = set()
        for s in selected:
            existing = SeatService.find_seat_by_member(table, s.member_id)
            if (existing is not None and existing.seat_no != s.seat_no) or s.member_id in seen:
                raise TableRuleError(RejectReason.DUPLICATE_MEMBER)
            seen.add(s.member_id)

        delta = _buy_in_delta(amount)

        updated = []
        for s in selected:
            seat = s if s.status == "seated" else _seated(s, now)
            updated.append(replace(seat, buy_in=seat.buy_in + delta))
        logger.info(f"Table {table.id} batch seated seats {nos} with buy-in {delta}")
        return _with_seats(table, *updated)

    @staticmethod
    def batch_leave(table: TableEntity, seat_nos: list[int] | None, now: int) -> PendingConfirmation:
        nos = SeatService.selected_seat_nos(table) if seat_nos is None else sorted(set(seat_nos))
        leaving = [n for n in nos if SeatService.get_seat(table, n).occupied]
        if not leaving:
            raise TableRuleError(RejectReason.NOTHING_SELECTED)
        return PendingConfirmation(
            kind="batch_leave",
            message="Leave all selected seats and write their sessions?",
            result=LedgerService.vacate(table, leaving, now),
            seat_nos=tuple(leaving),
        )
