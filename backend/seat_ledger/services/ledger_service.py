from __future__ import annotations

from dataclasses import replace

from ..models.entities import SeatEntity, SessionRecord, TableEntity
from .timing import (
    format_amount,
    format_date,
    format_datetime,
    format_hms,
    seat_active_seconds,
    seat_rest_seconds,
)


def transfer_note_for(seat_no: int) -> str:
    return f"Transfer-Seat{seat_no}"


class LedgerService:
    @staticmethod
    def close_session(
        table: TableEntity,
        seat: SeatEntity,
        now: int,
        transfer_note: str | None = None,
    ) -> SessionRecord | None:
        """
        Derive the record closing ``seat``'s current session at ``now``.

        Returns None for a seat that never had a session opened (no member or
        no session start). ``transfer_note`` marks a session closed by a
        transfer-out; otherwise the seat's own annotation is carried.
        """
        if not seat.member_id or not seat.session_start:
            return None

        active = seat_active_seconds(seat, now)
        rest = seat_rest_seconds(seat, now)

        # a session opened by a transfer reports its annotation instead of a buy-in
        if seat.transfer_note:
            buy_in_display = seat.transfer_note
            buy_in_amount = None
        else:
            buy_in_display = format_amount(seat.buy_in)
            buy_in_amount = float(seat.buy_in)

        return SessionRecord(
            date=format_date(now),
            table_id=table.id,
            table_name=table.name,
            seat_no=seat.seat_no,
            member_id=seat.member_id,
            start_time=seat.session_start,
            end_time=format_datetime(now),
            active_seconds=active,
            rest_seconds=rest,
            duration=format_hms(active),
            buy_in_display=buy_in_display,
            buy_in_amount=buy_in_amount,
            transfer_note=transfer_note or seat.transfer_note,
        )

    @staticmethod
    def clear_seat(seat: SeatEntity) -> SeatEntity:
        return SeatEntity(seat_no=seat.seat_no)

    @staticmethod
    def vacate(
        table: TableEntity,
        seat_nos: list[int],
        now: int,
        transfer_note: str | None = None,
    ) -> TableEntity:
        """Close and clear every listed seat, appending one record per closed session."""
        targets = set(seat_nos)
        sessions = list(table.sessions)
        seats = []
        for seat in table.seats:
            if seat.seat_no not in targets:
                seats.append(seat)
                continue
            record = LedgerService.close_session(table, seat, now, transfer_note)
            if record is not None:
                sessions.append(record)
            seats.append(LedgerService.clear_seat(seat))
        return replace(table, seats=tuple(seats), sessions=tuple(sessions))

    @staticmethod
    def summary(table: TableEntity) -> dict[str, float | int]:
        total_buy_in = sum(r.buy_in_amount for r in table.sessions if r.buy_in_amount is not None)
        members = {r.member_id for r in table.sessions if r.member_id.strip()}
        return {
            "total_buy_in": total_buy_in,
            "unique_members": len(members),
            "total_sessions": len(table.sessions),
        }
