from __future__ import annotations

from dataclasses import asdict
from typing import Literal

from pydantic import BaseModel, Field

from .entities import TableEntity
from ..services.ledger_service import LedgerService
from ..services.timing import (
    format_hms,
    seat_active_seconds,
    seat_rest_seconds,
    table_elapsed_seconds,
)

SeatStatus = Literal["idle", "seated", "rest"]


class SeatOut(BaseModel):
    seat_no: int
    member_id: str
    status: SeatStatus
    active_seconds: int
    rest_seconds: int
    last_active_start: int | None = None
    last_rest_start: int | None = None
    buy_in: float
    transfer_note: str | None = None
    session_start: str | None = None
    selected: bool = False
    # projections at request time
    live_active_seconds: int
    live_rest_seconds: int
    live_active_hms: str


class SessionRecordOut(BaseModel):
    date: str
    table_id: int
    table_name: str
    seat_no: int
    member_id: str
    start_time: str
    end_time: str
    active_seconds: int
    rest_seconds: int
    duration: str
    buy_in_display: str
    buy_in_amount: float | None = None
    transfer_note: str | None = None

    class Config:
        from_attributes = True


class TableOut(BaseModel):
    id: int
    name: str
    blinds: str
    opened_at: str | None = None
    closed_at: str | None = None
    elapsed_seconds: int
    last_start_time: int | None = None
    is_running: bool
    live_elapsed_seconds: int
    live_elapsed_hms: str
    total_buy_in: float = 0
    unique_members: int = 0
    total_sessions: int = 0
    seats: list[SeatOut]
    sessions: list[SessionRecordOut]

    @classmethod
    def from_entity(cls, table: TableEntity, now: int) -> TableOut:
        elapsed = table_elapsed_seconds(table, now)
        seats = []
        for s in table.seats:
            active = seat_active_seconds(s, now)
            seats.append(
                SeatOut(
                    **asdict(s),
                    live_active_seconds=active,
                    live_rest_seconds=seat_rest_seconds(s, now),
                    live_active_hms=format_hms(active),
                )
            )
        return cls(
            id=table.id,
            name=table.name,
            blinds=table.blinds,
            opened_at=table.opened_at,
            closed_at=table.closed_at,
            elapsed_seconds=table.elapsed_seconds,
            last_start_time=table.last_start_time,
            is_running=table.is_running,
            live_elapsed_seconds=elapsed,
            live_elapsed_hms=format_hms(elapsed),
            seats=seats,
            sessions=[SessionRecordOut.model_validate(r) for r in table.sessions],
            **LedgerService.summary(table),
        )


class ActionOut(BaseModel):
    table: TableOut
    export_file: str | None = None


class ConfirmationOut(BaseModel):
    kind: str
    message: str
    seat_nos: list[int] = []
    preview: TableOut


class BlindsIn(BaseModel):
    blinds: str = Field(default="", max_length=120)


class MemberIn(BaseModel):
    member_id: str = Field(default="", max_length=120)


class BuyInIn(BaseModel):
    # validated as a finite number by the seat rules, so bad input maps to invalid_number
    amount: float | str


class BatchSeatIn(BaseModel):
    seat_nos: list[int] | None = None  # defaults to the seats flagged as selected
    amount: float | str = 0


class BatchLeaveIn(BaseModel):
    seat_nos: list[int] | None = None
