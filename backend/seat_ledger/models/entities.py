from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

SEATS_PER_TABLE = 9

SeatStatus = Literal["idle", "seated", "rest"]


@dataclass(frozen=True)
class SeatEntity:
    seat_no: int
    member_id: str = ""
    status: SeatStatus = "idle"
    active_seconds: int = 0
    rest_seconds: int = 0
    last_active_start: int | None = None  # epoch ms, only while seated
    last_rest_start: int | None = None  # epoch ms, only while resting
    buy_in: float = 0
    transfer_note: str | None = None
    session_start: str | None = None
    selected: bool = False

    def __post_init__(self) -> None:
        if self.status == "idle":
            if self.last_active_start is not None or self.last_rest_start is not None:
                raise ValueError(f"Seat {self.seat_no}: idle seat cannot hold an open interval")
            return
        if not self.member_id:
            raise ValueError(f"Seat {self.seat_no}: occupied seat needs a member id")
        if self.status == "seated":
            if self.last_active_start is None or self.last_rest_start is not None:
                raise ValueError(f"Seat {self.seat_no}: seated requires only an active anchor")
        elif self.last_rest_start is None or self.last_active_start is not None:
            raise ValueError(f"Seat {self.seat_no}: rest requires only a rest anchor")

    @property
    def occupied(self) -> bool:
        return self.status != "idle"


@dataclass(frozen=True)
class SessionRecord:
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
    buy_in_amount: float | None = None  # None when the session began via a transfer
    transfer_note: str | None = None


def initial_seats() -> tuple[SeatEntity, ...]:
    return tuple(SeatEntity(seat_no=i) for i in range(1, SEATS_PER_TABLE + 1))


@dataclass(frozen=True)
class TableEntity:
    id: int
    name: str
    blinds: str = ""
    opened_at: str | None = None
    closed_at: str | None = None
    elapsed_seconds: int = 0
    last_start_time: int | None = None  # epoch ms, only while running
    is_running: bool = False
    seats: tuple[SeatEntity, ...] = field(default_factory=initial_seats)
    sessions: tuple[SessionRecord, ...] = ()

    def __post_init__(self) -> None:
        if self.is_running != (self.last_start_time is not None):
            raise ValueError(f"Table {self.id}: running flag and start anchor disagree")
        if [s.seat_no for s in self.seats] != list(range(1, SEATS_PER_TABLE + 1)):
            raise ValueError(f"Table {self.id}: expected seats 1..{SEATS_PER_TABLE}")

    def seat(self, seat_no: int) -> SeatEntity:
        return self.seats[seat_no - 1]


def initial_table(table_id: int, name: str | None = None) -> TableEntity:
    return TableEntity(id=table_id, name=name or f"Table {table_id}")


@dataclass(frozen=True)
class LedgerExport:
    """Tabular export of one table's ledger, frozen at the moment it was taken."""

    table_id: int
    filename_stem: str
    header_rows: tuple[tuple[str, ...], ...]
    columns: tuple[str, ...]
    rows: tuple[tuple[str, ...], ...]


ConfirmKind = Literal["transfer", "batch_leave", "reset"]


@dataclass(frozen=True)
class PendingConfirmation:
    """
    An operation that only takes effect once the user confirms it.

    ``result`` is the fully computed table the operation would produce.
    Dropping the pending value leaves the original table in force.
    """

    kind: ConfirmKind
    message: str
    result: TableEntity
    seat_nos: tuple[int, ...] = ()
    export: LedgerExport | None = None

    def commit(self) -> TableEntity:
        return self.result
