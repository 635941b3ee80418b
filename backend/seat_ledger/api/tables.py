from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from ..core.deps import get_now, get_table_service
from ..models.schemas import (
    ActionOut,
    BatchLeaveIn,
    BatchSeatIn,
    BlindsIn,
    BuyInIn,
    MemberIn,
    TableOut,
)
from ..services.clock_service import TableClock
from ..services.seat_service import SeatService
from ..services.table_service import Applied, TableService

router = APIRouter(prefix="/api/tables", tags=["tables"])


def _out(applied: Applied, now: int) -> ActionOut:
    return ActionOut(
        table=TableOut.from_entity(applied.table, now),
        export_file=applied.export_path.name if applied.export_path else None,
    )


@router.get("", response_model=list[TableOut])
def list_tables(
    svc: TableService = Depends(get_table_service),
    now: int = Depends(get_now),
):
    return [TableOut.from_entity(t, now) for t in svc.list_tables()]


@router.get("/{table_id}", response_model=TableOut)
def get_table(
    table_id: int,
    svc: TableService = Depends(get_table_service),
    now: int = Depends(get_now),
):
    return TableOut.from_entity(svc.get_table(table_id), now)


@router.post("/{table_id}/start", response_model=TableOut)
def start_table(
    table_id: int,
    svc: TableService = Depends(get_table_service),
    now: int = Depends(get_now),
):
    t = svc.update(table_id, lambda tbl: TableClock.start_or_resume(tbl, now))
    return TableOut.from_entity(t, now)


@router.post("/{table_id}/pause", response_model=TableOut)
def pause_table(
    table_id: int,
    svc: TableService = Depends(get_table_service),
    now: int = Depends(get_now),
):
    t = svc.update(table_id, lambda tbl: TableClock.pause(tbl, now))
    return TableOut.from_entity(t, now)


@router.post("/{table_id}/stop", response_model=ActionOut)
def stop_table(
    table_id: int,
    svc: TableService = Depends(get_table_service),
    now: int = Depends(get_now),
):
    return _out(svc.stop(table_id, now), now)


@router.post("/{table_id}/reset", response_model=ActionOut)
def reset_table(
    table_id: int,
    confirm: bool = Query(default=False),
    svc: TableService = Depends(get_table_service),
    now: int = Depends(get_now),
):
    return _out(svc.resolve(table_id, lambda tbl: TableClock.reset(tbl, now), confirm, now), now)


@router.put("/{table_id}/blinds", response_model=TableOut)
def set_blinds(
    table_id: int,
    payload: BlindsIn,
    svc: TableService = Depends(get_table_service),
    now: int = Depends(get_now),
):
    t = svc.update(table_id, lambda tbl: TableClock.set_blinds(tbl, payload.blinds))
    return TableOut.from_entity(t, now)


@router.put("/{table_id}/seats/{seat_no}/member", response_model=TableOut)
def set_member(
    table_id: int,
    seat_no: int,
    payload: MemberIn,
    svc: TableService = Depends(get_table_service),
    now: int = Depends(get_now),
):
    t = svc.update(table_id, lambda tbl: SeatService.set_member_id(tbl, seat_no, payload.member_id))
    return TableOut.from_entity(t, now)


@router.post("/{table_id}/seats/{seat_no}/select", response_model=TableOut)
def toggle_select(
    table_id: int,
    seat_no: int,
    svc: TableService = Depends(get_table_service),
    now: int = Depends(get_now),
):
    t = svc.update(table_id, lambda tbl: SeatService.toggle_selection(tbl, seat_no))
    return TableOut.from_entity(t, now)


@router.post("/{table_id}/seats/{seat_no}/seat-up", response_model=ActionOut)
def seat_up(
    table_id: int,
    seat_no: int,
    confirm: bool = Query(default=False),
    svc: TableService = Depends(get_table_service),
    now: int = Depends(get_now),
):
    return _out(svc.seat_up(table_id, seat_no, now, confirm=confirm), now)


@router.post("/{table_id}/seats/{seat_no}/rest", response_model=TableOut)
def rest(
    table_id: int,
    seat_no: int,
    svc: TableService = Depends(get_table_service),
    now: int = Depends(get_now),
):
    t = svc.update(table_id, lambda tbl: SeatService.rest(tbl, seat_no, now))
    return TableOut.from_entity(t, now)


@router.post("/{table_id}/seats/{seat_no}/leave", response_model=TableOut)
def leave(
    table_id: int,
    seat_no: int,
    svc: TableService = Depends(get_table_service),
    now: int = Depends(get_now),
):
    t = svc.update(table_id, lambda tbl: SeatService.leave(tbl, seat_no, now))
    return TableOut.from_entity(t, now)


@router.post("/{table_id}/seats/{seat_no}/buy-in", response_model=TableOut)
def add_buy_in(
    table_id: int,
    seat_no: int,
    payload: BuyInIn,
    svc: TableService = Depends(get_table_service),
    now: int = Depends(get_now),
):
    t = svc.update(table_id, lambda tbl: SeatService.add_buy_in(tbl, seat_no, payload.amount))
    return TableOut.from_entity(t, now)


@router.post("/{table_id}/batch/seat", response_model=TableOut)
def batch_seat(
    table_id: int,
    payload: BatchSeatIn,
    svc: TableService = Depends(get_table_service),
    now: int = Depends(get_now),
):
    t = svc.update(table_id, lambda tbl: SeatService.batch_seat(tbl, payload.seat_nos, payload.amount, now))
    return TableOut.from_entity(t, now)


@router.post("/{table_id}/batch/leave", response_model=ActionOut)
def batch_leave(
    table_id: int,
    payload: BatchLeaveIn,
    confirm: bool = Query(default=False),
    svc: TableService = Depends(get_table_service),
    now: int = Depends(get_now),
):
    applied = svc.resolve(table_id, lambda tbl: SeatService.batch_leave(tbl, payload.seat_nos, now), confirm, now)
    return _out(applied, now)
