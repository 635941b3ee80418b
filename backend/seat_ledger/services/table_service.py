from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, TypeVar

from ..core.exceptions import RejectReason, TableRuleError
from ..core.store import KeyValueStore
from ..models.entities import LedgerExport, PendingConfirmation, TableEntity
from .clock_service import TableClock
from .export_service import ExportService
from .persistence_service import PersistenceService
from .seat_service import SeatService

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ConfirmationRequired(Exception):
    """Raised when a pending operation was submitted without confirmation."""

    def __init__(self, pending: PendingConfirmation, now: int):
        self.pending = pending
        self.now = now
        super().__init__(pending.message)


@dataclass
class Applied:
    table: TableEntity
    export_path: Path | None = None


class TableService:
    """Load the stored tables, apply one transition, save the result."""

    def __init__(self, kv: KeyValueStore):
        self.kv = kv

    def list_tables(self) -> list[TableEntity]:
        return PersistenceService.load(self.kv)

    def get_table(self, table_id: int) -> TableEntity:
        for t in self.list_tables():
            if t.id == table_id:
                return t
        raise TableRuleError(RejectReason.TABLE_NOT_FOUND)

    def _apply(self, table_id: int, op: Callable[[TableEntity], T]) -> tuple[TableEntity, T]:
        tables = self.list_tables()
        idx = next((i for i, t in enumerate(tables) if t.id == table_id), None)
        if idx is None:
            raise TableRuleError(RejectReason.TABLE_NOT_FOUND)
        return tables[idx], op(tables[idx])

    def _save(self, table: TableEntity) -> TableEntity:
        tables = [table if t.id == table.id else t for t in self.list_tables()]
        PersistenceService.save(self.kv, tables)
        return table

    def update(self, table_id: int, op: Callable[[TableEntity], TableEntity]) -> TableEntity:
        before, after = self._apply(table_id, op)
        if after is before:
            return before
        return self._save(after)

    def resolve(
        self,
        table_id: int,
        op: Callable[[TableEntity], TableEntity | PendingConfirmation],
        confirm: bool,
        now: int,
    ) -> Applied:
        """Apply ``op``; a pending confirmation is committed only when ``confirm`` is set."""
        before, outcome = self._apply(table_id, op)
        if not isinstance(outcome, PendingConfirmation):
            if outcome is before:
                return Applied(before)
            return Applied(self._save(outcome))
        if not confirm:
            raise ConfirmationRequired(outcome, now)
        export_path = ExportService.write(outcome.export) if outcome.export is not None else None
        logger.info(f"Table {table_id}: confirmed {outcome.kind}")
        return Applied(self._save(outcome.commit()), export_path)

    def stop(self, table_id: int, now: int) -> Applied:
        _, (stopped, export) = self._apply(table_id, lambda t: TableClock.stop(t, now))
        path = ExportService.write(export)
        return Applied(self._save(stopped), path)

    def export(self, table_id: int, now: int) -> LedgerExport:
        return ExportService.snapshot(self.get_table(table_id), now)

    def seat_up(self, table_id: int, seat_no: int, now: int, confirm: bool = False) -> Applied:
        return self.resolve(table_id, lambda t: SeatService.seat_up(t, seat_no, now), confirm, now)
