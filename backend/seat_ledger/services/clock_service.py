from __future__ import annotations

import logging
from dataclasses import replace

from ..core.exceptions import RejectReason, TableRuleError
from ..models.entities import LedgerExport, PendingConfirmation, TableEntity, initial_table
from .export_service import ExportService
from .timing import format_datetime, table_elapsed_seconds

logger = logging.getLogger(__name__)


class TableClock:
    @staticmethod
    def has_active_players(table: TableEntity) -> bool:
        return any(s.status == "seated" for s in table.seats)

    @staticmethod
    def require_no_active_players(table: TableEntity) -> None:
        if TableClock.has_active_players(table):
            raise TableRuleError(RejectReason.TABLE_HAS_ACTIVE_PLAYERS)

    @staticmethod
    def elapsed(table: TableEntity, now: int) -> int:
        return table_elapsed_seconds(table, now)

    @staticmethod
    def start_or_resume(table: TableEntity, now: int) -> TableEntity:
        if table.is_running:
            return table
        logger.info(f"Table {table.id} clock started at {now}")
        return replace(
            table,
            opened_at=table.opened_at or format_datetime(now),
            is_running=True,
            last_start_time=now,
            closed_at=None,
        )

    @staticmethod
    def pause(table: TableEntity, now: int) -> TableEntity:
        TableClock.require_no_active_players(table)
        if not table.is_running:
            return table
        elapsed = table_elapsed_seconds(table, now)
        logger.info(f"Table {table.id} paused at {elapsed}s")
        return replace(table, is_running=False, last_start_time=None, elapsed_seconds=elapsed)

    @staticmethod
    def stop(table: TableEntity, now: int) -> tuple[TableEntity, LedgerExport]:
        """
        Close the table: freeze the clock, stamp ``closed_at`` and export.

        The export is taken from the frozen, stamped table, so it shows the
        same elapsed time and ledger as the returned state.
        """
        TableClock.require_no_active_players(table)
        closed_at = format_datetime(now)
        stopped = replace(
            table,
            is_running=False,
            last_start_time=None,
            elapsed_seconds=table_elapsed_seconds(table, now),
            closed_at=closed_at,
        )
        export = ExportService.build(stopped, now, closed_at=closed_at)
        logger.info(f"Table {table.id} closed at {closed_at} with {len(stopped.sessions)} sessions")
        return stopped, export

    @staticmethod
    def reset(table: TableEntity, now: int) -> PendingConfirmation:
        export = ExportService.snapshot(table, now) if table.sessions else None
        return PendingConfirmation(
            kind="reset",
            message="Reset this table and clear all data? A CSV will be exported first.",
            result=initial_table(table.id, table.name),
            export=export,
        )

    @staticmethod
    def set_blinds(table: TableEntity, blinds: str) -> TableEntity:
        return replace(table, blinds=blinds)
