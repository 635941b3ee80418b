"""
Ledger export for one table.

Builds a frozen tabular snapshot (header block, column row, one row per
session record) and renders it as CSV/TSV text or as an XLSX workbook.
"""
from __future__ import annotations

import csv
import io
import logging
import re
from pathlib import Path

from openpyxl import Workbook
from openpyxl.cell.cell import ILLEGAL_CHARACTERS_RE
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side

from ..core.config import settings
from ..models.entities import LedgerExport, TableEntity
from .ledger_service import LedgerService
from .timing import format_amount, format_date, format_hms, table_elapsed_seconds

logger = logging.getLogger(__name__)

COLUMNS = (
    "Date",
    "Table",
    "Seat",
    "Member ID",
    "Start Time",
    "End Time",
    "Active Seconds",
    "Rest Seconds",
    "Duration (HH:MM:SS)",
    "Buy-in",
    "Transfer Note",
)

MEDIA_TYPES = {
    "csv": "text/csv",
    "tsv": "text/tab-separated-values",
    "xlsx": "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
}

NUMERIC_HEADER_LABELS = ("Total Buy-in", "Unique Members", "Total Sessions")

# Style constants
HEADER_FONT = Font(bold=True, color="FFFFFF")
HEADER_FILL = PatternFill(start_color="1F4E79", end_color="1F4E79", fill_type="solid")
LABEL_FONT = Font(bold=True)
THIN_BORDER = Border(
    left=Side(style="thin"),
    right=Side(style="thin"),
    top=Side(style="thin"),
    bottom=Side(style="thin"),
)


class ExportService:
    @staticmethod
    def build(table: TableEntity, now: int, closed_at: str | None = None) -> LedgerExport:
        """
        Snapshot ``table``'s ledger at ``now``.

        The table time is projected to ``now``; ``closed_at`` overrides the
        table's own close stamp (used by stop, which exports before the
        stamped state is returned).
        """
        elapsed = table_elapsed_seconds(table, now)
        summary = LedgerService.summary(table)
        today = format_date(now)

        header_rows = (
            ("Table", table.name),
            ("Date", today),
            ("Blinds", table.blinds or ""),
            ("Opened At", table.opened_at or ""),
            ("Closed At", closed_at if closed_at is not None else (table.closed_at or "")),
            ("Table Time", format_hms(elapsed)),
            ("Total Buy-in", format_amount(summary["total_buy_in"])),
            ("Unique Members", str(summary["unique_members"])),
            ("Total Sessions", str(summary["total_sessions"])),
            ("",),
        )

        rows = tuple(
            (
                r.date,
                r.table_name,
                str(r.seat_no),
                r.member_id,
                r.start_time,
                r.end_time,
                str(r.active_seconds),
                str(r.rest_seconds),
                r.duration,
                r.buy_in_display,
                r.transfer_note or "",
            )
            for r in table.sessions
        )

        compact_name = re.sub(r"\s+", "", table.name)
        stem = f"PokerSessions_{today.replace('-', '')}_{compact_name}"
        return LedgerExport(
            table_id=table.id,
            filename_stem=stem,
            header_rows=header_rows,
            columns=COLUMNS,
            rows=rows,
        )

    @staticmethod
    def snapshot(table: TableEntity, now: int) -> LedgerExport:
        """Manual export: the table as it stands, elapsed time projected to ``now``."""
        return ExportService.build(table, now)

    @staticmethod
    def lines(export: LedgerExport) -> list[tuple[str, ...]]:
        return [*export.header_rows, export.columns, *export.rows]

    @staticmethod
    def render_text(export: LedgerExport, fmt: str = "csv") -> str:
        buf = io.StringIO()
        if fmt == "tsv":
            w = csv.writer(buf, delimiter="\t", lineterminator="\n", quoting=csv.QUOTE_MINIMAL)
        else:
            w = csv.writer(buf, delimiter=",", lineterminator="\n", quoting=csv.QUOTE_ALL)
        for line in ExportService.lines(export):
            w.writerow([_sanitize_text(v) for v in line])
        return buf.getvalue()

    @staticmethod
    def render_xlsx(export: LedgerExport) -> bytes:
        wb = Workbook()
        ws = wb.active
        ws.title = "Sessions"

        row = 1
        for label, *value in export.header_rows:
            if not label:
                row += 1
                continue
            ws.cell(row=row, column=1, value=label).font = LABEL_FONT
            cell_value = value[0] if value else ""
            if label in NUMERIC_HEADER_LABELS:
                cell_value = _to_number(cell_value)
            else:
                cell_value = _sanitize_cell(cell_value)
            ws.cell(row=row, column=2, value=cell_value)
            row += 1

        for col, name in enumerate(export.columns, start=1):
            cell = ws.cell(row=row, column=col, value=name)
            cell.font = HEADER_FONT
            cell.fill = HEADER_FILL
            cell.alignment = Alignment(horizontal="center", vertical="center")
            cell.border = THIN_BORDER
        row += 1

        for line in export.rows:
            for col, value in enumerate(line, start=1):
                ws.cell(row=row, column=col, value=_sanitize_cell(value)).border = THIN_BORDER
            row += 1

        _auto_width(ws)
        out = io.BytesIO()
        wb.save(out)
        return out.getvalue()

    @staticmethod
    def render(export: LedgerExport, fmt: str) -> bytes:
        if fmt == "xlsx":
            return ExportService.render_xlsx(export)
        # BOM so spreadsheet tools detect UTF-8 member ids
        return ("\ufeff" + ExportService.render_text(export, fmt)).encode("utf-8")

    @staticmethod
    def filename(export: LedgerExport, fmt: str) -> str:
        return f"{export.filename_stem}.{fmt}"

    @staticmethod
    def write(export: LedgerExport, fmt: str = "csv", directory: str | Path | None = None) -> Path:
        """Write ``export`` into the export directory and return the file path."""
        target_dir = Path(directory or settings.EXPORT_DIR)
        target_dir.mkdir(parents=True, exist_ok=True)
        path = target_dir / ExportService.filename(export, fmt)
        path.write_bytes(ExportService.render(export, fmt))
        logger.info(f"Exported {len(export.rows)} sessions of table {export.table_id} to {path}")
        return path


def _sanitize_cell(value: str) -> str:
    """Sanitize a cell for any export format: drop control characters, escape formulas."""
    value = ILLEGAL_CHARACTERS_RE.sub("", value)
    if value and value[0] in ("=", "@"):
        return "'" + value
    return value


def _sanitize_text(value: str) -> str:
    """Sanitize cell value for CSV/TSV export by removing line breaks and tabs."""
    value = value.replace("\r", " ").replace("\n", " ").replace("\t", " ")
    return _sanitize_cell(value)


def _to_number(value: str) -> int | float:
    return float(value) if "." in value else int(value)


def _auto_width(ws):
    for column_cells in ws.columns:
        max_length = max((len(str(c.value)) for c in column_cells if c.value is not None), default=0)
        ws.column_dimensions[column_cells[0].column_letter].width = max(min(max_length + 4, 60), 12)
