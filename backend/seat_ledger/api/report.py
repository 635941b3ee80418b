"""
Ledger download for one table.

Streams the table's session ledger as CSV, TSV or a styled XLSX workbook,
with the table time projected to the moment of the request.
"""
from __future__ import annotations

import io
import re
from urllib.parse import quote

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import StreamingResponse

from ..core.deps import get_now, get_table_service
from ..core.exceptions import ErrorMessages
from ..services.export_service import MEDIA_TYPES, ExportService
from ..services.table_service import TableService

router = APIRouter(prefix="/api/tables", tags=["export"])


def _ascii_filename_component(value: str) -> str:
    return re.sub(r"[^A-Za-z0-9_.-]", "_", value) or "table"


@router.get("/{table_id}/export")
def export_table(
    table_id: int,
    fmt: str = Query(default="csv", alias="format"),
    svc: TableService = Depends(get_table_service),
    now: int = Depends(get_now),
):
    fmt = fmt.lower()
    if fmt not in MEDIA_TYPES:
        raise HTTPException(status_code=400, detail=ErrorMessages.INVALID_EXPORT_FORMAT)

    export = svc.export(table_id, now)
    filename = ExportService.filename(export, fmt)
    filename_ascii = _ascii_filename_component(filename)

    headers = {
        "Content-Disposition": (
            f'attachment; filename="{filename_ascii}"; '
            f"filename*=UTF-8''{quote(filename)}"
        )
    }
    body = io.BytesIO(ExportService.render(export, fmt))
    return StreamingResponse(body, media_type=MEDIA_TYPES[fmt], headers=headers)
