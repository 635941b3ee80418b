from __future__ import annotations

import json
import logging
from typing import Any

from pydantic import TypeAdapter

from ..core.config import settings
from ..core.store import KeyValueStore
from ..models.entities import SEATS_PER_TABLE, TableEntity, initial_table

logger = logging.getLogger(__name__)

_tables_adapter = TypeAdapter(list[TableEntity])


def _normalize_seats(raw: Any) -> list[dict[str, Any]]:
    seats = raw if isinstance(raw, list) else []
    out = []
    for i in range(1, SEATS_PER_TABLE + 1):
        s = seats[i - 1] if i <= len(seats) and isinstance(seats[i - 1], dict) else {}
        out.append({**s, "seat_no": i})
    return out


def _normalize_table(raw: Any, table_id: int) -> dict[str, Any]:
    if not isinstance(raw, dict):
        raise TypeError(f"table entry {table_id} is not an object")
    return {
        "name": f"Table {table_id}",
        **raw,
        "id": table_id,
        "seats": _normalize_seats(raw.get("seats")),
        "sessions": raw.get("sessions") if isinstance(raw.get("sessions"), list) else [],
    }


class PersistenceService:
    @staticmethod
    def default_tables(count: int | None = None) -> list[TableEntity]:
        n = settings.TABLE_COUNT if count is None else count
        return [initial_table(i) for i in range(1, n + 1)]

    @staticmethod
    def dumps(tables: list[TableEntity]) -> str:
        return _tables_adapter.dump_json(tables).decode("utf-8")

    @staticmethod
    def loads(raw: str | None) -> list[TableEntity]:
        """
        Parse a stored blob into tables.

        Never raises: an absent, malformed or inconsistent blob yields the
        default tables. Table and seat ids are reassigned by position and seat
        lists are padded or truncated to nine before validation.
        """
        if not raw:
            return PersistenceService.default_tables()
        try:
            parsed = json.loads(raw)
            if not isinstance(parsed, list):
                raise TypeError("stored tables are not a list")
            normalized = [_normalize_table(t, idx) for idx, t in enumerate(parsed, start=1)]
            tables = _tables_adapter.validate_python(normalized)
        except (ValueError, TypeError) as e:
            logger.warning(f"Stored tables unreadable, falling back to defaults: {e}")
            return PersistenceService.default_tables()
        if not tables:
            return PersistenceService.default_tables()
        return tables

    @staticmethod
    def load(kv: KeyValueStore) -> list[TableEntity]:
        try:
            raw = kv.get(settings.STORAGE_KEY)
        except Exception as e:
            logger.warning(f"Store read failed, falling back to defaults: {e}")
            return PersistenceService.default_tables()
        return PersistenceService.loads(raw)

    @staticmethod
    def save(kv: KeyValueStore, tables: list[TableEntity]) -> None:
        kv.set(settings.STORAGE_KEY, PersistenceService.dumps(tables))
