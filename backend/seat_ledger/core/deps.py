from __future__ import annotations

from fastapi import Depends

from .store import KeyValueStore, store
from ..services.table_service import TableService
from ..services.timing import now_ms


def get_store() -> KeyValueStore:
    return store


def get_now() -> int:
    return now_ms()


def get_table_service(kv: KeyValueStore = Depends(get_store)) -> TableService:
    return TableService(kv)
