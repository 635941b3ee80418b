from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Protocol, cast

from sqlalchemy.orm import Session as DBSession

from ..models.db import StoredValue
from .db import SessionLocal

logger = logging.getLogger(__name__)


class KeyValueStore(Protocol):
    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...


@dataclass
class InMemoryStore:
    data: Dict[str, str] = field(default_factory=dict)

    def get(self, key: str) -> str | None:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.data[key] = value


class SqlStore:
    """Key/value blobs kept in the ``kv_store`` table."""

    def __init__(self, session_factory: Callable[[], DBSession] = SessionLocal):
        self._session_factory = session_factory

    def get(self, key: str) -> str | None:
        db = self._session_factory()
        try:
            row = db.query(StoredValue).filter(StoredValue.key == key).first()
            return cast(str, row.value) if row else None
        finally:
            db.close()

    def set(self, key: str, value: str) -> None:
        db = self._session_factory()
        try:
            row = db.query(StoredValue).filter(StoredValue.key == key).first()
            if row is None:
                db.add(StoredValue(key=key, value=value))
            else:
                row.value = cast(Any, value)
            db.commit()
        except Exception:
            db.rollback()
            logger.exception(f"Failed to write key '{key}'")
            raise
        finally:
            db.close()


store = SqlStore()
