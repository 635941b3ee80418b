from __future__ import annotations

import json

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from seat_ledger.core.config import settings
from seat_ledger.core.store import InMemoryStore, SqlStore
from seat_ledger.models.db import Base
from seat_ledger.services.persistence_service import PersistenceService
from seat_ledger.services.seat_service import SeatService

from .conftest import at, seated


@pytest.fixture
def sql_store():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield SqlStore(sessionmaker(bind=engine, autocommit=False, autoflush=False))
    engine.dispose()


def _busy_tables(running):
    t = seated(running, 1, "A")
    t = SeatService.add_buy_in(t, 1, 75)
    t = seated(t, 2, "B")
    t = SeatService.rest(t, 2, at(20))
    t = SeatService.set_member_id(t, 6, "A")
    t = SeatService.seat_up(t, 6, at(30)).commit()
    t = SeatService.toggle_selection(t, 9)
    return [t, *PersistenceService.default_tables()[1:]]


def test_round_trip_reproduces_the_tables(running):
    tables = _busy_tables(running)
    restored = PersistenceService.loads(PersistenceService.dumps(tables))
    assert restored == tables
    assert restored[0].seat(6).transfer_note == "Transfer-Seat1"
    assert restored[0].sessions[0].buy_in_amount == 75


@pytest.mark.parametrize("raw", [None, "", "not json", "{}", "[1, 2]", "[]"])
def test_unreadable_blobs_fall_back_to_defaults(raw):
    tables = PersistenceService.loads(raw)
    assert [t.name for t in tables] == ["Table 1", "Table 2", "Table 3", "Table 4"]
    assert all(len(t.seats) == 9 for t in tables)


def test_inconsistent_seat_state_falls_back_to_defaults():
    raw = json.dumps([{"name": "Main", "seats": [{"status": "seated", "member_id": "X"}]}])
    tables = PersistenceService.loads(raw)
    assert tables[0].name == "Table 1"


def test_partial_blobs_are_normalised():
    raw = json.dumps(
        [
            {"id": 42, "name": "High Stakes", "blinds": "5/10", "seats": [{"seat_no": 7, "member_id": "Z"}]},
            {"seats": "nope", "sessions": "nope"},
        ]
    )
    tables = PersistenceService.loads(raw)
    assert [t.id for t in tables] == [1, 2]
    assert tables[0].name == "High Stakes"
    assert tables[0].blinds == "5/10"
    assert [s.seat_no for s in tables[0].seats] == list(range(1, 10))
    assert tables[0].seat(1).member_id == "Z"
    assert tables[1].name == "Table 2"
    assert tables[1].sessions == ()


def test_extra_seats_are_dropped():
    raw = json.dumps([{"name": "T", "seats": [{} for _ in range(12)]}])
    assert len(PersistenceService.loads(raw)[0].seats) == 9


def test_store_round_trip_uses_the_storage_key(running):
    kv = InMemoryStore()
    tables = _busy_tables(running)
    PersistenceService.save(kv, tables)
    assert list(kv.data) == [settings.STORAGE_KEY]
    assert PersistenceService.load(kv) == tables


def test_load_from_an_empty_store_gives_defaults():
    assert len(PersistenceService.load(InMemoryStore())) == 4


def test_sql_store_get_and_overwrite(sql_store):
    assert sql_store.get("k") is None
    sql_store.set("k", "one")
    sql_store.set("k", "two")
    assert sql_store.get("k") == "two"


def test_sql_store_backs_persistence(sql_store, running):
    tables = _busy_tables(running)
    PersistenceService.save(sql_store, tables)
    assert PersistenceService.load(sql_store) == tables
