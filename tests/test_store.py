import threading

import pytest
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.orm import Session

from string_analyzer.crud.string import InMemoryStringStore, SqlStringStore, create_store
from string_analyzer.database import create_session_factory, init_db, normalize_database_url
from string_analyzer.exceptions import ConflictError, NotFoundError
from string_analyzer.services.analyzer import build_record


@pytest.fixture(params=["memory", "sql"])
def any_store(request, tmp_path):
    if request.param == "memory":
        return InMemoryStringStore()
    session_factory = create_session_factory(f"sqlite:///{tmp_path / 'strings.db'}")
    init_db(session_factory)
    return SqlStringStore(session_factory)


def test_insert_then_get(any_store):
    record = build_record("Racecar")
    assert any_store.insert(record) == record

    fetched = any_store.get(record.id)
    assert fetched.value == "Racecar"
    assert fetched.properties == record.properties
    assert fetched.created_at == record.created_at


def test_duplicate_insert_conflicts(any_store):
    any_store.insert(build_record("hello"))
    with pytest.raises(ConflictError):
        any_store.insert(build_record("  hello  "))
    assert any_store.count() == 1


def test_get_missing(any_store):
    with pytest.raises(NotFoundError):
        any_store.get("0" * 64)


def test_delete_twice(any_store):
    record = any_store.insert(build_record("hello"))
    any_store.delete(record.id)
    with pytest.raises(NotFoundError):
        any_store.delete(record.id)
    with pytest.raises(NotFoundError):
        any_store.get(record.id)


def test_list_and_clear(any_store):
    first = any_store.insert(build_record("first"))
    second = any_store.insert(build_record("second"))
    assert [r.id for r in any_store.list()] == [first.id, second.id]

    any_store.clear()
    assert any_store.list() == []
    assert any_store.count() == 0


def test_concurrent_inserts_of_same_value():
    store = InMemoryStringStore()
    outcomes = []

    def worker():
        try:
            store.insert(build_record("racecar"))
            outcomes.append("ok")
        except ConflictError:
            outcomes.append("conflict")

    threads = [threading.Thread(target=worker) for _ in range(16)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert outcomes.count("ok") == 1
    assert outcomes.count("conflict") == 15
    assert store.count() == 1


def test_create_store_backends(tmp_path):
    assert isinstance(create_store("memory"), InMemoryStringStore)
    assert isinstance(create_store("sql", f"sqlite:///{tmp_path / 'x.db'}"), SqlStringStore)
    with pytest.raises(ValueError):
        create_store("redis")


def test_mysql_urls_use_pymysql():
    assert normalize_database_url("mysql://u:p@h/db") == "mysql+pymysql://u:p@h/db"
    assert normalize_database_url("sqlite:///./x.db") == "sqlite:///./x.db"


def test_fetched_records_do_not_alias_stored_ones():
    store = InMemoryStringStore()
    record = build_record("Racecar")
    store.insert(record)
    record.properties.character_frequency_map["q"] = 1

    fetched = store.get(record.id)
    with pytest.raises(PydanticValidationError):
        fetched.properties.length = 0
    fetched.properties.character_frequency_map["z"] = 9
    store.list()[0].properties.character_frequency_map["y"] = 3

    stored = store.get(record.id)
    assert stored.properties.length == 7
    assert stored.properties.character_frequency_map == {"R": 1, "a": 2, "c": 2, "e": 1, "r": 1}


def test_sql_insert_race_reports_conflict(tmp_path, monkeypatch):
    session_factory = create_session_factory(f"sqlite:///{tmp_path / 'race.db'}")
    init_db(session_factory)
    store = SqlStringStore(session_factory)
    store.insert(build_record("hello"))

    # Pretend the row was not there yet when checked, so the commit itself collides
    monkeypatch.setattr(Session, "get", lambda self, *args, **kwargs: None)
    with pytest.raises(ConflictError):
        store.insert(build_record("hello"))

    monkeypatch.undo()
    assert store.count() == 1
