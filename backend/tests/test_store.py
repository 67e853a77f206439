"""Tests for the persisted record store and repositories."""
import threading

import pytest

from jobboard.core.errors import Conflict
from jobboard.db.repositories import (
    ANALYTICS,
    LOGINS,
    USERS,
    AnalyticsRepository,
    UserRepository,
    empty_analytics,
)
from jobboard.db.store import JsonFileRecordStore, SqlRecordStore, build_store
from jobboard.models import LoginEvent


def test_missing_collection_returns_fresh_default(store) -> None:
    default: list = []
    result = store.read_all(USERS, default)
    assert result == []
    result.append("x")
    assert default == []


def test_corrupt_file_falls_back_to_default(store) -> None:
    store.path_for(USERS).write_text("{not json", encoding="utf-8")
    assert store.read_all(USERS, []) == []


def test_wrong_shape_falls_back_to_default(store) -> None:
    store.write_all(USERS, {"oops": True})
    assert store.read_all(USERS, []) == []


def test_write_all_overwrites_whole_document(store) -> None:
    store.write_all(USERS, [{"id": 1}, {"id": 2}])
    store.write_all(USERS, [{"id": 3}])
    assert store.read_all(USERS, []) == [{"id": 3}]
    leftovers = [p for p in store.data_dir.iterdir() if p.name.endswith(".tmp")]
    assert leftovers == []


def test_update_does_not_write_when_mutator_raises(store) -> None:
    store.write_all(USERS, [{"id": 1}])

    def boom(rows):
        rows.append({"id": 2})
        raise RuntimeError("nope")

    with pytest.raises(RuntimeError):
        store.update(USERS, [], boom)
    assert store.read_all(USERS, []) == [{"id": 1}]


def test_concurrent_appends_are_not_lost(store) -> None:
    events = AnalyticsRepository(store)

    def worker(n: int) -> None:
        for i in range(5):
            events.append(
                LOGINS,
                LoginEvent(user_id=n, email=f"u{n}@x.io", timestamp=f"2026-01-01T00:00:0{i}+00:00"),
            )

    threads = [threading.Thread(target=worker, args=(n,)) for n in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len(events.load().logins) == 40


def test_sql_store_round_trip(tmp_path) -> None:
    sql_store = SqlRecordStore(f"sqlite:///{tmp_path / 'records.db'}")
    assert sql_store.read_all(ANALYTICS, empty_analytics()) == empty_analytics()

    sql_store.write_all(USERS, [{"id": 1, "email": "a@x.io"}])
    sql_store.update(USERS, [], lambda rows: rows.append({"id": 2, "email": "b@x.io"}))

    reopened = SqlRecordStore(f"sqlite:///{tmp_path / 'records.db'}")
    assert [row["id"] for row in reopened.read_all(USERS, [])] == [1, 2]


def test_build_store_rejects_unknown_backend(tmp_path) -> None:
    assert isinstance(
        build_store("json", database_url="sqlite://", data_dir=str(tmp_path)), JsonFileRecordStore
    )
    with pytest.raises(ValueError):
        build_store("redis", database_url="sqlite://", data_dir=str(tmp_path))


def test_user_ids_are_max_plus_one(users: UserRepository) -> None:
    first = users.create("a@x.io", "hash")
    second = users.create("b@x.io", "hash")
    assert (first.id, second.id) == (1, 2)

    users.store.write_all(USERS, [{"id": 7, "email": "c@x.io", "password_hash": "h", "role": "user"}])
    assert users.create("d@x.io", "hash").id == 8


def test_email_lookup_is_case_and_space_insensitive(users: UserRepository) -> None:
    users.create("Someone@Example.com", "hash")
    assert users.get_by_email("  someone@EXAMPLE.com ").email == "someone@example.com"
    with pytest.raises(Conflict):
        users.create(" SOMEONE@example.com", "hash")


def test_mobile_lookup_ignores_formatting(users: UserRepository) -> None:
    users.create("a@x.io", "hash", mobile="+919876543210")
    assert users.get_by_mobile("+91 98765-43210") is not None
    assert users.get_by_mobile("9876543210") is None
    with pytest.raises(Conflict):
        users.create("b@x.io", "hash", mobile="+91 (98765) 43210")


def test_malformed_events_are_skipped(store, events: AnalyticsRepository) -> None:
    store.write_all(
        ANALYTICS,
        {
            "logins": [
                {"userId": 1, "email": "a@x.io", "timestamp": "2026-01-01T00:00:00Z"},
                {"email": "missing-user-id"},
            ],
            "applications": "not-a-list",
        },
    )
    log = events.load()
    assert len(log.logins) == 1
    assert log.applications == []
    assert log.page_views == []
