from __future__ import annotations

import json
from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest

from asciimmo_client.storage import FileStore, MemoryStore


class FakeClock:
    def __init__(self) -> None:
        self.now = datetime(2026, 1, 1, tzinfo=UTC)

    def __call__(self) -> datetime:
        return self.now


def test_memory_store_entries_expire() -> None:
    clock = FakeClock()
    store = MemoryStore(clock=clock)
    store.set_many({"session_token": "t", "username": "alice"}, timedelta(days=30))

    clock.now += timedelta(days=29)
    assert store.get("session_token") == "t"

    clock.now += timedelta(days=2)
    assert store.get("session_token") is None
    assert store.get("username") is None


def test_memory_store_rewrite_extends_expiry() -> None:
    clock = FakeClock()
    store = MemoryStore(clock=clock)
    store.set_many({"username": "alice"}, timedelta(days=30))

    clock.now += timedelta(days=20)
    store.set_many({"username": "alice"}, timedelta(days=30))

    clock.now += timedelta(days=20)
    assert store.get("username") == "alice"


def test_file_store_persists_across_instances(tmp_path: Path) -> None:
    path = tmp_path / "data" / "session.json"
    FileStore(path).set_many({"session_token": "t", "username": "alice"}, timedelta(days=30))

    reopened = FileStore(path)
    assert reopened.get("session_token") == "t"
    assert reopened.get("username") == "alice"

    doc = json.loads(path.read_text(encoding="utf-8"))
    assert set(doc) == {"session_token", "username"}
    assert doc["username"]["value"] == "alice"


def test_file_store_expiry_and_delete(tmp_path: Path) -> None:
    clock = FakeClock()
    store = FileStore(tmp_path / "session.json", clock=clock)
    store.set_many({"session_token": "t", "username": "alice"}, timedelta(days=30))

    store.delete_many(["session_token", "username"])
    assert store.get("session_token") is None

    store.set_many({"username": "alice"}, timedelta(days=30))
    clock.now += timedelta(days=31)
    assert store.get("username") is None


def test_file_store_tolerates_missing_and_corrupt_files(tmp_path: Path) -> None:
    path = tmp_path / "session.json"
    store = FileStore(path)
    assert store.get("username") is None
    store.delete_many(["username"])
    assert not path.exists()

    path.write_text("{not json", encoding="utf-8")
    assert store.get("username") is None

    path.write_text(json.dumps({"username": {"value": "alice"}}), encoding="utf-8")
    assert store.get("username") is None

    store.set_many({"username": "bob"}, timedelta(days=1))
    assert store.get("username") == "bob"


def test_file_store_tolerates_undecodable_bytes(tmp_path: Path) -> None:
    path = tmp_path / "session.json"
    path.write_bytes(b'{"username": "\xff"}')
    store = FileStore(path)

    assert store.get("username") is None

    store.set_many({"username": "alice"}, timedelta(days=1))
    assert store.get("username") == "alice"


def test_file_store_ignores_naive_expiry(tmp_path: Path) -> None:
    path = tmp_path / "session.json"
    path.write_text(
        json.dumps({"username": {"value": "alice", "expires_at": "2099-01-01T00:00:00"}}),
        encoding="utf-8",
    )

    assert FileStore(path).get("username") is None


def test_file_store_failed_write_leaves_no_temp_file(tmp_path: Path) -> None:
    path = tmp_path / "session.json"
    store = FileStore(path)
    store.set_many({"username": "alice"}, timedelta(days=1))

    with pytest.raises(TypeError):
        store.set_many({"session_token": object()}, timedelta(days=1))  # type: ignore[dict-item]

    assert not (tmp_path / "session.json.tmp").exists()
    assert store.get("username") == "alice"
