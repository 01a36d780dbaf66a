import sqlite3
from datetime import timedelta

import pytest

from src.api import db
from src.api.db import SQLiteRepository, SQLiteUserRepository
from src.api.repositories import EmailAlreadyRegistered, StoreError, utcnow
from src.api.schemas import TodoCreate, TodoUpdate


@pytest.fixture
def db_path(tmp_path):
    return str(tmp_path / "data" / "todos.db")


@pytest.fixture
def todos(db_path):
    return SQLiteRepository(db_path)


@pytest.fixture
def users(db_path):
    return SQLiteUserRepository(db_path)


class TestSQLiteTodos:
    def test_create_and_get(self, todos):
        created = todos.create("u1", TodoCreate(text="  Buy milk "))
        assert created["text"] == "Buy milk"
        assert created["completed"] is False
        assert created["user"] == "u1"
        assert todos.get(created["id"]) == created
        assert todos.get("missing") is None

    def test_partial_update(self, todos):
        tid = todos.create("u1", TodoCreate(text="Walk dog"))["id"]

        done = todos.update(tid, TodoUpdate(completed=True))
        assert done["completed"] is True
        assert done["text"] == "Walk dog"

        renamed = todos.update(tid, TodoUpdate(text="Walk cat"))
        assert renamed["text"] == "Walk cat"
        assert renamed["completed"] is True
        assert renamed["updated_at"] >= renamed["created_at"]

        assert todos.update("missing", TodoUpdate(completed=True)) is None

    def test_list_by_owner_newest_first(self, todos):
        for text in ["a", "b", "c"]:
            todos.create("u1", TodoCreate(text=text))
        todos.create("u2", TodoCreate(text="other"))

        listed = todos.list_by_owner("u1")
        assert [t["text"] for t in listed] == ["c", "b", "a"]
        assert todos.list_by_owner("nobody") == []

    def test_same_timestamp_keeps_insertion_order(self, todos, monkeypatch):
        frozen = utcnow()
        monkeypatch.setattr(db, "utcnow", lambda: frozen)
        for text in ["a", "b", "c"]:
            todos.create("u1", TodoCreate(text=text))
        listed = todos.list_by_owner("u1")
        assert {t["created_at"] for t in listed} == {frozen}
        assert [t["text"] for t in listed] == ["c", "b", "a"]

    def test_delete(self, todos):
        tid = todos.create("u1", TodoCreate(text="gone"))["id"]
        assert todos.delete(tid) is True
        assert todos.delete(tid) is False
        assert todos.list_by_owner("u1") == []

    def test_data_survives_reopen(self, todos, db_path):
        tid = todos.create("u1", TodoCreate(text="persist"))["id"]
        assert SQLiteRepository(db_path).get(tid)["text"] == "persist"

    def test_sqlite_errors_become_store_errors(self, todos, db_path):
        conn = sqlite3.connect(db_path)
        conn.execute("DROP TABLE todos")
        conn.commit()
        conn.close()
        with pytest.raises(StoreError, match="no such table"):
            todos.list_by_owner("u1")


class TestSQLiteUsers:
    def test_create_and_lookup(self, users):
        user = users.create("Ada", "ada@example.com", "hash")
        assert users.get(user["id"]) == user
        assert users.get_by_email("ada@example.com")["id"] == user["id"]
        assert users.get_by_email("nobody@example.com") is None

    def test_duplicate_email(self, users):
        users.create("Ada", "ada@example.com", "hash")
        with pytest.raises(EmailAlreadyRegistered):
            users.create("Other", "ada@example.com", "hash2")

    def test_token_revocation(self, users):
        assert users.is_token_revoked("jti-1") is False
        users.revoke_token("jti-1", utcnow() + timedelta(hours=1))
        assert users.is_token_revoked("jti-1") is True

    def test_expired_revocations_are_pruned(self, users):
        users.revoke_token("old", utcnow() - timedelta(seconds=1))
        users.revoke_token("new", utcnow() + timedelta(hours=1))
        assert users.is_token_revoked("old") is False
        assert users.is_token_revoked("new") is True
