from datetime import timedelta

import pytest

from src.api import repositories
from src.api.repositories import (
    EmailAlreadyRegistered,
    InMemoryRepository,
    InMemoryUserRepository,
    get_repository,
    get_user_repository,
    reset_repositories,
    utcnow,
)
from src.api.schemas import TodoCreate, TodoUpdate


class TestInMemoryTodos:
    def test_same_timestamp_keeps_insertion_order(self, monkeypatch):
        frozen = utcnow()
        monkeypatch.setattr(repositories, "utcnow", lambda: frozen)
        repo = InMemoryRepository()
        for text in ["a", "b", "c"]:
            repo.create("u1", TodoCreate(text=text))
        assert [t["text"] for t in repo.list_by_owner("u1")] == ["c", "b", "a"]

    def test_returned_entities_are_copies(self):
        repo = InMemoryRepository()
        created = repo.create("u1", TodoCreate(text="original"))
        created["text"] = "mutated"
        repo.list_by_owner("u1")[0]["text"] = "mutated too"
        assert repo.get(created["id"])["text"] == "original"

    def test_update_only_supplied_fields(self):
        repo = InMemoryRepository()
        tid = repo.create("u1", TodoCreate(text="keep"))["id"]
        updated = repo.update(tid, TodoUpdate(completed=True))
        assert updated["text"] == "keep"
        assert updated["completed"] is True
        assert repo.update("missing", TodoUpdate(text="x")) is None

    def test_delete(self):
        repo = InMemoryRepository()
        tid = repo.create("u1", TodoCreate(text="bye"))["id"]
        assert repo.delete(tid) is True
        assert repo.delete(tid) is False
        assert repo.get(tid) is None


class TestInMemoryUsers:
    def test_duplicate_email(self):
        users = InMemoryUserRepository()
        users.create("Ada", "ada@example.com", "h")
        with pytest.raises(EmailAlreadyRegistered):
            users.create("Eve", "ada@example.com", "h")

    def test_revocation(self):
        users = InMemoryUserRepository()
        users.revoke_token("old", utcnow() - timedelta(seconds=1))
        users.revoke_token("new", utcnow() + timedelta(hours=1))
        assert users.is_token_revoked("new")
        assert not users.is_token_revoked("old")
        assert not users.is_token_revoked("never")


class TestBackendSelection:
    def test_sqlite_backend_from_env(self, monkeypatch, tmp_path):
        monkeypatch.setenv("PERSISTENCE_BACKEND", "sqlite")
        monkeypatch.setenv("SQLITE_DB_PATH", str(tmp_path / "app.db"))
        reset_repositories()
        try:
            from src.api.db import SQLiteRepository, SQLiteUserRepository

            assert isinstance(get_repository(), SQLiteRepository)
            assert isinstance(get_user_repository(), SQLiteUserRepository)
            assert get_repository() is get_repository()
        finally:
            reset_repositories()

    def test_unknown_backend_falls_back_to_memory(self, monkeypatch):
        monkeypatch.setenv("PERSISTENCE_BACKEND", "cassandra")
        reset_repositories()
        try:
            assert isinstance(get_repository(), InMemoryRepository)
        finally:
            reset_repositories()
