from __future__ import annotations

import logging
import uuid
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from functools import lru_cache
from threading import RLock
from typing import Dict, List, Optional, Tuple

from .models import TodoEntity, UserEntity
from .schemas import TodoCreate, TodoUpdate
from .settings import get_settings

logger = logging.getLogger(__name__)


class StoreError(Exception):
    """Unexpected failure of a storage backend. The message is reported to clients as-is."""


class EmailAlreadyRegistered(Exception):
    """Raised by user repositories when the email is taken."""


def new_id() -> str:
    return uuid.uuid4().hex


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


# PUBLIC_INTERFACE
class Repository(ABC):
    """Abstract repository contract for todo storage backends."""

    @abstractmethod
    def create(self, owner_id: str, data: TodoCreate) -> TodoEntity:
        """Create and return a new TodoEntity owned by owner_id."""

    @abstractmethod
    def get(self, todo_id: str) -> Optional[TodoEntity]:
        """Return a TodoEntity by id, or None if not found."""

    @abstractmethod
    def update(self, todo_id: str, data: TodoUpdate) -> Optional[TodoEntity]:
        """Update fields of an existing TodoEntity. Return updated entity or None if not found."""

    @abstractmethod
    def delete(self, todo_id: str) -> bool:
        """Delete a TodoEntity by id. Return True if deleted, False if not found."""

    @abstractmethod
    def list_by_owner(self, owner_id: str) -> List[TodoEntity]:
        """
        Return every TodoEntity owned by owner_id, newest first. Todos created
        within the same clock tick keep their insertion order (newest first).
        """


# PUBLIC_INTERFACE
class UserRepository(ABC):
    """Abstract repository contract for accounts and revoked bearer tokens."""

    @abstractmethod
    def create(self, name: str, email: str, password_hash: str) -> UserEntity:
        """Create an account. Raise EmailAlreadyRegistered if the email is taken."""

    @abstractmethod
    def get(self, user_id: str) -> Optional[UserEntity]:
        """Return a UserEntity by id, or None if not found."""

    @abstractmethod
    def get_by_email(self, email: str) -> Optional[UserEntity]:
        """Return the UserEntity registered with email (lower-case), or None."""

    @abstractmethod
    def revoke_token(self, jti: str, expires_at: datetime) -> None:
        """Remember a token id as revoked until it expires."""

    @abstractmethod
    def is_token_revoked(self, jti: str) -> bool:
        """Return True if the token id was revoked by a logout."""


class InMemoryRepository(Repository):
    """
    Thread-safe in-memory todo repository suitable for testing and default runtime.
    """

    def __init__(self) -> None:
        self._lock = RLock()
        self._items: Dict[str, TodoEntity] = {}
        self._order: Dict[str, int] = {}
        self._seq = 0

    def create(self, owner_id: str, data: TodoCreate) -> TodoEntity:
        now = utcnow()
        entity: TodoEntity = {
            "id": new_id(),
            "text": data.text,
            "completed": False,
            "user": owner_id,
            "created_at": now,
            "updated_at": now,
        }
        with self._lock:
            self._seq += 1
            self._items[entity["id"]] = entity
            self._order[entity["id"]] = self._seq
        return entity.copy()

    def get(self, todo_id: str) -> Optional[TodoEntity]:
        with self._lock:
            item = self._items.get(todo_id)
            return None if item is None else item.copy()

    def update(self, todo_id: str, data: TodoUpdate) -> Optional[TodoEntity]:
        with self._lock:
            existing = self._items.get(todo_id)
            if existing is None:
                return None

            # Update only provided fields
            updated = existing.copy()
            if "text" in data.model_fields_set:
                updated["text"] = data.text
            if "completed" in data.model_fields_set:
                updated["completed"] = data.completed
            updated["updated_at"] = utcnow()

            self._items[todo_id] = updated
            return updated.copy()

    def delete(self, todo_id: str) -> bool:
        with self._lock:
            self._order.pop(todo_id, None)
            return self._items.pop(todo_id, None) is not None

    def list_by_owner(self, owner_id: str) -> List[TodoEntity]:
        with self._lock:
            owned = [t for t in self._items.values() if t["user"] == owner_id]
            owned.sort(key=lambda t: (t["created_at"], self._order[t["id"]]), reverse=True)
            # Return copies to avoid external mutation
            return [t.copy() for t in owned]


class InMemoryUserRepository(UserRepository):
    """
    Thread-safe in-memory account store.
    """

    def __init__(self) -> None:
        self._lock = RLock()
        self._users: Dict[str, UserEntity] = {}
        self._by_email: Dict[str, str] = {}
        self._revoked: Dict[str, datetime] = {}

    def create(self, name: str, email: str, password_hash: str) -> UserEntity:
        with self._lock:
            if email in self._by_email:
                raise EmailAlreadyRegistered(email)
            user: UserEntity = {
                "id": new_id(),
                "name": name,
                "email": email,
                "password_hash": password_hash,
                "created_at": utcnow(),
            }
            self._users[user["id"]] = user
            self._by_email[email] = user["id"]
            return user.copy()

    def get(self, user_id: str) -> Optional[UserEntity]:
        with self._lock:
            user = self._users.get(user_id)
            return None if user is None else user.copy()

    def get_by_email(self, email: str) -> Optional[UserEntity]:
        with self._lock:
            user_id = self._by_email.get(email)
            return None if user_id is None else self._users[user_id].copy()

    def revoke_token(self, jti: str, expires_at: datetime) -> None:
        with self._lock:
            now = utcnow()
            # Expired tokens fail signature checks anyway; drop them
            self._revoked = {k: v for k, v in self._revoked.items() if v > now}
            self._revoked[jti] = expires_at

    def is_token_revoked(self, jti: str) -> bool:
        with self._lock:
            return jti in self._revoked


@lru_cache
def _backends() -> Tuple[Repository, UserRepository]:
    settings = get_settings()
    if settings.persistence_backend == "sqlite":
        from .db import SQLiteRepository, SQLiteUserRepository

        logger.info("Using sqlite persistence at %s", settings.sqlite_db_path)
        return (
            SQLiteRepository(settings.sqlite_db_path),
            SQLiteUserRepository(settings.sqlite_db_path),
        )
    logger.info("Using in-memory persistence")
    return InMemoryRepository(), InMemoryUserRepository()


# PUBLIC_INTERFACE
def get_repository() -> Repository:
    """
    Return the configured todo repository. The instance is created once per
    process so every request sees the same data.
    - memory: InMemoryRepository
    - sqlite: SQLiteRepository
    """
    return _backends()[0]


# PUBLIC_INTERFACE
def get_user_repository() -> UserRepository:
    """Return the configured account repository, sharing the todo backend's storage."""
    return _backends()[1]


def reset_repositories() -> None:
    """Forget the cached backends so the next call re-reads settings."""
    _backends.cache_clear()
