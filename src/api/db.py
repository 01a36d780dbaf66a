from __future__ import annotations

import os
import sqlite3
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime
from typing import Generator, List, Optional

from .models import TodoEntity, UserEntity
from .repositories import (
    EmailAlreadyRegistered,
    Repository,
    StoreError,
    UserRepository,
    new_id,
    utcnow,
)
from .schemas import TodoCreate, TodoUpdate


@dataclass(frozen=True)
class _TodoCols:
    table: str = "todos"
    id: str = "id"
    text: str = "text"
    completed: str = "completed"
    user: str = "user_id"
    created_at: str = "created_at"
    updated_at: str = "updated_at"


@dataclass(frozen=True)
class _UserCols:
    table: str = "users"
    id: str = "id"
    name: str = "name"
    email: str = "email"
    password_hash: str = "password_hash"
    created_at: str = "created_at"
    revoked_table: str = "revoked_tokens"
    jti: str = "jti"
    expires_at: str = "expires_at"


_T = _TodoCols()
_U = _UserCols()


class _SQLiteBase:
    def __init__(self, db_path: str) -> None:
        os.makedirs(os.path.dirname(db_path) or ".", exist_ok=True)
        self._db_path = db_path
        self._init_db()

    @contextmanager
    def _conn(self) -> Generator[sqlite3.Connection, None, None]:
        try:
            conn = sqlite3.connect(self._db_path)
        except sqlite3.Error as exc:
            raise StoreError(str(exc)) from exc
        conn.row_factory = sqlite3.Row
        try:
            yield conn
            conn.commit()
        except sqlite3.Error as exc:
            raise StoreError(str(exc)) from exc
        finally:
            conn.close()

    def _init_db(self) -> None:
        raise NotImplementedError


def _parse_dt(s: str) -> datetime:
    return datetime.fromisoformat(s)


class SQLiteRepository(_SQLiteBase, Repository):
    """
    Lightweight SQLite todo repository implementing the Repository interface.
    """

    def _init_db(self) -> None:
        with self._conn() as conn:
            conn.execute(
                f"""
                CREATE TABLE IF NOT EXISTS {_T.table} (
                    {_T.id} TEXT PRIMARY KEY,
                    {_T.text} TEXT NOT NULL,
                    {_T.completed} INTEGER NOT NULL DEFAULT 0,
                    {_T.user} TEXT NOT NULL,
                    {_T.created_at} TEXT NOT NULL,
                    {_T.updated_at} TEXT NOT NULL
                )
                """
            )
            conn.execute(
                f"CREATE INDEX IF NOT EXISTS idx_{_T.table}_owner_created "
                f"ON {_T.table}({_T.user}, {_T.created_at})"
            )

    def _row_to_entity(self, row: sqlite3.Row) -> TodoEntity:
        return {
            "id": str(row[_T.id]),
            "text": str(row[_T.text]),
            "completed": bool(row[_T.completed]),
            "user": str(row[_T.user]),
            "created_at": _parse_dt(row[_T.created_at]),
            "updated_at": _parse_dt(row[_T.updated_at]),
        }

    def _fetch(self, conn: sqlite3.Connection, todo_id: str) -> Optional[sqlite3.Row]:
        return conn.execute(f"SELECT * FROM {_T.table} WHERE {_T.id} = ?", (todo_id,)).fetchone()

    def create(self, owner_id: str, data: TodoCreate) -> TodoEntity:
        todo_id = new_id()
        now = utcnow().isoformat()
        with self._conn() as conn:
            conn.execute(
                f"""
                INSERT INTO {_T.table} ({_T.id}, {_T.text}, {_T.completed},
                    {_T.user}, {_T.created_at}, {_T.updated_at})
                VALUES (?, ?, 0, ?, ?, ?)
                """,
                (todo_id, data.text, owner_id, now, now),
            )
            row = self._fetch(conn, todo_id)
            assert row is not None
            return self._row_to_entity(row)

    def get(self, todo_id: str) -> Optional[TodoEntity]:
        with self._conn() as conn:
            row = self._fetch(conn, todo_id)
            return self._row_to_entity(row) if row else None

    def update(self, todo_id: str, data: TodoUpdate) -> Optional[TodoEntity]:
        with self._conn() as conn:
            row = self._fetch(conn, todo_id)
            if not row:
                return None
            current = self._row_to_entity(row)

            text = data.text if "text" in data.model_fields_set else current["text"]
            completed = data.completed if "completed" in data.model_fields_set else current["completed"]
            conn.execute(
                f"""
                UPDATE {_T.table}
                SET {_T.text} = ?, {_T.completed} = ?, {_T.updated_at} = ?
                WHERE {_T.id} = ?
                """,
                (text, 1 if completed else 0, utcnow().isoformat(), todo_id),
            )
            row2 = self._fetch(conn, todo_id)
            assert row2 is not None
            return self._row_to_entity(row2)

    def delete(self, todo_id: str) -> bool:
        with self._conn() as conn:
            cur = conn.execute(f"DELETE FROM {_T.table} WHERE {_T.id} = ?", (todo_id,))
            return cur.rowcount > 0

    def list_by_owner(self, owner_id: str) -> List[TodoEntity]:
        with self._conn() as conn:
            rows = conn.execute(
                f"""
                SELECT * FROM {_T.table}
                WHERE {_T.user} = ?
                ORDER BY {_T.created_at} DESC, rowid DESC
                """,
                (owner_id,),
            ).fetchall()
            return [self._row_to_entity(r) for r in rows]


class SQLiteUserRepository(_SQLiteBase, UserRepository):
    """
    SQLite account store. Shares the database file with SQLiteRepository.
    """

    def _init_db(self) -> None:
        with self._conn() as conn:
            conn.execute(
                f"""
                CREATE TABLE IF NOT EXISTS {_U.table} (
                    {_U.id} TEXT PRIMARY KEY,
                    {_U.name} TEXT NOT NULL,
                    {_U.email} TEXT NOT NULL UNIQUE,
                    {_U.password_hash} TEXT NOT NULL,
                    {_U.created_at} TEXT NOT NULL
                )
                """
            )
            conn.execute(
                f"""
                CREATE TABLE IF NOT EXISTS {_U.revoked_table} (
                    {_U.jti} TEXT PRIMARY KEY,
                    {_U.expires_at} TEXT NOT NULL
                )
                """
            )

    def _row_to_entity(self, row: sqlite3.Row) -> UserEntity:
        return {
            "id": str(row[_U.id]),
            "name": str(row[_U.name]),
            "email": str(row[_U.email]),
            "password_hash": str(row[_U.password_hash]),
            "created_at": _parse_dt(row[_U.created_at]),
        }

    def create(self, name: str, email: str, password_hash: str) -> UserEntity:
        user: UserEntity = {
            "id": new_id(),
            "name": name,
            "email": email,
            "password_hash": password_hash,
            "created_at": utcnow(),
        }
        with self._conn() as conn:
            try:
                conn.execute(
                    f"""
                    INSERT INTO {_U.table} ({_U.id}, {_U.name}, {_U.email},
                        {_U.password_hash}, {_U.created_at})
                    VALUES (?, ?, ?, ?, ?)
                    """,
                    (user["id"], name, email, password_hash, user["created_at"].isoformat()),
                )
            except sqlite3.IntegrityError as exc:
                raise EmailAlreadyRegistered(email) from exc
        return user

    def get(self, user_id: str) -> Optional[UserEntity]:
        with self._conn() as conn:
            row = conn.execute(f"SELECT * FROM {_U.table} WHERE {_U.id} = ?", (user_id,)).fetchone()
            return self._row_to_entity(row) if row else None

    def get_by_email(self, email: str) -> Optional[UserEntity]:
        with self._conn() as conn:
            row = conn.execute(f"SELECT * FROM {_U.table} WHERE {_U.email} = ?", (email,)).fetchone()
            return self._row_to_entity(row) if row else None

    def revoke_token(self, jti: str, expires_at: datetime) -> None:
        with self._conn() as conn:
            conn.execute(
                f"DELETE FROM {_U.revoked_table} WHERE {_U.expires_at} <= ?",
                (utcnow().isoformat(),),
            )
            conn.execute(
                f"INSERT OR REPLACE INTO {_U.revoked_table} ({_U.jti}, {_U.expires_at}) VALUES (?, ?)",
                (jti, expires_at.isoformat()),
            )

    def is_token_revoked(self, jti: str) -> bool:
        with self._conn() as conn:
            row = conn.execute(
                f"SELECT 1 FROM {_U.revoked_table} WHERE {_U.jti} = ?", (jti,)
            ).fetchone()
            return row is not None
