from __future__ import annotations

from datetime import datetime
from typing import TypedDict


# PUBLIC_INTERFACE
class TodoEntity(TypedDict):
    """
    A lightweight document representing a Todo item as held by the storage
    backends.

    Fields:
    - id: Opaque string identifier generated on insert
    - text: Todo content (trimmed on input via schemas)
    - completed: Boolean completion flag
    - user: Id of the owning user
    - created_at: UTC creation timestamp
    - updated_at: UTC last update timestamp
    """

    id: str
    text: str
    completed: bool
    user: str
    created_at: datetime
    updated_at: datetime


# PUBLIC_INTERFACE
class UserEntity(TypedDict):
    """
    A registered account. The password hash stays inside the backend and is
    never serialized by the API schemas.
    """

    id: str
    name: str
    email: str
    password_hash: str
    created_at: datetime
