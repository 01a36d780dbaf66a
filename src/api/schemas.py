from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

TEXT_MAX_LENGTH = 500
NAME_MAX_LENGTH = 100
PASSWORD_MIN_LENGTH = 6


def _clean_text(value: str, field: str, max_length: int) -> str:
    """
    Strip whitespace and enforce a 1..max_length length on a required string.
    """
    s = value.strip()
    if not (1 <= len(s) <= max_length):
        raise ValueError(f"{field} length must be between 1 and {max_length} characters")
    return s


# PUBLIC_INTERFACE
class TodoCreate(BaseModel):
    """
    Schema for creating a new Todo item. The owner is always the authenticated
    user and is never accepted from the body.
    """

    model_config = ConfigDict(json_schema_extra={"example": {"text": "Buy milk"}})

    text: str = Field(..., description="Todo content")

    @field_validator("text")
    @classmethod
    def validate_text(cls, v: str) -> str:
        return _clean_text(v, "text", TEXT_MAX_LENGTH)


# PUBLIC_INTERFACE
class TodoUpdate(BaseModel):
    """
    Schema for updating an existing Todo item.
    All fields are optional; only provided fields will be updated.
    """

    model_config = ConfigDict(json_schema_extra={"example": {"completed": True}})

    text: Optional[str] = Field(default=None, description="New todo content")
    completed: Optional[bool] = Field(default=None, description="Completion status flag")

    @field_validator("text")
    @classmethod
    def validate_text(cls, v: Optional[str]) -> str:
        # Defaults are not validated, so None here means an explicit null
        if v is None:
            raise ValueError("text cannot be null")
        return _clean_text(v, "text", TEXT_MAX_LENGTH)

    @field_validator("completed")
    @classmethod
    def validate_completed(cls, v: Optional[bool]) -> bool:
        if v is None:
            raise ValueError("completed cannot be null")
        return v


# PUBLIC_INTERFACE
class TodoOut(BaseModel):
    """
    Schema returned by the API for a Todo item.
    """

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "id": "6f1c2a9e0b7d4c3e8a5f1b2c3d4e5f60",
                "text": "Buy milk",
                "completed": False,
                "user": "0b7d4c3e8a5f1b2c3d4e5f606f1c2a9e",
                "createdAt": "2025-01-25T10:15:30.123456Z",
                "updatedAt": "2025-01-25T10:15:30.123456Z",
            }
        },
    )

    id: str = Field(..., description="Unique identifier of the todo item")
    text: str = Field(..., description="Todo content")
    completed: bool = Field(..., description="Completion status flag")
    user: str = Field(..., description="Id of the owning user")
    created_at: datetime = Field(..., alias="createdAt", description="Creation timestamp")
    updated_at: datetime = Field(..., alias="updatedAt", description="Last update timestamp")


# PUBLIC_INTERFACE
class RegisterRequest(BaseModel):
    """
    Schema for creating an account.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {"name": "Ada", "email": "ada@example.com", "password": "s3cret!"}
        }
    )

    name: str = Field(..., description="Display name used in greetings")
    email: EmailStr = Field(..., description="Login email, unique per account")
    password: str = Field(..., min_length=PASSWORD_MIN_LENGTH, description="Plain password")

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        return _clean_text(v, "name", NAME_MAX_LENGTH)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.strip().lower()


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.strip().lower()


# PUBLIC_INTERFACE
class UserOut(BaseModel):
    """
    Public view of an account. Never carries the password hash.
    """

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., description="Unique identifier of the user")
    name: str
    email: str
    created_at: datetime = Field(..., alias="createdAt")


class AuthResponse(UserOut):
    """
    Returned by register and login: the user fields plus the bearer token.
    """

    token: str = Field(..., description="Bearer token for the Authorization header")


class MessageResponse(BaseModel):
    message: str
