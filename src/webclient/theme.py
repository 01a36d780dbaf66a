"""CSS class names for the three page themes."""

from __future__ import annotations

from enum import Enum
from typing import Optional


class Theme(str, Enum):
    STANDARD = "standard"
    LIGHT = "light"
    DARKER = "darker"

    @classmethod
    def parse(cls, value: Optional[str]) -> "Theme":
        """Return the theme named by value, falling back to STANDARD."""
        try:
            return cls(value)
        except ValueError:
            return cls.STANDARD


class ButtonRole(str, Enum):
    CHECK = "check-btn"
    DELETE = "delete-btn"
    ADD = "todo-btn"
    LOGOUT = "logout-btn"


def body_class(theme: Theme) -> str:
    return theme.value


def title_class(theme: Theme) -> str:
    return "darker-title" if theme is Theme.DARKER else ""


def input_class(theme: Theme) -> str:
    return f"{theme.value}-input"


def todo_class(theme: Theme, completed: bool) -> str:
    base = f"todo {theme.value}-todo"
    return f"{base} completed" if completed else base


def button_class(role: ButtonRole, theme: Theme) -> str:
    return f"{role.value} {theme.value}-button"
