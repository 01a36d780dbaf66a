"""
Pure view models for the todo page.

Nothing here touches storage or the network: every function maps data and a
theme to immutable view objects, so the same input always renders the same
page regardless of what was rendered before.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Iterable, Mapping, Optional, Tuple

from .theme import ButtonRole, Theme, body_class, button_class, input_class, title_class, todo_class


class RowAction(str, Enum):
    """What a click on a row control asks for."""

    TOGGLE = "toggle"
    DELETE = "delete"


_ROW_CONTROLS = (
    (ButtonRole.CHECK, RowAction.TOGGLE, "fas fa-check"),
    (ButtonRole.DELETE, RowAction.DELETE, "fas fa-trash"),
)


@dataclass(frozen=True)
class ControlView:
    role: ButtonRole
    action: RowAction
    class_name: str
    icon: str


@dataclass(frozen=True)
class TodoRowView:
    todo_id: str
    text: str
    completed: bool
    class_name: str
    controls: Tuple[ControlView, ...]
    # Set while the delete fade-out runs
    falling: bool = False

    def control(self, action: RowAction) -> ControlView:
        for c in self.controls:
            if c.action is action:
                return c
        raise KeyError(action)


@dataclass(frozen=True)
class ListView:
    rows: Tuple[TodoRowView, ...] = ()

    def row(self, todo_id: str) -> Optional[TodoRowView]:
        for r in self.rows:
            if r.todo_id == todo_id:
                return r
        return None

    def replace_row(self, new_row: TodoRowView) -> "ListView":
        return ListView(tuple(new_row if r.todo_id == new_row.todo_id else r for r in self.rows))

    def without(self, todo_id: str) -> "ListView":
        return ListView(tuple(r for r in self.rows if r.todo_id != todo_id))


@dataclass(frozen=True)
class PageView:
    theme: Theme
    body_class: str
    title_class: str
    input_class: str
    add_button_class: str
    greeting: Optional[str]
    logout_button_class: Optional[str]
    todos: ListView


def _row_classes(theme: Theme, completed: bool, falling: bool) -> str:
    name = todo_class(theme, completed)
    return f"{name} fall" if falling else name


def render_row(todo: Mapping[str, Any], theme: Theme) -> TodoRowView:
    completed = bool(todo.get("completed", False))
    return TodoRowView(
        todo_id=str(todo["id"]),
        text=str(todo.get("text", "")),
        completed=completed,
        class_name=_row_classes(theme, completed, False),
        controls=tuple(
            ControlView(role=role, action=action, class_name=button_class(role, theme), icon=icon)
            for role, action, icon in _ROW_CONTROLS
        ),
    )


# PUBLIC_INTERFACE
def render_list(todos: Iterable[Mapping[str, Any]], theme: Theme) -> ListView:
    """Build the list view for todos, in the order given."""
    return ListView(tuple(render_row(t, theme) for t in todos))


def restyle_row(row: TodoRowView, theme: Theme, *, completed: Optional[bool] = None, falling: Optional[bool] = None) -> TodoRowView:
    """
    Return row with theme applied, keeping its completed/falling state unless
    new values are given.
    """
    done = row.completed if completed is None else completed
    fall = row.falling if falling is None else falling
    return replace(
        row,
        completed=done,
        falling=fall,
        class_name=_row_classes(theme, done, fall),
        controls=tuple(replace(c, class_name=button_class(c.role, theme)) for c in row.controls),
    )


def apply_theme(todos: ListView, theme: Theme) -> ListView:
    return ListView(tuple(restyle_row(r, theme) for r in todos.rows))


# PUBLIC_INTERFACE
def render_page(theme: Theme, user: Optional[Mapping[str, Any]], todos: ListView) -> PageView:
    """
    Build the whole page. The greeting and logout button only exist once a
    user is known.
    """
    return PageView(
        theme=theme,
        body_class=body_class(theme),
        title_class=title_class(theme),
        input_class=input_class(theme),
        add_button_class=button_class(ButtonRole.ADD, theme),
        greeting=f"Hello, {user.get('name', '')}" if user else None,
        logout_button_class=button_class(ButtonRole.LOGOUT, theme) if user else None,
        todos=apply_theme(todos, theme),
    )
