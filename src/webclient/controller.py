from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from .api import ApiError, TodoApiClient, UnauthorizedError
from .storage import THEME_KEY, TOKEN_KEY, USER_KEY, ClientStorage
from .theme import Theme
from .view import ListView, PageView, RowAction, render_list, render_page, restyle_row

logger = logging.getLogger(__name__)

LOGIN_PAGE = "login.html"
MAIN_PAGE = "index.html"
EMPTY_TODO_ALERT = "You must write something!"


class PageState(str, Enum):
    UNAUTHENTICATED = "unauthenticated"
    VERIFYING = "verifying"
    READY = "ready"


# PUBLIC_INTERFACE
class ClientSession:
    """
    Client-side session context: stored credentials and the saved theme.

    Everything is read from and written through to the storage, so a fresh
    session over the same storage sees the same state (like a page reload).
    """

    def __init__(self, storage: ClientStorage) -> None:
        self.storage = storage
        self.theme = Theme.parse(storage.get_item(THEME_KEY))
        self.user: Optional[Dict[str, Any]] = None

    @property
    def token(self) -> Optional[str]:
        return self.storage.get_item(TOKEN_KEY)

    def stored_user(self) -> Optional[Dict[str, Any]]:
        raw = self.storage.get_item(USER_KEY)
        return json.loads(raw) if raw else None

    def save_credentials(self, token: str, user: Dict[str, Any]) -> None:
        self.storage.set_item(TOKEN_KEY, token)
        self.storage.set_item(USER_KEY, json.dumps(user))
        self.user = user

    def clear_credentials(self) -> None:
        self.storage.remove_item(TOKEN_KEY)
        self.storage.remove_item(USER_KEY)
        self.user = None

    def save_theme(self, theme: Theme) -> None:
        self.storage.set_item(THEME_KEY, theme.value)
        self.theme = theme


def _log_navigation(page: str) -> None:
    logger.info("Navigate to %s", page)


def _log_alert(message: str) -> None:
    logger.warning("Alert: %s", message)


# PUBLIC_INTERFACE
class TodoPageController:
    """
    Drives the main todo page.

    Lifecycle: UNAUTHENTICATED (no token, go to login) -> VERIFYING (ask the
    server who the token belongs to) -> READY (greeting, list and theme shown).
    Any 401 on the way clears the stored credentials and goes back to login.

    navigate is called with LOGIN_PAGE on redirects; alert with blocking
    messages for the user. Both default to logging.
    """

    def __init__(
        self,
        api: TodoApiClient,
        session: ClientSession,
        navigate: Optional[Callable[[str], None]] = None,
        alert: Optional[Callable[[str], None]] = None,
    ) -> None:
        self.api = api
        self.session = session
        self._navigate = navigate or _log_navigation
        self._alert = alert or _log_alert
        self.state = PageState.UNAUTHENTICATED
        self.todos = ListView()

    @property
    def page(self) -> PageView:
        return render_page(self.session.theme, self.session.user, self.todos)

    def _force_login(self) -> None:
        self.session.clear_credentials()
        self.state = PageState.UNAUTHENTICATED
        self.todos = ListView()
        self._navigate(LOGIN_PAGE)

    def start(self) -> PageState:
        token = self.session.token
        if not token:
            self.state = PageState.UNAUTHENTICATED
            self._navigate(LOGIN_PAGE)
            return self.state

        self.state = PageState.VERIFYING
        try:
            self.session.user = self.api.me(token)
        except ApiError as exc:
            logger.error("Error initializing app: %s", exc.message)
            self._force_login()
            return self.state

        self.state = PageState.READY
        self.refresh()
        self.change_theme(self.session.theme)
        return self.state

    def _call(self, what: str, fn: Callable[[str], Any]) -> Any:
        """
        Run fn with the stored token. A 401 sends the user back to login; other
        failures are logged and reported as None.
        """
        token = self.session.token
        if not token:
            self._force_login()
            return None
        try:
            return fn(token)
        except UnauthorizedError:
            self._force_login()
        except ApiError as exc:
            logger.error("Error %s: %s", what, exc.message)
        return None

    def refresh(self) -> None:
        """Fetch the list and rebuild every row from scratch."""
        todos: Optional[List[Dict[str, Any]]] = self._call("fetching todos", self.api.list_todos)
        if todos is not None:
            self.todos = render_list(todos, self.session.theme)

    def add_todo(self, text: str) -> bool:
        """
        Create a todo from the input text and re-fetch the list. Empty text
        raises the alert instead. Returns True if a request was made.
        """
        if text == "":
            self._alert(EMPTY_TODO_ALERT)
            return False
        created = self._call("adding todo", lambda token: self.api.create_todo(token, text))
        if created is not None:
            self.refresh()
        return True

    def handle_action(self, todo_id: str, action: RowAction) -> None:
        row = self.todos.row(todo_id)
        if row is None:
            return
        theme = self.session.theme
        if action is RowAction.DELETE:
            self.todos = self.todos.replace_row(restyle_row(row, theme, falling=True))
            self._call("deleting todo", lambda token: self.api.delete_todo(token, todo_id))
        elif action is RowAction.TOGGLE:
            completed = not row.completed
            self.todos = self.todos.replace_row(restyle_row(row, theme, completed=completed))
            self._call(
                "updating todo",
                lambda token: self.api.update_todo(token, todo_id, completed=completed),
            )

    def finish_removal(self, todo_id: str) -> None:
        """Drop a falling row once its fade-out transition has ended."""
        row = self.todos.row(todo_id)
        if row is not None and row.falling:
            self.todos = self.todos.without(todo_id)

    def change_theme(self, theme: Theme) -> PageView:
        self.session.save_theme(theme)
        return self.page

    def logout(self) -> None:
        try:
            self.api.logout(self.session.token)
        except ApiError as exc:
            logger.error("Logout error: %s", exc.message)
        finally:
            self._force_login()


@dataclass(frozen=True)
class FormResult:
    ok: bool
    error: Optional[str] = None


# PUBLIC_INTERFACE
class AuthFormController:
    """Login and registration forms. Success stores the credentials and opens the main page."""

    def __init__(
        self,
        api: TodoApiClient,
        session: ClientSession,
        navigate: Optional[Callable[[str], None]] = None,
    ) -> None:
        self.api = api
        self.session = session
        self._navigate = navigate or _log_navigation

    def _accept(self, data: Dict[str, Any]) -> FormResult:
        self.session.save_credentials(data["token"], data)
        self._navigate(MAIN_PAGE)
        return FormResult(ok=True)

    def login(self, email: str, password: str) -> FormResult:
        try:
            data = self.api.login(email, password)
        except ApiError as exc:
            return FormResult(ok=False, error=exc.message or "Login failed")
        return self._accept(data)

    def register(self, name: str, email: str, password: str, confirm_password: str) -> FormResult:
        if password != confirm_password:
            return FormResult(ok=False, error="Passwords do not match")
        try:
            data = self.api.register(name, email, password)
        except ApiError as exc:
            return FormResult(ok=False, error=exc.message or "Registration failed")
        return self._accept(data)
