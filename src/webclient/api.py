from __future__ import annotations

from typing import Any, Dict, List, Optional

import httpx


class ApiError(Exception):
    """
    A request that did not succeed. status_code is None when the server could
    not be reached at all.
    """

    def __init__(self, status_code: Optional[int], message: str) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.message = message


class UnauthorizedError(ApiError):
    """The server rejected the bearer token (HTTP 401)."""


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or response.reason_phrase
    if isinstance(body, dict):
        message = body.get("message") or body.get("detail")
        if isinstance(message, str) and message:
            return message
    return response.reason_phrase


# PUBLIC_INTERFACE
class TodoApiClient:
    """
    Thin HTTP client for the auth and todo endpoints.

    Every URL is built from the one configured base (e.g.
    'http://localhost:8000/api'). Pass an existing httpx.Client (such as a
    FastAPI TestClient) to reuse its transport.
    """

    def __init__(self, base_url: str, http: Optional[httpx.Client] = None, timeout: float = 10.0) -> None:
        self._base_url = base_url.rstrip("/")
        self._http = http if http is not None else httpx.Client(timeout=timeout)

    def close(self) -> None:
        self._http.close()

    def _request(
        self,
        method: str,
        path: str,
        token: Optional[str] = None,
        payload: Optional[Dict[str, Any]] = None,
    ) -> Any:
        headers = {"Authorization": f"Bearer {token}"} if token else {}
        try:
            response = self._http.request(method, f"{self._base_url}{path}", headers=headers, json=payload)
        except httpx.TransportError as exc:
            raise ApiError(None, str(exc)) from exc

        if response.is_success:
            return response.json() if response.content else None
        message = _error_message(response)
        if response.status_code == 401:
            raise UnauthorizedError(401, message)
        raise ApiError(response.status_code, message)

    # Auth

    def register(self, name: str, email: str, password: str) -> Dict[str, Any]:
        return self._request("POST", "/auth/register", payload={"name": name, "email": email, "password": password})

    def login(self, email: str, password: str) -> Dict[str, Any]:
        return self._request("POST", "/auth/login", payload={"email": email, "password": password})

    def me(self, token: str) -> Dict[str, Any]:
        return self._request("GET", "/auth/me", token=token)

    def logout(self, token: Optional[str]) -> None:
        self._request("POST", "/auth/logout", token=token)

    # Todos

    def list_todos(self, token: str) -> List[Dict[str, Any]]:
        return self._request("GET", "/todos", token=token)

    def create_todo(self, token: str, text: str) -> Dict[str, Any]:
        return self._request("POST", "/todos", token=token, payload={"text": text})

    def update_todo(
        self,
        token: str,
        todo_id: str,
        *,
        text: Optional[str] = None,
        completed: Optional[bool] = None,
    ) -> Dict[str, Any]:
        payload: Dict[str, Any] = {}
        if text is not None:
            payload["text"] = text
        if completed is not None:
            payload["completed"] = completed
        return self._request("PATCH", f"/todos/{todo_id}", token=token, payload=payload)

    def delete_todo(self, token: str, todo_id: str) -> Dict[str, Any]:
        return self._request("DELETE", f"/todos/{todo_id}", token=token)
