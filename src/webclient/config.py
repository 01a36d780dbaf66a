from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class ClientConfig:
    """
    Client settings loaded from environment variables.

    Env vars:
    - TODO_API_BASE_URL: single base URL for both auth and todo calls.
      Default 'http://localhost:8000/api'
    - TODO_CLIENT_STORAGE: JSON file holding token, user and theme between
      runs. Unset keeps state in memory only.
    - TODO_CLIENT_TIMEOUT: request timeout in seconds. Default 10
    """

    api_base_url: str
    storage_path: Optional[str]
    timeout: float


def _parse_float(value: str, default: float) -> float:
    try:
        parsed = float(value)
    except ValueError:
        return default
    return parsed if parsed > 0 else default


# PUBLIC_INTERFACE
def get_client_config() -> ClientConfig:
    """Return client settings loaded from environment variables."""
    base = os.getenv("TODO_API_BASE_URL") or "http://localhost:8000/api"
    storage_path = os.getenv("TODO_CLIENT_STORAGE") or None
    return ClientConfig(
        api_base_url=base.strip().rstrip("/"),
        storage_path=storage_path.strip() if storage_path else None,
        timeout=_parse_float(os.getenv("TODO_CLIENT_TIMEOUT") or "10", 10.0),
    )
