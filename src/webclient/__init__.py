"""
Client for the Todo App API: session storage, pure page rendering and the
controllers that drive the login and todo pages.
"""

from __future__ import annotations

from typing import Callable, Optional

from .api import TodoApiClient
from .config import ClientConfig, get_client_config
from .controller import AuthFormController, ClientSession, TodoPageController
from .storage import ClientStorage, JsonFileStorage, MemoryStorage


def create_storage(config: ClientConfig) -> ClientStorage:
    if config.storage_path:
        return JsonFileStorage(config.storage_path)
    return MemoryStorage()


# PUBLIC_INTERFACE
def create_page_controller(
    config: Optional[ClientConfig] = None,
    navigate: Optional[Callable[[str], None]] = None,
    alert: Optional[Callable[[str], None]] = None,
) -> TodoPageController:
    """Wire a TodoPageController from configuration (environment by default)."""
    cfg = config or get_client_config()
    api = TodoApiClient(cfg.api_base_url, timeout=cfg.timeout)
    return TodoPageController(api, ClientSession(create_storage(cfg)), navigate=navigate, alert=alert)


# PUBLIC_INTERFACE
def create_auth_controller(
    config: Optional[ClientConfig] = None,
    navigate: Optional[Callable[[str], None]] = None,
) -> AuthFormController:
    cfg = config or get_client_config()
    api = TodoApiClient(cfg.api_base_url, timeout=cfg.timeout)
    return AuthFormController(api, ClientSession(create_storage(cfg)), navigate=navigate)
