from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import List

DEV_JWT_SECRET = "dev-insecure-secret-change-me"


@dataclass(frozen=True)
class Settings:
    """
    Application settings loaded from environment variables.

    Env vars:
    - PERSISTENCE_BACKEND: 'memory' (default) or 'sqlite'
    - SQLITE_DB_PATH: path to sqlite db file. Default './data/todos.db'
    - CORS_ALLOW_ORIGINS: comma-separated list of allowed origins; '*' by default
    - API_PREFIX: mount point of the auth and todo routers. Default '/api'
    - JWT_SECRET: signing key for bearer tokens (a development key is used when unset)
    - JWT_ALGORITHM: signing algorithm. Default 'HS256'
    - TOKEN_TTL_MINUTES: bearer token lifetime. Default 43200 (30 days)
    - LOG_LEVEL: root log level. Default 'INFO'
    """

    persistence_backend: str
    sqlite_db_path: str
    cors_allow_origins: List[str]
    api_prefix: str
    jwt_secret: str
    jwt_algorithm: str
    token_ttl_minutes: int
    log_level: str

    @property
    def uses_dev_secret(self) -> bool:
        return self.jwt_secret == DEV_JWT_SECRET


def _get_env(name: str, default: str) -> str:
    value = os.getenv(name, default)
    if value is None or value == "":
        return default
    return value


def _parse_int(value: str, default: int) -> int:
    try:
        parsed = int(value.strip())
    except ValueError:
        return default
    return parsed if parsed > 0 else default


def _parse_log_level(value: str, default: str = "INFO") -> str:
    level = value.strip().upper()
    # getLevelName maps unknown names to a "Level X" string
    return level if isinstance(logging.getLevelName(level), int) else default


def _parse_origins(origins_value: str) -> List[str]:
    """
    Parse CORS origins from env. Supports:
    - '*' to allow all origins
    - Comma-separated list of origins
    """
    value = origins_value.strip()
    if value == "*":
        return ["*"]
    return [o.strip() for o in value.split(",") if o.strip()]


def _normalize_prefix(prefix: str) -> str:
    p = "/" + prefix.strip().strip("/")
    return "" if p == "/" else p


# PUBLIC_INTERFACE
def get_settings() -> Settings:
    """Return application settings loaded from environment variables."""
    backend = _get_env("PERSISTENCE_BACKEND", "memory").strip().lower()
    if backend not in {"memory", "sqlite"}:
        # Fallback to memory if unsupported
        backend = "memory"

    return Settings(
        persistence_backend=backend,
        sqlite_db_path=_get_env("SQLITE_DB_PATH", "./data/todos.db").strip(),
        cors_allow_origins=_parse_origins(_get_env("CORS_ALLOW_ORIGINS", "*")),
        api_prefix=_normalize_prefix(_get_env("API_PREFIX", "/api")),
        jwt_secret=_get_env("JWT_SECRET", DEV_JWT_SECRET),
        jwt_algorithm=_get_env("JWT_ALGORITHM", "HS256").strip(),
        token_ttl_minutes=_parse_int(_get_env("TOKEN_TTL_MINUTES", "43200"), 43200),
        log_level=_parse_log_level(_get_env("LOG_LEVEL", "INFO")),
    )
