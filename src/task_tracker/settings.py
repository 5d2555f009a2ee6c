from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

logger = logging.getLogger(__name__)

DEFAULT_DATABASE_URL = "sqlite:///./data/task_tracker.db"
DEFAULT_CORS_ORIGINS = "http://localhost:3000,http://localhost:3001"


@dataclass(frozen=True)
class Settings:
    """
    Application settings loaded from environment variables.

    Env vars:
    - DATABASE_URL: connection string selecting the store. 'memory://' or
      'sqlite:///<path>'. Default 'sqlite:///./data/task_tracker.db'
    - CORS_ALLOW_ORIGINS: comma-separated list of allowed origins; the two local
      frontend origins by default
    - PASSWORD_SCHEME: 'bcrypt' (default) or 'plain'
    - BCRYPT_ROUNDS: bcrypt cost factor (default: 12)
    - LOG_LEVEL: logging level name (default: INFO)
    - HOST / PORT: bind address for the bundled server (default 0.0.0.0:8080)
    """

    database_url: str = "memory://"
    persistence_backend: str = "memory"
    sqlite_db_path: Optional[str] = None
    cors_allow_origins: List[str] = field(default_factory=lambda: _parse_origins(DEFAULT_CORS_ORIGINS))
    password_scheme: str = "bcrypt"
    bcrypt_rounds: int = 12
    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 8080


def _get_env(name: str, default: str) -> str:
    value = os.getenv(name, default)
    if value is None or value == "":
        return default
    return value


def _parse_int(value: str, default: int) -> int:
    try:
        return int(value.strip())
    except ValueError:
        return default


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


# PUBLIC_INTERFACE
def parse_database_url(url: str) -> Tuple[str, Optional[str]]:
    """
    Split a connection string into (backend, sqlite_path).

    'memory://' and 'memory' select the in-memory backend. 'sqlite:///rel.db'
    and 'sqlite:////abs/path.db' select SQLite with the given file path.
    Anything else falls back to memory.
    """
    value = url.strip()
    if value in {"memory", "memory://"}:
        return "memory", None
    if value.startswith("sqlite:///"):
        path = value[len("sqlite:///"):]
        if path:
            return "sqlite", path
    logger.warning("Unsupported DATABASE_URL %r, falling back to in-memory store", value)
    return "memory", None


# PUBLIC_INTERFACE
def get_settings() -> Settings:
    """Return application settings loaded from environment variables."""
    database_url = _get_env("DATABASE_URL", DEFAULT_DATABASE_URL).strip()
    backend, sqlite_path = parse_database_url(database_url)

    scheme = _get_env("PASSWORD_SCHEME", "bcrypt").strip().lower()
    if scheme not in {"bcrypt", "plain"}:
        scheme = "bcrypt"

    # bcrypt accepts cost factors 4..31
    rounds = min(max(_parse_int(_get_env("BCRYPT_ROUNDS", "12"), 12), 4), 31)

    return Settings(
        database_url=database_url,
        persistence_backend=backend,
        sqlite_db_path=sqlite_path,
        cors_allow_origins=_parse_origins(_get_env("CORS_ALLOW_ORIGINS", DEFAULT_CORS_ORIGINS)),
        password_scheme=scheme,
        bcrypt_rounds=rounds,
        log_level=_get_env("LOG_LEVEL", "INFO").strip().upper(),
        host=_get_env("HOST", "0.0.0.0").strip(),
        port=_parse_int(_get_env("PORT", "8080"), 8080),
    )
