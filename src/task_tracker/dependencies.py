from __future__ import annotations

from fastapi import Request

from .repositories import Repository
from .security import PasswordHasher


# PUBLIC_INTERFACE
def get_repo(request: Request) -> Repository:
    """
    Dependency returning the repository built by create_app() for this application.
    """
    return request.app.state.repository


# PUBLIC_INTERFACE
def get_password_hasher(request: Request) -> PasswordHasher:
    """Dependency returning the configured PasswordHasher."""
    return request.app.state.password_hasher
