from __future__ import annotations

from datetime import datetime
from typing import TypedDict


# PUBLIC_INTERFACE
class UserEntity(TypedDict):
    """
    Stored representation of a registered user.

    Fields:
    - email: Normalized (trimmed, lower-cased) email, unique per store
    - password: Output of the configured PasswordHasher for the trimmed password
    """

    email: str
    password: str


# PUBLIC_INTERFACE
class TodoEntity(TypedDict):
    """
    A lightweight domain model representing a Todo item for non-ORM storage
    backends.

    Fields:
    - id: Opaque identifier generated by the store (UUID hex string)
    - email: Normalized email of the owner
    - title: Trimmed, non-empty title
    - completed: Boolean completion flag
    - created_at: UTC creation timestamp, never changed after insert
    """

    id: str
    email: str
    title: str
    completed: bool
    created_at: datetime
