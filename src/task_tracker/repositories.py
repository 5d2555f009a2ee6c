from __future__ import annotations

import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timezone
from threading import RLock
from typing import Dict, List, Optional

from .errors import DuplicateKeyError
from .models import TodoEntity, UserEntity
from .settings import Settings


@dataclass(frozen=True)
class TodoChanges:
    """
    Partial update for a todo. None means "leave the field untouched".
    """
    title: Optional[str] = None
    completed: Optional[bool] = None

    def is_empty(self) -> bool:
        return self.title is None and self.completed is None


# PUBLIC_INTERFACE
def new_todo_id() -> str:
    """Generate a fresh opaque todo identifier."""
    return uuid.uuid4().hex


# PUBLIC_INTERFACE
def parse_todo_id(raw: str) -> Optional[str]:
    """
    Return the canonical form of ``raw`` if it is a well-formed todo id, else None.
    """
    try:
        return uuid.UUID(raw.strip()).hex
    except (ValueError, AttributeError):
        return None


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


# PUBLIC_INTERFACE
class Repository(ABC):
    """Abstract persistence contract for the users and todos collections."""

    # Users

    @abstractmethod
    def find_user(self, email: str) -> Optional[UserEntity]:
        """Return the user stored under ``email``, or None."""

    @abstractmethod
    def insert_user(self, user: UserEntity) -> None:
        """Insert a user. Raise DuplicateKeyError if the email is taken."""

    @abstractmethod
    def list_users(self) -> List[UserEntity]:
        """Return every stored user."""

    @abstractmethod
    def delete_users(self) -> int:
        """Delete every user. Return the number removed."""

    # Todos

    @abstractmethod
    def list_todos(self, email: Optional[str] = None) -> List[TodoEntity]:
        """Return all todos, or only those whose email equals ``email`` exactly."""

    @abstractmethod
    def insert_todo(self, email: str, title: str) -> TodoEntity:
        """Create an incomplete todo stamped with the current UTC time and return it."""

    @abstractmethod
    def get_todo(self, todo_id: str) -> Optional[TodoEntity]:
        """Return a todo by id, or None if not found."""

    @abstractmethod
    def update_todo(self, todo_id: str, changes: TodoChanges) -> bool:
        """Write the supplied fields only. Return True if a todo matched."""

    @abstractmethod
    def delete_todo(self, todo_id: str) -> bool:
        """Delete a todo by id. Return True if deleted, False if not found."""

    @abstractmethod
    def delete_todos(self, email: Optional[str] = None) -> int:
        """Delete all todos, or only those whose email equals ``email`` exactly."""


class InMemoryRepository(Repository):
    """
    Thread-safe in-memory repository suitable for testing and local runs.
    """

    def __init__(self) -> None:
        self._lock = RLock()
        self._users: Dict[str, UserEntity] = {}
        self._todos: Dict[str, TodoEntity] = {}

    def find_user(self, email: str) -> Optional[UserEntity]:
        with self._lock:
            user = self._users.get(email)
            return None if user is None else user.copy()

    def insert_user(self, user: UserEntity) -> None:
        with self._lock:
            if user["email"] in self._users:
                raise DuplicateKeyError("User already exists")
            self._users[user["email"]] = user.copy()

    def list_users(self) -> List[UserEntity]:
        with self._lock:
            return [u.copy() for u in self._users.values()]

    def delete_users(self) -> int:
        with self._lock:
            count = len(self._users)
            self._users.clear()
            return count

    def list_todos(self, email: Optional[str] = None) -> List[TodoEntity]:
        with self._lock:
            return [
                t.copy() for t in self._todos.values()
                if email is None or t["email"] == email
            ]

    def insert_todo(self, email: str, title: str) -> TodoEntity:
        entity: TodoEntity = {
            "id": new_todo_id(),
            "email": email,
            "title": title,
            "completed": False,
            "created_at": utcnow(),
        }
        with self._lock:
            self._todos[entity["id"]] = entity
        return entity.copy()

    def get_todo(self, todo_id: str) -> Optional[TodoEntity]:
        with self._lock:
            item = self._todos.get(todo_id)
            return None if item is None else item.copy()

    def update_todo(self, todo_id: str, changes: TodoChanges) -> bool:
        with self._lock:
            existing = self._todos.get(todo_id)
            if existing is None:
                return False

            updated = existing.copy()
            if changes.title is not None:
                updated["title"] = changes.title
            if changes.completed is not None:
                updated["completed"] = changes.completed
            self._todos[todo_id] = updated
            return True

    def delete_todo(self, todo_id: str) -> bool:
        with self._lock:
            return self._todos.pop(todo_id, None) is not None

    def delete_todos(self, email: Optional[str] = None) -> int:
        with self._lock:
            if email is None:
                count = len(self._todos)
                self._todos.clear()
                return count
            doomed = [k for k, t in self._todos.items() if t["email"] == email]
            for k in doomed:
                del self._todos[k]
            return len(doomed)


# PUBLIC_INTERFACE
def get_repository(settings: Settings) -> Repository:
    """
    Factory to return the repository selected by settings.
    - memory: InMemoryRepository
    - sqlite: SQLiteRepository at settings.sqlite_db_path
    """
    if settings.persistence_backend == "sqlite" and settings.sqlite_db_path:
        from .db import SQLiteRepository

        return SQLiteRepository(settings.sqlite_db_path)
    return InMemoryRepository()
