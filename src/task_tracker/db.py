from __future__ import annotations

import os
import sqlite3
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime
from typing import Generator, List, Optional

from .errors import DuplicateKeyError, StoreError
from .models import TodoEntity, UserEntity
from .repositories import Repository, TodoChanges, new_todo_id, utcnow


@dataclass(frozen=True)
class _UserCols:
    table: str = "users"
    email: str = "email"
    password: str = "password"


@dataclass(frozen=True)
class _TodoCols:
    table: str = "todos"
    id: str = "id"
    email: str = "email"
    title: str = "title"
    completed: str = "completed"
    created_at: str = "created_at"


_USERS = _UserCols()
_TODOS = _TodoCols()


class SQLiteRepository(Repository):
    """
    Lightweight SQLite repository implementing the Repository interface.

    Opens one connection per operation. A UNIQUE constraint on users.email makes
    concurrent registrations of the same email fail with DuplicateKeyError.
    """

    def __init__(self, db_path: str) -> None:
        os.makedirs(os.path.dirname(db_path) or ".", exist_ok=True)
        self._db_path = db_path
        self._init_db()

    @contextmanager
    def _conn(self) -> Generator[sqlite3.Connection, None, None]:
        try:
            conn = sqlite3.connect(self._db_path)
        except sqlite3.Error as exc:
            raise StoreError(str(exc)) from exc
        conn.row_factory = sqlite3.Row
        try:
            yield conn
            conn.commit()
        except sqlite3.IntegrityError as exc:
            raise DuplicateKeyError(str(exc)) from exc
        except sqlite3.Error as exc:
            raise StoreError(str(exc)) from exc
        finally:
            conn.close()

    def _init_db(self) -> None:
        with self._conn() as conn:
            conn.execute(
                f"""
                CREATE TABLE IF NOT EXISTS {_USERS.table} (
                    {_USERS.email} TEXT NOT NULL UNIQUE,
                    {_USERS.password} TEXT NOT NULL
                )
                """
            )
            conn.execute(
                f"""
                CREATE TABLE IF NOT EXISTS {_TODOS.table} (
                    {_TODOS.id} TEXT PRIMARY KEY,
                    {_TODOS.email} TEXT NOT NULL,
                    {_TODOS.title} TEXT NOT NULL,
                    {_TODOS.completed} INTEGER NOT NULL DEFAULT 0,
                    {_TODOS.created_at} TEXT NOT NULL
                )
                """
            )
            conn.execute(
                f"CREATE INDEX IF NOT EXISTS idx_{_TODOS.table}_email ON {_TODOS.table}({_TODOS.email})"
            )

    def _row_to_todo(self, row: sqlite3.Row) -> TodoEntity:
        return {
            "id": str(row[_TODOS.id]),
            "email": str(row[_TODOS.email]),
            "title": str(row[_TODOS.title]),
            "completed": bool(row[_TODOS.completed]),
            "created_at": datetime.fromisoformat(row[_TODOS.created_at]),
        }

    # Users

    def find_user(self, email: str) -> Optional[UserEntity]:
        with self._conn() as conn:
            row = conn.execute(
                f"SELECT * FROM {_USERS.table} WHERE {_USERS.email} = ?", (email,)
            ).fetchone()
            if row is None:
                return None
            return {"email": row[_USERS.email], "password": row[_USERS.password]}

    def insert_user(self, user: UserEntity) -> None:
        with self._conn() as conn:
            conn.execute(
                f"INSERT INTO {_USERS.table} ({_USERS.email}, {_USERS.password}) VALUES (?, ?)",
                (user["email"], user["password"]),
            )

    def list_users(self) -> List[UserEntity]:
        with self._conn() as conn:
            rows = conn.execute(f"SELECT * FROM {_USERS.table} ORDER BY rowid").fetchall()
            return [{"email": r[_USERS.email], "password": r[_USERS.password]} for r in rows]

    def delete_users(self) -> int:
        with self._conn() as conn:
            return conn.execute(f"DELETE FROM {_USERS.table}").rowcount

    # Todos

    def list_todos(self, email: Optional[str] = None) -> List[TodoEntity]:
        where_sql = f"WHERE {_TODOS.email} = ?" if email is not None else ""
        params = (email,) if email is not None else ()
        with self._conn() as conn:
            rows = conn.execute(
                f"SELECT * FROM {_TODOS.table} {where_sql} ORDER BY rowid", params
            ).fetchall()
            return [self._row_to_todo(r) for r in rows]

    def insert_todo(self, email: str, title: str) -> TodoEntity:
        entity: TodoEntity = {
            "id": new_todo_id(),
            "email": email,
            "title": title,
            "completed": False,
            "created_at": utcnow(),
        }
        with self._conn() as conn:
            conn.execute(
                f"""
                INSERT INTO {_TODOS.table} ({_TODOS.id}, {_TODOS.email}, {_TODOS.title},
                    {_TODOS.completed}, {_TODOS.created_at})
                VALUES (?, ?, ?, ?, ?)
                """,
                (entity["id"], email, title, 0, entity["created_at"].isoformat()),
            )
        return entity

    def get_todo(self, todo_id: str) -> Optional[TodoEntity]:
        with self._conn() as conn:
            row = conn.execute(
                f"SELECT * FROM {_TODOS.table} WHERE {_TODOS.id} = ?", (todo_id,)
            ).fetchone()
            return self._row_to_todo(row) if row else None

    def update_todo(self, todo_id: str, changes: TodoChanges) -> bool:
        assignments = []
        params: list = []
        if changes.title is not None:
            assignments.append(f"{_TODOS.title} = ?")
            params.append(changes.title)
        if changes.completed is not None:
            assignments.append(f"{_TODOS.completed} = ?")
            params.append(1 if changes.completed else 0)
        if not assignments:
            return self.get_todo(todo_id) is not None

        with self._conn() as conn:
            cur = conn.execute(
                f"UPDATE {_TODOS.table} SET {', '.join(assignments)} WHERE {_TODOS.id} = ?",
                [*params, todo_id],
            )
            return cur.rowcount > 0

    def delete_todo(self, todo_id: str) -> bool:
        with self._conn() as conn:
            cur = conn.execute(f"DELETE FROM {_TODOS.table} WHERE {_TODOS.id} = ?", (todo_id,))
            return cur.rowcount > 0

    def delete_todos(self, email: Optional[str] = None) -> int:
        with self._conn() as conn:
            if email is None:
                return conn.execute(f"DELETE FROM {_TODOS.table}").rowcount
            return conn.execute(
                f"DELETE FROM {_TODOS.table} WHERE {_TODOS.email} = ?", (email,)
            ).rowcount
