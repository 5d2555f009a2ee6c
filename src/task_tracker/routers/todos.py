from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from ..dependencies import get_repo
from ..errors import InvalidIdentifierError, StoreError, ValidationError, store_errors
from ..repositories import Repository, TodoChanges, parse_todo_id
from ..schemas import (
    ErrorOut,
    MessageOut,
    TodoCreate,
    TodoEnvelope,
    TodoListEnvelope,
    TodoOut,
    TodoUpdate,
)
from ..utils import normalize_email, normalize_text

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/todos",
    tags=["todos"],
)


def _require_id(todo_id: str) -> str:
    parsed = parse_todo_id(todo_id)
    if parsed is None:
        raise InvalidIdentifierError()
    return parsed


# PUBLIC_INTERFACE
@router.get(
    "",
    response_model=TodoListEnvelope,
    summary="List Todos",
    description=(
        "List todos. With a non-empty email query parameter only that owner's todos are "
        "returned; the email is trimmed and lower-cased before matching. Without it every "
        "todo in the store is returned."
    ),
    responses={500: {"model": ErrorOut, "description": "Store error"}},
)
def list_todos(
    email: Optional[str] = Query(None, description="Owner email filter"),
    repo: Repository = Depends(get_repo),
) -> TodoListEnvelope:
    owner = normalize_email(email) if email else None
    with store_errors("Failed to fetch todos"):
        items = repo.list_todos(owner)
    return TodoListEnvelope(todos=[TodoOut.from_entity(it) for it in items])


# PUBLIC_INTERFACE
@router.post(
    "",
    response_model=TodoEnvelope,
    status_code=status.HTTP_201_CREATED,
    summary="Create Todo",
    description="Create a new, incomplete Todo item for an owner email and return it.",
    responses={
        400: {"model": ErrorOut, "description": "Email or title missing"},
        500: {"model": ErrorOut, "description": "Store error"},
    },
)
def create_todo(payload: TodoCreate, repo: Repository = Depends(get_repo)) -> TodoEnvelope:
    """
    Create a new Todo.
    """
    email = normalize_email(payload.email)
    title = normalize_text(payload.title)
    if not email or not title:
        raise ValidationError("Email and title are required")

    with store_errors("Failed to create todo"):
        created = repo.insert_todo(email, title)
    logger.info("Created todo %s for %s", created["id"], email)
    return TodoEnvelope(todo=TodoOut.from_entity(created))


# PUBLIC_INTERFACE
@router.put(
    "/{todo_id}",
    response_model=TodoEnvelope,
    summary="Update Todo",
    description=(
        "Partially update a Todo. Only the supplied fields (title, completed) are written; "
        "the others keep their current values."
    ),
    responses={
        400: {"model": ErrorOut, "description": "Invalid id, empty title or nothing to update"},
        500: {"model": ErrorOut, "description": "Store error"},
    },
)
def update_todo(todo_id: str, payload: TodoUpdate, repo: Repository = Depends(get_repo)) -> TodoEnvelope:
    key = _require_id(todo_id)

    title: Optional[str] = None
    if payload.title is not None:
        title = normalize_text(payload.title)
        if not title:
            raise ValidationError("Title cannot be empty")

    changes = TodoChanges(title=title, completed=payload.completed)
    if changes.is_empty():
        raise ValidationError("Nothing to update")

    with store_errors("Failed to update todo"):
        repo.update_todo(key, changes)
    with store_errors("Failed to read updated todo"):
        updated = repo.get_todo(key)
    if updated is None:
        # never existed, or deleted between the write and the read
        raise StoreError("Failed to read updated todo")
    return TodoEnvelope(todo=TodoOut.from_entity(updated))


# PUBLIC_INTERFACE
@router.delete(
    "/{todo_id}",
    response_model=MessageOut,
    summary="Delete Todo",
    description="Delete a Todo by id. Deleting an id that does not exist also succeeds.",
    responses={
        400: {"model": ErrorOut, "description": "Invalid id"},
        500: {"model": ErrorOut, "description": "Store error"},
    },
)
def delete_todo(todo_id: str, repo: Repository = Depends(get_repo)) -> MessageOut:
    key = _require_id(todo_id)
    with store_errors("Failed to delete todo"):
        repo.delete_todo(key)
    return MessageOut(message="Todo deleted")


# PUBLIC_INTERFACE
@router.delete(
    "",
    response_model=MessageOut,
    summary="Clear Todos",
    description=(
        "Test utility: delete every todo, or only those whose stored email equals the "
        "email query parameter exactly (the filter is not normalized)."
    ),
    responses={500: {"model": ErrorOut, "description": "Store error"}},
)
def clear_todos(
    email: Optional[str] = Query(None, description="Exact owner email to clear"),
    repo: Repository = Depends(get_repo),
) -> MessageOut:
    with store_errors("Failed to clear todos"):
        removed = repo.delete_todos(email or None)
    logger.info("Cleared %d todos", removed)
    return MessageOut(message="Todos deleted")
