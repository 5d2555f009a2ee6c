from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, StrictBool

from .models import TodoEntity, UserEntity


# PUBLIC_INTERFACE
class Credentials(BaseModel):
    """
    Body for registration and login. Missing fields default to the empty
    string so the handlers can report them as required.
    """

    model_config = ConfigDict(
        json_schema_extra={"example": {"email": "u@x.com", "password": "pw1"}}
    )

    email: str = Field(default="", description="Account email; trimmed and lower-cased")
    password: str = Field(default="", description="Account password; trimmed")


# PUBLIC_INTERFACE
class TodoCreate(BaseModel):
    """
    Schema for creating a new Todo item.
    """

    model_config = ConfigDict(
        json_schema_extra={"example": {"email": "u@x.com", "title": "Buy groceries"}}
    )

    email: str = Field(default="", description="Owner email; trimmed and lower-cased")
    title: str = Field(default="", description="Short title for the todo item; trimmed")


# PUBLIC_INTERFACE
class TodoUpdate(BaseModel):
    """
    Schema for updating an existing Todo item.
    All fields are optional; only provided fields will be updated.
    """

    model_config = ConfigDict(
        json_schema_extra={"example": {"completed": True}}
    )

    title: Optional[str] = Field(default=None, description="New title; must not be blank")
    completed: Optional[StrictBool] = Field(default=None, description="Completion status flag; JSON true or false only")


# PUBLIC_INTERFACE
class TodoOut(BaseModel):
    """
    Schema returned by the API for a Todo item.
    """

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "id": "0f8fad5bd9cb469fa16570867728950e",
                "email": "u@x.com",
                "title": "Buy groceries",
                "completed": False,
                "createdAt": "2025-01-25T10:15:30.123456Z",
            }
        },
    )

    id: str = Field(..., description="Opaque identifier of the todo item")
    email: str = Field(..., description="Owner email")
    title: str = Field(..., description="Short title for the todo item")
    completed: bool = Field(..., description="Completion status flag")
    created_at: datetime = Field(..., alias="createdAt", description="Creation timestamp (UTC)")

    @classmethod
    def from_entity(cls, entity: TodoEntity) -> "TodoOut":
        return cls(
            id=entity["id"],
            email=entity["email"],
            title=entity["title"],
            completed=entity["completed"],
            created_at=entity["created_at"],
        )


# PUBLIC_INTERFACE
class UserOut(BaseModel):
    """Public projection of a user. Password material is never returned."""

    email: str

    @classmethod
    def from_entity(cls, entity: UserEntity) -> "UserOut":
        return cls(email=entity["email"])


class MessageOut(BaseModel):
    message: str


class ErrorOut(BaseModel):
    error: str = Field(..., description="Human-readable error message")


class TodoEnvelope(BaseModel):
    todo: TodoOut


class TodoListEnvelope(BaseModel):
    todos: List[TodoOut]


class UserListEnvelope(BaseModel):
    users: List[UserOut]


class HealthOut(BaseModel):
    status: str
    timestamp: datetime
