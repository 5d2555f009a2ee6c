from __future__ import annotations

import logging
from typing import Tuple

from fastapi import APIRouter, Depends, status

from ..dependencies import get_password_hasher, get_repo
from ..errors import (
    AuthenticationError,
    ConflictError,
    DuplicateKeyError,
    StoreError,
    ValidationError,
    store_errors,
)
from ..repositories import Repository
from ..schemas import Credentials, ErrorOut, MessageOut, UserListEnvelope, UserOut
from ..security import PasswordHasher
from ..utils import normalize_email, normalize_text

logger = logging.getLogger(__name__)

router = APIRouter(tags=["users"])


def _normalized_credentials(payload: Credentials) -> Tuple[str, str]:
    email = normalize_email(payload.email)
    password = normalize_text(payload.password)
    if not email or not password:
        raise ValidationError("Email and password are required")
    return email, password


# PUBLIC_INTERFACE
@router.post(
    "/register",
    response_model=MessageOut,
    status_code=status.HTTP_201_CREATED,
    summary="Register user",
    description="Create an account for a normalized email. Emails are unique per store.",
    responses={
        400: {"model": ErrorOut, "description": "Invalid or empty email/password"},
        409: {"model": ErrorOut, "description": "User already exists"},
        500: {"model": ErrorOut, "description": "Store error"},
    },
)
def register_user(
    payload: Credentials,
    repo: Repository = Depends(get_repo),
    hasher: PasswordHasher = Depends(get_password_hasher),
) -> MessageOut:
    """
    Register a new user.
    """
    email, password = _normalized_credentials(payload)

    with store_errors("Failed to register user"):
        existing = repo.find_user(email)
    if existing is not None:
        raise ConflictError("User already exists")

    stored = hasher.hash(password)
    try:
        repo.insert_user({"email": email, "password": stored})
    except DuplicateKeyError as exc:
        # lost a race with a concurrent registration for the same email
        raise ConflictError("User already exists") from exc
    except StoreError as exc:
        logger.exception("Failed to insert user %s", email)
        raise StoreError("Failed to register user") from exc

    logger.info("Registered user %s", email)
    return MessageOut(message="User registered successfully")


# PUBLIC_INTERFACE
@router.post(
    "/login",
    response_model=MessageOut,
    summary="Log in",
    description="Check an email/password pair. No token or session is issued.",
    responses={
        400: {"model": ErrorOut, "description": "Invalid or empty email/password"},
        401: {"model": ErrorOut, "description": "Unknown user or wrong password"},
    },
)
def login_user(
    payload: Credentials,
    repo: Repository = Depends(get_repo),
    hasher: PasswordHasher = Depends(get_password_hasher),
) -> MessageOut:
    email, password = _normalized_credentials(payload)

    with store_errors("Failed to log in"):
        found = repo.find_user(email)
    if found is None:
        logger.warning("Login failed for %s: user not found", email)
        raise AuthenticationError("User not found")

    if not hasher.verify(found["password"], password):
        logger.warning("Login failed for %s: incorrect password", email)
        raise AuthenticationError("Incorrect password")

    return MessageOut(message="Login successful")


# PUBLIC_INTERFACE
@router.get(
    "/users",
    response_model=UserListEnvelope,
    summary="List users",
    description="Diagnostic listing of every registered user (emails only).",
    responses={500: {"model": ErrorOut, "description": "Store error"}},
)
def list_users(repo: Repository = Depends(get_repo)) -> UserListEnvelope:
    with store_errors("Failed to fetch users"):
        users = repo.list_users()
    return UserListEnvelope(users=[UserOut.from_entity(u) for u in users])


# PUBLIC_INTERFACE
@router.delete(
    "/users",
    response_model=MessageOut,
    summary="Clear users",
    description="Test utility: delete every user.",
    responses={500: {"model": ErrorOut, "description": "Store error"}},
)
def clear_users(repo: Repository = Depends(get_repo)) -> MessageOut:
    with store_errors("Failed to clear users"):
        removed = repo.delete_users()
    logger.info("Cleared %d users", removed)
    return MessageOut(message="All users deleted")
