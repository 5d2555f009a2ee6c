"""
Error hierarchy for the task tracker API.

Every error carries the HTTP status code and the human-readable message that
the exception handler in main.py renders as ``{"error": message}``.
"""
from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator

logger = logging.getLogger(__name__)


class TaskTrackerError(Exception):
    """Base class for errors reported to API clients."""

    status_code: int = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(TaskTrackerError):
    """Malformed, missing or empty input."""

    status_code = 400


class InvalidIdentifierError(TaskTrackerError):
    """A path identifier that is not a well-formed key for the store."""

    status_code = 400

    def __init__(self, message: str = "Invalid id") -> None:
        super().__init__(message)


class AuthenticationError(TaskTrackerError):
    status_code = 401


class ConflictError(TaskTrackerError):
    status_code = 409


class StoreError(TaskTrackerError):
    """Any persistence failure. Details stay in the logs, never in the response."""

    status_code = 500


class DuplicateKeyError(StoreError):
    """Raised by a storage backend when a unique key already exists."""


# PUBLIC_INTERFACE
@contextmanager
def store_errors(public_message: str) -> Iterator[None]:
    """
    Translate storage failures raised inside the block into a StoreError that
    only carries ``public_message``.
    """
    try:
        yield
    except StoreError as exc:
        logger.exception("Store operation failed: %s", public_message)
        raise StoreError(public_message) from exc
