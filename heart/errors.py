"""
Heart: Typed failures raised by the core and mapped at the HTTP boundary.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator

from fastapi import status
from sqlalchemy.exc import DBAPIError, IntegrityError


class HeartError(Exception):
    """Base class for failures with a client-safe message."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail: str = "Internal error."

    def __init__(self, detail: str | None = None) -> None:
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


class ValidationError(HeartError):
    """Missing or malformed input, including self-swipes."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Invalid request."


class AuthorizationError(HeartError):
    """The caller is not a participant of the match it addressed."""

    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "Not a participant of this match."


class NotFoundError(HeartError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Not found."


class ConflictError(HeartError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Resource already exists."


class TransientStorageError(HeartError):
    """The store failed; every core operation is safe to retry."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = "Storage temporarily unavailable, please retry."


@contextmanager
def storage_errors(operation: str) -> Iterator[None]:
    """Translate driver failures into ``TransientStorageError``.

    Integrity violations pass through untouched; callers that expect
    them handle them explicitly.
    """
    try:
        yield
    except IntegrityError:
        raise
    except DBAPIError as exc:
        raise TransientStorageError(
            f"Storage temporarily unavailable during {operation}, please retry."
        ) from exc
