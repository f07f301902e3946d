"""Translate domain errors into HTTP responses."""

from __future__ import annotations

from fastapi import HTTPException, status

from ..domain.errors import (
    AccountNotFoundError,
    AlreadySettledError,
    DuplicateRequestError,
    EscrowError,
    RequestNotFoundError,
    UnauthorizedReceiverError,
)


def status_code_for(error: ValueError) -> int:
    if isinstance(error, (RequestNotFoundError, AccountNotFoundError)):
        return status.HTTP_404_NOT_FOUND
    if isinstance(error, UnauthorizedReceiverError):
        return status.HTTP_403_FORBIDDEN
    if isinstance(error, (DuplicateRequestError, AlreadySettledError)):
        return status.HTTP_409_CONFLICT
    return status.HTTP_400_BAD_REQUEST


def to_http_exception(error: ValueError) -> HTTPException:
    """HTTPException whose detail carries the error kind and message."""
    code = error.code if isinstance(error, EscrowError) else "BadRequest"
    return HTTPException(
        status_code=status_code_for(error),
        detail={"error": code, "message": str(error)},
    )
