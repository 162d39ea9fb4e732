"""
Error taxonomy shared by every service.

Two classes of failure exist:

- ClientError: the caller supplied invalid input or referenced something that
  doesn't (or shouldn't) exist. The message is safe to return as-is and the
  error is never logged as a server fault.
- ServerError: storage failure, exhausted retry budget, hashing failure or an
  internal inconsistency. The cause chain is logged once by the boundary
  exception handler and the caller only sees a generic message.
"""

from typing import Any, Optional

from fastapi import status

STORAGE_ERROR_MESSAGE = "Something went wrong in the database."
SERVER_ERROR_MESSAGE = "Something went wrong with the server."


class AppError(Exception):
    """Base class for errors that carry a caller-facing message."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    @property
    def result(self) -> dict[str, Any]:
        """Response body reported to the caller."""
        return {"code": self.status_code, "message": self.message}


class ClientError(AppError):
    """The caller is at fault."""

    status_code = status.HTTP_400_BAD_REQUEST


class SessionNotFoundError(ClientError):
    """
    The token is malformed, unknown, expired or already destroyed.

    All four cases are deliberately indistinguishable to the caller.
    """

    status_code = status.HTTP_401_UNAUTHORIZED

    def __init__(self, message: str = "Couldn't find session."):
        super().__init__(message)


class ServerError(AppError):
    """Something went wrong on our side."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str = SERVER_ERROR_MESSAGE, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.cause = cause
        if cause is not None:
            self.__cause__ = cause


class StorageError(ServerError):
    """A document store call failed."""

    def __init__(self, cause: Optional[BaseException] = None):
        super().__init__(STORAGE_ERROR_MESSAGE, cause)


def document_should_exist(doc: Any, didnt_exist_message: str) -> None:
    """Raise a ClientError when a document that should exist is missing."""
    if not doc:
        raise ClientError(didnt_exist_message)


def document_shouldnt_exist(doc: Any, did_exist_message: str) -> None:
    """Raise a ClientError when a document that shouldn't exist is present."""
    if doc:
        raise ClientError(did_exist_message)
