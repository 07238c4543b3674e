"""Errors raised by the account workflows and mapped onto HTTP responses."""
from __future__ import annotations

from fastapi import status


class AccountError(Exception):
    """Base class for failures that carry a public message and status code."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    message: str = "Internal server error"

    def __init__(self, message: str | None = None) -> None:
        if message is not None:
            self.message = message
        super().__init__(self.message)

    def to_payload(self) -> dict[str, str]:
        return {"error": self.message}


class InvalidInputError(AccountError):
    status_code = status.HTTP_400_BAD_REQUEST
    message = "Invalid input"


class DuplicateAccountError(AccountError):
    # Reported with a success status; clients inspect the ``error`` key.
    status_code = status.HTTP_200_OK
    message = "User email already exists, please login instead."


class UserNotFoundError(AccountError):
    status_code = status.HTTP_404_NOT_FOUND
    message = "User not found"


class IncorrectPasswordError(AccountError):
    status_code = status.HTTP_404_NOT_FOUND
    message = "Incorrect password"


class InternalServiceError(AccountError):
    pass


__all__ = [
    "AccountError",
    "DuplicateAccountError",
    "IncorrectPasswordError",
    "InternalServiceError",
    "InvalidInputError",
    "UserNotFoundError",
]
