"""
core/errors.py -- Domain error taxonomy for Armory.

Every failure a service can report is one of these classes. Each carries the
HTTP status and machine-readable code the API layer should answer with, so
services raise and api/main.py translates -- route handlers never build
error responses by hand.

  400  InvalidInputError, ConflictError, InvalidCredentialsError, SelfDeletionError
  401  UnauthenticatedError, InvalidTokenError, UserNotFoundError
  403  ForbiddenError
  404  NotFoundError

Layer rule: core/ is the kernel. No imports from api/, auth/ or inventory/.
"""

from __future__ import annotations


class ArmoryError(Exception):
    """Base class for expected, client-facing failures."""

    status_code: int = 500
    code: str = "internal_error"
    message: str = "An unexpected error occurred."

    def __init__(self, message: str | None = None, detail: str | None = None) -> None:
        self.message = message or self.message
        self.detail = detail
        super().__init__(self.message)


class InvalidInputError(ArmoryError):
    status_code = 400
    code = "validation_error"
    message = "Request validation failed."


class ConflictError(ArmoryError):
    """A unique field (username, serial number) is already taken."""

    status_code = 400
    code = "conflict"
    message = "Record already exists."


class InvalidCredentialsError(ArmoryError):
    """Unknown username and wrong password share this error on purpose."""

    status_code = 400
    code = "invalid_credentials"
    message = "Invalid credentials."


class SelfDeletionError(ArmoryError):
    status_code = 400
    code = "self_deletion"
    message = "You cannot delete your own account."


class UnauthenticatedError(ArmoryError):
    status_code = 401
    code = "unauthenticated"
    message = "No token, authorization denied."


class InvalidTokenError(UnauthenticatedError):
    code = "invalid_token"
    message = "Token is not valid."


class UserNotFoundError(UnauthenticatedError):
    """The token verified but its user has since been deleted."""

    code = "user_not_found"
    message = "User not found."


class ForbiddenError(ArmoryError):
    status_code = 403
    code = "forbidden"
    message = "Not authorized."


class NotFoundError(ArmoryError):
    status_code = 404
    code = "not_found"
    message = "Record not found."
