"""
auth/dependencies.py -- FastAPI Depends() helpers for authentication.

Token transport, checked in priority order:
  1. x-auth-token: <token>             -- what the web client sends.
  2. Authorization: Bearer <token>     -- standard API clients.

get_current_user() is the hard variant: it raises UnauthenticatedError,
InvalidTokenError or UserNotFoundError (all HTTP 401) and otherwise returns
the live User record from the store.
get_optional_user() returns None only when no token was sent at all; a token
that is present but bad still fails, so a broken admin session is never
silently downgraded to an anonymous request.
require_roles(*roles) wraps get_current_user() and raises ForbiddenError (403).

Layer rule: no imports from api/ or inventory/.
  auth/dependencies.py may import from fastapi (for Depends/Request) because
  this module is part of the FastAPI dependency injection system.
"""

from __future__ import annotations

from collections.abc import Callable

from fastapi import Depends, Request

from auth.models import User
from auth.policy import authorize
from core.errors import UnauthenticatedError, UserNotFoundError

TOKEN_HEADER = "x-auth-token"


def extract_token(request: Request) -> str | None:
    """Return the raw token from x-auth-token or the Bearer header, if any."""
    token = request.headers.get(TOKEN_HEADER, "").strip()
    if token:
        return token
    auth_header = request.headers.get("Authorization", "")
    if auth_header.startswith("Bearer "):
        return auth_header[7:].strip() or None
    return None


def _resolve_user(request: Request, token: str) -> User:
    claims = request.app.state.tokens.verify(token)
    user = request.app.state.user_store.get_by_id(claims["user_id"])
    if user is None:
        raise UserNotFoundError()
    return user


def get_current_user(request: Request) -> User:
    """Require authentication.

    Use as a FastAPI dependency:
        @router.get("/protected")
        def route(user: User = Depends(get_current_user)): ...
    """
    token = extract_token(request)
    if token is None:
        raise UnauthenticatedError()
    return _resolve_user(request, token)


def get_optional_user(request: Request) -> User | None:
    """Authenticate if a token was sent; return None for anonymous requests."""
    token = extract_token(request)
    if token is None:
        return None
    return _resolve_user(request, token)


def require_roles(*roles: str) -> Callable[..., User]:
    """Build a dependency that requires one of roles (no roles = any user).

        @router.get("/auth/users")
        def route(user: User = Depends(require_roles("admin"))): ...
    """

    def dependency(user: User = Depends(get_current_user)) -> User:
        authorize(user, roles)
        return user

    return dependency
