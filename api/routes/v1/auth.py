"""
api/routes/v1/auth.py -- Authentication and user management REST endpoints.

Routes:
  POST   /api/auth/register      -- public sign-up (officer) or admin-created account
  POST   /api/auth/login         -- password login; returns token + identity
  GET    /api/auth/user          -- current user profile (requires auth)
  GET    /api/auth/users         -- list all users (admin only)
  DELETE /api/auth/users/{id}    -- delete a user (admin only, never self)

Security:
  [C1] AccountService.login() goes through CredentialStore.verify(), which
       equalizes timing for unknown usernames. Do not inline a lookup here.
  [M5] Cache-Control: no-store on every response that carries a token.
  Unknown username and wrong password return the identical 400 body.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request, Response
from fastapi.responses import JSONResponse

from api.models import (
    LoginRequest,
    LoginResponse,
    MessageResponse,
    RecordId,
    RegisterRequest,
    SessionUser,
    UserCreatedResponse,
    UserResponse,
)
from api.responses import error_response
from auth.accounts import AccountService
from auth.dependencies import get_current_user, get_optional_user, require_roles
from auth.models import ROLE_ADMIN, User
from core.errors import InvalidCredentialsError

# Auth policy:
# - POST   /api/auth/register:     public, or admin token for any-role accounts
# - POST   /api/auth/login:        public
# - GET    /api/auth/user:         requires auth (get_current_user)
# - GET    /api/auth/users:        requires admin (require_roles)
# - DELETE /api/auth/users/{id}:   requires admin (require_roles)
router = APIRouter()


def _accounts(request: Request) -> AccountService:
    return request.app.state.accounts


# ---------------------------------------------------------------------------
# Public endpoints
# ---------------------------------------------------------------------------


@router.post("/auth/register", response_model=LoginResponse | UserCreatedResponse)
def register(
    request: Request,
    response: Response,
    body: RegisterRequest,
    requester: User | None = Depends(get_optional_user),
) -> LoginResponse | UserCreatedResponse:
    """Create an account.

    Anonymous callers always get an officer account and are logged in.
    Admin callers may pick any role and base; they get the new user back
    but stay logged in as themselves.
    """
    result = _accounts(request).register(
        requester,
        username=body.username,
        password=body.password,
        name=body.name,
        base=body.base,
        role=body.role,
    )
    if result.token is None:
        return UserCreatedResponse(msg="User created successfully", user=SessionUser.from_user(result.user))

    response.headers["Cache-Control"] = "no-store"  # [M5]
    return LoginResponse(token=result.token, user=SessionUser.from_user(result.user))


@router.post("/auth/login", response_model=LoginResponse)
def login(request: Request, response: Response, body: LoginRequest) -> LoginResponse | JSONResponse:
    """Authenticate with username and password and return a session token."""
    try:
        token, user = _accounts(request).login(body.username, body.password)
    except InvalidCredentialsError as exc:
        resp = error_response(exc)
        resp.headers["Cache-Control"] = "no-store"  # [M5]
        return resp

    response.headers["Cache-Control"] = "no-store"  # [M5]
    return LoginResponse(token=token, user=SessionUser.from_user(user))


# ---------------------------------------------------------------------------
# Authenticated endpoints
# ---------------------------------------------------------------------------


@router.get("/auth/user", response_model=UserResponse)
def current_user_profile(current_user: User = Depends(get_current_user)) -> UserResponse:
    """Return the profile of the user the token belongs to."""
    return UserResponse.from_user(current_user)


# ---------------------------------------------------------------------------
# User management (admin only)
# ---------------------------------------------------------------------------


@router.get("/auth/users", response_model=list[UserResponse])
def list_users(request: Request, current_user: User = Depends(require_roles(ROLE_ADMIN))) -> list[UserResponse]:
    """List all user accounts. Password hashes are never included."""
    return [UserResponse.from_user(u) for u in _accounts(request).list_users(current_user)]


@router.delete("/auth/users/{user_id}", response_model=MessageResponse)
def delete_user(
    request: Request,
    user_id: RecordId,
    current_user: User = Depends(require_roles(ROLE_ADMIN)),
) -> MessageResponse:
    """Delete a user account. Admins cannot delete themselves."""
    _accounts(request).delete_user(current_user, user_id)
    return MessageResponse(msg="User deleted successfully")
