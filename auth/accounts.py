"""
auth/accounts.py -- User management: register, login, list, delete, bases.

AccountService glues the credential store, the token service and the policy
together. Route handlers in api/routes/v1/auth.py call exactly one method
each and map the result onto a response model.

Registration rules:
  - requester is an admin      -> any role at any base, no login
  - requester is another user  -> ForbiddenError
  - requester is None (public) -> role must be "officer"; the new user is
                                  logged in straight away
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from auth.credentials import CredentialStore
from auth.models import ROLE_ADMIN, ROLE_OFFICER, User
from auth.policy import MANAGE_USERS, ensure_access
from auth.store import UserStore
from auth.tokens import TokenService
from core.db import MAX_DB_INT
from core.errors import ForbiddenError, InvalidCredentialsError, NotFoundError, SelfDeletionError

logger = logging.getLogger("armory.auth")


@dataclass
class Registration:
    """Outcome of register(). token is None when an admin created the account."""

    user: User
    token: str | None = None


class AccountService:
    def __init__(self, credentials: CredentialStore, tokens: TokenService) -> None:
        self.credentials = credentials
        self.tokens = tokens

    @property
    def users(self) -> UserStore:
        return self.credentials.users

    def register(
        self,
        requester: User | None,
        username: str,
        password: str,
        name: str,
        base: str,
        role: str | None = None,
    ) -> Registration:
        if requester is not None:
            if requester.role != ROLE_ADMIN:
                raise ForbiddenError("Not authorized to create users.")
            user = self.credentials.create(username, password, name, base, role or ROLE_OFFICER)
            return Registration(user=user)

        if role not in (None, ROLE_OFFICER):
            raise ForbiddenError("Not authorized to create this role.")
        user = self.credentials.create(username, password, name, base, ROLE_OFFICER)
        return Registration(user=user, token=self.tokens.issue(user))

    def login(self, username: str, password: str) -> tuple[str, User]:
        """Verify credentials and return (token, user)."""
        try:
            user = self.credentials.verify(username, password)
        except InvalidCredentialsError:
            logger.warning("Failed login for username=%r", username)
            raise
        logger.info("Login: %s", user.username)
        return self.tokens.issue(user), user

    def list_users(self, requester: User) -> list[User]:
        ensure_access(requester, None, MANAGE_USERS)
        return self.users.list_users()

    def delete_user(self, requester: User, user_id: int) -> None:
        ensure_access(requester, None, MANAGE_USERS)
        if user_id == requester.id:
            raise SelfDeletionError()
        if not 1 <= user_id <= MAX_DB_INT or not self.users.delete_user(user_id):
            raise NotFoundError("User not found.")
        logger.info("User %d deleted by %s", user_id, requester.username)

    def list_bases(self, requester: User) -> list[str]:
        """All known bases for admins; just the requester's own base otherwise."""
        if requester.role == ROLE_ADMIN:
            return self.users.list_bases()
        return [requester.base] if requester.base else []
