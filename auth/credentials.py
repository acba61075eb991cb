"""
auth/credentials.py -- Credential store: create accounts and verify passwords.

Sits on top of UserStore and owns everything password-related, so no other
module ever sees a plaintext password after the request body is parsed.

Security:
  [C1] verify() always runs bcrypt, against DUMMY_HASH when the username is
       unknown, so response time does not leak which usernames exist. Both
       failure modes raise the same InvalidCredentialsError.
  Uniqueness is left to the UNIQUE(username) constraint -- create() inserts
  first and translates IntegrityError, there is no check-then-insert window.

Layer rule: no imports from api/ or inventory/.
"""

from __future__ import annotations

import logging

from sqlalchemy.exc import IntegrityError

from auth.models import ROLES, User
from auth.store import UserStore
from auth.tokens import DUMMY_HASH, MAX_PASSWORD_BYTES, hash_password, verify_password
from core.errors import ConflictError, InvalidCredentialsError, InvalidInputError

logger = logging.getLogger("armory.auth")

MIN_PASSWORD_LENGTH = 6


class CredentialStore:
    def __init__(self, users: UserStore) -> None:
        self.users = users

    def create(self, username: str, password: str, name: str, base: str, role: str) -> User:
        """Hash the password and persist a new user. Returns the stored record.

        Raises InvalidInputError for a bad role or password, ConflictError if
        the username is taken.
        """
        if role not in ROLES:
            raise InvalidInputError(f"role must be one of: {', '.join(ROLES)}")
        if len(password) < MIN_PASSWORD_LENGTH:
            raise InvalidInputError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters.")
        if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
            raise InvalidInputError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes.")
        for field, value in (("username", username), ("name", name), ("base", base)):
            if not value or not value.strip():
                raise InvalidInputError(f"{field} is required.")

        user = User(
            username=username.strip(),
            name=name.strip(),
            role=role,
            base=base.strip(),
            hashed_password=hash_password(password),
        )
        try:
            user_id = self.users.create_user(user)
        except IntegrityError as exc:
            raise ConflictError("User already exists.") from exc

        logger.info("User created: %s (role=%s, base=%s)", user.username, role, user.base)
        return self.users.get_by_id(user_id)

    def verify(self, username: str, password: str) -> User:
        """Return the user if username and password match, else raise InvalidCredentialsError."""
        user = self.users.get_by_username(username)
        if user is None:
            # Equalize timing -- do NOT return early before running bcrypt [C1]
            verify_password(password, DUMMY_HASH)
            raise InvalidCredentialsError()
        if not verify_password(password, user.hashed_password):
            raise InvalidCredentialsError()
        return user
