"""
auth/tokens.py -- Password hashing and JWT session tokens.

Security design decisions:
  JWT: python-jose with HS256. Tokens are signed with SECRET_KEY and carry
       user_id, username (sub), name, role, base and expiry. TokenService is
       built once in the lifespan with the key and lifetime passed in, so
       tests can create their own with a throwaway key.

  Passwords: bcrypt directly (no passlib wrapper). Bcrypt's cost factor makes
       brute-force expensive for low-entropy secrets. A fresh salt is drawn
       by bcrypt.gensalt() on every hash. DUMMY_HASH enables timing
       equalization in CredentialStore.verify() so response time does not
       reveal whether a username exists.

Layer rule: no imports from api/ or inventory/. Import from core/ is allowed.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING

import bcrypt
from jose import JWTError, jwt

from core.errors import InvalidTokenError

if TYPE_CHECKING:
    from auth.models import User

logger = logging.getLogger("armory.auth")

_ALGORITHM = "HS256"

# bcrypt only looks at the first 72 bytes; bcrypt>=5 refuses longer input.
MAX_PASSWORD_BYTES = 72

# ---------------------------------------------------------------------------
# Password hashing
# ---------------------------------------------------------------------------


def hash_password(plain: str) -> str:
    """Return a bcrypt hash of the given plaintext password.

    Callers must keep the password within MAX_PASSWORD_BYTES; CredentialStore
    checks this before hashing.
    """
    return bcrypt.hashpw(plain.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    """Return True if the plaintext password matches the bcrypt hash."""
    try:
        return bcrypt.checkpw(plain.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        # Over-long input or a corrupt stored hash -- never a match.
        return False


# Computed once at module load so the first login attempt is not measurably
# slower than subsequent ones.
DUMMY_HASH: str = hash_password("armory_timing_dummy")


# ---------------------------------------------------------------------------
# JWT encode / decode
# ---------------------------------------------------------------------------


class TokenService:
    """Issues and verifies stateless session tokens.

    Usage:
        tokens = TokenService(settings.secret_key, settings.token_expire_seconds)
        token = tokens.issue(user)
        claims = tokens.verify(token)   # raises InvalidTokenError
    """

    def __init__(self, secret_key: str, expire_seconds: int) -> None:
        if not secret_key:
            raise ValueError("TokenService requires a signing key.")
        self._secret_key = secret_key
        self.expire_seconds = expire_seconds

    def issue(self, user: User) -> str:
        """Encode a signed JWT with the user's identity, role and base."""
        now = datetime.now(timezone.utc)
        payload = {
            "sub": user.username,
            "user_id": user.id,
            "name": user.name,
            "role": user.role,
            "base": user.base,
            "iat": now,
            "exp": now + timedelta(seconds=self.expire_seconds),
        }
        return jwt.encode(payload, self._secret_key, algorithm=_ALGORITHM)

    def verify(self, token: str) -> dict:
        """Decode and verify a JWT and return its claims.

        Raises InvalidTokenError on a bad signature, an expired token, a
        malformed token, or a payload without a user id.
        """
        try:
            payload = jwt.decode(token, self._secret_key, algorithms=[_ALGORITHM])
        except JWTError as exc:
            logger.info("Token rejected: %s", exc)
            raise InvalidTokenError() from exc
        if not isinstance(payload.get("user_id"), int):
            raise InvalidTokenError("Invalid token format.")
        return payload

