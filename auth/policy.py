"""
auth/policy.py -- The single authorization policy for Armory.

Every handler that needs a permission decision goes through can_access():

    can_access(actor, record, action) -> bool

Two rules, applied in order:
  1. Role: actor.role must be in the allow-list for the action.
  2. Base: non-admins may only touch records whose base equals their own.
     Admins bypass this rule. record=None skips it (role check only), which
     is how callers gate an operation before the record is loaded.

record is anything with a .base attribute (Asset, User).

Layer rule: no imports from api/ or inventory/.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any

from auth.models import ROLE_ADMIN, ROLE_COMMANDER, ROLE_OFFICER, User
from core.errors import ForbiddenError

logger = logging.getLogger("armory.auth")

READ = "read"
CREATE = "create"
UPDATE = "update"
DELETE = "delete"
MANAGE_USERS = "manage_users"

_ACTION_ROLES: dict[str, frozenset[str]] = {
    READ: frozenset({ROLE_ADMIN, ROLE_COMMANDER, ROLE_OFFICER}),
    CREATE: frozenset({ROLE_ADMIN, ROLE_COMMANDER}),
    UPDATE: frozenset({ROLE_ADMIN, ROLE_COMMANDER}),
    DELETE: frozenset({ROLE_ADMIN}),
    MANAGE_USERS: frozenset({ROLE_ADMIN}),
}


def can_access(actor: User, record: Any | None, action: str) -> bool:
    """Return True if actor may perform action on record."""
    allowed = _ACTION_ROLES.get(action)
    if allowed is None:
        raise ValueError(f"Unknown action: {action!r}")
    if actor.role not in allowed:
        return False
    if actor.role == ROLE_ADMIN or record is None:
        return True
    return record.base == actor.base


def ensure_access(actor: User, record: Any | None, action: str) -> None:
    """Raise ForbiddenError unless can_access() allows the action."""
    if not can_access(actor, record, action):
        logger.info(
            "Access denied: user=%s role=%s action=%s record_base=%s",
            actor.username,
            actor.role,
            action,
            getattr(record, "base", None),
        )
        raise ForbiddenError()


def authorize(user: User, allowed_roles: Iterable[str]) -> None:
    """Raise ForbiddenError if user.role is not in allowed_roles.

    An empty allow-list means no restriction.
    """
    roles = set(allowed_roles)
    if roles and user.role not in roles:
        raise ForbiddenError()
