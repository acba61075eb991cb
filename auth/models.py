"""
auth/models.py -- Domain dataclasses for authentication entities.

Pattern: Data class (pure data container, zero logic). Mirrors the approach
in inventory/models.py -- dataclasses own domain shape; stores and services
do the work.

Layer rule: no imports from api/ or inventory/.
"""

from __future__ import annotations

from dataclasses import dataclass

ROLE_ADMIN = "admin"
ROLE_COMMANDER = "commander"
ROLE_OFFICER = "officer"

ROLES: tuple[str, ...] = (ROLE_ADMIN, ROLE_COMMANDER, ROLE_OFFICER)


@dataclass
class User:
    """An Armory account.

    base is a free-form facility name ("Alpha", "Fort Bragg"). It is the only
    link between users and assets -- there is no foreign key, just string
    equality in auth/policy.can_access().

    hashed_password is a bcrypt hash. It is loaded so the credential store can
    verify logins, but no response model in api/models.py exposes it.
    """

    username: str
    name: str
    role: str  # "admin", "commander", "officer"
    base: str
    id: int | None = None
    hashed_password: str | None = None
    created_at: str | None = None
    updated_at: str | None = None
