"""
inventory/repository.py -- Base-scoped asset operations.

AssetRepository is what route handlers call. It owns the business rules the
storage layer does not know about:

  - who may do what, via auth.policy.ensure_access() on every operation
  - field validation (enums, quantities, required strings)
  - serial number uniqueness, by translating the store's IntegrityError

Check order for an operation on an existing record: role first (so an
officer cannot probe IDs with DELETE), then existence (404), then base
access (403). get() is the exception -- every role may read, so existence
is checked first.

Validation happens here rather than only in the Pydantic request models so
that the CLI and tests get the same guarantees as the HTTP API.
"""

from __future__ import annotations

import dataclasses
import logging
from typing import Any

from sqlalchemy.exc import IntegrityError

from auth.models import ROLE_ADMIN, User
from auth.policy import CREATE, DELETE, READ, UPDATE, ensure_access
from core.db import MAX_DB_INT
from core.errors import ConflictError, InvalidInputError, NotFoundError
from inventory.models import ASSET_STATUSES, ASSET_TYPES, DEFAULT_STATUS, Asset
from inventory.store import UPDATABLE_COLUMNS, AssetStore

logger = logging.getLogger("armory.inventory")

_REQUIRED_ON_CREATE = ("name", "type", "quantity", "base")


# ---------------------------------------------------------------------------
# Field validation
# ---------------------------------------------------------------------------


def _require_text(field: str, value: Any) -> str:
    if not isinstance(value, str) or not value.strip():
        raise InvalidInputError(f"{field} is required.")
    return value.strip()


def _require_int(field: str, value: Any, minimum: int) -> int:
    # bool is an int subclass; True is not a quantity
    if isinstance(value, bool) or not isinstance(value, int) or not minimum <= value <= MAX_DB_INT:
        raise InvalidInputError(f"{field} must be an integer between {minimum} and {MAX_DB_INT}.")
    return value


def _optional_text(value: Any) -> str | None:
    """Blank strings mean "not set" -- keeps the serial UNIQUE constraint sparse."""
    if value is None:
        return None
    if not isinstance(value, str):
        raise InvalidInputError("Expected a string.")
    return value.strip() or None


def _clean_fields(fields: dict[str, Any], min_quantity: int) -> dict[str, Any]:
    """Validate and normalize whichever asset fields are present."""
    unknown = set(fields) - UPDATABLE_COLUMNS
    if unknown:
        raise InvalidInputError(f"Unknown fields: {', '.join(sorted(unknown))}")

    cleaned: dict[str, Any] = {}
    for field, value in fields.items():
        if field in ("name", "base"):
            cleaned[field] = _require_text(field, value)
        elif field == "type":
            if value not in ASSET_TYPES:
                raise InvalidInputError(f"type must be one of: {', '.join(ASSET_TYPES)}")
            cleaned[field] = value
        elif field == "status":
            if value not in ASSET_STATUSES:
                raise InvalidInputError(f"status must be one of: {', '.join(ASSET_STATUSES)}")
            cleaned[field] = value
        elif field == "quantity":
            cleaned[field] = _require_int(field, value, min_quantity)
        elif field == "assigned_quantity":
            cleaned[field] = _require_int(field, value, 0)
        else:  # serial_number, notes
            cleaned[field] = _optional_text(value)
    return cleaned


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class AssetRepository:
    """Asset CRUD with role and base scoping.

    Usage:
        assets = AssetRepository(AssetStore(settings.database_url))
        visible = assets.list(current_user)
        created = assets.create(current_user, {"name": "Humvee", "type": "vehicle",
                                               "quantity": 4, "base": "Alpha"})
    """

    def __init__(self, store: AssetStore) -> None:
        self.store = store

    def list(self, actor: User) -> list[Asset]:
        """Every asset for admins; only the actor's base otherwise."""
        ensure_access(actor, None, READ)
        if actor.role == ROLE_ADMIN:
            return self.store.list_assets()
        return self.store.list_assets(base=actor.base)

    def get(self, actor: User, asset_id: int) -> Asset:
        asset = self._load(asset_id)
        ensure_access(actor, asset, READ)
        return asset

    def create(self, actor: User, fields: dict[str, Any]) -> Asset:
        ensure_access(actor, None, CREATE)
        missing = [f for f in _REQUIRED_ON_CREATE if fields.get(f) is None]
        if missing:
            raise InvalidInputError(f"Missing required fields: {', '.join(missing)}")
        cleaned = _clean_fields(fields, min_quantity=1)
        cleaned.setdefault("status", DEFAULT_STATUS)

        asset = Asset(**cleaned)
        ensure_access(actor, asset, CREATE)
        try:
            asset_id = self.store.create_asset(asset)
        except IntegrityError as exc:
            raise ConflictError("Serial number already exists.") from exc

        logger.info("Asset %d created at base %s by %s", asset_id, asset.base, actor.username)
        return self.store.get_asset(asset_id)

    def update(self, actor: User, asset_id: int, fields: dict[str, Any]) -> Asset:
        """Apply a partial update. Only the keys present in fields change."""
        ensure_access(actor, None, UPDATE)
        asset = self._load(asset_id)
        ensure_access(actor, asset, UPDATE)

        if not fields:
            raise InvalidInputError("No fields to update.")
        cleaned = _clean_fields(fields, min_quantity=0)
        if "base" in cleaned:
            # Moving an asset needs write access at the destination as well.
            ensure_access(actor, dataclasses.replace(asset, base=cleaned["base"]), UPDATE)

        try:
            updated = self.store.update_asset(asset_id, **cleaned)
        except IntegrityError as exc:
            raise ConflictError("Serial number already exists.") from exc
        if not updated:
            raise NotFoundError("Asset not found.")

        logger.info("Asset %d updated by %s: %s", asset_id, actor.username, ", ".join(sorted(cleaned)))
        return self.store.get_asset(asset_id)

    def delete(self, actor: User, asset_id: int) -> None:
        ensure_access(actor, None, DELETE)
        asset = self._load(asset_id)
        ensure_access(actor, asset, DELETE)
        if not self.store.delete_asset(asset_id):
            raise NotFoundError("Asset not found.")
        logger.info("Asset %d deleted by %s", asset_id, actor.username)

    def _load(self, asset_id: int) -> Asset:
        # No row can carry an id outside the INTEGER range.
        if not 1 <= asset_id <= MAX_DB_INT:
            raise NotFoundError("Asset not found.")
        asset = self.store.get_asset(asset_id)
        if asset is None:
            raise NotFoundError("Asset not found.")
        return asset
