"""
API request and response models for Armory REST endpoints.

These Pydantic v2 models define the HTTP transport contract for the API layer.
They are intentionally separate from the dataclasses in auth/models.py and
inventory/models.py, which own the internal domain representation. Route
handlers map between the two.

Wire format is camelCase (serialNumber, assignedQuantity, createdAt) because
that is what the single-page client speaks. _ApiModel generates the aliases;
populate_by_name lets Python callers and tests use snake_case too. FastAPI
serializes response models by alias, so responses always come out camelCase.
"""

from enum import Enum
from typing import Annotated, Optional

from fastapi import Path
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from auth.models import User
from core.db import MAX_DB_INT
from inventory.models import Asset

# Path parameter for a row id. Out-of-range values fail request validation (400).
RecordId = Annotated[int, Path(ge=1, le=MAX_DB_INT)]

# ---------------------------------------------------------------------------
# Base model
# ---------------------------------------------------------------------------


class _ApiModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class AssetTypeEnum(str, Enum):
    vehicle = "vehicle"
    weapon = "weapon"
    ammunition = "ammunition"
    equipment = "equipment"


class AssetStatusEnum(str, Enum):
    available = "available"
    assigned = "assigned"
    maintenance = "maintenance"
    decommissioned = "decommissioned"


# ---------------------------------------------------------------------------
# Shared envelopes
# ---------------------------------------------------------------------------


class ErrorDetail(BaseModel):
    """Machine-readable error payload."""

    model_config = ConfigDict(frozen=True)

    code: str
    message: str
    detail: Optional[str] = None


class ErrorResponse(BaseModel):
    """Top-level error envelope returned on 4xx/5xx responses."""

    model_config = ConfigDict(frozen=True)

    error: ErrorDetail


class MessageResponse(BaseModel):
    msg: str


class HealthResponse(BaseModel):
    """Response for GET /api/health."""

    model_config = ConfigDict(frozen=True)

    status: str = "ok"
    version: str


# ---------------------------------------------------------------------------
# Auth -- requests
# ---------------------------------------------------------------------------


class LoginRequest(BaseModel):
    """Request body for POST /api/auth/login."""

    model_config = ConfigDict(str_strip_whitespace=True)

    username: str = Field(min_length=1, max_length=255)
    # Not stripped: leading/trailing spaces are part of a password.
    password: str = Field(min_length=1, max_length=255)


class RegisterRequest(BaseModel):
    """Request body for POST /api/auth/register.

    role is optional: omitted means "officer". It is a plain string so that
    AccountService decides: a public caller asking for any other value gets
    403, an admin asking for an unknown role gets 400. Password byte length (bcrypt's 72-byte limit) is checked
    by the credential store.
    """

    username: str = Field(min_length=1, max_length=255)
    password: str = Field(min_length=6, max_length=72)
    name: str = Field(min_length=1, max_length=255)
    base: str = Field(min_length=1, max_length=255)
    role: Optional[str] = None


# ---------------------------------------------------------------------------
# Auth -- responses
# ---------------------------------------------------------------------------


class SessionUser(_ApiModel):
    """Identity block embedded next to a token (mirrors the token claims)."""

    id: int
    username: str
    name: str
    role: str
    base: str

    @classmethod
    def from_user(cls, user: User) -> "SessionUser":
        return cls(id=user.id, username=user.username, name=user.name, role=user.role, base=user.base)


class LoginResponse(_ApiModel):
    token: str
    user: SessionUser


class UserCreatedResponse(_ApiModel):
    """Admin-created account: the admin stays logged in as themselves."""

    msg: str
    user: SessionUser


class UserResponse(_ApiModel):
    """A user record as shown to admins and in GET /auth/user. Never includes the hash."""

    id: int
    username: str
    name: str
    role: str
    base: str
    created_at: str
    updated_at: Optional[str] = None

    @classmethod
    def from_user(cls, user: User) -> "UserResponse":
        return cls(
            id=user.id,
            username=user.username,
            name=user.name,
            role=user.role,
            base=user.base,
            created_at=user.created_at or "",
            updated_at=user.updated_at,
        )


class BaseResponse(_ApiModel):
    id: str
    name: str


# ---------------------------------------------------------------------------
# Assets
# ---------------------------------------------------------------------------


class AssetCreate(_ApiModel):
    """Request body for POST /api/assets."""

    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(min_length=1, max_length=255)
    type: AssetTypeEnum
    quantity: int = Field(ge=1, le=MAX_DB_INT)
    base: str = Field(min_length=1, max_length=255)
    serial_number: Optional[str] = Field(default=None, max_length=255)
    status: AssetStatusEnum = AssetStatusEnum.available
    assigned_quantity: int = Field(default=0, ge=0, le=MAX_DB_INT)
    notes: Optional[str] = Field(default=None, max_length=2000)


class AssetUpdate(_ApiModel):
    """Request body for PUT /api/assets/{id}.

    Every field is optional; only the ones present in the JSON body are
    applied (route handlers use model_dump(exclude_unset=True)). Sending
    null for a required field such as name is rejected by the repository.
    """

    model_config = ConfigDict(str_strip_whitespace=True)

    name: Optional[str] = Field(default=None, max_length=255)
    type: Optional[AssetTypeEnum] = None
    quantity: Optional[int] = Field(default=None, ge=0, le=MAX_DB_INT)
    base: Optional[str] = Field(default=None, max_length=255)
    serial_number: Optional[str] = Field(default=None, max_length=255)
    status: Optional[AssetStatusEnum] = None
    assigned_quantity: Optional[int] = Field(default=None, ge=0, le=MAX_DB_INT)
    notes: Optional[str] = Field(default=None, max_length=2000)


class AssetResponse(_ApiModel):
    model_config = ConfigDict(frozen=True)

    id: int
    name: str
    type: str
    serial_number: Optional[str]
    status: str
    quantity: int
    assigned_quantity: int
    base: str
    notes: Optional[str]
    created_at: str
    updated_at: str

    @classmethod
    def from_asset(cls, asset: Asset) -> "AssetResponse":
        """Factory Method -- the mapping lives next to the output model."""
        return cls(
            id=asset.id,
            name=asset.name,
            type=asset.type,
            serial_number=asset.serial_number,
            status=asset.status,
            quantity=asset.quantity,
            assigned_quantity=asset.assigned_quantity,
            base=asset.base,
            notes=asset.notes,
            created_at=asset.created_at,
            updated_at=asset.updated_at,
        )
