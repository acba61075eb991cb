"""
api/routes/v1/assets.py -- Asset inventory routes for the Armory REST API.

Routes:
  GET    /assets        -- list assets visible to the caller (base scoped)
  POST   /assets        -- create asset (admin, commander)
  GET    /assets/{id}   -- asset detail
  PUT    /assets/{id}   -- partial update (admin, commander)
  DELETE /assets/{id}   -- delete (admin)

Handlers are thin: the role gate runs as a dependency, and AssetRepository
applies the same policy again together with the base check and field
validation. A non-integer or out-of-range {id} fails request validation and returns 400.
"""

from fastapi import APIRouter, Depends, Request

from api.models import AssetCreate, AssetResponse, AssetUpdate, MessageResponse, RecordId
from auth.dependencies import get_current_user, require_roles
from auth.models import ROLE_ADMIN, ROLE_COMMANDER, User
from inventory.repository import AssetRepository

# All asset routes require authentication.
# Router-level dependency applies to every route registered on this router,
# so the 401 is raised before any body validation or store access.
router = APIRouter(dependencies=[Depends(get_current_user)])

_writers = require_roles(ROLE_ADMIN, ROLE_COMMANDER)
_admins = require_roles(ROLE_ADMIN)


def _assets(request: Request) -> AssetRepository:
    return request.app.state.assets


@router.get("/assets", response_model=list[AssetResponse])
def list_assets(request: Request, current_user: User = Depends(get_current_user)) -> list[AssetResponse]:
    """Every asset for admins; only the caller's base for everyone else."""
    return [AssetResponse.from_asset(a) for a in _assets(request).list(current_user)]


@router.post("/assets", response_model=AssetResponse, status_code=201)
def create_asset(
    request: Request,
    body: AssetCreate,
    current_user: User = Depends(_writers),
) -> AssetResponse:
    """Register a new asset. Commanders may only create at their own base."""
    created = _assets(request).create(current_user, body.model_dump(mode="json"))
    return AssetResponse.from_asset(created)


@router.get("/assets/{asset_id}", response_model=AssetResponse)
def get_asset(request: Request, asset_id: RecordId, current_user: User = Depends(get_current_user)) -> AssetResponse:
    """Return one asset. 404 if absent, 403 if it belongs to another base."""
    return AssetResponse.from_asset(_assets(request).get(current_user, asset_id))


@router.put("/assets/{asset_id}", response_model=AssetResponse)
def update_asset(
    request: Request,
    asset_id: RecordId,
    body: AssetUpdate,
    current_user: User = Depends(_writers),
) -> AssetResponse:
    """Apply only the fields present in the request body."""
    updated = _assets(request).update(current_user, asset_id, body.model_dump(mode="json", exclude_unset=True))
    return AssetResponse.from_asset(updated)


@router.delete("/assets/{asset_id}", response_model=MessageResponse)
def delete_asset(request: Request, asset_id: RecordId, current_user: User = Depends(_admins)) -> MessageResponse:
    """Delete an asset. Admin only."""
    _assets(request).delete(current_user, asset_id)
    return MessageResponse(msg="Asset removed")
