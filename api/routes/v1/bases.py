"""
api/routes/v1/bases.py -- Base lookup for the client's base pickers.

There is no bases table: a base is just the string on user and asset
records. Admins see every base that has at least one user; everyone else
sees only their own.
"""

from fastapi import APIRouter, Depends, Request

from api.models import BaseResponse
from auth.dependencies import get_current_user
from auth.models import User

# Auth policy:
# - GET /api/bases: requires auth -- router-level dependency
router = APIRouter(dependencies=[Depends(get_current_user)])


@router.get("/bases", response_model=list[BaseResponse])
def list_bases(request: Request, current_user: User = Depends(get_current_user)) -> list[BaseResponse]:
    """Return [{id, name}] with both set to the base string."""
    return [BaseResponse(id=b, name=b) for b in request.app.state.accounts.list_bases(current_user)]
