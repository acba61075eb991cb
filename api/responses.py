"""
api/responses.py -- The one JSON error envelope: {"error": {code, message, detail}}.

The exception handlers in api/main.py and the login route (which adds
Cache-Control to its error) build their error bodies here.
"""

from typing import Optional

from fastapi.responses import JSONResponse

from api.models import ErrorDetail, ErrorResponse
from core.errors import ArmoryError


def envelope(
    status_code: int,
    code: str,
    message: str,
    detail: Optional[str] = None,
    headers: Optional[dict] = None,
) -> JSONResponse:
    body = ErrorResponse(error=ErrorDetail(code=code, message=message, detail=detail))
    return JSONResponse(status_code=status_code, content=body.model_dump(), headers=headers)


def error_response(exc: ArmoryError) -> JSONResponse:
    return envelope(exc.status_code, exc.code, exc.message, exc.detail)
