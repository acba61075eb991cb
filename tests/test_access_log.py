"""Tests for the log_requests middleware in api/main.py.

The middleware is driven directly with a stub call_next, so no route has to
be added to the shared app.
"""

import asyncio
import logging

import pytest
from starlette.requests import Request
from starlette.responses import PlainTextResponse

from api.main import log_requests


def _request(path: str) -> Request:
    return Request({
        "type": "http",
        "method": "GET",
        "path": path,
        "query_string": b"",
        "headers": [],
        "client": ("10.0.0.7", 50000),
        "server": ("testserver", 80),
        "scheme": "http",
    })


def test_logs_normal_response(caplog):
    async def call_next(request):
        return PlainTextResponse("ok", status_code=204)

    caplog.set_level(logging.INFO, logger="armory.api")
    response = asyncio.run(log_requests(_request("/api/health"), call_next))
    assert response.status_code == 204
    lines = [r.getMessage() for r in caplog.records if r.name == "armory.api"]
    assert any(line.startswith("GET /api/health 204 ") and line.endswith("10.0.0.7") for line in lines)


def test_logs_unhandled_error_as_500_and_reraises(caplog):
    async def call_next(request):
        raise RuntimeError("store exploded")

    caplog.set_level(logging.INFO, logger="armory.api")
    with pytest.raises(RuntimeError):
        asyncio.run(log_requests(_request("/api/assets"), call_next))
    lines = [r.getMessage() for r in caplog.records if r.name == "armory.api"]
    assert any(line.startswith("GET /api/assets 500 ") for line in lines)
