"""
NoteShare Backend — Middleware Tests
======================================

What we test:
    ✅ Rate limiter returns 429 with Retry-After once the window is full
    ✅ Request IDs are echoed or generated
    ✅ Access log level follows the status class
"""

import logging

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from noteshare.middleware.logging import level_for_status
from noteshare.middleware.rate_limit import RateLimitMiddleware
from noteshare.middleware.request_id import RequestIDMiddleware, request_id_var


def _app(**limits) -> FastAPI:
    app = FastAPI()

    @app.get("/ping")
    async def ping():
        return {"request_id": request_id_var.get("")}

    @app.get("/health")
    async def health():
        return {"status": "healthy"}

    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(RateLimitMiddleware, **limits)
    return app


async def _client(app):
    return AsyncClient(transport=ASGITransport(app=app), base_url="http://test")


class TestRateLimit:
    @pytest.mark.asyncio
    async def test_third_request_is_rejected(self):
        app = _app(max_requests=2, window_seconds=60)
        async with await _client(app) as client:
            assert (await client.get("/ping")).status_code == 200
            assert (await client.get("/ping")).status_code == 200
            response = await client.get("/ping")

        assert response.status_code == 429
        assert response.json()["error"] == "rate_limit_exceeded"
        assert 1 <= int(response.headers["Retry-After"]) <= 61

    @pytest.mark.asyncio
    async def test_health_is_never_limited(self):
        app = _app(max_requests=1, window_seconds=60)
        async with await _client(app) as client:
            statuses = [(await client.get("/health")).status_code for _ in range(5)]
        assert statuses == [200] * 5


class TestRequestId:
    @pytest.mark.asyncio
    async def test_client_id_is_echoed(self):
        async with await _client(_app()) as client:
            response = await client.get("/ping", headers={"X-Request-ID": "abc123"})

        assert response.headers["X-Request-ID"] == "abc123"
        assert response.json()["request_id"] == "abc123"

    @pytest.mark.asyncio
    async def test_generated_when_absent(self):
        async with await _client(_app()) as client:
            response = await client.get("/ping")

        assert len(response.headers["X-Request-ID"]) == 8


class TestAccessLogLevel:
    def test_levels(self):
        assert level_for_status(200) == logging.INFO
        assert level_for_status(404) == logging.WARNING
        assert level_for_status(503) == logging.ERROR
