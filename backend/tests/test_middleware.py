"""
AEDCheck Backend — Middleware Tests
====================================

What:  Tests for request IDs, request-log levels and the rate limiter.
How:   A throwaway FastAPI app per test; the rate limiter gets a fake clock.
"""

import logging

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from aedcheck.middleware.logging import status_log_level
from aedcheck.middleware.rate_limit import RateLimitMiddleware
from aedcheck.middleware.request_id import RequestIDMiddleware, new_request_id


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


def _app(clock=None, max_requests=2) -> FastAPI:
    app = FastAPI()

    @app.get("/ping")
    async def ping():
        return {"ok": True}

    @app.get("/health")
    async def health():
        return {"status": "healthy"}

    if clock is not None:
        app.add_middleware(
            RateLimitMiddleware, max_requests=max_requests, window_seconds=60, clock=clock
        )
    app.add_middleware(RequestIDMiddleware)
    return app


def _client(app: FastAPI) -> AsyncClient:
    return AsyncClient(transport=ASGITransport(app=app), base_url="http://test")


class TestRequestID:

    def test_new_ids_are_short_hex(self):
        rid = new_request_id()
        assert len(rid) == 8
        int(rid, 16)

    @pytest.mark.asyncio
    async def test_generated_when_missing(self):
        async with _client(_app()) as client:
            response = await client.get("/ping")
        assert len(response.headers["X-Request-ID"]) == 8

    @pytest.mark.asyncio
    async def test_malformed_client_id_replaced(self):
        async with _client(_app()) as client:
            response = await client.get("/ping", headers={"X-Request-ID": "id;drop"})
        assert response.headers["X-Request-ID"] != "id;drop"


class TestStatusLogLevel:

    @pytest.mark.parametrize(
        "status, level",
        [(200, logging.INFO), (304, logging.INFO), (404, logging.WARNING), (503, logging.ERROR)],
    )
    def test_levels(self, status, level):
        assert status_log_level(status) == level


class TestRateLimit:

    @pytest.mark.asyncio
    async def test_blocks_after_limit_then_recovers(self):
        clock = FakeClock()
        async with _client(_app(clock)) as client:
            assert (await client.get("/ping")).status_code == 200
            assert (await client.get("/ping")).status_code == 200

            blocked = await client.get("/ping")
            assert blocked.status_code == 429
            assert blocked.headers["Retry-After"] == "61"
            body = blocked.json()
            assert body["error"] == "rate_limit_exceeded"
            assert body["request_id"] == blocked.headers["X-Request-ID"]

            clock.now += 61
            assert (await client.get("/ping")).status_code == 200

    @pytest.mark.asyncio
    async def test_health_is_not_limited(self):
        async with _client(_app(FakeClock(), max_requests=1)) as client:
            for _ in range(3):
                assert (await client.get("/health")).status_code == 200
