"""
SnipShare — Middleware Tests
=============================

What:  Rate limiting and request ids, on a small app so the shared
       application's counters are left alone.

What we test:
    ✅ POSTs beyond the limit get the 429 page with Retry-After
    ✅ GETs are never limited
    ✅ X-Request-ID is generated, or echoed when the client sends one
    ✅ SlidingWindow expiry per client; access log level per status
"""

import logging

import pytest
from fastapi import FastAPI
from fastapi.responses import PlainTextResponse
from httpx import ASGITransport, AsyncClient

from snipshare.config import settings
from snipshare.middleware.logging import access_level
from snipshare.middleware.rate_limit import RateLimitMiddleware, SlidingWindow
from snipshare.middleware.request_id import RequestIDMiddleware


def build_app() -> FastAPI:
    app = FastAPI()

    @app.get("/page")
    async def page():
        return PlainTextResponse("page")

    @app.post("/submit")
    async def submit():
        return PlainTextResponse("ok")

    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(RateLimitMiddleware)
    return app


@pytest.fixture
def small_limit(monkeypatch):
    monkeypatch.setattr(settings, "rate_limit_requests", 5)
    monkeypatch.setattr(settings, "rate_limit_window", 60)


class TestRateLimit:

    @pytest.mark.asyncio
    async def test_posts_over_limit_are_rejected(self, small_limit):
        transport = ASGITransport(app=build_app())
        async with AsyncClient(transport=transport, base_url="http://testserver") as client:
            for _ in range(5):
                assert (await client.post("/submit")).status_code == 200

            response = await client.post("/submit")
            assert response.status_code == 429
            assert 0 < int(response.headers["retry-after"]) <= 61
            assert "Too many requests" in response.text

    @pytest.mark.asyncio
    async def test_gets_are_not_limited(self, small_limit):
        transport = ASGITransport(app=build_app())
        async with AsyncClient(transport=transport, base_url="http://testserver") as client:
            for _ in range(20):
                assert (await client.get("/page")).status_code == 200


class TestRequestId:

    @pytest.mark.asyncio
    async def test_generated_and_echoed(self):
        transport = ASGITransport(app=build_app())
        async with AsyncClient(transport=transport, base_url="http://testserver") as client:
            generated = await client.get("/page")
            assert len(generated.headers["x-request-id"]) == 8

            echoed = await client.get("/page", headers={"X-Request-ID": "trace-123"})
            assert echoed.headers["x-request-id"] == "trace-123"


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


class TestSlidingWindow:

    def test_window_slides(self):
        clock = FakeClock()
        window = SlidingWindow(limit=lambda: 2, window=lambda: 10, clock=clock)

        assert window.hit("1.2.3.4") is None
        clock.now += 4
        assert window.hit("1.2.3.4") is None
        assert window.hit("1.2.3.4") == 7

        # First hit leaves the window at t=1010
        clock.now = 1010.5
        assert window.hit("1.2.3.4") is None

    def test_clients_are_independent(self):
        clock = FakeClock()
        window = SlidingWindow(limit=lambda: 1, window=lambda: 60, clock=clock)

        assert window.hit("10.0.0.1") is None
        assert window.hit("10.0.0.1") is not None
        assert window.hit("10.0.0.2") is None


class TestAccessLevel:

    @pytest.mark.parametrize("status,path,level", [
        (200, "/", logging.INFO),
        (303, "/create", logging.INFO),
        (200, "/static/css/style.css", logging.DEBUG),
        (403, "/x/edit", logging.WARNING),
        (500, "/", logging.ERROR),
    ])
    def test_levels(self, status, path, level):
        assert access_level(status, path) == level
