"""
TravelMemory Backend — Middleware Tests
========================================

What:  Tests for request id resolution and the access log.
How:   Requests go through test_client, so both middlewares run in their real
       order; caplog captures the `travel_memory.access` logger.

What we test:
    ✅ Unsafe client request ids are replaced
    ✅ One access line per request, levelled by status
    ✅ Scrape endpoints stay out of the access log unless they fail
"""

import logging

import pytest
from httpx import ASGITransport, AsyncClient

from travel_memory.middleware.logging import level_for_status
from travel_memory.middleware.request_id import resolve_request_id


class TestRequestId:

    def test_safe_client_id_kept(self):
        assert resolve_request_id("trip-ui.7f3a_1") == "trip-ui.7f3a_1"

    @pytest.mark.parametrize("bad", ["", "has space", "line\nbreak", "x" * 65])
    def test_unsafe_client_id_replaced(self, bad):
        rid = resolve_request_id(bad)
        assert rid != bad
        assert len(rid) == 8

    @pytest.mark.asyncio
    async def test_replaced_id_is_echoed(self, test_client):
        response = await test_client.get("/hello", headers={"X-Request-ID": "a b"})
        assert len(response.headers["X-Request-ID"]) == 8


class TestAccessLog:

    @pytest.mark.parametrize(
        "status, level",
        [(200, logging.INFO), (204, logging.INFO), (404, logging.WARNING), (503, logging.ERROR)],
    )
    def test_level_for_status(self, status, level):
        assert level_for_status(status) == level

    @pytest.mark.asyncio
    async def test_request_logged_with_request_id(self, test_client, caplog):
        caplog.set_level(logging.INFO, logger="travel_memory.access")

        await test_client.get("/hello", headers={"X-Request-ID": "trace-7"})

        records = [r for r in caplog.records if r.name == "travel_memory.access"]
        assert len(records) == 1
        assert records[0].path == "/hello"
        assert records[0].status == 200
        assert records[0].request_id == "trace-7"

    @pytest.mark.asyncio
    async def test_scrape_endpoints_not_logged(self, test_client, caplog):
        caplog.set_level(logging.INFO, logger="travel_memory.access")

        await test_client.get("/metrics")
        await test_client.get("/health")

        assert not [r for r in caplog.records if r.name == "travel_memory.access"]

    @pytest.mark.asyncio
    async def test_unhandled_error_logged_as_500(self, test_app, caplog):
        caplog.set_level(logging.INFO, logger="travel_memory.access")

        async def explode():
            raise RuntimeError("boom")

        test_app.add_api_route("/explode", explode)
        transport = ASGITransport(app=test_app, raise_app_exceptions=False)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            await client.get("/explode")

        records = [r for r in caplog.records if r.name == "travel_memory.access"]
        assert len(records) == 1
        assert records[0].status == 500
        assert records[0].levelno == logging.ERROR
