"""
TravelMemory Backend — API Endpoint Tests
==========================================

What:  HTTP-level tests for /hello, /metrics, /health, CORS and /trip.
How:   HTTPX AsyncClient over ASGITransport against create_app(), with a real
       MongoConnector built on a mock driver client.

What we test:
    ✅ /hello and /metrics answer while the database is unreachable
    ✅ Permissive CORS headers for arbitrary origins
    ✅ Trip CRUD status codes and error body format
"""

import pytest
from bson import ObjectId
from httpx import ASGITransport, AsyncClient
from prometheus_client import CONTENT_TYPE_LATEST
from pymongo.errors import ServerSelectionTimeoutError

from travel_memory.database import ConnectionStatus


class TestHello:

    @pytest.mark.asyncio
    async def test_hello_returns_static_text(self, test_client):
        response = await test_client.get("/hello")

        assert response.status_code == 200
        assert response.text == "Hello World!"
        assert response.headers["content-type"].startswith("text/plain")

    @pytest.mark.asyncio
    async def test_hello_ignores_database_state(self, test_client, connector):
        connector.status = ConnectionStatus.ERROR

        response = await test_client.get("/hello")

        assert response.status_code == 200
        assert response.text == "Hello World!"

    @pytest.mark.asyncio
    async def test_response_carries_request_id(self, test_client):
        response = await test_client.get("/hello", headers={"X-Request-ID": "trace-42"})
        assert response.headers["X-Request-ID"] == "trace-42"


class TestMetrics:

    @pytest.mark.asyncio
    async def test_metrics_exposition(self, test_client, connector):
        connector.status = ConnectionStatus.ERROR

        response = await test_client.get("/metrics")

        assert response.status_code == 200
        assert response.headers["content-type"] == CONTENT_TYPE_LATEST
        assert "python_info" in response.text
        assert "python_gc_objects_collected_total" in response.text


class TestHealth:

    @pytest.mark.asyncio
    async def test_health_degraded_while_connecting(self, test_client):
        response = await test_client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "degraded"
        assert body["database"] == "connecting"

    @pytest.mark.asyncio
    async def test_health_healthy_once_connected(self, test_client, connector):
        await connector.connect()

        body = (await test_client.get("/health")).json()

        assert body["status"] == "healthy"
        assert body["database"] == "connected"
        assert body["uptime_seconds"] >= 0


class TestCors:

    @pytest.mark.asyncio
    async def test_simple_request_from_any_origin(self, test_client):
        response = await test_client.get("/hello", headers={"Origin": "http://anywhere.example"})
        assert response.headers["access-control-allow-origin"] == "*"

    @pytest.mark.asyncio
    async def test_preflight_from_any_origin(self, test_client):
        response = await test_client.options(
            "/trip",
            headers={
                "Origin": "http://frontend.example:3000",
                "Access-Control-Request-Method": "POST",
                "Access-Control-Request-Headers": "content-type",
            },
        )

        assert response.status_code == 200
        assert response.headers["access-control-allow-origin"] == "*"
        assert "POST" in response.headers["access-control-allow-methods"]

    @pytest.mark.asyncio
    async def test_error_responses_carry_cors_headers(self, test_client):
        response = await test_client.get(
            "/trip/not-an-id", headers={"Origin": "http://anywhere.example"}
        )
        assert response.status_code == 400
        assert response.headers["access-control-allow-origin"] == "*"

    @pytest.mark.asyncio
    async def test_unexpected_errors_carry_cors_headers(self, test_app):
        async def explode():
            raise RuntimeError("boom")

        test_app.add_api_route("/explode", explode)
        # Starlette re-raises after sending the 500; only the response matters here
        transport = ASGITransport(app=test_app, raise_app_exceptions=False)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            response = await client.get("/explode", headers={"Origin": "http://any.example"})

        assert response.status_code == 500
        assert response.json()["error"] == "internal_server_error"
        assert response.headers["access-control-allow-origin"] == "*"
        assert response.headers["x-request-id"] == response.json()["request_id"]


class TestModuleApp:

    def test_uvicorn_target_exists(self):
        from fastapi import FastAPI

        from travel_memory import main

        assert isinstance(main.app, FastAPI)
        assert main.app.state.settings.port == 3001
        assert main.app.state.connector.status is ConnectionStatus.CONNECTING


class TestTripRoutes:

    @pytest.mark.asyncio
    async def test_create_trip(self, test_client, mock_collection, sample_trip_payload):
        oid = ObjectId()

        async def insert_one(document):
            document["_id"] = oid
            return type("InsertOneResult", (), {"inserted_id": oid})()

        mock_collection.insert_one.side_effect = insert_one

        response = await test_client.post("/trip", json=sample_trip_payload)

        assert response.status_code == 201
        body = response.json()
        assert body["_id"] == str(oid)
        assert body["tripName"] == sample_trip_payload["tripName"]
        assert body["featured"] is True

    @pytest.mark.asyncio
    async def test_create_trip_missing_fields(self, test_client, mock_collection):
        response = await test_client.post("/trip", json={"tripName": "Half a trip"})

        assert response.status_code == 422
        mock_collection.insert_one.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_create_trip_rejects_unknown_trip_type(self, test_client, sample_trip_payload):
        response = await test_client.post("/trip", json={**sample_trip_payload, "tripType": "cruise"})
        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_list_trips(self, test_client, mock_collection, sample_trip_document):
        mock_collection.find.return_value.sort.return_value.to_list.return_value = [
            sample_trip_document
        ]

        response = await test_client.get("/trip")

        assert response.status_code == 200
        body = response.json()
        assert len(body) == 1
        assert body[0]["_id"] == str(sample_trip_document["_id"])
        assert body[0]["placesVisited"] == "Alleppey, Munnar, Kochi"

    @pytest.mark.asyncio
    async def test_get_trip(self, test_client, mock_collection, sample_trip_document):
        mock_collection.find_one.return_value = sample_trip_document

        response = await test_client.get(f"/trip/{sample_trip_document['_id']}")

        assert response.status_code == 200
        assert response.json()["shortDescription"] == "A week of backwaters and hills"

    @pytest.mark.asyncio
    async def test_get_missing_trip(self, test_client):
        trip_id = str(ObjectId())

        response = await test_client.get(f"/trip/{trip_id}")

        assert response.status_code == 404
        body = response.json()
        assert body["error"] == "not_found"
        assert trip_id in body["message"]
        assert body["request_id"]

    @pytest.mark.asyncio
    async def test_get_malformed_id(self, test_client):
        response = await test_client.get("/trip/12345")

        assert response.status_code == 400
        assert response.json()["error"] == "validation_error"

    @pytest.mark.asyncio
    async def test_update_trip(self, test_client, mock_collection, sample_trip_document):
        mock_collection.find_one_and_update.return_value = {
            **sample_trip_document,
            "featured": False,
        }

        response = await test_client.patch(
            f"/trip/{sample_trip_document['_id']}", json={"featured": False}
        )

        assert response.status_code == 200
        assert response.json()["featured"] is False

    @pytest.mark.asyncio
    async def test_update_with_null_field_rejected(self, test_client, mock_collection):
        response = await test_client.patch(f"/trip/{ObjectId()}", json={"tripName": None})

        assert response.status_code == 422
        mock_collection.find_one_and_update.assert_not_awaited()

        listed = await test_client.get("/trip")
        assert listed.status_code == 200

    @pytest.mark.asyncio
    async def test_delete_trip(self, test_client, mock_collection):
        mock_collection.delete_one.return_value = type("DeleteResult", (), {"deleted_count": 1})()

        response = await test_client.delete(f"/trip/{ObjectId()}")

        assert response.status_code == 204
        assert response.content == b""

    @pytest.mark.asyncio
    async def test_unreachable_database_fails_at_point_of_use(self, test_client, mock_collection):
        mock_collection.find_one.side_effect = ServerSelectionTimeoutError("no servers available")

        response = await test_client.get(f"/trip/{ObjectId()}")

        assert response.status_code == 500
        body = response.json()
        assert body["error"] == "server_error"
        assert "no servers" not in body["message"]
