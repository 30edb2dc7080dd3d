"""Tests for application wiring: health, error envelopes, startup and shutdown."""

import asyncio
import logging
import signal
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from sqlalchemy import inspect
from sqlalchemy.exc import OperationalError

from talenthub.database import Database, get_db
from talenthub.dependencies import get_candidate_repository
from talenthub.main import _terminate_on_unhandled_error, app, lifespan

from conftest import VALID_CANDIDATE


def _store_failure() -> OperationalError:
    return OperationalError("SELECT 1", {}, Exception("connection lost to db-internal-host"))


class FailingCandidateRepository:
    """Stands in for the repository when the store is unavailable."""

    async def find_all(self, owner_id):
        raise _store_failure()

    async def create(self, data, owner_id):
        raise _store_failure()


class TestHealth:
    """Tests for GET /api/health."""

    async def test_health_ok(self, client):
        response = await client.get("/api/health")
        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "success"
        assert body["database"] == "healthy"
        assert body["timestamp"]

    async def test_health_reports_unreachable_database(self, client):
        broken = MagicMock()
        broken.execute = AsyncMock(side_effect=_store_failure())

        async def override_get_db():
            yield broken

        app.dependency_overrides[get_db] = override_get_db
        response = await client.get("/api/health")
        assert response.status_code == 200
        assert response.json()["database"] == "unhealthy"


class TestErrorEnvelope:
    """Framework and store errors use the standard error envelope."""

    async def test_unknown_route(self, client):
        response = await client.get("/api/does-not-exist")
        assert response.status_code == 404
        assert response.json() == {"status": "error", "message": "Route not found"}

    async def test_wrong_method(self, client):
        response = await client.patch("/api/health")
        assert response.status_code == 405
        assert response.json()["status"] == "error"

    async def test_invalid_json_body(self, client, auth_headers):
        response = await client.post(
            "/api/candidates",
            content="{not json",
            headers={**auth_headers, "Content-Type": "application/json"},
        )
        assert response.status_code == 400
        assert response.json()["status"] == "error"
        assert response.json()["errors"]

    async def test_invalid_json_body_without_token(self, client):
        """The body is parsed before the bearer token is checked, so bad JSON wins."""
        response = await client.post(
            "/api/candidates",
            content="{not json",
            headers={"Content-Type": "application/json"},
        )
        assert response.status_code == 400
        assert response.json()["status"] == "error"

    async def test_valid_body_without_token(self, client):
        response = await client.post("/api/candidates", json=VALID_CANDIDATE)
        assert response.status_code == 401

    async def test_store_failure_is_generic_500(self, client, auth_headers, caplog):
        """Store errors are logged but never leaked to the caller."""
        app.dependency_overrides[get_candidate_repository] = FailingCandidateRepository

        with caplog.at_level(logging.ERROR, logger="talenthub.routers.candidates"):
            response = await client.get("/api/candidates", headers=auth_headers)

        assert response.status_code == 500
        assert response.json() == {"status": "error", "message": "Error fetching candidates"}
        assert "db-internal-host" not in response.text
        assert "Failed to fetch candidates" in caplog.text

    async def test_store_failure_on_create(self, client, auth_headers):
        app.dependency_overrides[get_candidate_repository] = FailingCandidateRepository

        response = await client.post("/api/candidates", json=VALID_CANDIDATE, headers=auth_headers)
        assert response.status_code == 500
        assert response.json() == {"status": "error", "message": "Error creating candidate"}


class TestLifespan:
    """Startup initializes the store before serving; shutdown releases it."""

    async def test_startup_creates_schema(self):
        async with lifespan(app):
            database = app.state.database
            assert isinstance(database, Database)
            async with database.engine.connect() as conn:
                tables = await conn.run_sync(lambda c: inspect(c).get_table_names())
            assert {"users", "candidates"} <= set(tables)
            assert (
                asyncio.get_running_loop().get_exception_handler()
                is _terminate_on_unhandled_error
            )
        del app.state.database

    async def test_startup_failure_is_fatal(self):
        with patch.object(Database, "connect", AsyncMock(side_effect=_store_failure())):
            with pytest.raises(OperationalError):
                async with lifespan(app):
                    pytest.fail("server must not start without a database")

    async def test_shutdown_disposes_engine(self):
        with patch.object(Database, "dispose", AsyncMock()) as dispose:
            async with lifespan(app):
                dispose.assert_not_called()
        dispose.assert_awaited_once()
        del app.state.database


class TestUnhandledAsyncErrors:
    """Background failures nobody handles bring the process down."""

    def test_unhandled_exception_terminates(self):
        loop = MagicMock()
        with patch("talenthub.main.os.kill") as kill, patch("talenthub.main.os.getpid", return_value=1234):
            _terminate_on_unhandled_error(
                loop, {"message": "Task exception was never retrieved", "exception": RuntimeError("boom")}
            )
        kill.assert_called_once_with(1234, signal.SIGTERM)
        loop.default_exception_handler.assert_not_called()

    def test_connection_errors_are_only_logged(self):
        loop = MagicMock()
        context = {"message": "peer went away", "exception": ConnectionResetError()}
        with patch("talenthub.main.os.kill") as kill:
            _terminate_on_unhandled_error(loop, context)
        kill.assert_not_called()
        loop.default_exception_handler.assert_called_once_with(context)

    def test_context_without_exception(self):
        loop = MagicMock()
        context = {"message": "slow callback"}
        with patch("talenthub.main.os.kill") as kill:
            _terminate_on_unhandled_error(loop, context)
        kill.assert_not_called()
