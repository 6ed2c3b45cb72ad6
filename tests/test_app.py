"""
Bookshelf — Application Wiring Tests
=====================================

What:  Startup/shutdown lifecycle, schema bootstrap, configuration, the
       request deadline and the response encoder.
How:   Engine and bootstrap are replaced with mocks; no database is needed.
"""

import asyncio
from datetime import datetime
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.dialects import postgresql

import bookshelf.main as main_module
from bookshelf.bootstrap import ensure_schema
from bookshelf.config import Settings, settings
from bookshelf.main import describe_invalid_request, lifespan
from bookshelf.middleware.timeout import RequestTimeoutMiddleware
from bookshelf.responses import encode_response, error_response
from bookshelf.schemas.book import BookResponse


@pytest.fixture
def quiet_startup(monkeypatch):
    """Keep lifespan from reconfiguring logging during tests."""
    monkeypatch.setattr(main_module, "setup_logging", lambda: None)


@pytest.fixture
def fake_engine(monkeypatch):
    engine = MagicMock()
    engine.dispose = AsyncMock()
    monkeypatch.setattr(main_module, "create_engine_from_settings", lambda s: engine)
    return engine


class TestLifespan:

    @pytest.mark.asyncio
    async def test_startup_bootstraps_schema_and_shutdown_disposes(
        self, monkeypatch, quiet_startup, fake_engine
    ):
        bootstrap = AsyncMock()
        monkeypatch.setattr(main_module, "ensure_schema", bootstrap)
        app = FastAPI()

        async with lifespan(app):
            bootstrap.assert_awaited_once_with(fake_engine)
            assert app.state.engine is fake_engine
            assert app.state.session_factory is not None
            fake_engine.dispose.assert_not_awaited()

        fake_engine.dispose.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_missing_database_url_is_fatal(self, monkeypatch, quiet_startup):
        monkeypatch.setattr(settings, "database_url", "")
        engine_factory = MagicMock()
        monkeypatch.setattr(main_module, "create_engine_from_settings", engine_factory)

        with pytest.raises(ValueError, match="DATABASE_URL"):
            async with lifespan(FastAPI()):
                pass

        engine_factory.assert_not_called()

    @pytest.mark.asyncio
    async def test_bootstrap_failure_is_fatal(self, monkeypatch, quiet_startup, fake_engine):
        monkeypatch.setattr(
            main_module,
            "ensure_schema",
            AsyncMock(side_effect=ConnectionRefusedError("db down")),
        )
        app = FastAPI()

        with pytest.raises(ConnectionRefusedError):
            async with lifespan(app):
                pass

        fake_engine.dispose.assert_awaited_once()
        assert not hasattr(app.state, "session_factory")


class TestSchemaBootstrap:

    @pytest.mark.asyncio
    async def test_issues_create_table_if_not_exists(self):
        conn = AsyncMock()
        engine = MagicMock()
        engine.begin.return_value.__aenter__.return_value = conn

        await ensure_schema(engine)

        conn.execute.assert_awaited_once()
        ddl = str(conn.execute.call_args.args[0].compile(dialect=postgresql.dialect()))
        assert "CREATE TABLE IF NOT EXISTS books" in ddl
        assert "id SERIAL NOT NULL" in ddl
        assert "title TEXT NOT NULL" in ddl
        assert "author TEXT NOT NULL" in ddl
        assert "created_at TIMESTAMP WITH TIME ZONE DEFAULT CURRENT_TIMESTAMP NOT NULL" in ddl
        assert "updated_at TIMESTAMP WITH TIME ZONE DEFAULT CURRENT_TIMESTAMP NOT NULL" in ddl
        assert "PRIMARY KEY (id)" in ddl


class TestSettings:

    def test_bare_postgres_url_uses_asyncpg(self):
        configured = Settings(_env_file=None, database_url="postgres://u:p@db:5432/books")
        assert configured.database_url == "postgresql+asyncpg://u:p@db:5432/books"

    def test_async_url_left_alone(self):
        url = "postgresql+asyncpg://u:p@db/books"
        assert Settings(_env_file=None, database_url=url).database_url == url

    def test_validate_required(self):
        with pytest.raises(ValueError, match="DATABASE_URL"):
            Settings(_env_file=None, database_url="").validate_required()

    def test_invalid_log_level(self):
        with pytest.raises(ValueError):
            Settings(_env_file=None, database_url="x", log_level="loud")

    def test_port_from_environment(self, monkeypatch):
        monkeypatch.setenv("PORT", "9090")
        assert Settings(_env_file=None).port == 9090


class TestRequestDeadline:

    @pytest.mark.asyncio
    async def test_slow_request_gets_generic_500(self):
        app = FastAPI()
        app.add_middleware(RequestTimeoutMiddleware, timeout=0.05)

        @app.get("/slow")
        async def slow():
            await asyncio.sleep(5)
            return {"done": True}

        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            response = await client.get("/slow")

        assert response.status_code == 500
        assert response.json() == {"error": "internal server error"}


class TestResponseEncoder:

    def test_error_envelope(self):
        response = error_response(404, "book not found")
        assert response.status_code == 404
        assert response.body == b'{"error":"book not found"}'

    def test_unencodable_value_becomes_500(self):
        response = encode_response(200, {"value": float("nan")})
        assert response.status_code == 500
        assert response.body == b'{"error":"internal server error"}'

    def test_naive_timestamps_rendered_as_utc(self):
        stamp = datetime(2024, 1, 15, 12, 0, 0)
        book = BookResponse(id=1, title="A", author="B", created_at=stamp, updated_at=stamp)
        response = encode_response(200, book)
        assert b'"created_at":"2024-01-15T12:00:00+00:00"' in response.body


class TestDescribeInvalidRequest:

    def test_path_error_wins(self):
        errors = [
            {"type": "int_parsing", "loc": ("path", "book_id")},
            {"type": "missing", "loc": ("body", "title")},
        ]
        assert describe_invalid_request(errors) == "invalid id"

    def test_json_decode_error(self):
        errors = [{"type": "json_invalid", "loc": ("body", 12)}]
        assert describe_invalid_request(errors) == "invalid JSON"

    def test_body_not_an_object(self):
        errors = [{"type": "model_attributes_type", "loc": ("body",)}]
        assert describe_invalid_request(errors) == "invalid JSON"

    def test_field_errors(self):
        errors = [{"type": "string_too_short", "loc": ("body", "title")}]
        assert describe_invalid_request(errors) == "title and author are required"
