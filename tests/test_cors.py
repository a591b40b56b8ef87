"""Tests for sqlroute.middleware.cors: CORS headers and preflight."""

from dataclasses import replace

from sqlroute.app import App
from sqlroute.config import AppConfig
from sqlroute.middleware.cors import CORSConfig, CORSMiddleware
from sqlroute.testing import TestClient


class TestDefaultCORS:
    async def test_wildcard_on_success(self, app: App) -> None:
        async with TestClient(app) as client:
            response = await client.get("/api/v1/users/select")
        assert response.header("access-control-allow-origin") == "*"
        assert response.header("access-control-allow-methods") == "GET, POST, PUT, DELETE, OPTIONS"
        assert response.header("access-control-allow-headers") == "Content-Type, Authorization"
        assert response.header("vary") is None

    async def test_headers_on_errors(self, app: App) -> None:
        async with TestClient(app) as client:
            missing = await client.get("/api/v1/nope")
            wrong = await client.get("/api/v1/users/insert")
            failed = await client.get("/api/v1/broken")
        for response in (missing, wrong, failed):
            assert response.header("access-control-allow-origin") == "*"

    async def test_preflight_short_circuits(self, app: App) -> None:
        async with TestClient(app) as client:
            response = await client.options(
                "/api/v1/users/insert",
                headers={"Origin": "https://app.example.com"},
            )
        assert response.status == 200
        assert response.body_bytes == b""
        assert response.header("access-control-allow-origin") == "*"

    async def test_preflight_for_unknown_path(self, app: App) -> None:
        async with TestClient(app) as client:
            response = await client.options("/api/v1/nope")
        assert response.status == 200

    async def test_disabled(self, config: AppConfig) -> None:
        async with TestClient(App(replace(config, cors=False))) as client:
            response = await client.get("/api/v1/users/select")
            unknown = await client.options("/api/v1/nope")
        assert response.header("access-control-allow-origin") is None
        assert unknown.status == 404


class TestExplicitOrigins:
    def _app(self, config: AppConfig) -> App:
        app = App(replace(config, cors=False))
        app.add_middleware(
            CORSMiddleware(
                CORSConfig(allow_origins=("https://app.example.com",), max_age=600)
            )
        )
        return app

    async def test_listed_origin_is_echoed(self, config: AppConfig) -> None:
        async with TestClient(self._app(config)) as client:
            response = await client.get(
                "/api/v1/users/select", headers={"Origin": "https://app.example.com"}
            )
        assert response.header("access-control-allow-origin") == "https://app.example.com"
        assert response.header("vary") == "Origin"
        assert response.header("access-control-max-age") == "600"

    async def test_unlisted_origin_gets_no_headers(self, config: AppConfig) -> None:
        async with TestClient(self._app(config)) as client:
            response = await client.get(
                "/api/v1/users/select", headers={"Origin": "https://evil.example.com"}
            )
        assert response.status == 200
        assert response.header("access-control-allow-origin") is None

    async def test_no_origin_gets_no_headers(self, config: AppConfig) -> None:
        async with TestClient(self._app(config)) as client:
            response = await client.get("/api/v1/users/select")
        assert response.header("access-control-allow-origin") is None
