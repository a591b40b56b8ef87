"""Tests for sqlroute.routing: descriptors, the route table, and the router."""

import pytest

from sqlroute.errors import ConfigurationError, MethodNotAllowed, NotFound
from sqlroute.routing import Route, RouteDescriptor, Router, RouteTable, normalize_path


def _descriptor(method: str = "GET", path: str = "/api/v1/users/select", table: str | None = "users",
                sql_path: str = "Tables/users/GET/select.sql") -> RouteDescriptor:
    return RouteDescriptor(
        http_method=method,
        path=path,
        sql_path=sql_path,
        table_name=table,
        is_universal=table is None,
    )


async def _noop(request):
    return None


# =============================================================================
# RouteDescriptor
# =============================================================================


class TestRouteDescriptor:
    def test_operation_is_last_segment(self) -> None:
        assert _descriptor().operation == "select"

    def test_manifest_entry(self) -> None:
        assert _descriptor().to_manifest() == {
            "method": "GET",
            "path": "/api/v1/users/select",
            "universal": False,
            "table": "users",
        }

    def test_universal_without_table(self) -> None:
        route = RouteDescriptor("GET", "/api/v1/ping", "GET/ping.sql")
        assert route.is_universal
        assert route.table_name is None

    def test_universal_with_table_is_rejected(self) -> None:
        with pytest.raises(ConfigurationError, match="contradicts"):
            RouteDescriptor("GET", "/p", "p.sql", table_name="users", is_universal=True)

    def test_table_scoped_without_table_is_rejected(self) -> None:
        with pytest.raises(ConfigurationError):
            RouteDescriptor("GET", "/p", "p.sql", table_name=None, is_universal=False)

    def test_unknown_method_is_rejected(self) -> None:
        with pytest.raises(ConfigurationError, match="Unsupported HTTP method"):
            RouteDescriptor("PATCH", "/p", "p.sql")

    def test_frozen(self) -> None:
        route = _descriptor()
        with pytest.raises(AttributeError):
            route.path = "/other"  # type: ignore[misc]


# =============================================================================
# RouteTable
# =============================================================================


class TestRouteTable:
    def test_keyed_by_method_and_path(self) -> None:
        table = RouteTable([_descriptor("GET"), _descriptor("POST", sql_path="x.sql")])
        assert len(table) == 2
        assert ("GET", "/api/v1/users/select") in table
        assert table.get("post", "/api/v1/users/select").sql_path == "x.sql"

    def test_later_route_shadows_in_place(self, caplog) -> None:
        first = _descriptor(sql_path="first.sql")
        other = _descriptor(path="/api/v1/users/count")
        second = _descriptor(sql_path="second.sql")
        with caplog.at_level("DEBUG", logger="sqlroute.compiler"):
            table = RouteTable([first, other, second])
        assert [r.sql_path for r in table] == ["second.sql", other.sql_path]
        assert "shadows first.sql" in caplog.text

    def test_frozen_table_rejects_additions(self) -> None:
        table = RouteTable().freeze()
        with pytest.raises(RuntimeError, match="frozen"):
            table.add(_descriptor())

    def test_tables_universal_and_for_table(self) -> None:
        table = RouteTable(
            [
                _descriptor(),
                _descriptor(path="/api/v1/orders/select", table="orders"),
                _descriptor(path="/api/v1/ping", table=None),
                _descriptor("DELETE", path="/api/v1/users/delete"),
            ]
        )
        assert table.tables() == ["users", "orders"]
        assert [r.path for r in table.universal()] == ["/api/v1/ping"]
        assert [r.http_method for r in table.for_table("users")] == ["GET", "DELETE"]

    def test_missing_route(self) -> None:
        assert RouteTable().get("GET", "/nope") is None


# =============================================================================
# Router
# =============================================================================


class TestNormalizePath:
    @pytest.mark.parametrize(
        ("raw", "normalized"),
        [("/", "/"), ("", "/"), ("/a/b/", "/a/b"), ("//a//b", "/a/b"), ("/a", "/a")],
    )
    def test_normalize(self, raw: str, normalized: str) -> None:
        assert normalize_path(raw) == normalized


class TestRouter:
    def _router(self) -> Router:
        router = Router()
        router.add(Route("/api/v1/users/insert", _noop, frozenset({"POST", "OPTIONS"})))
        router.add(Route("/api/v1/users/select", _noop, frozenset({"GET", "OPTIONS"})))
        router.compile()
        return router

    def test_match(self) -> None:
        match = self._router().match("get", "/api/v1/users/select")
        assert match.method == "GET"
        assert match.route.path == "/api/v1/users/select"

    def test_trailing_slash_matches(self) -> None:
        assert self._router().match("GET", "/api/v1/users/select/").method == "GET"

    def test_unknown_path(self) -> None:
        with pytest.raises(NotFound):
            self._router().match("GET", "/api/v1/nope")

    def test_method_mismatch(self) -> None:
        with pytest.raises(MethodNotAllowed) as exc_info:
            self._router().match("GET", "/api/v1/users/insert")
        assert exc_info.value.status == 405
        assert ("Allow", "OPTIONS, POST") in exc_info.value.headers

    def test_add_after_compile(self) -> None:
        router = self._router()
        with pytest.raises(RuntimeError):
            router.add(Route("/x", _noop, frozenset({"GET"})))

    def test_same_path_two_methods(self) -> None:
        router = Router()
        get = Route("/r", _noop, frozenset({"GET"}))
        post = Route("/r", _noop, frozenset({"POST"}))
        router.add(get)
        router.add(post)
        assert router.match("GET", "/r").route is get
        assert router.match("POST", "/r").route is post
        assert router.allowed_methods("/r") == frozenset({"GET", "POST"})
        assert router.routes == [get, post]
