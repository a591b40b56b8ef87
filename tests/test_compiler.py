"""Tests for sqlroute.sql.compiler: path-to-route compilation."""

import logging
from pathlib import Path

import pytest

from sqlroute.errors import CompileError
from sqlroute.routing.route import RouteDescriptor, RouteTable
from sqlroute.sql.compiler import (
    check_routes,
    compile_route,
    compile_routes,
    glob_sql_files,
    method_from_path,
    normalize_base_url,
    route_from_path,
    table_from_path,
)

# =============================================================================
# Table detection
# =============================================================================


class TestTableFromPath:
    @pytest.mark.parametrize(
        ("path", "table"),
        [
            ("Tables/users/GET/select.sql", "users"),
            ("Tables/orders/POST/insert.sql", "orders"),
            ("db/Tables/products/custom/top_sellers.sql", "products"),
            ("Tables/users/select.sql", "users"),
        ],
    )
    def test_tables_segment_names_the_table(self, path: str, table: str) -> None:
        assert table_from_path(path) == table

    @pytest.mark.parametrize(
        "path",
        [
            "GET/health_check.sql",
            "Database/GET/stats.sql",
            "reports/daily.sql",
            "tables/users/GET/select.sql",  # marker is case-sensitive
        ],
    )
    def test_no_tables_segment_is_universal(self, path: str) -> None:
        assert table_from_path(path) is None

    def test_file_directly_in_marker_dir_has_no_table(self) -> None:
        assert table_from_path("Tables/select.sql") is None

    def test_backslash_separators(self) -> None:
        assert table_from_path("Tables\\users\\GET\\select.sql") == "users"

    def test_custom_marker(self) -> None:
        assert table_from_path("Entities/users/GET/select.sql", "Entities") == "users"


# =============================================================================
# Method detection
# =============================================================================


class TestMethodFromPath:
    @pytest.mark.parametrize("method", ["GET", "POST", "PUT", "DELETE"])
    def test_method_directory(self, method: str) -> None:
        assert method_from_path(f"Tables/users/{method}/anything.sql") == method

    def test_method_directory_is_case_insensitive(self) -> None:
        assert method_from_path("Tables/users/post/anything.sql") == "POST"

    def test_directory_wins_over_filename(self) -> None:
        assert method_from_path("Tables/users/POST/select_into.sql") == "POST"

    @pytest.mark.parametrize(
        ("stem", "method"),
        [
            ("select_all", "GET"),
            ("get_user", "GET"),
            ("find_by_email", "GET"),
            ("read_profile", "GET"),
            ("list_users", "GET"),
            ("insert_user", "POST"),
            ("create_account", "POST"),
            ("add_item", "POST"),
            ("new_order", "POST"),
            ("update_user", "PUT"),
            ("upsert_setting", "PUT"),
            ("modify_role", "PUT"),
            ("edit_profile", "PUT"),
            ("put_value", "PUT"),
            ("delete_user", "DELETE"),
            ("remove_item", "DELETE"),
            ("drop_session", "DELETE"),
            ("destroy_token", "DELETE"),
        ],
    )
    def test_filename_vocabulary(self, stem: str, method: str) -> None:
        assert method_from_path(f"Tables/users/custom/{stem}.sql") == method

    def test_vocabulary_is_case_insensitive(self) -> None:
        assert method_from_path("reports/DeleteStale.sql") == "DELETE"

    def test_vocabularies_checked_in_order(self) -> None:
        # Contains both "delete" and "select": the GET vocabulary is checked first
        assert method_from_path("custom/delete_selected.sql") == "GET"

    def test_defaults_to_get(self) -> None:
        assert method_from_path("reports/summary.sql") == "GET"

    def test_filename_itself_is_not_a_method_directory(self) -> None:
        assert method_from_path("reports/POST.sql") == "GET"


# =============================================================================
# Route paths
# =============================================================================


class TestRouteFromPath:
    def test_table_scoped(self) -> None:
        assert route_from_path("Tables/users/GET/select.sql", "/api/v1") == "/api/v1/users/select"

    def test_universal(self) -> None:
        assert route_from_path("GET/health_check.sql", "/api/v1") == "/api/v1/health_check"

    def test_uppercase_suffix_is_stripped(self) -> None:
        assert route_from_path("GET/Report.SQL", "/api/v1") == "/api/v1/Report"

    @pytest.mark.parametrize(
        ("base", "normalized"),
        [
            ("/api/v1", "/api/v1"),
            ("api/v1", "/api/v1"),
            ("/api/v1/", "/api/v1"),
            ("", ""),
            ("/", ""),
        ],
    )
    def test_base_url_normalization(self, base: str, normalized: str) -> None:
        assert normalize_base_url(base) == normalized
        assert route_from_path("GET/ping.sql", base) == f"{normalized}/ping"


class TestCompileRoute:
    def test_table_scoped_scenario(self) -> None:
        route = compile_route("Tables/users/GET/select.sql", base_url="/api/v1")
        assert route.http_method == "GET"
        assert route.path == "/api/v1/users/select"
        assert route.table_name == "users"
        assert route.is_universal is False

    def test_universal_scenario(self) -> None:
        route = compile_route("GET/health_check.sql", base_url="/api/v1")
        assert route.http_method == "GET"
        assert route.path == "/api/v1/health_check"
        assert route.table_name is None
        assert route.is_universal is True

    def test_classification_ignores_the_root_directory_name(self, tmp_path: Path) -> None:
        root = tmp_path / "POST"
        route = compile_route(root / "Database" / "stats.sql", root=root)
        assert route.http_method == "GET"
        assert route.is_universal is True

    def test_root_named_tables_does_not_invent_a_table(self, tmp_path: Path) -> None:
        root = tmp_path / "Tables"
        route = compile_route(root / "GET" / "ping.sql", root=root)
        assert route.table_name is None

    def test_sql_path_is_kept_for_loading(self, tmp_path: Path) -> None:
        sql_path = tmp_path / "GET" / "ping.sql"
        route = compile_route(sql_path, root=tmp_path)
        assert route.sql_path == str(sql_path)


# =============================================================================
# Tree walking
# =============================================================================


class TestGlobSqlFiles:
    def test_sorted_and_case_insensitive(self, make_tree) -> None:
        root = make_tree(
            {
                "b/two.sql": "",
                "a/one.SQL": "",
                "a/notes.txt": "",
                "c.sql": "",
            }
        )
        found = [p.relative_to(root).as_posix() for p in glob_sql_files(root)]
        assert found == ["a/one.SQL", "b/two.sql", "c.sql"]

    def test_hidden_directories_are_skipped(self, make_tree) -> None:
        root = make_tree({".git/hooks.sql": "", "GET/ping.sql": ""})
        found = [p.relative_to(root).as_posix() for p in glob_sql_files(root)]
        assert found == ["GET/ping.sql"]

    def test_missing_root_raises(self, tmp_path: Path) -> None:
        with pytest.raises(CompileError, match="not found"):
            glob_sql_files(tmp_path / "nope")

    def test_file_as_root_raises(self, tmp_path: Path) -> None:
        path = tmp_path / "file.sql"
        path.write_text("SELECT 1;")
        with pytest.raises(CompileError):
            glob_sql_files(path)


class TestCompileRoutes:
    def test_compiles_every_file(self, sql_root: Path) -> None:
        table = compile_routes(sql_root, exclude=(sql_root / "schema.sql",))
        assert len(table) == 8
        assert table.frozen
        assert table.tables() == ["users"]
        assert ("POST", "/api/v1/users/insert") in table
        assert ("GET", "/api/v1/health_check") in table

    def test_schema_is_excluded(self, sql_root: Path) -> None:
        table = compile_routes(sql_root, exclude=(sql_root / "schema.sql",))
        assert all(not r.sql_path.endswith("schema.sql") for r in table)

    def test_schema_without_exclude_becomes_a_route(self, sql_root: Path) -> None:
        table = compile_routes(sql_root)
        assert ("GET", "/api/v1/schema") in table

    def test_deterministic_order(self, sql_root: Path) -> None:
        first = [r.key for r in compile_routes(sql_root)]
        second = [r.key for r in compile_routes(sql_root)]
        assert first == second
        assert first[0] == ("GET", "/api/v1/broken")

    def test_base_url(self, sql_root: Path) -> None:
        table = compile_routes(sql_root, base_url="/v2")
        assert ("GET", "/v2/users/select") in table

    def test_later_file_shadows_earlier(self, make_tree) -> None:
        root = make_tree(
            {
                "Tables/users/GET/select.sql": "SELECT 1;",
                "Tables/users/select.sql": "SELECT 2;",
            }
        )
        table = compile_routes(root)
        assert len(table) == 1
        route = table.get("GET", "/api/v1/users/select")
        assert route is not None
        assert Path(route.sql_path) == root / "Tables" / "users" / "select.sql"

    def test_unreadable_file_is_skipped_with_warning(self, make_tree, caplog) -> None:
        root = make_tree({"GET/ok.sql": "SELECT 1;"})
        (root / "GET" / "bad.sql").write_bytes(b"SELECT '\xff\xfe';")
        with caplog.at_level(logging.WARNING, logger="sqlroute.compiler"):
            table = compile_routes(root)
        assert [r.path for r in table] == ["/api/v1/ok"]
        assert "bad.sql" in caplog.text

    def test_empty_tree(self, make_tree) -> None:
        root = make_tree({"README.txt": "nothing here"})
        assert len(compile_routes(root)) == 0

    def test_missing_root_raises(self, tmp_path: Path) -> None:
        with pytest.raises(CompileError):
            compile_routes(tmp_path / "missing")


# =============================================================================
# Route table checks
# =============================================================================


class TestCheckRoutes:
    def test_compiled_tree_is_clean(self, sql_root: Path) -> None:
        assert check_routes(compile_routes(sql_root, exclude=(sql_root / "schema.sql",))) == []

    def test_empty_table(self) -> None:
        assert check_routes(RouteTable()) == ["no routes compiled"]

    def test_missing_sql_file(self, tmp_path: Path) -> None:
        table = RouteTable([RouteDescriptor("GET", "/api/v1/gone", str(tmp_path / "gone.sql"))])
        problems = check_routes(table)
        assert len(problems) == 1
        assert "does not exist" in problems[0]

    def test_empty_path_and_sql_path(self) -> None:
        problems = check_routes(RouteTable([RouteDescriptor("GET", "", "")]))
        assert problems == ["GET <empty>: path must start with '/'", "GET <empty>: no SQL file"]
