"""SQL tree handling: file loading, templating, compilation, scaffolding."""

from sqlroute.sql.compiler import (
    check_routes,
    compile_route,
    compile_routes,
    glob_sql_files,
    method_from_path,
    route_from_path,
    table_from_path,
)
from sqlroute.sql.files import SQLFile, SQLFileStore, load_sql
from sqlroute.sql.layout import SQLLayout, discover_tables
from sqlroute.sql.template import bindable_params, process_template, unresolved_placeholders

__all__ = [
    "SQLFile",
    "SQLFileStore",
    "SQLLayout",
    "bindable_params",
    "check_routes",
    "compile_route",
    "compile_routes",
    "discover_tables",
    "glob_sql_files",
    "load_sql",
    "method_from_path",
    "process_template",
    "route_from_path",
    "table_from_path",
    "unresolved_placeholders",
]
