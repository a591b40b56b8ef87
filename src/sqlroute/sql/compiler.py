"""Path-to-route compilation for a SQL directory tree.

Walks the SQL root and turns every ``.sql`` file into a
:class:`RouteDescriptor`. Everything about a route is read off its path::

    <root>/Tables/users/GET/select.sql  ->  GET  /api/v1/users/select  (table "users")
    <root>/Database/GET/health_check.sql ->  GET  /api/v1/health_check (universal)

Derivation, first match wins:

1. Table scope: the directory right after a ``Tables`` segment names the
   table. No such segment means the route is universal.
2. Method: a directory named GET/POST/PUT/DELETE (any case). Otherwise the
   file stem is searched for method vocabulary (``select``, ``insert``,
   ``update``, ``delete``, ...). Otherwise GET.
3. Path: ``{base}/{table}/{stem}`` or ``{base}/{stem}``.

Files are compiled in sorted path order, so the same tree always yields
the same route table.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable
from pathlib import Path

from sqlroute.errors import CompileError
from sqlroute.routing.route import HTTP_METHODS, RouteDescriptor, RouteTable
from sqlroute.sql.files import SQLFileStore

logger = logging.getLogger("sqlroute.compiler")

_SQL_SUFFIX = ".sql"

# Filename vocabularies, checked in this order
_METHOD_VOCABULARY: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("GET", ("select", "get", "find", "read", "list")),
    ("POST", ("insert", "create", "add", "new")),
    ("PUT", ("update", "upsert", "modify", "edit", "put")),
    ("DELETE", ("delete", "remove", "drop", "destroy")),
)

_DEFAULT_METHOD = "GET"


def _segments(sql_path: str | Path) -> list[str]:
    """Split a path on either separator, dropping empty and ``.`` parts."""
    normalized = str(sql_path).replace("\\", "/")
    return [part for part in normalized.split("/") if part and part != "."]


def _stem(filename: str) -> str:
    if filename.lower().endswith(_SQL_SUFFIX):
        return filename[: -len(_SQL_SUFFIX)]
    return filename


def normalize_base_url(base_url: str) -> str:
    """``"api/v1/"`` -> ``"/api/v1"``; an empty base stays empty."""
    stripped = base_url.strip().strip("/")
    return f"/{stripped}" if stripped else ""


def glob_sql_files(root: str | Path) -> list[Path]:
    """Recursively find every ``.sql`` file under ``root``, sorted.

    Hidden directories are skipped. A missing root, or any directory that
    cannot be listed, raises ``CompileError``.
    """
    root_path = Path(root)
    if not root_path.is_dir():
        raise CompileError(f"SQL root directory not found: {root_path}")

    def _abort(exc: OSError) -> None:
        raise CompileError(f"failed to walk directory {root_path}: {exc}") from exc

    found: list[Path] = []
    for dirpath, dirnames, filenames in os.walk(root_path, onerror=_abort):
        dirnames[:] = sorted(d for d in dirnames if not d.startswith("."))
        found.extend(
            Path(dirpath) / name
            for name in filenames
            if name.lower().endswith(_SQL_SUFFIX)
        )
    return sorted(found, key=lambda p: p.as_posix())


def table_from_path(sql_path: str | Path, tables_marker: str = "Tables") -> str | None:
    """The table a file belongs to, or ``None`` for universal files.

    The table is the directory immediately after the first segment equal
    to ``tables_marker``. A file sitting directly in the marker directory
    has no table.
    """
    parts = _segments(sql_path)
    directories = parts[:-1]
    for i, part in enumerate(directories):
        if part == tables_marker:
            if i + 1 < len(directories):
                return directories[i + 1]
            return None
    return None


def method_from_path(sql_path: str | Path) -> str:
    """The HTTP method for a file.

    A directory named after a method wins; the filename vocabulary is the
    fallback; GET is the default.
    """
    parts = _segments(sql_path)
    for part in parts[:-1]:
        upper = part.upper()
        if upper in HTTP_METHODS:
            return upper

    stem = _stem(parts[-1]).lower() if parts else ""
    for method, words in _METHOD_VOCABULARY:
        if any(word in stem for word in words):
            return method
    return _DEFAULT_METHOD


def route_from_path(
    sql_path: str | Path,
    base_url: str = "/api/v1",
    tables_marker: str = "Tables",
) -> str:
    """The URL path for a file: ``{base}/{table}/{stem}`` or ``{base}/{stem}``."""
    parts = _segments(sql_path)
    stem = _stem(parts[-1]) if parts else ""
    base = normalize_base_url(base_url)
    table = table_from_path(sql_path, tables_marker)
    if table is not None:
        return f"{base}/{table}/{stem}"
    return f"{base}/{stem}"


def compile_route(
    sql_path: str | Path,
    *,
    root: str | Path | None = None,
    base_url: str = "/api/v1",
    tables_marker: str = "Tables",
) -> RouteDescriptor:
    """Build the descriptor for one file.

    Classification uses the path relative to ``root`` when given, so a
    root that is itself named ``GET`` or ``Tables`` does not leak into the
    result. ``sql_path`` is stored as given, for loading.
    """
    relative: str | Path = sql_path
    if root is not None:
        try:
            relative = Path(sql_path).relative_to(root)
        except ValueError:
            relative = sql_path

    table = table_from_path(relative, tables_marker)
    return RouteDescriptor(
        http_method=method_from_path(relative),
        path=route_from_path(relative, base_url, tables_marker),
        sql_path=str(sql_path),
        table_name=table,
        is_universal=table is None,
    )


def compile_routes(
    root: str | Path,
    *,
    base_url: str = "/api/v1",
    tables_marker: str = "Tables",
    files: SQLFileStore | None = None,
    exclude: Iterable[str | Path] = (),
) -> RouteTable:
    """Compile every ``.sql`` file under ``root`` into a frozen route table.

    Each file is loaded through ``files`` up front; a file that cannot be
    read is skipped with a warning. Paths in ``exclude`` (the schema file)
    never become routes.
    """
    files = files if files is not None else SQLFileStore()
    excluded = {Path(p).resolve() for p in exclude}
    table = RouteTable()

    for sql_path in glob_sql_files(root):
        if sql_path.resolve() in excluded:
            continue
        try:
            files.get(sql_path)
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning("Skipping unreadable SQL file %s: %s", sql_path, exc)
            continue
        table.add(
            compile_route(
                sql_path,
                root=root,
                base_url=base_url,
                tables_marker=tables_marker,
            )
        )

    logger.info("Compiled %d routes from %s", len(table), root)
    return table.freeze()


def check_routes(table: RouteTable) -> list[str]:
    """Return the problems that make ``table`` unfit to serve.

    An empty table is a problem on its own. Each route needs a path under
    ``/``, a supported method and a SQL file that still exists on disk.
    """
    if not len(table):
        return ["no routes compiled"]

    problems: list[str] = []
    for route in table:
        label = f"{route.http_method} {route.path or '<empty>'}"
        if not route.path.startswith("/"):
            problems.append(f"{label}: path must start with '/'")
        if route.http_method not in HTTP_METHODS:
            problems.append(f"{label}: unsupported method {route.http_method!r}")
        if not route.sql_path:
            problems.append(f"{label}: no SQL file")
        elif not Path(route.sql_path).is_file():
            problems.append(f"{label}: SQL file {route.sql_path} does not exist")
    return problems
