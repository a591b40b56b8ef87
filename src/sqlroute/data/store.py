"""Serialized SQLite store.

One ``sqlite3`` connection guarded by one ``threading.Lock``. Every
statement, read or write, takes the same lock: SQLite allows a single
writer, and a single shared connection must never see two statements at
once. Read concurrency is deliberately given up; latency grows linearly
with concurrent load.

Blocking calls run in a worker thread via ``anyio.to_thread`` so the
event loop keeps serving requests while a statement waits for the lock.

Lifecycle::

    UNINITIALIZED --open()--> OPEN --close()--> CLOSED (terminal)

Usage::

    store = Store("app.db", schema=Path("schema.sql").read_text())
    await store.open()
    result = await store.execute("SELECT * FROM users WHERE id = ?", (1,))
    await store.close()
"""

import enum
import logging
import re
import sqlite3
import threading
import time
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any, TypeAlias

import anyio

from sqlroute.data.errors import QueryError, SchemaError, StoreClosedError

logger = logging.getLogger("sqlroute.data")

Params: TypeAlias = Sequence[Any] | Mapping[str, Any]

_QUERY_PREFIXES = ("SELECT", "WITH", "EXPLAIN", "PRAGMA")

# CREATE [TEMP|TEMPORARY] TABLE not already followed by IF NOT EXISTS
_CREATE_TABLE_RE = re.compile(
    r"\bCREATE\s+(?:(TEMP|TEMPORARY)\s+)?TABLE\s+(?!IF\s+NOT\s+EXISTS\b)",
    re.IGNORECASE,
)


async def _run_sync(func: Callable[..., Any], *args: Any) -> Any:
    """Run a blocking call in an anyio worker thread."""
    return await anyio.to_thread.run_sync(func, *args)


# =============================================================================
# Results
# =============================================================================


@dataclass(frozen=True, slots=True)
class QueryResult:
    """Rows returned by a SELECT/WITH/EXPLAIN/PRAGMA statement."""

    columns: tuple[str, ...]
    rows: tuple[dict[str, Any], ...]
    count: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "columns": list(self.columns),
            "rows": [dict(row) for row in self.rows],
            "count": self.count,
        }


@dataclass(frozen=True, slots=True)
class MutationResult:
    """Outcome of any statement that is not a query."""

    last_insert_id: int = 0
    rows_affected: int = 0
    success: bool = True

    def to_dict(self) -> dict[str, Any]:
        return {
            "last_insert_id": self.last_insert_id,
            "rows_affected": self.rows_affected,
            "success": self.success,
        }


ExecutionResult: TypeAlias = QueryResult | MutationResult


class StoreState(enum.Enum):
    UNINITIALIZED = "uninitialized"
    OPEN = "open"
    CLOSED = "closed"


# =============================================================================
# Statement helpers
# =============================================================================


def is_query(sql: str) -> bool:
    """True if the statement returns rows (SELECT, WITH, EXPLAIN, PRAGMA)."""
    return sql.strip().upper().startswith(_QUERY_PREFIXES)


def strip_comments(sql: str) -> str:
    """Remove ``--`` line comments and ``/* */`` block comments.

    Quoted strings and identifiers are copied verbatim, so ``'--'`` inside
    a literal survives.
    """
    out: list[str] = []
    quote: str | None = None
    i, n = 0, len(sql)
    while i < n:
        ch = sql[i]
        if quote is not None:
            out.append(ch)
            if ch == quote:
                quote = None
            i += 1
        elif ch in ("'", '"'):
            quote = ch
            out.append(ch)
            i += 1
        elif sql.startswith("--", i):
            end = sql.find("\n", i)
            i = n if end == -1 else end
        elif sql.startswith("/*", i):
            end = sql.find("*/", i + 2)
            i = n if end == -1 else end + 2
        else:
            out.append(ch)
            i += 1
    return "".join(out)


def _idempotent_create(match: re.Match[str]) -> str:
    temp = match.group(1)
    if temp:
        return f"CREATE {temp.upper()} TABLE IF NOT EXISTS "
    return "CREATE TABLE IF NOT EXISTS "


def fix_schema(schema: str) -> str:
    """Normalize a schema script for repeated application.

    Strips comments, drops blank lines, and rewrites every ``CREATE TABLE``
    into ``CREATE TABLE IF NOT EXISTS``. Applying it twice yields the same
    text as applying it once.
    """
    text = strip_comments(schema)
    lines = [line.rstrip() for line in text.splitlines() if line.strip()]
    return _CREATE_TABLE_RE.sub(_idempotent_create, "\n".join(lines))


def split_statements(script: str) -> list[str]:
    """Split a script on ``;`` boundaries.

    Fragments are re-joined until ``sqlite3.complete_statement`` accepts
    them, so semicolons inside string literals and trigger bodies do not
    split a statement.
    """
    statements: list[str] = []
    pending: list[str] = []
    for piece in script.split(";"):
        pending.append(piece)
        candidate = ";".join(pending)
        if sqlite3.complete_statement(candidate + ";"):
            statement = candidate.strip()
            if statement:
                statements.append(statement)
            pending = []
    tail = ";".join(pending).strip()
    if tail:
        statements.append(tail)
    return statements


def _decode(value: Any) -> Any:
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return value


def _run_query(conn: sqlite3.Connection, sql: str, params: Params) -> QueryResult:
    cursor = conn.execute(sql, params)
    try:
        columns = tuple(desc[0] for desc in cursor.description or ())
        rows = tuple(
            {column: _decode(value) for column, value in zip(columns, row, strict=True)}
            for row in cursor.fetchall()
        )
    finally:
        cursor.close()
    return QueryResult(columns=columns, rows=rows, count=len(rows))


def _run_mutation(conn: sqlite3.Connection, sql: str, params: Params) -> MutationResult:
    cursor = conn.execute(sql, params)
    try:
        # lastrowid is None unless the statement inserted; rowcount is -1
        # for statements SQLite does not count (DDL).
        last_insert_id = cursor.lastrowid or 0
        rows_affected = max(cursor.rowcount, 0)
    finally:
        cursor.close()
    return MutationResult(last_insert_id=last_insert_id, rows_affected=rows_affected)


def _connect(path: str) -> sqlite3.Connection:
    if path != ":memory:":
        Path(path).parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(path, check_same_thread=False, isolation_level=None)
    conn.execute("PRAGMA journal_mode=WAL")
    conn.execute("PRAGMA foreign_keys=ON")
    return conn


# =============================================================================
# Store
# =============================================================================


class Store:
    """A single SQLite connection with fully serialized statement execution.

    Reads return a :class:`QueryResult` (column names plus one mapping per
    row); everything else returns a :class:`MutationResult`.

    Thread safety:
        ``_lock`` is held for the whole of every statement, schema
        application, health probe, and close. There is no path to the
        connection that bypasses it.
    """

    __slots__ = ("_conn", "_echo", "_lock", "_path", "_schema", "_state")

    def __init__(
        self,
        path: str | Path,
        /,
        *,
        schema: str | None = None,
        echo: bool = False,
    ) -> None:
        self._path = str(path)
        self._schema = schema
        self._echo = echo
        self._lock = threading.Lock()
        self._conn: sqlite3.Connection | None = None
        self._state = StoreState.UNINITIALIZED

    @property
    def path(self) -> str:
        return self._path

    @property
    def state(self) -> StoreState:
        return self._state

    @property
    def closed(self) -> bool:
        return self._state is StoreState.CLOSED

    # -- Lifecycle --

    async def open(self) -> None:
        """Open the connection and apply the schema, if one was given.

        Called automatically on the first statement. Call explicitly to
        fail fast at startup: a failing schema statement raises
        ``SchemaError`` and leaves the store uninitialized.
        """
        await _run_sync(self._open_sync)

    def _open_sync(self) -> None:
        with self._lock:
            self._open_locked()

    def _open_locked(self) -> sqlite3.Connection:
        if self._state is StoreState.CLOSED:
            raise StoreClosedError()
        if self._conn is not None:
            return self._conn

        try:
            conn = _connect(self._path)
        except sqlite3.Error as exc:
            msg = f"failed to open database {self._path!r}: {exc}"
            raise QueryError(msg) from exc

        if self._schema and self._schema.strip():
            try:
                self._apply_schema_locked(conn, self._schema)
            except BaseException:
                conn.close()
                raise

        self._conn = conn
        self._state = StoreState.OPEN
        return conn

    async def close(self) -> None:
        """Close the connection. Idempotent; the store cannot be reopened."""
        await _run_sync(self._close_sync)

    def _close_sync(self) -> None:
        with self._lock:
            if self._state is StoreState.CLOSED:
                return
            if self._conn is not None:
                self._conn.close()
                self._conn = None
            self._state = StoreState.CLOSED

    async def is_healthy(self) -> bool:
        """Probe the connection with ``SELECT 1``."""
        return await _run_sync(self._probe)

    def _probe(self) -> bool:
        with self._lock:
            if self._state is not StoreState.OPEN or self._conn is None:
                return False
            try:
                self._conn.execute("SELECT 1").fetchone()
            except sqlite3.Error:
                return False
            return True

    # -- Statements --

    async def execute(self, sql: str, params: Params = ()) -> ExecutionResult:
        """Execute one statement and shape its result by statement kind.

        Usage::

            rows = await store.execute("SELECT * FROM users")
            created = await store.execute(
                "INSERT INTO users (name) VALUES (?)", ("Alice",)
            )
        """
        return await _run_sync(self._execute_sync, sql, params)

    def _execute_sync(self, sql: str, params: Params) -> ExecutionResult:
        statement = sql.strip()
        if not statement:
            raise QueryError("empty query")

        with self._lock:
            conn = self._ensure_open_locked()
            t0 = time.perf_counter()
            try:
                if is_query(strip_comments(statement)):
                    return _run_query(conn, statement, params)
                return _run_mutation(conn, statement, params)
            except (sqlite3.Error, OverflowError) as exc:
                raise QueryError(str(exc)) from exc
            finally:
                self._log_statement(statement, params, time.perf_counter() - t0)

    async def apply_schema(self, schema: str) -> None:
        """Apply a schema script to an open store.

        Raises ``SchemaError`` on the first failing statement.
        """
        await _run_sync(self._apply_schema_sync, schema)

    def _apply_schema_sync(self, schema: str) -> None:
        with self._lock:
            conn = self._ensure_open_locked()
            self._apply_schema_locked(conn, schema)

    def _apply_schema_locked(self, conn: sqlite3.Connection, schema: str) -> None:
        if not schema.strip():
            return
        for statement in split_statements(fix_schema(schema)):
            logger.debug("Executing schema statement: %s", statement)
            try:
                conn.execute(statement)
            except sqlite3.Error as exc:
                msg = f"failed to execute schema statement {statement!r}: {exc}"
                raise SchemaError(msg) from exc

    # -- Internal --

    def _ensure_open_locked(self) -> sqlite3.Connection:
        if self._state is StoreState.CLOSED:
            raise StoreClosedError()
        return self._open_locked()

    def _log_statement(self, sql: str, params: Params, elapsed: float) -> None:
        if not self._echo:
            return
        ms = elapsed * 1000
        param_str = f"  params={params!r}" if params else ""
        logger.info("%6.1fms  %s%s", ms, sql, param_str)

    # -- Context manager --

    async def __aenter__(self) -> "Store":
        await self.open()
        return self

    async def __aexit__(self, *_: Any) -> None:
        await self.close()
