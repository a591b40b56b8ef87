"""Serialized SQLite access for compiled routes.

Statements in, self-describing results out. Not an ORM::

    from sqlroute.data import Store

    async with Store("app.db") as store:
        result = await store.execute("SELECT * FROM users")
        result.columns, result.rows, result.count
"""

from sqlroute.data.errors import DataError, QueryError, SchemaError, StoreClosedError
from sqlroute.data.store import (
    ExecutionResult,
    MutationResult,
    QueryResult,
    Store,
    StoreState,
    fix_schema,
    is_query,
    split_statements,
)

__all__ = [
    "DataError",
    "ExecutionResult",
    "MutationResult",
    "QueryError",
    "QueryResult",
    "SchemaError",
    "Store",
    "StoreClosedError",
    "StoreState",
    "fix_schema",
    "is_query",
    "split_statements",
]
