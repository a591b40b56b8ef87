"""Data layer error hierarchy."""

from sqlroute.errors import ExecutionError


class DataError(ExecutionError):
    """Base for all sqlroute.data errors."""


class QueryError(DataError):
    """Raised when a SQL statement fails."""


class SchemaError(DataError):
    """Raised when a schema statement fails during initialization."""


class StoreClosedError(DataError):
    """Raised for any operation on a closed store."""

    def __init__(self, detail: str = "store closed") -> None:
        super().__init__(detail)
