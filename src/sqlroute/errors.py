"""sqlroute exception hierarchy.

Shared across the compiler, executor, store, router, and client so every
module raises and catches the same types.
"""

from dataclasses import dataclass


class SQLRouteError(Exception):
    """Base for all sqlroute-specific errors."""


class ConfigurationError(SQLRouteError):
    """Raised when configuration is invalid.

    Typically surfaces from ``AppConfig.validate()`` or ``App.startup()``.
    """


class CompileError(SQLRouteError):
    """Raised when the SQL root cannot be walked.

    Directory-level failures abort compilation. Individual unreadable
    files are skipped with a warning instead.
    """


class TemplateError(SQLRouteError):
    """Raised for unresolved ``{{placeholder}}`` tokens in strict mode."""


class ExecutionError(SQLRouteError):
    """Raised when a compiled route cannot be executed."""


class DiscoveryError(SQLRouteError):
    """Raised client-side for an unknown namespace or operation."""


class RemoteError(SQLRouteError):
    """Raised client-side when the server cannot be reached or decoded."""


@dataclass(frozen=True, slots=True)
class HTTPError(SQLRouteError):
    """An error that maps directly to an HTTP status code.

    Raised by the router or handlers. The ASGI pipeline catches these
    and renders the JSON failure envelope.
    """

    status: int
    detail: str = ""
    headers: tuple[tuple[str, str], ...] = ()

    def __str__(self) -> str:
        if self.detail:
            return f"{self.status}: {self.detail}"
        return str(self.status)


class BadRequest(HTTPError):  # noqa: N818
    """400: the request body or parameters are malformed."""

    def __init__(self, detail: str = "Bad Request") -> None:
        super().__init__(status=400, detail=detail)


class NotFound(HTTPError):  # noqa: N818
    """404: no route matched the request path."""

    def __init__(self, detail: str = "Not Found") -> None:
        super().__init__(status=404, detail=detail)


class MethodNotAllowed(HTTPError):  # noqa: N818
    """405: route exists but was compiled for a different HTTP method.

    Includes an ``Allow`` header listing the valid methods.
    """

    def __init__(self, allowed: frozenset[str], detail: str = "") -> None:
        allow_value = ", ".join(sorted(allowed))
        default_detail = f"Method not allowed. Allowed methods: {allow_value}"
        super().__init__(
            status=405,
            detail=detail or default_detail,
            headers=(("Allow", allow_value),),
        )
