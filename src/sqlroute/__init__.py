"""sqlroute: a directory of SQL files served as a REST API.

Every ``.sql`` file under the SQL root becomes an endpoint; its path
decides the URL, the HTTP method and the table it works on::

    db/
        schema.sql
        Database/GET/health_check.sql       GET  /api/v1/health_check
        Tables/users/GET/select.sql         GET  /api/v1/users/select
        Tables/users/POST/insert.sql        POST /api/v1/users/insert

Serving (``pip install sqlroute[server]``)::

    from sqlroute import App, AppConfig

    app = App(AppConfig(sql_root="db", database_path="app.db"))
    app.run()

Calling it from Python::

    from sqlroute import SQLRouteClient

    async with SQLRouteClient("http://localhost:8080") as client:
        await client.discover()
        rows = await client.call("users", "select")
"""

__version__ = "0.1.0"
__all__ = [
    "App",
    "AppConfig",
    "BadRequest",
    "CompileError",
    "ConfigurationError",
    "DiscoveryError",
    "ExecutionError",
    "HTTPError",
    "MethodNotAllowed",
    "NotFound",
    "RemoteError",
    "Request",
    "Response",
    "RouteDescriptor",
    "RouteTable",
    "SQLRouteClient",
    "SQLRouteError",
    "Store",
    "TemplateError",
    "compile_routes",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import sqlroute`` fast while providing a clean top-level API.
    """
    if name == "App":
        from sqlroute.app import App

        return App

    if name == "AppConfig":
        from sqlroute.config import AppConfig

        return AppConfig

    if name == "Request":
        from sqlroute.http.request import Request

        return Request

    if name == "Response":
        from sqlroute.http.response import Response

        return Response

    if name in ("RouteDescriptor", "RouteTable"):
        from sqlroute.routing import route as _route

        return getattr(_route, name)

    if name == "compile_routes":
        from sqlroute.sql.compiler import compile_routes

        return compile_routes

    if name == "Store":
        from sqlroute.data.store import Store

        return Store

    if name == "SQLRouteClient":
        from sqlroute.client.requester import SQLRouteClient

        return SQLRouteClient

    if name in (
        "BadRequest",
        "CompileError",
        "ConfigurationError",
        "DiscoveryError",
        "ExecutionError",
        "HTTPError",
        "MethodNotAllowed",
        "NotFound",
        "RemoteError",
        "SQLRouteError",
        "TemplateError",
    ):
        from sqlroute import errors as _errors

        return getattr(_errors, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
