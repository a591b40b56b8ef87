"""sqlroute application class.

Startup turns a SQL tree into a live API: open the store and apply the
schema, compile the tree into a route table, and register one handler
per route. After startup the app is frozen; the route table, router and
middleware chain never change while requests are served.
"""

import logging
from datetime import UTC, datetime
from typing import Any

import anyio

from sqlroute._internal.asgi import Receive, Scope, Send
from sqlroute.config import AppConfig
from sqlroute.data.store import Store
from sqlroute.executor import SQLExecutor, make_handler
from sqlroute.http.request import Request
from sqlroute.http.response import Response, json_response
from sqlroute.middleware.cors import CORSMiddleware
from sqlroute.middleware.protocol import Middleware
from sqlroute.routing.route import Route, RouteTable
from sqlroute.routing.router import Router
from sqlroute.server.handler import handle_request
from sqlroute.sql.compiler import compile_routes
from sqlroute.sql.files import SQLFileStore

logger = logging.getLogger("sqlroute.server")

SERVER_MESSAGE = "sqlroute HTTP API Server"


class App:
    """The sqlroute application.

    Usage::

        app = App(AppConfig(sql_root="db", database_path="app.db"))
        app.run()

    or hand it to any ASGI server. Startup runs during the ASGI lifespan
    or, when the server sends no lifespan events, on the first request.
    ``startup()`` and ``shutdown()`` can also be awaited directly.
    """

    __slots__ = (
        "_files",
        "_middleware_list",
        "_route_table",
        "_router",
        "_started",
        "_startup_lock",
        "_store",
        "config",
    )

    def __init__(self, config: AppConfig | None = None) -> None:
        self.config: AppConfig = config or AppConfig()
        self._files = SQLFileStore()
        self._middleware_list: list[Middleware] = []
        self._store: Store | None = None
        self._route_table: RouteTable | None = None
        self._router: Router | None = None
        self._started = False
        self._startup_lock: anyio.Lock | None = None

    # -- Middleware --

    def add_middleware(self, middleware: Middleware) -> None:
        """Add a middleware to the pipeline. Must be called before startup."""
        if self._started:
            msg = "Cannot add middleware after the app has started."
            raise RuntimeError(msg)
        self._middleware_list.append(middleware)

    # -- Compiled state --

    @property
    def route_table(self) -> RouteTable:
        if self._route_table is None:
            msg = "Routes are compiled during startup; await app.startup() first."
            raise RuntimeError(msg)
        return self._route_table

    @property
    def router(self) -> Router:
        if self._router is None:
            msg = "The router is built during startup; await app.startup() first."
            raise RuntimeError(msg)
        return self._router

    @property
    def store(self) -> Store:
        if self._store is None:
            msg = "The store is opened during startup; await app.startup() first."
            raise RuntimeError(msg)
        return self._store

    @property
    def started(self) -> bool:
        return self._started

    # -- Lifecycle --

    async def startup(self) -> None:
        """Open the store, compile the SQL tree and build the router.

        Raises ``ConfigurationError`` for invalid config, ``CompileError``
        if the SQL root cannot be walked and ``SchemaError`` if the schema
        fails. Calling it again after success is a no-op.
        """
        if self._startup_lock is None:
            self._startup_lock = anyio.Lock()
        async with self._startup_lock:
            if self._started:
                return
            await self._startup()

    async def _startup(self) -> None:
        cfg = self.config
        cfg.validate()

        schema_path = cfg.resolved_schema_path
        schema = schema_path.read_text(encoding="utf-8") if schema_path.is_file() else None
        if schema is None:
            logger.info("No schema file at %s", schema_path)

        # Compile before opening the store so a bad tree leaves no open connection
        route_table = compile_routes(
            cfg.sql_root,
            base_url=cfg.base_url,
            tables_marker=cfg.tables_marker,
            files=self._files,
            exclude=(schema_path,),
        )

        store = Store(cfg.database_path, schema=schema, echo=cfg.echo_sql)
        await store.open()

        executor = SQLExecutor(
            store,
            self._files,
            debug=cfg.debug,
            strict_templates=cfg.strict_templates,
        )
        router = Router()
        for descriptor in route_table:
            router.add(
                Route(
                    path=descriptor.path,
                    handler=make_handler(descriptor, executor),
                    methods=frozenset({descriptor.http_method, "OPTIONS"}),
                    descriptor=descriptor,
                )
            )
        router.add(Route("/health", self._health, frozenset({"GET", "OPTIONS"})))
        router.add(Route("/", self._index, frozenset({"GET", "OPTIONS"})))
        router.compile()

        if cfg.cors:
            self._middleware_list.insert(0, CORSMiddleware())

        self._store = store
        self._route_table = route_table
        self._router = router
        self._started = True
        logger.info(
            "sqlroute ready: %d routes (%d tables) from %s, database %s",
            len(route_table),
            len(route_table.tables()),
            cfg.sql_root,
            cfg.database_path,
        )

    async def shutdown(self) -> None:
        """Close the store. The app cannot be started again."""
        if self._store is not None:
            await self._store.close()

    # -- Built-in endpoints --

    async def _health(self, request: Request) -> Response:
        if request.method == "OPTIONS":
            return Response(body="", status=200)
        healthy = self._store is not None and await self._store.is_healthy()
        return json_response(
            {
                "status": "healthy" if healthy else "unhealthy",
                "endpoints": len(self.route_table),
                "port": self.config.port,
                "timestamp": datetime.now(UTC).isoformat(timespec="seconds"),
            }
        )

    async def _index(self, request: Request) -> Response:
        if request.method == "OPTIONS":
            return Response(body="", status=200)
        return json_response(self.manifest())

    def manifest(self) -> dict[str, Any]:
        """The endpoint listing served at ``GET /``."""
        return {
            "message": SERVER_MESSAGE,
            "endpoints": [descriptor.to_manifest() for descriptor in self.route_table],
        }

    # -- Server --

    def run(self, host: str | None = None, port: int | None = None) -> None:
        """Serve the app with pounce. Blocks until the server stops.

        In debug mode the server reloads on file changes.
        """
        from sqlroute.server.dev import run_server

        run_server(
            self,
            host or self.config.host,
            port or self.config.port,
            reload=self.config.debug,
            request_timeout=self.config.request_timeout,
            keep_alive_timeout=self.config.keep_alive_timeout,
            log_level=self.config.log_level,
        )

    # -- ASGI interface --

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """ASGI 3.0 entry point."""
        if scope["type"] == "lifespan":
            await self._handle_lifespan(receive, send)
            return

        if not self._started:
            await self.startup()

        await handle_request(
            scope,
            receive,
            send,
            router=self.router,
            middleware=tuple(self._middleware_list),
            debug=self.config.debug,
        )

    async def _handle_lifespan(self, receive: Receive, send: Send) -> None:
        """Run the ASGI lifespan protocol."""
        while True:
            message = await receive()
            msg_type = message["type"]

            if msg_type == "lifespan.startup":
                try:
                    await self.startup()
                except Exception as exc:
                    logger.exception("Startup failed")
                    await send({"type": "lifespan.startup.failed", "message": str(exc)})
                    return
                await send({"type": "lifespan.startup.complete"})

            elif msg_type == "lifespan.shutdown":
                await self.shutdown()
                await send({"type": "lifespan.shutdown.complete"})
                return
