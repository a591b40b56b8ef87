"""Async HTTP client for a running sqlroute server.

Discovers the server's routes from its manifest and exposes them as
namespaced operations::

    async with SQLRouteClient("http://localhost:8080") as client:
        await client.discover()
        users = await client.call("users", "select")
        created = await client.call("users", "insert", name="Alice")
        await client.health()

Every call returns the decoded JSON body, including failure envelopes
(``{"success": false, ...}``); only transport and decoding problems raise.
"""

import logging
from typing import Any

import httpx

from sqlroute.client.namespace import Namespace, NamespaceSet, build_namespaces
from sqlroute.client.routes import SYSTEM_NAMESPACE, RemoteRoute
from sqlroute.errors import DiscoveryError, RemoteError

logger = logging.getLogger("sqlroute.client")


class SQLRouteClient:
    """Client over ``httpx.AsyncClient``.

    Args:
        base_url: Server origin, e.g. ``http://localhost:8080``.
        api_base: The server's route prefix, used to read table names
            from paths when the manifest does not list them.
        transport: Optional httpx transport, e.g. ``httpx.ASGITransport``
            to talk to an in-process app.
        timeout: Per-request timeout in seconds.
    """

    __slots__ = ("_api_base", "_http", "_namespaces", "_routes")

    def __init__(
        self,
        base_url: str,
        *,
        api_base: str = "/api/v1",
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float = 30.0,
    ) -> None:
        self._http = httpx.AsyncClient(base_url=base_url, transport=transport, timeout=timeout)
        self._api_base = api_base
        self._routes: tuple[RemoteRoute, ...] = ()
        self._namespaces: NamespaceSet | None = None

    async def __aenter__(self) -> "SQLRouteClient":
        return self

    async def __aexit__(self, *_: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    # -- Transport --

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json: dict[str, Any] | None = None,
    ) -> Any:
        try:
            response = await self._http.request(method, path, params=params, json=json)
        except httpx.HTTPError as exc:
            raise RemoteError(f"{method} {path} failed: {exc}") from exc
        try:
            return response.json()
        except ValueError as exc:
            msg = f"{method} {path} returned a non-JSON body (status {response.status_code})"
            raise RemoteError(msg) from exc

    async def _invoke(self, route: RemoteRoute, arguments: dict[str, Any]) -> Any:
        if route.method == "GET":
            return await self._request(route.method, route.path, params=arguments or None)
        return await self._request(route.method, route.path, json=arguments)

    # -- Always available --

    async def health(self) -> Any:
        """``GET /health``."""
        return await self._request("GET", "/health")

    async def docs(self) -> Any:
        """``GET /``: the server's endpoint listing."""
        return await self._request("GET", "/")

    # -- Discovery --

    async def discover(self) -> NamespaceSet:
        """Read the manifest and (re)build the namespaces."""
        manifest = await self.docs()
        entries = manifest.get("endpoints") if isinstance(manifest, dict) else None
        if not isinstance(entries, list):
            raise DiscoveryError("server manifest has no endpoint list")

        self._routes = tuple(RemoteRoute.from_manifest(entry, self._api_base) for entry in entries)
        self._namespaces = build_namespaces(self._routes, self._invoke)
        logger.debug(
            "Discovered %d routes in %d namespaces",
            len(self._routes),
            len(self._namespaces),
        )
        return self._namespaces

    @property
    def routes(self) -> tuple[RemoteRoute, ...]:
        return self._routes

    @property
    def namespaces(self) -> NamespaceSet:
        if self._namespaces is None:
            raise DiscoveryError("routes have not been discovered; await client.discover() first")
        return self._namespaces

    @property
    def tables(self) -> list[str]:
        """Discovered table namespaces, without ``system``."""
        return [name for name in self.namespaces if name != SYSTEM_NAMESPACE]

    def namespace(self, name: str) -> Namespace:
        return self.namespaces.require(name)

    async def call(self, namespace: str, operation: str, **kwargs: Any) -> Any:
        """Invoke ``namespace.operation`` with keyword arguments."""
        return await self.namespaces.require(namespace).call(operation, **kwargs)
