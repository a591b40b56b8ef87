"""Namespaced call surface built from discovered routes.

Routes are grouped by table, universal routes under ``system``, and each
route becomes a callable keyed by its operation name::

    namespaces = build_namespaces(routes, invoke)
    users = namespaces.require("users")
    result = await users.call("select", limit=10)

Lookups are explicit: ``get`` returns ``None``, ``require`` and ``call``
raise ``DiscoveryError``.
"""

import logging
from collections.abc import Awaitable, Callable, Iterable, Iterator, Mapping
from types import MappingProxyType
from typing import Any, TypeAlias

from sqlroute.client.routes import RemoteRoute
from sqlroute.errors import DiscoveryError

logger = logging.getLogger("sqlroute.client")

# Issues the HTTP request for one route with the caller's arguments
Invoke: TypeAlias = Callable[[RemoteRoute, dict[str, Any]], Awaitable[Any]]


class RemoteOperation:
    """A callable bound to one remote route."""

    __slots__ = ("_invoke", "route")

    def __init__(self, route: RemoteRoute, invoke: Invoke) -> None:
        self.route = route
        self._invoke = invoke

    @property
    def name(self) -> str:
        return self.route.operation

    async def __call__(self, **kwargs: Any) -> Any:
        return await self._invoke(self.route, kwargs)

    def __repr__(self) -> str:
        return f"RemoteOperation({self.route.method} {self.route.path})"


class Namespace(Mapping[str, RemoteOperation]):
    """Operations of one table (or of ``system``), by operation name."""

    __slots__ = ("_operations", "name")

    def __init__(self, name: str, operations: Mapping[str, RemoteOperation]) -> None:
        self.name = name
        self._operations = MappingProxyType(dict(operations))

    def __getitem__(self, key: str) -> RemoteOperation:
        return self._operations[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._operations)

    def __len__(self) -> int:
        return len(self._operations)

    def require(self, operation: str) -> RemoteOperation:
        op = self._operations.get(operation)
        if op is None:
            available = ", ".join(sorted(self._operations)) or "none"
            msg = f"operation {operation!r} not found in namespace {self.name!r} (available: {available})"
            raise DiscoveryError(msg)
        return op

    async def call(self, operation: str, **kwargs: Any) -> Any:
        return await self.require(operation)(**kwargs)

    def __repr__(self) -> str:
        return f"Namespace({self.name!r}, operations={sorted(self._operations)})"


class NamespaceSet(Mapping[str, Namespace]):
    """All namespaces discovered from one server. Read-only."""

    __slots__ = ("_namespaces",)

    def __init__(self, namespaces: Mapping[str, Namespace]) -> None:
        self._namespaces = MappingProxyType(dict(namespaces))

    def __getitem__(self, key: str) -> Namespace:
        return self._namespaces[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._namespaces)

    def __len__(self) -> int:
        return len(self._namespaces)

    def require(self, name: str) -> Namespace:
        namespace = self._namespaces.get(name)
        if namespace is None:
            available = ", ".join(sorted(self._namespaces)) or "none"
            msg = f"namespace {name!r} not found (available: {available})"
            raise DiscoveryError(msg)
        return namespace

    def __repr__(self) -> str:
        return f"NamespaceSet({sorted(self._namespaces)})"


def build_namespaces(routes: Iterable[RemoteRoute], invoke: Invoke) -> NamespaceSet:
    """Group routes into namespaces.

    Two routes with the same operation name in one namespace (``select``
    under both GET and POST) leave the later one reachable.
    """
    grouped: dict[str, dict[str, RemoteOperation]] = {}
    for route in routes:
        operations = grouped.setdefault(route.namespace, {})
        if route.operation in operations:
            logger.debug(
                "%s %s replaces %s.%s",
                route.method,
                route.path,
                route.namespace,
                route.operation,
            )
        operations[route.operation] = RemoteOperation(route, invoke)
    return NamespaceSet({name: Namespace(name, ops) for name, ops in grouped.items()})
