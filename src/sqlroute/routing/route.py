"""Route descriptors, the compiled route table, and router types."""

import logging
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from typing import Any

from sqlroute.errors import ConfigurationError

logger = logging.getLogger("sqlroute.compiler")

HTTP_METHODS = ("GET", "POST", "PUT", "DELETE")


@dataclass(frozen=True, slots=True)
class RouteDescriptor:
    """One compiled SQL file: where it lives and how it is reached.

    Invariant: ``is_universal`` is true exactly when ``table_name`` is None.
    """

    http_method: str
    path: str
    sql_path: str
    table_name: str | None = None
    is_universal: bool = True

    def __post_init__(self) -> None:
        if self.http_method not in HTTP_METHODS:
            msg = f"Unsupported HTTP method {self.http_method!r} for {self.sql_path}"
            raise ConfigurationError(msg)
        if self.is_universal != (self.table_name is None):
            msg = (
                f"Route {self.path!r}: is_universal={self.is_universal} "
                f"contradicts table_name={self.table_name!r}"
            )
            raise ConfigurationError(msg)

    @property
    def key(self) -> tuple[str, str]:
        return (self.http_method, self.path)

    @property
    def operation(self) -> str:
        """The final path segment, e.g. ``select`` for ``/api/v1/users/select``."""
        return self.path.rstrip("/").rsplit("/", 1)[-1]

    def to_manifest(self) -> dict[str, Any]:
        """The entry served in the ``GET /`` endpoint listing."""
        return {
            "method": self.http_method,
            "path": self.path,
            "universal": self.is_universal,
            "table": self.table_name,
        }


class RouteTable:
    """Ordered collection of descriptors, unique by ``(method, path)``.

    Adding a descriptor whose key is already present replaces the earlier
    one in its original position. Shadowing is not an error.
    """

    __slots__ = ("_frozen", "_routes")

    def __init__(self, routes: tuple[RouteDescriptor, ...] | list[RouteDescriptor] = ()) -> None:
        self._routes: dict[tuple[str, str], RouteDescriptor] = {}
        self._frozen = False
        for route in routes:
            self.add(route)

    def add(self, route: RouteDescriptor) -> None:
        if self._frozen:
            msg = "Cannot add routes after the route table is frozen."
            raise RuntimeError(msg)
        previous = self._routes.get(route.key)
        if previous is not None:
            logger.debug(
                "%s %s from %s shadows %s",
                route.http_method,
                route.path,
                route.sql_path,
                previous.sql_path,
            )
        self._routes[route.key] = route

    def freeze(self) -> "RouteTable":
        self._frozen = True
        return self

    @property
    def frozen(self) -> bool:
        return self._frozen

    def get(self, method: str, path: str) -> RouteDescriptor | None:
        return self._routes.get((method.upper(), path))

    def tables(self) -> list[str]:
        """Distinct table names, in first-seen order."""
        seen: dict[str, None] = {}
        for route in self._routes.values():
            if route.table_name is not None:
                seen.setdefault(route.table_name, None)
        return list(seen)

    def for_table(self, table_name: str) -> list[RouteDescriptor]:
        return [r for r in self._routes.values() if r.table_name == table_name]

    def universal(self) -> list[RouteDescriptor]:
        return [r for r in self._routes.values() if r.is_universal]

    def __iter__(self) -> Iterator[RouteDescriptor]:
        return iter(self._routes.values())

    def __len__(self) -> int:
        return len(self._routes)

    def __contains__(self, key: object) -> bool:
        return key in self._routes

    def __repr__(self) -> str:
        return f"RouteTable({len(self)} routes, frozen={self._frozen})"


@dataclass(frozen=True, slots=True)
class Route:
    """A handler registered in the router for a set of methods."""

    path: str
    handler: Callable[..., Any]
    methods: frozenset[str]
    descriptor: RouteDescriptor | None = None


@dataclass(frozen=True, slots=True)
class RouteMatch:
    """Result of a successful route match."""

    route: Route
    method: str
