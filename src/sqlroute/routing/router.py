"""Compiled router with exact path matching.

Every path a SQL tree can produce is static, so the router is a two-level
lookup: path, then method. Routes are registered during startup and the
router is frozen before the first request.
"""

from sqlroute.errors import MethodNotAllowed, NotFound
from sqlroute.routing.route import Route, RouteMatch


def normalize_path(path: str) -> str:
    """Collapse duplicate slashes and drop a trailing slash (except root)."""
    parts = [p for p in path.split("/") if p]
    return "/" + "/".join(parts)


class Router:
    """Path/method router.

    Usage::

        router = Router()
        router.add(Route("/api/v1/users/select", handler, frozenset({"GET", "OPTIONS"})))
        router.compile()
        match = router.match("GET", "/api/v1/users/select")

    Registering the same method on the same path again replaces the
    earlier handler.
    """

    __slots__ = ("_compiled", "_paths")

    def __init__(self) -> None:
        self._paths: dict[str, dict[str, Route]] = {}
        self._compiled = False

    def add(self, route: Route) -> None:
        """Add a route. Must be called before compile()."""
        if self._compiled:
            msg = "Cannot add routes after compilation."
            raise RuntimeError(msg)
        by_method = self._paths.setdefault(normalize_path(route.path), {})
        for method in route.methods:
            by_method[method.upper()] = route

    def compile(self) -> None:
        """Freeze the router. No more routes can be added."""
        self._compiled = True

    @property
    def routes(self) -> list[Route]:
        """Every distinct registered route, in registration order."""
        seen: set[int] = set()
        result: list[Route] = []
        for by_method in self._paths.values():
            for route in by_method.values():
                if id(route) not in seen:
                    seen.add(id(route))
                    result.append(route)
        return result

    def allowed_methods(self, path: str) -> frozenset[str]:
        return frozenset(self._paths.get(normalize_path(path), {}))

    def match(self, method: str, path: str) -> RouteMatch:
        """Match a request against the registered routes.

        Raises ``NotFound`` if no route has this path.
        Raises ``MethodNotAllowed`` if the path exists for other methods.
        """
        by_method = self._paths.get(normalize_path(path))
        if not by_method:
            raise NotFound(f"No route matches {method} {path!r}")

        method = method.upper()
        route = by_method.get(method)
        if route is None:
            raise MethodNotAllowed(frozenset(by_method))
        return RouteMatch(route=route, method=method)
