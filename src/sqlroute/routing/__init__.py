"""Route descriptors, the route table, and the path/method router."""

from sqlroute.routing.route import HTTP_METHODS, Route, RouteDescriptor, RouteMatch, RouteTable
from sqlroute.routing.router import Router, normalize_path

__all__ = [
    "HTTP_METHODS",
    "Route",
    "RouteDescriptor",
    "RouteMatch",
    "RouteTable",
    "Router",
    "normalize_path",
]
