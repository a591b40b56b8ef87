"""Client for a running sqlroute server.

Reads the server's route manifest and exposes every route as an async
callable grouped by table, with universal routes under ``system``.
"""

from sqlroute.client.namespace import (
    Invoke,
    Namespace,
    NamespaceSet,
    RemoteOperation,
    build_namespaces,
)
from sqlroute.client.requester import SQLRouteClient
from sqlroute.client.routes import SYSTEM_NAMESPACE, RemoteRoute

__all__ = [
    "SYSTEM_NAMESPACE",
    "Invoke",
    "Namespace",
    "NamespaceSet",
    "RemoteOperation",
    "RemoteRoute",
    "SQLRouteClient",
    "build_namespaces",
]
