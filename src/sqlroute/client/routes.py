"""Routes as the client sees them, read back from the server manifest."""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from sqlroute.errors import DiscoveryError

SYSTEM_NAMESPACE = "system"


@dataclass(frozen=True, slots=True)
class RemoteRoute:
    """One endpoint listed in ``GET /``.

    ``namespace`` is the table name, or ``"system"`` for universal routes.
    ``operation`` is the final path segment.
    """

    method: str
    path: str
    is_universal: bool
    table_name: str | None = None
    sql_path: str | None = None

    @property
    def operation(self) -> str:
        return self.path.rstrip("/").rsplit("/", 1)[-1]

    @property
    def namespace(self) -> str:
        return self.table_name if self.table_name is not None else SYSTEM_NAMESPACE

    @classmethod
    def from_manifest(cls, entry: Mapping[str, Any], base_url: str = "/api/v1") -> "RemoteRoute":
        """Build a route from one manifest entry.

        Older servers list no ``table``; it is then recovered from the
        path, where a table-scoped route is ``{base}/{table}/{operation}``.
        """
        try:
            method = str(entry["method"]).upper()
            path = str(entry["path"])
        except (KeyError, TypeError) as exc:
            raise DiscoveryError(f"malformed manifest entry: {entry!r}") from exc

        table: str | None = None
        if entry.get("universal") is not True:
            table = entry.get("table") or _table_from_route_path(path, base_url)

        return cls(
            method=method,
            path=path,
            is_universal=table is None,
            table_name=table,
            sql_path=entry.get("sql_path"),
        )


def _table_from_route_path(path: str, base_url: str) -> str | None:
    base = "/" + base_url.strip("/") if base_url.strip("/") else ""
    rest = path[len(base) :] if base and path.startswith(base + "/") else path
    segments = [s for s in rest.split("/") if s]
    if len(segments) >= 2:
        return segments[-2]
    return None
