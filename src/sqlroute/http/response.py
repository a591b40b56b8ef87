"""HTTP response with chainable ``.with_*()`` transformation API.

Each transformation returns a new Response. Every body sqlroute produces
is JSON, so the module also builds the wire envelope::

    {"success": true,  "data": ...}
    {"success": false, "error": "...", "debug": {...}}
"""

from __future__ import annotations

import json as json_module
from collections.abc import Mapping
from dataclasses import dataclass, replace
from typing import Any

JSON_CONTENT_TYPE = "application/json"


@dataclass(frozen=True, slots=True)
class Response:
    """An HTTP response built through immutable transformations."""

    body: str | bytes = ""
    status: int = 200
    content_type: str = JSON_CONTENT_TYPE
    headers: tuple[tuple[str, str], ...] = ()

    def with_status(self, status: int) -> Response:
        """Return a new Response with a different status code."""
        return replace(self, status=status)

    def with_header(self, name: str, value: str) -> Response:
        """Return a new Response with an additional header."""
        return replace(self, headers=(*self.headers, (name, value)))

    def with_headers(self, headers: Mapping[str, str] | tuple[tuple[str, str], ...]) -> Response:
        """Return a new Response with additional headers."""
        new = tuple(headers.items()) if isinstance(headers, Mapping) else tuple(headers)
        return replace(self, headers=(*self.headers, *new))

    def header(self, name: str) -> str | None:
        """First value of a header, case-insensitively."""
        lower = name.lower()
        for key, value in self.headers:
            if key.lower() == lower:
                return value
        return None

    @property
    def body_bytes(self) -> bytes:
        if isinstance(self.body, str):
            return self.body.encode("utf-8")
        return self.body

    @property
    def text(self) -> str:
        if isinstance(self.body, bytes):
            return self.body.decode("utf-8")
        return self.body

    def json(self) -> Any:
        """Decode the body as JSON."""
        return json_module.loads(self.body_bytes)


def _default(value: Any) -> Any:
    # SQLite hands back bytes for BLOBs that were not decoded upstream
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    msg = f"Object of type {type(value).__name__} is not JSON serializable"
    raise TypeError(msg)


def json_response(data: Any, status: int = 200) -> Response:
    """Serialize ``data`` into a JSON response."""
    body = json_module.dumps(data, default=_default, ensure_ascii=False)
    return Response(body=body, status=status)


def success_response(data: Any, *, debug: Mapping[str, Any] | None = None) -> Response:
    envelope: dict[str, Any] = {"success": True, "data": data}
    if debug is not None:
        envelope["debug"] = dict(debug)
    return json_response(envelope)


def error_response(
    status: int,
    error: str,
    *,
    debug: Mapping[str, Any] | None = None,
) -> Response:
    envelope: dict[str, Any] = {"success": False, "error": error}
    if debug is not None:
        envelope["debug"] = dict(debug)
    return json_response(envelope, status=status)
