"""CORS middleware.

The API is meant to be called from browser front-ends on any origin, so
the defaults are permissive: every response carries the allow headers,
and preflight ``OPTIONS`` requests are answered directly with 200.
"""

from dataclasses import dataclass

from sqlroute.http.request import Request
from sqlroute.http.response import Response
from sqlroute.middleware.protocol import Next


@dataclass(frozen=True, slots=True)
class CORSConfig:
    """CORS header values::

        CORSConfig(allow_origins=("https://example.com",))
    """

    allow_origins: tuple[str, ...] = ("*",)
    allow_methods: tuple[str, ...] = ("GET", "POST", "PUT", "DELETE", "OPTIONS")
    allow_headers: tuple[str, ...] = ("Content-Type", "Authorization")
    max_age: int | None = None


class CORSMiddleware:
    """Adds CORS headers to every response and short-circuits preflight.

    With a wildcard origin the headers are sent whether or not the
    request carries ``Origin``. With an explicit allow list the request
    origin is echoed back only when it is listed.
    """

    __slots__ = ("config",)

    def __init__(self, config: CORSConfig | None = None) -> None:
        self.config = config or CORSConfig()

    def _allow_origin(self, origin: str | None) -> str | None:
        if "*" in self.config.allow_origins:
            return "*"
        if origin is not None and origin in self.config.allow_origins:
            return origin
        return None

    def _add_cors_headers(self, response: Response, allow_origin: str) -> Response:
        cfg = self.config
        response = response.with_header("Access-Control-Allow-Origin", allow_origin)
        if allow_origin != "*":
            response = response.with_header("Vary", "Origin")
        response = response.with_header("Access-Control-Allow-Methods", ", ".join(cfg.allow_methods))
        response = response.with_header("Access-Control-Allow-Headers", ", ".join(cfg.allow_headers))
        if cfg.max_age is not None:
            response = response.with_header("Access-Control-Max-Age", str(cfg.max_age))
        return response

    async def __call__(self, request: Request, next: Next) -> Response:
        allow_origin = self._allow_origin(request.headers.get("origin"))
        if allow_origin is None:
            return await next(request)

        if request.method == "OPTIONS":
            return self._add_cors_headers(Response(body="", status=200), allow_origin)

        response = await next(request)
        return self._add_cors_headers(response, allow_origin)
