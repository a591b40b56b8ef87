"""ASGI handler: translates ASGI scope/messages to sqlroute types.

The only component that touches raw HTTP scopes directly. Converts the
scope to a Request, dispatches through middleware and routing, and sends
the Response back through ASGI ``send()``.
"""

from collections.abc import Sequence

from sqlroute._internal.asgi import Receive, Scope, Send
from sqlroute.errors import HTTPError
from sqlroute.http.request import Request
from sqlroute.http.response import Response
from sqlroute.middleware.protocol import Middleware, Next
from sqlroute.routing.router import Router
from sqlroute.server.errors import handle_http_error, handle_internal_error
from sqlroute.server.sender import send_response


def build_pipeline(router: Router, middleware: Sequence[Middleware]) -> Next:
    """Wrap router dispatch in the middleware chain, outermost first."""

    async def dispatch(request: Request) -> Response:
        # Routing errors become responses here so middleware still sees them
        try:
            match = router.match(request.method, request.path)
        except HTTPError as exc:
            return handle_http_error(exc, request)
        return await match.route.handler(request)

    handler: Next = dispatch
    for mw in reversed(middleware):

        async def make_next(req: Request, _mw: Middleware = mw, _next: Next = handler) -> Response:
            return await _mw(req, _next)

        handler = make_next
    return handler


async def handle_request(
    scope: Scope,
    receive: Receive,
    send: Send,
    *,
    router: Router,
    middleware: Sequence[Middleware],
    debug: bool,
) -> None:
    """Process a single HTTP request through the full pipeline."""
    if scope["type"] != "http":
        return

    request = Request.from_asgi(scope, receive)
    pipeline = build_pipeline(router, middleware)

    try:
        response = await pipeline(request)
    except HTTPError as exc:
        response = handle_http_error(exc, request)
    except Exception as exc:
        response = handle_internal_error(exc, request, debug=debug)

    await send_response(response, send)
