"""Error handling pipeline for sqlroute requests.

Maps HTTPError exceptions and unexpected failures to JSON failure
envelopes. 404 and 405 look the same on the wire as an execution error,
only the status differs.
"""

import logging

from sqlroute.errors import HTTPError
from sqlroute.http.request import Request
from sqlroute.http.response import Response, error_response

logger = logging.getLogger("sqlroute.server")


def handle_http_error(exc: HTTPError, request: Request) -> Response:
    """Map an HTTPError to an envelope, keeping its headers (``Allow``)."""
    logger.debug("%d %s %s: %s", exc.status, request.method, request.path, exc.detail)
    response = error_response(exc.status, exc.detail or f"Error {exc.status}")
    return response.with_headers(exc.headers)


def handle_internal_error(exc: Exception, request: Request, *, debug: bool) -> Response:
    """Handle unexpected exceptions as 500 errors.

    The traceback is always logged. The message reaches the client only
    in debug mode.
    """
    logger.exception("500 %s %s", request.method, request.path)
    message = f"{type(exc).__name__}: {exc}" if debug else "Internal Server Error"
    return error_response(500, message)
