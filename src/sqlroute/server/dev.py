"""Server launch.

Starts a pounce ASGI server with the live sqlroute App object. pounce is
an optional dependency (``pip install sqlroute[server]``).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlroute.errors import ConfigurationError

if TYPE_CHECKING:
    from sqlroute.app import App


def run_server(
    app: App,
    host: str,
    port: int,
    *,
    reload: bool = False,
    request_timeout: float = 30.0,
    keep_alive_timeout: float = 5.0,
    log_level: str = "info",
) -> None:
    """Start a pounce server with the given App.

    pounce's ``run()`` takes an import string, but sqlroute has a live
    ``App`` object, so ``pounce.Server`` is used directly with the ASGI
    callable. Blocks until the server stops.

    Args:
        app: ASGI callable (sqlroute App instance).
        host: Bind host address.
        port: Bind port number.
        reload: Restart on file changes (debug mode).
        request_timeout: Individual request timeout (seconds).
        keep_alive_timeout: Keep-alive connection timeout (seconds).
        log_level: pounce log level.
    """
    try:
        from pounce.config import ServerConfig
        from pounce.server import Server
    except ImportError as exc:
        msg = (
            "Serving requires the pounce ASGI server. "
            "Install it with: pip install sqlroute[server]"
        )
        raise ConfigurationError(msg) from exc

    config = ServerConfig(
        host=host,
        port=port,
        workers=1,
        reload=reload,
        request_timeout=request_timeout,
        keep_alive_timeout=keep_alive_timeout,
        log_level=log_level,
    )
    server = Server(config, app)
    server.run()
