"""Development server.

Starts a uvicorn ASGI server with the live bodyrest App object.
"""

from typing import Any


def run_server(
    app: Any,
    host: str,
    port: int,
    *,
    log_level: str = "info",
) -> None:
    """Serve *app* with uvicorn until interrupted.

    Uvicorn's reload mode needs an import string, so a live ``App``
    object is always served without reload.

    Args:
        app: ASGI callable (bodyrest App instance).
        host: Bind host address.
        port: Bind port number.
        log_level: Uvicorn log level name.
    """
    import uvicorn

    uvicorn.run(app, host=host, port=port, log_level=log_level, lifespan="on")
