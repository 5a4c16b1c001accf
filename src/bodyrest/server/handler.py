"""ASGI handler: translates ASGI scope/messages to bodyrest types.

The only component that touches raw ASGI directly. Converts the scope
to a Request, matches it against the router, runs the matched raw
handler with a ResponseWriter, and closes the response.
"""

import logging

from bodyrest._internal.asgi import Receive, Scope, Send
from bodyrest._internal.invoke import invoke
from bodyrest._internal.types import ErrorRenderer
from bodyrest.errors import HTTPError
from bodyrest.http.request import Request
from bodyrest.http.writer import ResponseWriter
from bodyrest.routing.router import Router
from bodyrest.server.errors import render_http_error

logger = logging.getLogger("bodyrest.server")


async def handle_request(
    scope: Scope,
    receive: Receive,
    send: Send,
    *,
    router: Router,
    error_renderer: ErrorRenderer | None = None,
) -> None:
    """Process a single HTTP request through the full pipeline."""
    if scope["type"] != "http":
        return

    request = Request.from_asgi(scope, receive)
    writer = ResponseWriter(send)

    try:
        match = router.match(request.method, request.path)
    except HTTPError as exc:
        logger.debug("%d %s %s: %s", exc.status, request.method, request.path, exc.detail)
        await render_http_error(writer, request, exc, error_renderer)
    else:
        request = request.with_route(match.route.path, match.path_params)
        try:
            await invoke(match.route.handler, writer, request)
        except HTTPError as exc:
            logger.debug("%d %s %s: %s", exc.status, request.method, request.path, exc.detail)
            await render_http_error(writer, request, exc, error_renderer)
        except Exception:
            logger.exception("500 %s %s", request.method, request.path)
            await render_http_error(writer, request, HTTPError(status=500), error_renderer)

    await writer.finish()
