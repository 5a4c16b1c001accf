"""Error rendering for failed requests.

Every request-time failure ends here with a status code. The response
body is produced by an error renderer ``(writer, request, status)``:

- the renderer passed explicitly to ``App(error_renderer=...)`` or
  ``handle_to(..., error_renderer=...)``, otherwise
- the process-wide renderer installed with ``set_error_renderer()``,
  otherwise
- an empty ``text/plain`` body with the status code.

The process-wide slot is first-writer-wins: once a renderer is installed,
later ``set_error_renderer()`` calls are ignored without error.
"""

import logging
import threading

from bodyrest._internal.invoke import invoke
from bodyrest._internal.types import ErrorRenderer
from bodyrest.errors import HTTPError
from bodyrest.http.request import Request
from bodyrest.http.writer import ResponseWriter

logger = logging.getLogger("bodyrest.server")

_renderer: ErrorRenderer | None = None
_renderer_lock = threading.Lock()


def set_error_renderer(renderer: ErrorRenderer) -> None:
    """Install the process-wide error renderer. Only the first call counts.

    Call once at startup, before serving traffic. The renderer may run
    concurrently for many requests and must not mutate shared state.
    """
    global _renderer
    with _renderer_lock:
        if _renderer is None:
            _renderer = renderer


def get_error_renderer() -> ErrorRenderer | None:
    """Return the process-wide error renderer, if one is installed."""
    return _renderer


def write_default_error(writer: ResponseWriter, status: int) -> None:
    """Commit *status* with an empty plain-text body."""
    writer.set_header("content-type", "text/plain; charset=utf-8")
    writer.set_header("x-content-type-options", "nosniff")
    writer.write_header(status)


async def render_error(
    writer: ResponseWriter,
    request: Request,
    status: int,
    renderer: ErrorRenderer | None = None,
) -> None:
    """Hand *status* to the active error renderer.

    Nothing is written if the response already started; the failure is
    only logged. A renderer that raises falls back to the default body.
    """
    if writer.started:
        logger.warning(
            "cannot render %d for %s %s: response already started with %d",
            status,
            request.method,
            request.path,
            writer.status,
        )
        return

    active = renderer if renderer is not None else _renderer
    if active is not None:
        try:
            await invoke(active, writer, request, status)
        except Exception:
            logger.exception(
                "error renderer failed for %d %s %s", status, request.method, request.path
            )
        else:
            return
        if writer.started:
            return

    write_default_error(writer, status)


async def render_http_error(
    writer: ResponseWriter,
    request: Request,
    exc: HTTPError,
    renderer: ErrorRenderer | None = None,
) -> None:
    """Render an ``HTTPError``, carrying over its headers (e.g. ``Allow``)."""
    if not writer.started:
        for name, value in exc.headers:
            writer.add_header(name, value)
    await render_error(writer, request, exc.status, renderer)
