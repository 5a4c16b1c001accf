"""The adaptive dispatcher: turn a target handler into a raw handler.

A target handler declares what a request must supply and returns the
raw handler that writes the response::

    @dataclass
    class NewNote:
        title: str
        body: str = body_field(omitempty=True, default="")

    def create_note(book_id: int, note: NewNote) -> RawHandler:
        saved = notes.add(book_id, note)

        async def created(w: ResponseWriter, r: Request) -> None:
            await w.respond(Response.json(saved, status=201))

        return created

    router.add(Route("/books/{book_id}/notes", handle_to(create_note), frozenset({"POST"})))

Per request the dispatcher inspects the target's parameters, binds them
from the body and path, calls the target, and forwards the live writer
and request to whatever it returned. Failures never escape: they are
logged on ``bodyrest.dispatch`` and rendered as 400 (binding) or 500
(contract) through the error renderer.
"""

import inspect
import logging
from typing import Any

from bodyrest._internal.invoke import invoke
from bodyrest._internal.types import ErrorRenderer, RawHandler, TargetHandler
from bodyrest.binding import bind_arguments
from bodyrest.config import AppConfig
from bodyrest.errors import (
    BindingError,
    HTTPError,
    InvalidHandlerContract,
    SignatureIntrospectionError,
)
from bodyrest.http.request import Request
from bodyrest.http.writer import ResponseWriter
from bodyrest.server.errors import render_http_error
from bodyrest.signature import check_target, describe_handler, return_contract_problem

logger = logging.getLogger("bodyrest.dispatch")


def handle_to(
    target: TargetHandler,
    *,
    config: AppConfig | None = None,
    error_renderer: ErrorRenderer | None = None,
) -> RawHandler:
    """Wrap *target* into an async raw handler ``(writer, request) -> None``.

    Args:
        target: The target handler. Sync or async.
        config: Binding limits; ``AppConfig()`` defaults when omitted.
        error_renderer: Renderer for failures. Falls back to the
            process-wide renderer, then to an empty body.

    Raises:
        ConfigurationError: If *target* is not callable, cannot be
            inspected, or is itself a raw handler.
    """
    check_target(target)
    cfg = config or AppConfig()
    target_name = getattr(target, "__qualname__", None) or repr(target)

    async def dispatch(writer: ResponseWriter, request: Request) -> None:
        try:
            handler = await resolve_handler(target, request, cfg)
        except BindingError as exc:
            logger.warning("%d %s %s: %s", exc.status, request.method, request.path, exc.detail)
            await render_http_error(writer, request, exc, error_renderer)
            return
        except HTTPError as exc:
            logger.error("%d %s %s: %s", exc.status, request.method, request.path, exc.detail)
            await render_http_error(writer, request, exc, error_renderer)
            return
        except Exception:
            logger.exception(
                "target handler %s raised for %s %s", target_name, request.method, request.path
            )
            await render_http_error(writer, request, HTTPError(status=500), error_renderer)
            return

        try:
            await invoke(handler, writer, request)
        except Exception:
            logger.exception(
                "raw handler from %s raised for %s %s", target_name, request.method, request.path
            )
            await render_http_error(writer, request, HTTPError(status=500), error_renderer)

    dispatch.__name__ = f"dispatch_{getattr(target, '__name__', 'target')}"
    dispatch.__qualname__ = f"handle_to({target_name})"
    return dispatch


async def resolve_handler(target: TargetHandler, request: Request, config: AppConfig) -> RawHandler:
    """Bind *request* onto *target*, call it, and return its raw handler.

    Raises:
        BindingError: If the request cannot satisfy the parameters.
        HandlerContractError: If *target* cannot be inspected or does not
            return exactly one raw handler.
    """
    try:
        params = describe_handler(target)
        problem = return_contract_problem(target)
    except (TypeError, ValueError, NameError) as exc:
        raise SignatureIntrospectionError(f"cannot inspect handler: {exc}") from exc
    if problem is not None:
        # checked before binding: a miswired target answers 500 for any input
        raise InvalidHandlerContract(problem)

    bound = await bind_arguments(params, request, config)
    if len(bound) != len(params):
        raise SignatureIntrospectionError(
            f"got {len(bound)} arguments, expected {len(params)}"
        )

    result = await invoke(target, *bound.args, **bound.kwargs)
    return ensure_raw_handler(result)


def ensure_raw_handler(result: Any) -> RawHandler:
    """Return *result* if it can be called as ``(writer, request)``.

    Raises:
        InvalidHandlerContract: For tuples (more than one return value),
            non-callables, classes, and callables with another arity.
    """
    if isinstance(result, tuple):
        raise InvalidHandlerContract(
            f"handler does not return exactly one value (got {len(result)})"
        )
    if not callable(result) or isinstance(result, type):
        raise InvalidHandlerContract(
            f"handler returned {type(result).__name__}, not a raw (writer, request) handler"
        )
    try:
        inspect.signature(result).bind(None, None)
    except (TypeError, ValueError) as exc:
        raise InvalidHandlerContract(
            f"handler returned a callable that cannot take (writer, request): {exc}"
        ) from exc
    return result
