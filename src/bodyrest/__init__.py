"""bodyrest: adaptive request dispatching for ASGI.

Write a function that declares what a request must supply, return the
raw handler that writes the response, and let bodyrest do the binding.

Basic usage::

    from dataclasses import dataclass

    from bodyrest import App, RawHandler, Request, Response, ResponseWriter

    app = App()

    @dataclass
    class Greeting:
        name: str

    @app.route("/greet/{times}", methods=["POST"])
    def greet(times: int, body: Greeting) -> RawHandler:
        async def reply(w: ResponseWriter, r: Request) -> None:
            await w.respond(Response.json({"hello": [body.name] * times}))

        return reply

    app.run()

Outside an ``App``, ``handle_to(target)`` turns any target function into
a raw ``(writer, request)`` handler.
"""

__version__ = "0.1.0"
__all__ = [
    "App",
    "AppConfig",
    "BindingError",
    "BodyrestError",
    "ConfigurationError",
    "DuplicateBodyParameter",
    "EmptyBody",
    "FormData",
    "HTTPError",
    "HandlerContractError",
    "InvalidHandlerContract",
    "MalformedBody",
    "MalformedMultipart",
    "MethodNotAllowed",
    "MissingRequiredField",
    "NotFound",
    "PathParamTypeMismatch",
    "RawHandler",
    "Request",
    "Response",
    "ResponseWriter",
    "SignatureIntrospectionError",
    "UnboundParameter",
    "UploadFile",
    "are_required_fields_valid",
    "body_field",
    "handle_to",
    "set_error_renderer",
]

_ERRORS = frozenset(
    {
        "BindingError",
        "BodyrestError",
        "ConfigurationError",
        "DuplicateBodyParameter",
        "EmptyBody",
        "HTTPError",
        "HandlerContractError",
        "InvalidHandlerContract",
        "MalformedBody",
        "MalformedMultipart",
        "MethodNotAllowed",
        "MissingRequiredField",
        "NotFound",
        "PathParamTypeMismatch",
        "SignatureIntrospectionError",
        "UnboundParameter",
    }
)


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import bodyrest`` fast while providing a clean top-level API.
    """
    if name == "App":
        from bodyrest.app import App

        return App

    if name == "AppConfig":
        from bodyrest.config import AppConfig

        return AppConfig

    if name == "handle_to":
        from bodyrest.dispatch import handle_to

        return handle_to

    if name == "set_error_renderer":
        from bodyrest.server.errors import set_error_renderer

        return set_error_renderer

    if name == "Request":
        from bodyrest.http.request import Request

        return Request

    if name == "Response":
        from bodyrest.http.response import Response

        return Response

    if name == "ResponseWriter":
        from bodyrest.http.writer import ResponseWriter

        return ResponseWriter

    if name in ("FormData", "UploadFile"):
        from bodyrest.http import forms as _forms

        return getattr(_forms, name)

    if name == "body_field":
        from bodyrest.extraction import body_field

        return body_field

    if name == "are_required_fields_valid":
        from bodyrest.validation import are_required_fields_valid

        return are_required_fields_valid

    if name == "RawHandler":
        from bodyrest._internal.types import RawHandler

        return RawHandler

    if name in _ERRORS:
        from bodyrest import errors as _errors

        return getattr(_errors, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
