"""bodyrest exception hierarchy.

Shared across Router, App, dispatcher, and binder so every module
raises and catches the same types.

Two tiers reach the client: ``BindingError`` (400, the request did not
supply what the handler declares) and ``HandlerContractError`` (500, the
handler itself is miswired). ``ConfigurationError`` never reaches a
client; it is raised at registration and stops startup.
"""

from dataclasses import dataclass


class BodyrestError(Exception):
    """Base for all bodyrest-specific errors."""


class ConfigurationError(BodyrestError):
    """Raised when a handler registration or app configuration is invalid.

    Raised from ``handle_to()`` and ``App.route()`` so a malformed target
    handler stops the process before it serves traffic.
    """


@dataclass(frozen=True, slots=True)
class HTTPError(BodyrestError):
    """An error that maps directly to an HTTP status code.

    Raised by the router and the dispatcher. Caught at the request
    boundary and handed to the error renderer with its ``status``.

    Subclasses carrying extra data store it with ``object.__setattr__``:
    the frozen ``__setattr__`` refuses plain assignment.
    """

    status: int
    detail: str = ""
    headers: tuple[tuple[str, str], ...] = ()

    def __str__(self) -> str:
        if self.detail:
            return f"{self.status}: {self.detail}"
        return str(self.status)


class NotFound(HTTPError):  # noqa: N818
    """404: no route matched the request path."""

    def __init__(self, detail: str = "Not Found") -> None:
        super().__init__(status=404, detail=detail)


class MethodNotAllowed(HTTPError):  # noqa: N818
    """405: route exists but not for this HTTP method.

    Includes an ``Allow`` header listing the valid methods.
    """

    def __init__(self, allowed: frozenset[str], detail: str = "") -> None:
        allow_value = ", ".join(sorted(allowed))
        default_detail = f"Method not allowed. Allowed methods: {allow_value}"
        super().__init__(
            status=405,
            detail=detail or default_detail,
            headers=(("Allow", allow_value),),
        )


# -- Client errors (400) --


class BindingError(HTTPError):
    """400: request data could not be bound to the handler's parameters."""

    def __init__(self, detail: str = "Bad Request") -> None:
        super().__init__(status=400, detail=detail)


class EmptyBody(BindingError):
    """A body-carrying method arrived without a body."""

    def __init__(self, method: str) -> None:
        super().__init__(f"request body is empty for {method}")


class MalformedBody(BindingError):
    """The JSON body could not be decoded into the declared dataclass."""


class MalformedMultipart(BindingError):
    """The multipart form could not be parsed."""


class MissingRequiredField(BindingError):
    """A decoded body left required (non-omissible) fields empty."""

    def __init__(self, fields: tuple[str, ...]) -> None:
        object.__setattr__(self, "fields", fields)
        super().__init__(f"required fields are empty: {', '.join(fields)}")


class PathParamTypeMismatch(BindingError):
    """A path segment could not be converted to the parameter's type."""

    def __init__(self, index: int, value: str, target: type) -> None:
        object.__setattr__(self, "index", index)
        object.__setattr__(self, "value", value)
        super().__init__(
            f"failed to parse path param under index {index}: "
            f"{value!r} is not a valid {target.__name__}"
        )


class DuplicateBodyParameter(BindingError):
    """The handler declares more than one structured-body parameter."""

    def __init__(self, name: str) -> None:
        super().__init__(f"got more than one body parameter (second is {name!r})")


class UnboundParameter(BindingError):
    """A parameter was left without a value after binding."""

    def __init__(self, names: tuple[str, ...]) -> None:
        object.__setattr__(self, "names", names)
        super().__init__(f"parameters left unbound: {', '.join(names)}")


# -- Server errors (500) --


class HandlerContractError(HTTPError):
    """500: the target handler violates the dispatcher's contract."""

    def __init__(self, detail: str = "Internal Server Error") -> None:
        super().__init__(status=500, detail=detail)


class InvalidHandlerContract(HandlerContractError):
    """The target did not return exactly one raw request handler."""


class SignatureIntrospectionError(HandlerContractError):
    """The target's signature could not be inspected at call time."""
