"""Signature inspection for target handlers.

A target handler describes the data a request must supply through its
annotated parameters::

    def update_user(user_id: int, body: UserPatch) -> RawHandler: ...

Each parameter is classified once per request into a ``ParamSpec``:

- ``BODY``: a user dataclass, decoded from the JSON body
- ``FORM``: the reserved ``FormData`` type, parsed from a multipart body
- ``SCALAR``: ``int``, ``str``, ``bool``, or ``float``, bound from a path variable
- ``UNSUPPORTED``: anything else; binding leaves it unfilled

``check_target()`` runs at registration and raises ``ConfigurationError``
for callables the dispatcher must never accept.
"""

import collections.abc
import inspect
import types
import typing
from dataclasses import dataclass
from enum import Enum
from typing import Any

from bodyrest.errors import ConfigurationError
from bodyrest.extraction import is_body_dataclass
from bodyrest.http.forms import FormData
from bodyrest.http.request import Request
from bodyrest.http.writer import ResponseWriter
from bodyrest.routing.params import SCALAR_TYPES


class ParamKind(Enum):
    BODY = "body"
    FORM = "form"
    SCALAR = "scalar"
    UNSUPPORTED = "unsupported"

    @property
    def is_body(self) -> bool:
        """True for the structured-body kinds (JSON or multipart)."""
        return self in (ParamKind.BODY, ParamKind.FORM)


@dataclass(frozen=True, slots=True)
class ParamSpec:
    """How one target handler parameter is bound."""

    name: str
    annotation: Any
    kind: ParamKind
    keyword_only: bool = False


def classify(annotation: Any) -> ParamKind:
    """Classify a resolved parameter annotation."""
    if annotation is FormData:
        return ParamKind.FORM
    if is_body_dataclass(annotation):
        return ParamKind.BODY
    if any(annotation is scalar for scalar in SCALAR_TYPES):
        return ParamKind.SCALAR
    return ParamKind.UNSUPPORTED


def describe_handler(target: Any) -> tuple[ParamSpec, ...]:
    """Return the parameter descriptors of *target*, in declaration order.

    ``*args`` and ``**kwargs`` are not part of the bound parameter list.

    Raises:
        TypeError: If *target* is not callable.
        ValueError: If no signature can be found for *target*.
        NameError: If a string annotation cannot be resolved.
    """
    sig = inspect.signature(target, eval_str=True)
    specs: list[ParamSpec] = []
    for param in sig.parameters.values():
        if param.kind in (param.VAR_POSITIONAL, param.VAR_KEYWORD):
            continue
        annotation = param.annotation
        if annotation is inspect.Parameter.empty:
            annotation = None
            kind = ParamKind.UNSUPPORTED
        else:
            kind = classify(annotation)
        specs.append(
            ParamSpec(
                name=param.name,
                annotation=annotation,
                kind=kind,
                keyword_only=param.kind is param.KEYWORD_ONLY,
            )
        )
    return tuple(specs)


def return_contract_problem(target: Any) -> str | None:
    """Describe why *target*'s declared return type can never be a raw handler.

    ``None`` when the annotation is missing or could describe one:
    ``Any``, ``Callable`` forms, classes defining ``__call__``, and unions
    with at least one such member. ``-> None``, ``-> str`` or
    ``-> SomeDataclass`` yield a message.

    Raises:
        TypeError, ValueError, NameError: As ``describe_handler``.
    """
    annotation = inspect.signature(target, eval_str=True).return_annotation
    if _may_be_handler(annotation):
        return None
    return f"handler is declared to return {annotation!r}, not a raw (writer, request) handler"


def _may_be_handler(annotation: Any) -> bool:
    if annotation is inspect.Signature.empty or annotation is Any:
        return True
    if isinstance(annotation, typing.TypeAliasType):
        return _may_be_handler(annotation.__value__)
    if annotation is None or annotation is type(None):
        return False
    origin = typing.get_origin(annotation)
    if origin is collections.abc.Callable:
        return True
    if origin is collections.abc.Awaitable or origin is collections.abc.Coroutine:
        # invoke() awaits the result, so judge what it resolves to
        args = typing.get_args(annotation)
        return _may_be_handler(args[-1]) if args else True
    if origin is typing.Union or origin is types.UnionType:
        return any(_may_be_handler(arg) for arg in typing.get_args(annotation))
    if origin is type:
        return False
    if origin is not None:
        annotation = origin
    if isinstance(annotation, type):
        return any("__call__" in vars(klass) for klass in annotation.__mro__)
    # TypeVars, Protocol instances and other typing constructs stay unchecked
    return True


def is_raw_handler_signature(sig: inspect.Signature) -> bool:
    """True if *sig* is ``(ResponseWriter, Request) -> None``."""
    params = [
        p
        for p in sig.parameters.values()
        if p.kind not in (p.VAR_POSITIONAL, p.VAR_KEYWORD)
    ]
    if len(params) != 2:
        return False
    if params[0].annotation is not ResponseWriter or params[1].annotation is not Request:
        return False
    return sig.return_annotation in (inspect.Signature.empty, None, type(None))


def check_target(target: Any) -> None:
    """Validate a target handler at registration time.

    Raises:
        ConfigurationError: If *target* is not callable, its signature
            cannot be inspected, or it already is a raw handler.
    """
    if not callable(target):
        msg = f"Handler is not a function: {target!r}"
        raise ConfigurationError(msg)

    try:
        sig = inspect.signature(target, eval_str=True)
    except (TypeError, ValueError, NameError) as exc:
        msg = f"Cannot inspect the signature of {_describe(target)}: {exc}"
        raise ConfigurationError(msg) from exc

    if is_raw_handler_signature(sig):
        msg = (
            f"{_describe(target)} is a raw (writer, request) handler, not a valid "
            "target; return a raw handler from a target function instead, "
            "or register it with App.handle()"
        )
        raise ConfigurationError(msg)


def _describe(target: Any) -> str:
    return getattr(target, "__qualname__", None) or repr(target)
