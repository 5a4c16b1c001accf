"""Argument binding: map one request onto a target handler's parameters.

Structured bodies come from the payload; scalars come from path
variables. Scalars carry no naming convention: the Nth scalar parameter
binds the Nth ``{...}`` segment of the route pattern, left to right::

    @app.route("/teams/{team}/members/{member}")
    def member(team: str, member: int) -> RawHandler: ...

    # GET /teams/core/members/7  ->  member("core", 7)

Parameter order must therefore mirror path-variable order. A body
parameter may appear anywhere in the list without disturbing that order.
"""

from dataclasses import dataclass, field
from typing import Any

from bodyrest.config import AppConfig
from bodyrest.errors import (
    DuplicateBodyParameter,
    EmptyBody,
    MalformedBody,
    MalformedMultipart,
    MissingRequiredField,
    PathParamTypeMismatch,
    UnboundParameter,
)
from bodyrest.extraction import decode_dataclass, loads
from bodyrest.http.forms import MULTIPART, FormData, media_type
from bodyrest.http.request import Request
from bodyrest.routing.params import convert_scalar
from bodyrest.routing.router import split_path
from bodyrest.signature import ParamKind, ParamSpec
from bodyrest.validation import find_missing_fields

_UNSET: Any = object()


@dataclass(slots=True)
class BoundArguments:
    """The bound argument vector, split for the call site."""

    args: list[Any] = field(default_factory=list)
    kwargs: dict[str, Any] = field(default_factory=dict)

    def __len__(self) -> int:
        return len(self.args) + len(self.kwargs)


async def bind_arguments(
    params: tuple[ParamSpec, ...],
    request: Request,
    config: AppConfig,
) -> BoundArguments:
    """Resolve every parameter in *params* from *request*.

    Raises:
        BindingError: One of its subclasses, describing the first failure.
    """
    if not params:
        return BoundArguments()

    if request.method in config.body_methods and not await request.has_body():
        raise EmptyBody(request.method)

    slots: list[Any] = [_UNSET] * len(params)
    body_consumed = False
    last_index = -1
    # same segmentation the router matched with; index 0 stands for the root
    pattern_parts = ["", *split_path(request.route_pattern)]
    path_parts = ["", *split_path(request.path)]

    for i, spec in enumerate(params):
        if spec.kind.is_body:
            if body_consumed:
                raise DuplicateBodyParameter(spec.name)
            if spec.kind is ParamKind.FORM:
                slots[i] = await bind_form(request, config.max_multipart_size)
            else:
                slots[i] = await bind_json(request, spec.annotation)
            body_consumed = True
        elif spec.kind is ParamKind.SCALAR:
            index = next_path_variable(pattern_parts, last_index)
            if index is None or index >= len(path_parts):
                continue
            raw = path_parts[index]
            try:
                slots[i] = convert_scalar(raw, spec.annotation)
            except ValueError:
                raise PathParamTypeMismatch(index, raw, spec.annotation) from None
            last_index = index

    unbound = tuple(
        spec.name for spec, value in zip(params, slots, strict=True) if value is _UNSET
    )
    if unbound:
        raise UnboundParameter(unbound)

    bound = BoundArguments()
    for spec, value in zip(params, slots, strict=True):
        if spec.keyword_only:
            bound.kwargs[spec.name] = value
        else:
            bound.args.append(value)
    return bound


def next_path_variable(pattern_parts: list[str], after: int) -> int | None:
    """Index of the first ``{...}`` pattern segment past *after*, if any."""
    for index in range(after + 1, len(pattern_parts)):
        part = pattern_parts[index]
        if "{" in part and "}" in part:
            return index
    return None


async def bind_json(request: Request, datacls: type) -> Any:
    """Decode the JSON body into *datacls* and check its required fields.

    Raises:
        MalformedBody: If the body is not JSON or does not fit *datacls*.
        MissingRequiredField: If required fields are left empty.
    """
    raw = await request.body()
    try:
        instance = decode_dataclass(datacls, loads(raw))
    except (ValueError, TypeError) as exc:
        # decode failures subclass ValueError; __post_init__ checks may raise TypeError
        raise MalformedBody(f"failed to parse request body: {exc}") from exc

    missing = find_missing_fields(instance)
    if missing:
        raise MissingRequiredField(missing)
    return instance


async def bind_form(request: Request, max_size: int) -> FormData:
    """Parse the multipart body, reading at most *max_size* bytes.

    Raises:
        MalformedMultipart: On a non-multipart content type, an oversized
            body, or a body the multipart parser rejects.
    """
    if media_type(request.content_type) != MULTIPART:
        raise MalformedMultipart(
            f"request Content-Type isn't {MULTIPART}: {request.content_type!r}"
        )
    declared = request.content_length
    if declared is not None and declared > max_size:
        raise MalformedMultipart(f"multipart body of {declared} bytes exceeds {max_size}")
    try:
        return await request.form(limit=max_size)
    except ValueError as exc:
        raise MalformedMultipart(f"failed to parse multipart form: {exc}") from exc
