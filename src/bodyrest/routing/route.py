"""Value types shared by the router and the app."""

from dataclasses import dataclass

from bodyrest._internal.types import RawHandler


@dataclass(frozen=True, slots=True)
class PathSegment:
    """One ``/``-separated piece of a pattern.

    ``users`` is static; ``{id}`` and ``{id:int}`` are placeholders, the
    latter restricted to what the ``int`` converter accepts.
    """

    value: str
    is_param: bool = False
    param_name: str | None = None
    param_type: str = "str"


@dataclass(frozen=True, slots=True)
class Route:
    """A pattern bound to a raw handler for a set of methods.

    Target handlers are wrapped by ``handle_to()`` before they become a
    ``Route``; ``target`` remembers the function that was wrapped.
    """

    path: str
    handler: RawHandler
    methods: frozenset[str]
    name: str | None = None
    target: object | None = None


@dataclass(frozen=True, slots=True)
class RouteMatch:
    route: Route
    path_params: dict[str, str]
