"""Segment trie router.

The router only decides which route a request belongs to. It hands the
winning ``Route`` back so the transport can stamp ``route.path`` (the
pattern) onto the request; the binder then lines up pattern segments and
path segments one to one. For that reason every ``{...}`` placeholder
matches exactly one segment: there is no multi-segment wildcard.
"""

from __future__ import annotations

import re
from collections.abc import Iterator
from dataclasses import dataclass, field

from bodyrest.errors import ConfigurationError, MethodNotAllowed, NotFound
from bodyrest.routing.params import CONVERTERS
from bodyrest.routing.route import PathSegment, Route, RouteMatch


def split_path(path: str) -> list[str]:
    """Segments of a request path or pattern.

    One leading and one trailing slash are dropped; empty segments in
    between are kept, so ``/x//7`` never matches ``/x/{id}``::

        split_path("/users/7/")  # ["users", "7"]
        split_path("/x//7")      # ["x", "", "7"]
        split_path("/")          # []
    """
    trimmed = path.removeprefix("/").removesuffix("/")
    return trimmed.split("/") if trimmed else []


def parse_path(path: str) -> list[PathSegment]:
    """Split a route pattern into static and placeholder segments.

    ``{name}`` matches any segment, ``{name:int}`` (or ``float``, ``bool``,
    ``str``) only segments the converter accepts::

        parse_path("/users/{id:int}")
        # [PathSegment("users"), PathSegment("{id:int}", True, "id", "int")]

    Raises:
        ConfigurationError: For ``<param>`` placeholders, unnamed or
            unknown placeholders, and empty segments such as ``/a//b``.
    """
    segments: list[PathSegment] = []
    for part in split_path(path):
        if not part:
            msg = f"Route pattern {path!r} contains an empty segment"
            raise ConfigurationError(msg)
        if part.startswith("<") and part.endswith(">"):
            msg = f"Route pattern {path!r} uses <param> placeholders; bodyrest expects {{param}}."
            raise ConfigurationError(msg)
        if not (part.startswith("{") and part.endswith("}")):
            segments.append(PathSegment(value=part))
            continue

        name, _, converter = part[1:-1].partition(":")
        converter = converter or "str"
        if not name:
            msg = f"Placeholder without a name in route pattern {path!r}"
            raise ConfigurationError(msg)
        if converter not in CONVERTERS:
            msg = (
                f"Unknown path converter {converter!r} in {path!r}. "
                f"Available: {', '.join(sorted(CONVERTERS))}"
            )
            raise ConfigurationError(msg)
        segments.append(PathSegment(part, is_param=True, param_name=name, param_type=converter))
    return segments


@dataclass(slots=True)
class _Node:
    static: dict[str, _Node] = field(default_factory=dict)
    params: list[_ParamEdge] = field(default_factory=list)
    routes: dict[str, Route] = field(default_factory=dict)


@dataclass(slots=True)
class _ParamEdge:
    name: str
    converter: str
    regex: re.Pattern[str]
    node: _Node


class Router:
    """Maps ``(method, path)`` to a registered ``Route``.

    Static segments win over placeholders; placeholders at the same level
    are tried in registration order, so register ``{id:int}`` before a
    catch-any ``{slug}``::

        router = Router()
        router.add(Route("/users/{id:int}", raw_handler, frozenset({"GET"})))
        router.compile()
        router.match("GET", "/users/42").path_params  # {"id": "42"}
    """

    __slots__ = ("_compiled", "_root", "_routes")

    def __init__(self) -> None:
        self._root = _Node()
        self._routes: list[Route] = []
        self._compiled = False

    def add(self, route: Route) -> None:
        """Register *route*. Only allowed before ``compile()``."""
        if self._compiled:
            msg = "Cannot add routes after compilation."
            raise RuntimeError(msg)

        node = self._root
        for seg in parse_path(route.path):
            node = self._param_child(node, seg) if seg.is_param else self._static_child(node, seg)
        for method in route.methods:
            node.routes[method] = route
        self._routes.append(route)

    @staticmethod
    def _static_child(node: _Node, seg: PathSegment) -> _Node:
        return node.static.setdefault(seg.value, _Node())

    @staticmethod
    def _param_child(node: _Node, seg: PathSegment) -> _Node:
        for edge in node.params:
            if (edge.name, edge.converter) == (seg.param_name, seg.param_type):
                return edge.node
        pattern, _ = CONVERTERS[seg.param_type]
        edge = _ParamEdge(seg.param_name or "", seg.param_type, re.compile(pattern), _Node())
        node.params.append(edge)
        return edge.node

    @property
    def routes(self) -> list[Route]:
        """All registered routes in registration order."""
        return list(self._routes)

    def compile(self) -> None:
        """Freeze the route table."""
        self._compiled = True

    def match(self, method: str, path: str) -> RouteMatch:
        """Resolve *method* and *path* to a route.

        Raises:
            NotFound: No route pattern matches *path*.
            MethodNotAllowed: A pattern matches, but not for *method*.
        """
        candidate = next(self._walk(self._root, split_path(path), {}), None)
        if candidate is None:
            raise NotFound(f"No route matches {method} {path!r}")

        routes, params = candidate
        route = routes.get(method)
        if route is None and method == "HEAD":
            route = routes.get("GET")
        if route is None:
            raise MethodNotAllowed(frozenset(routes))
        return RouteMatch(route=route, path_params=params)

    def _walk(
        self,
        node: _Node,
        parts: list[str],
        params: dict[str, str],
    ) -> Iterator[tuple[dict[str, Route], dict[str, str]]]:
        if not parts:
            if node.routes:
                yield node.routes, params
            return

        head, rest = parts[0], parts[1:]
        child = node.static.get(head)
        if child is not None:
            yield from self._walk(child, rest, params)
        for edge in node.params:
            if edge.regex.fullmatch(head):
                yield from self._walk(edge.node, rest, {**params, edge.name: head})
