"""The request object handed to raw handlers and the binder.

Everything but the body is fixed when the request is built from the ASGI
scope. After routing, ``with_route`` stamps the matched pattern onto a
copy; the binder reads path variables from that pattern by position.
"""

from __future__ import annotations

import json
from collections.abc import AsyncGenerator
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Any

from bodyrest._internal.asgi import Receive
from bodyrest.http.headers import Headers

if TYPE_CHECKING:
    from bodyrest.http.forms import FormData


class BodyTooLarge(ValueError):
    """The body is longer than the limit a reader asked for."""

    def __init__(self, limit: int) -> None:
        self.limit = limit
        super().__init__(f"request body exceeds {limit} bytes")


@dataclass(slots=True)
class _BodyCache:
    # Shared by every routed copy of one request; receive() runs once.
    raw: bytes | None = None
    form: FormData | None = None
    # Chunks pulled by has_body() that body() and stream() have not seen yet
    peeked: list[bytes] = field(default_factory=list)
    exhausted: bool = False


@dataclass(frozen=True, slots=True)
class Request:
    """A single HTTP request.

    Metadata attributes are frozen. The body is read lazily through the
    async accessors and cached, so ``body()``, ``json()`` and ``form()``
    may be called in any order and any number of times.
    """

    method: str
    path: str
    headers: Headers
    route_pattern: str
    path_params: dict[str, str]
    http_version: str
    server: tuple[str, int] | None
    client: tuple[str, int] | None
    _receive: Receive
    _cache: _BodyCache = field(default_factory=_BodyCache, repr=False, compare=False)

    @property
    def content_type(self) -> str | None:
        return self.headers.get("content-type")

    @property
    def content_length(self) -> int | None:
        """Declared body length; ``None`` if the header is absent or garbage."""
        declared = self.headers.get("content-length")
        if declared is None or not declared.isdigit():
            return None
        return int(declared)

    async def _pull(self) -> bytes | None:
        """Next non-empty chunk off the wire; ``None`` once the body ended."""
        cache = self._cache
        while not cache.exhausted:
            message = await self._receive()
            if message.get("type") == "http.disconnect":
                cache.exhausted = True
                break
            cache.exhausted = not message.get("more_body", False)
            chunk = message.get("body", b"")
            if chunk:
                return chunk
        return None

    async def stream(self) -> AsyncGenerator[bytes]:
        """Yield body chunks as they arrive, stopping at disconnect.

        A body that was already read in full is yielded as one chunk.
        """
        cache = self._cache
        if cache.raw is not None:
            if cache.raw:
                yield cache.raw
            return
        while cache.peeked:
            yield cache.peeked.pop(0)
        while True:
            chunk = await self._pull()
            if chunk is None:
                return
            yield chunk

    async def body(self, *, limit: int | None = None) -> bytes:
        """The whole body.

        Raises:
            BodyTooLarge: When *limit* is given and the body is longer,
                whether or not it was already read.
        """
        cached = self._cache.raw
        if cached is not None:
            if limit is not None and len(cached) > limit:
                raise BodyTooLarge(limit)
            return cached

        buffer = bytearray()
        async for chunk in self.stream():
            buffer += chunk
            if limit is not None and len(buffer) > limit:
                raise BodyTooLarge(limit)
        self._cache.raw = bytes(buffer)
        return self._cache.raw

    async def has_body(self) -> bool:
        """False for ``Content-Length: 0`` or when no bytes arrive.

        Reads at most one chunk and keeps it for ``body()``, so a later
        size-limited read still sees every byte.
        """
        if self.content_length == 0:
            return False
        cache = self._cache
        if cache.raw is not None:
            return len(cache.raw) > 0
        if cache.peeked:
            return True
        chunk = await self._pull()
        if chunk is None:
            return False
        cache.peeked.append(chunk)
        return True

    async def json(self) -> Any:
        return json.loads(await self.body())

    async def text(self) -> str:
        return (await self.body()).decode("utf-8")

    async def form(self, *, limit: int | None = None) -> FormData:
        """The body parsed as a URL-encoded or multipart form.

        A missing Content-Type is treated as URL-encoded.

        Raises:
            ValueError: Not a form encoding, or a malformed payload.
            BodyTooLarge: When *limit* is given and the body is longer.
        """
        if self._cache.form is not None:
            return self._cache.form

        from bodyrest.http.forms import URLENCODED, parse_form_data

        raw = await self.body(limit=limit)
        self._cache.form = parse_form_data(raw, self.content_type or URLENCODED)
        return self._cache.form

    def with_route(self, route_pattern: str, path_params: dict[str, str]) -> Request:
        """Copy carrying the router's match; the body cache is shared."""
        return replace(self, route_pattern=route_pattern, path_params=path_params)

    @classmethod
    def from_asgi(
        cls,
        scope: dict[str, Any],
        receive: Receive,
        route_pattern: str = "",
        path_params: dict[str, str] | None = None,
    ) -> Request:
        server = scope.get("server")
        client = scope.get("client")
        return cls(
            method=scope["method"],
            path=scope["path"],
            headers=Headers(tuple(scope.get("headers", ()))),
            route_pattern=route_pattern,
            path_params=path_params or {},
            http_version=scope.get("http_version", "1.1"),
            server=tuple(server) if server else None,
            client=tuple(client) if client else None,
            _receive=receive,
        )
