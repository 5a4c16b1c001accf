"""A response as a value.

Raw handlers may build one and pass it to ``ResponseWriter.respond()``
instead of writing status, headers and body separately. The test client
returns the same type.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, replace
from typing import Any


@dataclass(frozen=True, slots=True)
class Response:
    """Status, content type, extra headers and body.

    ``with_*`` methods return modified copies::

        Response.json({"id": 7}, status=201).with_header("Location", "/notes/7")
    """

    body: str | bytes = ""
    status: int = 200
    content_type: str = "text/plain; charset=utf-8"
    headers: tuple[tuple[str, str], ...] = ()

    @classmethod
    def json(cls, data: Any, *, status: int = 200) -> Response:
        return cls(json.dumps(data), status=status, content_type="application/json")

    def with_status(self, status: int) -> Response:
        return replace(self, status=status)

    def with_header(self, name: str, value: str) -> Response:
        return replace(self, headers=(*self.headers, (name, value)))

    @property
    def body_bytes(self) -> bytes:
        body = self.body
        return body.encode("utf-8") if isinstance(body, str) else body

    @property
    def text(self) -> str:
        body = self.body
        return body.decode("utf-8") if isinstance(body, bytes) else body

    def header(self, name: str) -> str | None:
        """First value of header *name*, compared case-insensitively."""
        wanted = name.lower()
        return next((value for key, value in self.headers if key.lower() == wanted), None)
