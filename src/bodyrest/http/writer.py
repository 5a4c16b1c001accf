"""Response sink: the writer half of a raw request handler.

A raw handler receives ``(writer, request)`` and completes the exchange
through the writer. Headers and status are held until the first body
write (or ``finish()``), then streamed through ASGI ``send()``; the body
itself is never buffered.

Usage::

    async def hello(w: ResponseWriter, r: Request) -> None:
        w.set_header("content-type", "text/plain")
        w.write_header(201)
        await w.write("created")
"""

import logging

from bodyrest._internal.asgi import Send
from bodyrest.http.response import Response

logger = logging.getLogger("bodyrest.server")


def body_allowed(status: int) -> bool:
    """Whether an HTTP status code permits a response body."""
    # RFC: 1xx, 204, and 304 responses do not include a message body.
    return not (100 <= status < 200 or status in {204, 304})


class ResponseWriter:
    """Streams one HTTP response through an ASGI ``send`` callable.

    ``write_header`` commits the status; later calls are ignored with a
    warning. Writing without committing a status sends ``200``. A raw
    handler that writes nothing at all yields ``200`` with an empty body
    once the transport calls ``finish()``.
    """

    __slots__ = ("_finished", "_headers", "_send", "_sent_start", "_status")

    def __init__(self, send: Send) -> None:
        self._send = send
        self._headers: list[tuple[str, str]] = []
        self._status: int | None = None
        self._sent_start = False
        self._finished = False

    # -- State --

    @property
    def status(self) -> int:
        """The committed status, or ``200`` if none was written yet."""
        return self._status if self._status is not None else 200

    @property
    def started(self) -> bool:
        """True once a status was committed or any body byte was sent."""
        return self._status is not None or self._sent_start

    @property
    def finished(self) -> bool:
        return self._finished

    @property
    def headers(self) -> tuple[tuple[str, str], ...]:
        """Headers queued for the response start message."""
        return tuple(self._headers)

    # -- Header phase --

    def set_header(self, name: str, value: str) -> None:
        """Replace any queued value for *name* with *value*."""
        if self._sent_start:
            logger.warning("header %r set after the response started; ignored", name)
            return
        lowered = name.lower()
        self._headers = [(k, v) for k, v in self._headers if k.lower() != lowered]
        self._headers.append((name, value))

    def add_header(self, name: str, value: str) -> None:
        """Queue an additional value for *name*."""
        if self._sent_start:
            logger.warning("header %r added after the response started; ignored", name)
            return
        self._headers.append((name, value))

    def write_header(self, status: int) -> None:
        """Commit the response status. The first call wins."""
        if self._status is not None or self._sent_start:
            logger.warning(
                "superfluous write_header(%d); status %d already committed",
                status,
                self.status,
            )
            return
        self._status = status

    # -- Body phase --

    async def write(self, data: str | bytes) -> None:
        """Send a body chunk, committing ``200`` if no status was written."""
        if self._finished:
            msg = "write() after finish()"
            raise RuntimeError(msg)
        chunk = data.encode("utf-8") if isinstance(data, str) else data
        if not self._sent_start:
            await self._start(content_length=None)
        if not chunk or not body_allowed(self.status):
            return
        await self._send({"type": "http.response.body", "body": chunk, "more_body": True})

    async def respond(self, response: Response) -> None:
        """Write a complete ``Response`` value: headers, status, then body."""
        self.set_header("content-type", response.content_type)
        for name, value in response.headers:
            self.add_header(name, value)
        self.write_header(response.status)
        body = response.body_bytes
        if body:
            await self.write(body)

    async def finish(self) -> None:
        """Close the response. Safe to call more than once."""
        if self._finished:
            return
        if not self._sent_start:
            await self._start(content_length=0)
        self._finished = True
        await self._send({"type": "http.response.body", "body": b"", "more_body": False})

    async def _start(self, *, content_length: int | None) -> None:
        raw_headers: list[tuple[bytes, bytes]] = [
            (name.lower().encode("latin-1"), value.encode("latin-1"))
            for name, value in self._headers
        ]
        if content_length is not None:
            raw_headers.append((b"content-length", str(content_length).encode("latin-1")))
        self._sent_start = True
        await self._send(
            {
                "type": "http.response.start",
                "status": self.status,
                "headers": raw_headers,
            }
        )
