"""Form bodies: the ``FormData`` composite and its parsers.

A target handler parameter annotated ``FormData`` is bound from a
``multipart/form-data`` body instead of being decoded as JSON::

    def upload(form: FormData) -> RawHandler:
        avatar = form.files.get("avatar")
        ...

Multipart bodies go through ``python-multipart``'s push parser; the
URL-encoded case is plain ``urllib.parse``.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from urllib.parse import parse_qs

from python_multipart.multipart import MultipartParser, parse_options_header

MULTIPART = "multipart/form-data"
URLENCODED = "application/x-www-form-urlencoded"


@dataclass(frozen=True, slots=True)
class UploadFile:
    """One file part of a multipart body, held in memory."""

    filename: str
    content_type: str
    size: int
    _content: bytes

    async def read(self) -> bytes:
        return self._content

    async def save(self, path: Path) -> None:
        """Write the content to *path*; its directory must already exist."""
        path.write_bytes(self._content)

    def __repr__(self) -> str:
        return f"UploadFile({self.filename!r}, {self.content_type!r}, {self.size} bytes)"


class FormData(Mapping[str, str]):
    """Read-only form fields plus uploaded files.

    Indexing gives the first value sent for a field, ``get_list`` all of
    them. File parts live apart from text fields, under ``files``.
    """

    __slots__ = ("_fields", "_files")

    def __init__(
        self,
        fields: dict[str, list[str]],
        files: dict[str, UploadFile] | None = None,
    ) -> None:
        self._fields = fields
        self._files = files or {}

    @property
    def files(self) -> Mapping[str, UploadFile]:
        return self._files

    def __getitem__(self, key: str) -> str:
        return self._fields[key][0]

    def __contains__(self, key: object) -> bool:
        return key in self._fields

    def __iter__(self) -> Iterator[str]:
        return iter(self._fields)

    def __len__(self) -> int:
        return len(self._fields)

    def __repr__(self) -> str:
        shown = {name: values[0] for name, values in self._fields.items()}
        return f"FormData({shown!r}, files={sorted(self._files)!r})"

    def get(self, key: str, default: str | None = None) -> str | None:  # type: ignore[override]
        values = self._fields.get(key)
        return values[0] if values else default

    def get_list(self, key: str) -> list[str]:
        """Every value sent for *key*, e.g. repeated checkboxes."""
        return list(self._fields.get(key, ()))


def media_type(content_type: str | None) -> str:
    """``"Multipart/Form-Data; boundary=x"`` -> ``"multipart/form-data"``."""
    if not content_type:
        return ""
    return content_type.partition(";")[0].strip().lower()


def parse_form_data(body: bytes, content_type: str) -> FormData:
    """Parse *body* according to its form encoding.

    Raises:
        ValueError: For non-form content types and malformed bodies.
    """
    kind = media_type(content_type)
    if kind == URLENCODED:
        return parse_urlencoded(body)
    if kind == MULTIPART:
        return parse_multipart(body, content_type)
    msg = f"Unsupported form content type: {content_type!r}"
    raise ValueError(msg)


def parse_urlencoded(body: bytes) -> FormData:
    return FormData(parse_qs(body.decode("utf-8"), keep_blank_values=True))


@dataclass(slots=True)
class _Part:
    headers: dict[str, str] = field(default_factory=dict)
    content: bytearray = field(default_factory=bytearray)
    name: str | None = None
    filename: str | None = None


class _PartCollector:
    """Callback sink for ``MultipartParser``.

    Header names and values may arrive split across callbacks, so both are
    buffered until ``on_header_end``.
    """

    def __init__(self) -> None:
        self.fields: dict[str, list[str]] = {}
        self.files: dict[str, UploadFile] = {}
        self.complete = False
        self._part = _Part()
        self._header_name = bytearray()
        self._header_value = bytearray()

    def callbacks(self) -> dict[str, object]:
        return {
            "on_part_begin": self.on_part_begin,
            "on_header_field": self.on_header_field,
            "on_header_value": self.on_header_value,
            "on_header_end": self.on_header_end,
            "on_part_data": self.on_part_data,
            "on_part_end": self.on_part_end,
            "on_end": self.on_end,
        }

    def on_part_begin(self) -> None:
        self._part = _Part()

    def on_header_field(self, data: bytes, start: int, end: int) -> None:
        self._header_name += data[start:end]

    def on_header_value(self, data: bytes, start: int, end: int) -> None:
        self._header_value += data[start:end]

    def on_header_end(self) -> None:
        name = self._header_name.decode("latin-1").lower()
        value = self._header_value.decode("latin-1")
        self._header_name.clear()
        self._header_value.clear()
        self._part.headers[name] = value
        if name == "content-disposition":
            _, params = parse_options_header(value.encode("latin-1"))
            if b"name" in params:
                self._part.name = params[b"name"].decode("utf-8")
            if b"filename" in params:
                self._part.filename = params[b"filename"].decode("utf-8")

    def on_part_data(self, data: bytes, start: int, end: int) -> None:
        self._part.content += data[start:end]

    def on_part_end(self) -> None:
        part = self._part
        if part.name is None:
            return
        if part.filename is None:
            text = part.content.decode("utf-8", errors="replace")
            self.fields.setdefault(part.name, []).append(text)
            return
        content = bytes(part.content)
        self.files[part.name] = UploadFile(
            filename=part.filename,
            content_type=part.headers.get("content-type", "application/octet-stream"),
            size=len(content),
            _content=content,
        )

    def on_end(self) -> None:
        self.complete = True


def parse_multipart(body: bytes, content_type: str) -> FormData:
    """Parse a complete ``multipart/form-data`` body.

    Raises:
        ValueError: Missing boundary, a body the parser rejects, or a body
            that stops before the closing boundary.
    """
    _, options = parse_options_header(content_type.encode("latin-1"))
    boundary = options.get(b"boundary")
    if not boundary:
        msg = "Multipart form data missing boundary parameter"
        raise ValueError(msg)

    collector = _PartCollector()
    parser = MultipartParser(boundary, collector.callbacks())
    parser.write(body)
    parser.finalize()
    if not collector.complete:
        msg = "Multipart form data ended before the closing boundary"
        raise ValueError(msg)
    return FormData(collector.fields, collector.files)
