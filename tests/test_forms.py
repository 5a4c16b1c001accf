"""Tests for bodyrest.http.forms: URL-encoded and multipart parsing."""

from pathlib import Path

import pytest

from bodyrest.http.forms import (
    FormData,
    UploadFile,
    media_type,
    parse_form_data,
    parse_multipart,
)
from bodyrest.testing import encode_multipart


class TestMediaType:
    def test_strips_parameters(self) -> None:
        assert media_type("Multipart/Form-Data; boundary=x") == "multipart/form-data"

    def test_empty(self) -> None:
        assert media_type(None) == ""


class TestFormData:
    def test_first_value(self) -> None:
        form = FormData({"tag": ["a", "b"]})
        assert form["tag"] == "a"
        assert form.get_list("tag") == ["a", "b"]
        assert form.get("missing") is None

    def test_files(self) -> None:
        upload = UploadFile("a.txt", "text/plain", 2, b"hi")
        form = FormData({}, {"doc": upload})
        assert form.files["doc"] is upload
        assert len(form) == 0


class TestParseMultipart:
    def test_fields_and_files(self) -> None:
        body, content_type = encode_multipart(
            {"title": "Report", "tag": "q3"},
            {"attachment": ("report.csv", b"a,b\n1,2\n", "text/csv")},
        )
        form = parse_multipart(body, content_type)

        assert form["title"] == "Report"
        assert form["tag"] == "q3"
        upload = form.files["attachment"]
        assert upload.filename == "report.csv"
        assert upload.content_type == "text/csv"
        assert upload.size == 8

    async def test_upload_read_and_save(self, tmp_path: Path) -> None:
        body, content_type = encode_multipart(
            files={"f": ("x.bin", b"\x00\x01", "application/octet-stream")}
        )
        upload = parse_multipart(body, content_type).files["f"]

        assert await upload.read() == b"\x00\x01"
        target = tmp_path / "x.bin"
        await upload.save(target)
        assert target.read_bytes() == b"\x00\x01"

    def test_missing_boundary(self) -> None:
        with pytest.raises(ValueError, match="boundary"):
            parse_multipart(b"", "multipart/form-data")

    def test_truncated_body(self) -> None:
        body, content_type = encode_multipart({"a": "1"}, boundary="xyz")
        with pytest.raises(ValueError):
            parse_multipart(body[: len(body) // 2], content_type)


class TestParseFormData:
    def test_urlencoded(self) -> None:
        form = parse_form_data(b"name=Ada+Lovelace", "application/x-www-form-urlencoded")
        assert form["name"] == "Ada Lovelace"

    def test_dispatches_multipart(self) -> None:
        body, content_type = encode_multipart({"a": "1"})
        assert parse_form_data(body, content_type)["a"] == "1"

    def test_unsupported(self) -> None:
        with pytest.raises(ValueError, match="Unsupported"):
            parse_form_data(b"{}", "application/json")
