"""Tests for bodyrest.extraction: JSON body decoding into dataclasses."""

import dataclasses
from dataclasses import dataclass, field
from typing import Any

import pytest

from bodyrest.extraction import (
    DecodeError,
    body_field,
    decode_dataclass,
    is_body_dataclass,
    is_omissible,
    loads,
    serialization_key,
    zero_value,
)
from bodyrest.http.forms import UploadFile
from bodyrest.http.response import Response


@dataclass
class Address:
    city: str
    zip_code: str = body_field("zip", default="")


@dataclass
class Customer:
    name: str
    age: int
    score: float = 0.0
    active: bool = True
    tags: list[str] = field(default_factory=list)
    address: Address | None = None
    nickname: str | None = None
    internal: str = body_field("-", default="server-side")
    customer_id: int = body_field("id", default=0)


@dataclass(frozen=True, slots=True)
class Point:
    x: int
    y: int


@dataclass
class Containers:
    pair: tuple[int, str] = (0, "")
    labels: set[str] = field(default_factory=set)
    counts: dict[int, int] = field(default_factory=dict)
    extra: Any = None


class TestBodyField:
    def test_custom_key(self) -> None:
        f = {f.name: f for f in dataclasses.fields(Customer)}["customer_id"]
        assert serialization_key(f) == "id"

    def test_dash_key_means_none(self) -> None:
        f = {f.name: f for f in dataclasses.fields(Customer)}["internal"]
        assert serialization_key(f) is None

    def test_default_key_is_name(self) -> None:
        f = {f.name: f for f in dataclasses.fields(Customer)}["name"]
        assert serialization_key(f) == "name"
        assert is_omissible(f) is False

    def test_omitempty(self) -> None:
        @dataclass
        class Note:
            body: str = body_field(omitempty=True, default="")

        (f,) = dataclasses.fields(Note)
        assert is_omissible(f) is True

    def test_merges_user_metadata(self) -> None:
        @dataclass
        class Note:
            body: str = body_field("text", default="", metadata={"doc": "x"})

        (f,) = dataclasses.fields(Note)
        assert f.metadata["doc"] == "x"
        assert serialization_key(f) == "text"


class TestIsBodyDataclass:
    def test_user_dataclass(self) -> None:
        assert is_body_dataclass(Customer) is True
        assert is_body_dataclass(Point) is True

    def test_instance_is_not(self) -> None:
        assert is_body_dataclass(Point(1, 2)) is False

    def test_bodyrest_types_excluded(self) -> None:
        assert is_body_dataclass(Response) is False
        assert is_body_dataclass(UploadFile) is False

    @pytest.mark.parametrize("annotation", [int, str, dict, list[int], None])
    def test_non_dataclasses(self, annotation: Any) -> None:
        assert is_body_dataclass(annotation) is False


class TestDecodeDataclass:
    def test_basic(self) -> None:
        customer = decode_dataclass(
            Customer,
            {
                "name": "Ada",
                "age": 36,
                "score": 9,
                "tags": ["vip"],
                "address": {"city": "London", "zip": "N1"},
                "id": 42,
            },
        )
        assert customer.name == "Ada"
        assert customer.score == 9.0
        assert isinstance(customer.score, float)
        assert customer.tags == ["vip"]
        assert customer.address == Address("London", "N1")
        assert customer.customer_id == 42

    def test_missing_keys_take_zero_value(self) -> None:
        customer = decode_dataclass(Customer, {})
        assert customer.name == ""
        assert customer.age == 0
        assert customer.active is True

    def test_unknown_keys_ignored(self) -> None:
        point = decode_dataclass(Point, {"x": 1, "y": 2, "z": 3})
        assert point == Point(1, 2)

    def test_dash_key_never_decoded(self) -> None:
        customer = decode_dataclass(Customer, {"name": "a", "age": 1, "internal": "x", "-": "y"})
        assert customer.internal == "server-side"

    def test_null_gives_zero_value(self) -> None:
        customer = decode_dataclass(Customer, {"name": None, "age": 1, "nickname": None})
        assert customer.name == ""
        assert customer.nickname is None

    def test_containers(self) -> None:
        result = decode_dataclass(
            Containers,
            {"pair": [1, "a"], "labels": ["x", "x"], "counts": {"3": 4}, "extra": {"any": [1]}},
        )
        assert result.pair == (1, "a")
        assert result.labels == {"x"}
        assert result.counts == {3: 4}
        assert result.extra == {"any": [1]}

    def test_not_an_object(self) -> None:
        with pytest.raises(DecodeError, match="expected a JSON object"):
            decode_dataclass(Point, [1, 2])

    @pytest.mark.parametrize(
        "payload",
        [
            {"x": "1", "y": 2},
            {"x": True, "y": 2},
            {"x": 1.5, "y": 2},
        ],
    )
    def test_wrong_int_type(self, payload: dict[str, Any]) -> None:
        with pytest.raises(DecodeError, match=r"Point\.x"):
            decode_dataclass(Point, payload)

    def test_wrong_nested_type(self) -> None:
        with pytest.raises(DecodeError):
            decode_dataclass(Customer, {"name": "a", "age": 1, "address": "London"})

    def test_wrong_tuple_length(self) -> None:
        with pytest.raises(DecodeError, match="expected 2 items"):
            decode_dataclass(Containers, {"pair": [1]})

    def test_bad_int_key(self) -> None:
        with pytest.raises(DecodeError):
            decode_dataclass(Containers, {"counts": {"a": 1}})


class TestLoads:
    def test_valid(self) -> None:
        assert loads(b'{"a": [1, 2]}') == {"a": [1, 2]}

    def test_rejects_nan(self) -> None:
        with pytest.raises(ValueError):
            loads(b'{"a": NaN}')

    def test_rejects_trailing_data(self) -> None:
        with pytest.raises(ValueError):
            loads(b'{"a": 1} {"b": 2}')

    def test_rejects_invalid_utf8(self) -> None:
        with pytest.raises(ValueError):
            loads(b"\xff\xfe")


class TestZeroValue:
    @pytest.mark.parametrize(
        ("hint", "expected"),
        [
            (str, ""),
            (int, 0),
            (float, 0.0),
            (bool, False),
            (list[int], []),
            (dict[str, int], {}),
            (tuple[int, ...], ()),
            (set[str], set()),
            (int | None, None),
            (Any, None),
        ],
    )
    def test_values(self, hint: Any, expected: Any) -> None:
        assert zero_value(hint) == expected

    def test_nested_dataclass(self) -> None:
        assert zero_value(Address) == Address(city="", zip_code="")
