"""Tests for bodyrest.routing.params: strict scalar conversion."""

import math

import pytest

from bodyrest.routing.params import CONVERTERS, SCALAR_TYPES, convert_param, convert_scalar


class TestConvertScalar:
    def test_str_verbatim(self) -> None:
        assert convert_scalar(" hello ", str) == " hello "

    @pytest.mark.parametrize(("raw", "expected"), [("7", 7), ("+7", 7), ("-12", -12), ("007", 7)])
    def test_int(self, raw: str, expected: int) -> None:
        assert convert_scalar(raw, int) == expected

    @pytest.mark.parametrize(
        "raw", ["abc", " 7", "7 ", "1_000", "1.5", "", "0x10", "\u0663", "\uff17"]
    )
    def test_int_rejects(self, raw: str) -> None:
        with pytest.raises(ValueError, match="invalid integer"):
            convert_scalar(raw, int)

    @pytest.mark.parametrize("raw", ["1", "t", "T", "TRUE", "true", "True"])
    def test_bool_true(self, raw: str) -> None:
        assert convert_scalar(raw, bool) is True

    @pytest.mark.parametrize("raw", ["0", "f", "F", "FALSE", "false", "False"])
    def test_bool_false(self, raw: str) -> None:
        assert convert_scalar(raw, bool) is False

    @pytest.mark.parametrize("raw", ["yes", "no", "tRuE", "2", ""])
    def test_bool_rejects(self, raw: str) -> None:
        with pytest.raises(ValueError, match="invalid boolean"):
            convert_scalar(raw, bool)

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [("1.5", 1.5), ("-2", -2.0), ("1e3", 1000.0), (".5", 0.5), ("3.", 3.0), ("+1E-2", 0.01)],
    )
    def test_float(self, raw: str, expected: float) -> None:
        assert convert_scalar(raw, float) == expected

    def test_float_special_values(self) -> None:
        assert math.isinf(convert_scalar("inf", float))
        assert math.isinf(convert_scalar("-Infinity", float))
        assert math.isnan(convert_scalar("NaN", float))

    @pytest.mark.parametrize(
        "raw", ["abc", "1.2.3", " 1.5", "1_0.0", "e5", "\u0663.5", "1.\uff15"]
    )
    def test_float_rejects(self, raw: str) -> None:
        with pytest.raises(ValueError, match="invalid float"):
            convert_scalar(raw, float)

    def test_unsupported_type(self) -> None:
        with pytest.raises(TypeError):
            convert_scalar("x", bytes)


class TestConverters:
    def test_scalar_types(self) -> None:
        assert SCALAR_TYPES == frozenset({int, str, bool, float})

    def test_convert_param(self) -> None:
        assert convert_param("42", "int") == 42
        assert convert_param("on", "str") == "on"
        assert convert_param("f", "bool") is False

    def test_unknown_converter(self) -> None:
        with pytest.raises(KeyError):
            convert_param("1", "uuid")

    def test_registered_names(self) -> None:
        assert set(CONVERTERS) == {"str", "int", "float", "bool"}
