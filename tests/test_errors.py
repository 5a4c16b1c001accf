"""Tests for bodyrest.errors: exception hierarchy and error messages."""

import pytest

from bodyrest.errors import (
    BindingError,
    BodyrestError,
    ConfigurationError,
    DuplicateBodyParameter,
    EmptyBody,
    HandlerContractError,
    HTTPError,
    InvalidHandlerContract,
    MalformedBody,
    MalformedMultipart,
    MethodNotAllowed,
    MissingRequiredField,
    NotFound,
    PathParamTypeMismatch,
    SignatureIntrospectionError,
    UnboundParameter,
)


class TestHierarchy:
    def test_http_error_is_bodyrest_error(self) -> None:
        assert issubclass(HTTPError, BodyrestError)

    def test_configuration_error_is_not_http_error(self) -> None:
        assert issubclass(ConfigurationError, BodyrestError)
        assert not issubclass(ConfigurationError, HTTPError)

    @pytest.mark.parametrize(
        "cls",
        [
            EmptyBody,
            MalformedBody,
            MalformedMultipart,
            MissingRequiredField,
            PathParamTypeMismatch,
            DuplicateBodyParameter,
            UnboundParameter,
        ],
    )
    def test_binding_errors(self, cls: type) -> None:
        assert issubclass(cls, BindingError)
        assert issubclass(cls, HTTPError)

    @pytest.mark.parametrize("cls", [InvalidHandlerContract, SignatureIntrospectionError])
    def test_contract_errors(self, cls: type) -> None:
        assert issubclass(cls, HandlerContractError)


class TestHTTPError:
    def test_status_and_detail(self) -> None:
        err = HTTPError(status=418, detail="short and stout")
        assert err.status == 418
        assert str(err) == "418: short and stout"

    def test_str_without_detail(self) -> None:
        assert str(HTTPError(status=500)) == "500"

    def test_frozen(self) -> None:
        err = HTTPError(status=400)
        with pytest.raises(AttributeError):
            err.status = 500  # type: ignore[misc]

    def test_method_not_allowed_allow_header(self) -> None:
        err = MethodNotAllowed(frozenset({"POST", "GET"}))
        assert err.status == 405
        assert err.headers == (("Allow", "GET, POST"),)

    def test_not_found_default(self) -> None:
        err = NotFound()
        assert err.status == 404
        assert err.detail == "Not Found"


class TestBindingErrors:
    def test_status_is_400(self) -> None:
        assert EmptyBody("POST").status == 400
        assert MalformedBody("bad json").status == 400
        assert UnboundParameter(("a",)).status == 400

    def test_empty_body_names_method(self) -> None:
        assert "PATCH" in EmptyBody("PATCH").detail

    def test_missing_required_field_carries_fields(self) -> None:
        err = MissingRequiredField(("email", "name"))
        assert err.fields == ("email", "name")
        assert "email, name" in err.detail

    def test_path_param_mismatch_carries_index(self) -> None:
        err = PathParamTypeMismatch(2, "abc", int)
        assert err.index == 2
        assert err.value == "abc"
        assert err.detail.startswith("failed to parse path param under index 2")
        assert "int" in err.detail

    def test_unbound_parameter_carries_names(self) -> None:
        err = UnboundParameter(("x", "y"))
        assert err.names == ("x", "y")

    def test_catchable_as_http_error(self) -> None:
        with pytest.raises(HTTPError):
            raise DuplicateBodyParameter("second")


class TestContractErrors:
    def test_status_is_500(self) -> None:
        assert InvalidHandlerContract("returned str").status == 500
        assert SignatureIntrospectionError("no signature").status == 500
