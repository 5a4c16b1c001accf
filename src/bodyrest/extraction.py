"""Typed decoding of JSON bodies into dataclass instances.

A target handler parameter annotated with a user dataclass is a
structured body: the JSON payload is decoded into a new instance of it.

Decoding rules:

- The payload must be a JSON object. Unknown keys are ignored.
- Each field is read from its serialization key: the field name, or
  the ``key`` given to ``body_field()``. ``key="-"`` excludes the field.
- A missing key uses the field default. A field without default is set
  to the zero value of its type (``""``, ``0``, ``[]``, ``None``, ...),
  so required-field validation can report it instead of the constructor.
- JSON ``null`` on a non-optional field also yields the zero value.
- A value of the wrong JSON type is a ``DecodeError``.

Supported field types: ``str``, ``int``, ``float``, ``bool``, nested
dataclasses, ``list``/``tuple``/``set``/``frozenset``/``dict`` of those,
``X | None`` unions, and ``Any``.
"""

from __future__ import annotations

import dataclasses
import json
import types
import typing
from collections.abc import Mapping, Sequence
from collections.abc import Set as AbstractSet
from typing import Any, get_args, get_origin, get_type_hints

BODY_KEY = "bodyrest.key"
BODY_OMITEMPTY = "bodyrest.omitempty"

_MISSING = dataclasses.MISSING


class DecodeError(ValueError):
    """Raised when a JSON payload does not fit the declared dataclass."""


def body_field(
    key: str | None = None,
    *,
    omitempty: bool = False,
    default: Any = _MISSING,
    default_factory: Any = _MISSING,
    **kwargs: Any,
) -> Any:
    """A ``dataclasses.field()`` carrying body serialization options.

    Args:
        key: JSON key to read instead of the field name. ``"-"`` means the
            field has no key: it is never decoded and never required.
        omitempty: Mark the field omissible, exempting it from
            required-field validation.
        default: Passed through to ``dataclasses.field``.
        default_factory: Passed through to ``dataclasses.field``.

    Usage::

        @dataclass
        class CreateUser:
            name: str
            nickname: str = body_field(omitempty=True, default="")
            user_id: int = body_field("id")
    """
    metadata = dict(kwargs.pop("metadata", None) or {})
    if key is not None:
        metadata[BODY_KEY] = key
    if omitempty:
        metadata[BODY_OMITEMPTY] = True
    return dataclasses.field(
        default=default,
        default_factory=default_factory,
        metadata=metadata,
        **kwargs,
    )


def serialization_key(f: dataclasses.Field[Any]) -> str | None:
    """Return the JSON key of a dataclass field, or ``None`` if it has none."""
    if not f.init:
        return None
    key = f.metadata.get(BODY_KEY, f.name)
    if key == "-":
        return None
    return key


def is_omissible(f: dataclasses.Field[Any]) -> bool:
    """True if the field was declared with ``body_field(omitempty=True)``."""
    return bool(f.metadata.get(BODY_OMITEMPTY, False))


def is_body_dataclass(annotation: Any) -> bool:
    """Return True if *annotation* is a user-defined dataclass type.

    Excludes bodyrest's own dataclass types (``Request``, ``Response``,
    ``UploadFile``), which are never decoded from a payload.
    """
    if not isinstance(annotation, type) or not dataclasses.is_dataclass(annotation):
        return False

    module = getattr(annotation, "__module__", "") or ""
    return not module.startswith("bodyrest.")


def loads(raw: bytes) -> Any:
    """Parse a JSON document, rejecting ``NaN``/``Infinity`` literals."""
    return json.loads(raw.decode("utf-8"), parse_constant=_reject_constant)


def decode_dataclass[T](cls: type[T], data: Any) -> T:
    """Create a dataclass instance from a decoded JSON value.

    Raises:
        DecodeError: If *data* is not an object or a value has the wrong type.
    """
    if not isinstance(data, dict):
        msg = f"expected a JSON object for {cls.__name__}, got {_json_type(data)}"
        raise DecodeError(msg)

    hints = get_type_hints(cls)
    kwargs: dict[str, Any] = {}

    for f in dataclasses.fields(cls):  # type: ignore[arg-type]
        if not f.init:
            continue
        hint = hints.get(f.name, Any)
        key = serialization_key(f)
        if key is not None and key in data:
            kwargs[f.name] = _decode_value(data[key], hint, f"{cls.__name__}.{key}")
        elif f.default is _MISSING and f.default_factory is _MISSING:
            kwargs[f.name] = zero_value(hint)

    return cls(**kwargs)


def zero_value(hint: Any) -> Any:
    """The value a field takes when its key is absent and it has no default."""
    if hint in (str, int, float, bool):
        return hint()
    if _is_optional(hint):
        return None
    origin = get_origin(hint) or hint
    if origin in (list, Sequence):
        return []
    if origin in (dict, Mapping):
        return {}
    if origin is tuple:
        return ()
    if origin in (set, AbstractSet):
        return set()
    if origin is frozenset:
        return frozenset()
    if is_body_dataclass(hint):
        return decode_dataclass(hint, {})
    return None


def _decode_value(value: Any, hint: Any, where: str) -> Any:
    if hint is Any or hint is object:
        return value

    if value is None:
        # null leaves the zero value, unless None is a member of the type
        return None if _is_optional(hint) else zero_value(hint)

    origin = get_origin(hint)
    args = get_args(hint)

    if origin is typing.Union or isinstance(hint, types.UnionType):
        for member in args:
            if member is type(None):
                continue
            try:
                return _decode_value(value, member, where)
            except DecodeError:
                continue
        raise _mismatch(where, hint, value)

    if is_body_dataclass(hint):
        if not isinstance(value, dict):
            raise _mismatch(where, hint, value)
        return decode_dataclass(hint, value)

    if hint is bool:
        if isinstance(value, bool):
            return value
        raise _mismatch(where, hint, value)
    if hint is int:
        if isinstance(value, int) and not isinstance(value, bool):
            return value
        raise _mismatch(where, hint, value)
    if hint is float:
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return float(value)
        raise _mismatch(where, hint, value)
    if hint is str:
        if isinstance(value, str):
            return value
        raise _mismatch(where, hint, value)

    container = origin or hint
    if container in (list, tuple, set, frozenset, Sequence, AbstractSet):
        if not isinstance(value, list):
            raise _mismatch(where, hint, value)
        return _decode_sequence(value, container, args, where)

    if container in (dict, Mapping):
        if not isinstance(value, dict):
            raise _mismatch(where, hint, value)
        key_type, item_type = args if len(args) == 2 else (str, Any)
        result: dict[Any, Any] = {}
        for k, v in value.items():
            decoded_key = _decode_key(k, key_type, where)
            result[decoded_key] = _decode_value(v, item_type, f"{where}[{k!r}]")
        return result

    if isinstance(hint, type) and isinstance(value, hint):
        return value
    raise _mismatch(where, hint, value)


def _decode_sequence(value: list[Any], container: Any, args: tuple[Any, ...], where: str) -> Any:
    if container is tuple and args and args[-1] is not Ellipsis:
        if len(args) != len(value):
            msg = f"{where}: expected {len(args)} items, got {len(value)}"
            raise DecodeError(msg)
        return tuple(
            _decode_value(item, arg, f"{where}[{i}]")
            for i, (item, arg) in enumerate(zip(value, args, strict=True))
        )
    item_type = args[0] if args else Any
    items = [_decode_value(item, item_type, f"{where}[{i}]") for i, item in enumerate(value)]
    if container is tuple:
        return tuple(items)
    if container in (set, AbstractSet):
        return set(items)
    if container is frozenset:
        return frozenset(items)
    return items


def _decode_key(key: str, key_type: Any, where: str) -> Any:
    if key_type is int:
        try:
            return int(key)
        except ValueError:
            msg = f"{where}: key {key!r} is not an int"
            raise DecodeError(msg) from None
    return key


def _is_optional(hint: Any) -> bool:
    if get_origin(hint) is typing.Union or isinstance(hint, types.UnionType):
        return type(None) in get_args(hint)
    return hint is type(None)


def _mismatch(where: str, hint: Any, value: Any) -> DecodeError:
    expected = getattr(hint, "__name__", None) or str(hint)
    return DecodeError(f"{where}: cannot decode JSON {_json_type(value)} into {expected}")


def _json_type(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "array"
    return "object"


def _reject_constant(name: str) -> Any:
    msg = f"invalid JSON constant {name!r}"
    raise DecodeError(msg)
