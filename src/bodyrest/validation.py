"""Required-field validation for decoded body dataclasses.

"Required unless explicitly optional": every field that carries a
serialization key and is not declared ``body_field(omitempty=True)``
must be non-empty after decoding. Empty means a zero-length string,
sequence, mapping, or set, or ``None``. Numbers and booleans are never
empty, so ``0`` and ``False`` satisfy a required field.

This is not schema validation: no range or format checks::

    @dataclass
    class Signup:
        email: str
        referrer: str = body_field(omitempty=True, default="")

    are_required_fields_valid(Signup(email=""))        # False
    find_missing_fields(Signup(email=""))              # ("email",)
    are_required_fields_valid(Signup(email="a@b.c"))   # True
"""

import dataclasses
from collections.abc import Mapping, Sequence, Set
from typing import Any

from bodyrest.extraction import is_omissible, serialization_key


def is_empty(value: Any) -> bool:
    """True for ``None`` and zero-length strings, sequences, mappings, sets."""
    if value is None:
        return True
    if isinstance(value, (str, bytes, bytearray, Sequence, Mapping, Set)):
        return len(value) == 0
    return False


def find_missing_fields(instance: Any) -> tuple[str, ...]:
    """Return the serialization keys of required fields that are empty.

    Raises:
        TypeError: If *instance* is not a dataclass instance.
    """
    if not dataclasses.is_dataclass(instance) or isinstance(instance, type):
        msg = f"expected a dataclass instance, got {type(instance).__name__}"
        raise TypeError(msg)

    missing: list[str] = []
    for f in dataclasses.fields(instance):
        key = serialization_key(f)
        if key is None or is_omissible(f):
            continue
        if is_empty(getattr(instance, f.name)):
            missing.append(key)
    return tuple(missing)


def are_required_fields_valid(instance: Any) -> bool:
    """True if every required field of *instance* is non-empty.

    Non-dataclass values are never valid.
    """
    try:
        return not find_missing_fields(instance)
    except TypeError:
        return False
