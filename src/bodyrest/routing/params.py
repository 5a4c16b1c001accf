"""Path placeholder converters and scalar conversion.

The router filters segments with the converter regexes (``{id:int}``);
the binder converts the raw segment into the scalar type a target
handler declares, whatever converter the pattern used.

Conversion is strict. No surrounding whitespace, no digit separators::

    convert_scalar("7", int)       # 7
    convert_scalar("+7", int)      # 7
    convert_scalar(" 7", int)      # ValueError
    convert_scalar("T", bool)      # True
    convert_scalar("1e3", float)   # 1000.0
"""

import re

# converter name -> (segment regex, scalar type); one segment per placeholder
CONVERTERS: dict[str, tuple[str, type]] = {
    "str": (r"[^/]+", str),
    "int": (r"[+-]?[0-9]+", int),
    "float": (r"[+-]?(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)(?:[eE][+-]?[0-9]+)?", float),
    "bool": (r"(?:1|t|T|TRUE|true|True|0|f|F|FALSE|false|False)", bool),
}

# The scalar types a target handler parameter may declare
SCALAR_TYPES: frozenset[type] = frozenset({int, str, bool, float})

_INT_RE = re.compile(r"[+-]?[0-9]+")
_FLOAT_RE = re.compile(
    r"[+-]?(?:(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)(?:[eE][+-]?[0-9]+)?|inf|infinity|nan)",
    re.IGNORECASE,
)
_TRUE = frozenset({"1", "t", "T", "TRUE", "true", "True"})
_FALSE = frozenset({"0", "f", "F", "FALSE", "false", "False"})


def convert_param(value: str, param_type: str) -> str | int | float | bool:
    """Convert a captured path parameter string to a route converter's type.

    Raises ``ValueError`` if the string cannot be converted.
    Raises ``KeyError`` if *param_type* is not a registered converter.
    """
    _, target_type = CONVERTERS[param_type]
    return convert_scalar(value, target_type)


def convert_scalar(value: str, target: type) -> str | int | float | bool:
    """Convert a raw path segment to one of ``SCALAR_TYPES``.

    Raises:
        ValueError: If *value* is not a valid literal for *target*.
        TypeError: If *target* is not a supported scalar type.
    """
    if target is str:
        return value
    if target is bool:
        if value in _TRUE:
            return True
        if value in _FALSE:
            return False
        msg = f"invalid boolean literal: {value!r}"
        raise ValueError(msg)
    if target is int:
        if not _INT_RE.fullmatch(value):
            msg = f"invalid integer literal: {value!r}"
            raise ValueError(msg)
        return int(value)
    if target is float:
        if not _FLOAT_RE.fullmatch(value):
            msg = f"invalid float literal: {value!r}"
            raise ValueError(msg)
        return float(value)
    msg = f"unsupported path parameter type: {target!r}"
    raise TypeError(msg)
