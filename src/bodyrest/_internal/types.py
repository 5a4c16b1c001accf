"""Shared type aliases used across bodyrest modules."""

from collections.abc import Callable
from typing import Any, TypeAlias

# Target handler: user-defined function whose parameters describe request inputs
TargetHandler: TypeAlias = Callable[..., Any]

# Raw handler: (writer, request) -> None, sync or async
RawHandler: TypeAlias = Callable[..., Any]

# Error renderer: (writer, request, status) -> None, sync or async
ErrorRenderer: TypeAlias = Callable[..., Any]
