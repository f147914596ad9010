"""Shared type aliases and protocols used across roost modules."""

from collections.abc import Mapping
from typing import Any, Protocol, TypeAlias

# Template variable bindings — duck-typed against host-supplied data
Variables: TypeAlias = Mapping[str, Any]


class Writer(Protocol):
    """Render target.  ``io.StringIO``, ``sys.stdout`` and friends qualify."""

    def write(self, s: str, /) -> int: ...


class SafeContent(str):
    """Text the render pipeline produced itself, written into layouts unescaped.

    Engines that autoescape treat instances as already-escaped markup.
    Plain ``str`` values, including a caller's own ``Content`` variable,
    are escaped as usual.
    """

    __slots__ = ()
