"""Passthrough engine: copies a view file to the writer as-is."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from roost._internal.types import Variables, Writer

if TYPE_CHECKING:
    from roost.views import Views

EXTENSIONS: tuple[str, ...] = ("txt", "html", "htm", "xml", "json", "yaml", "js")


class RawEngine:
    """Serve static view files.  Variables are ignored.

    Writers are text streams, so view files must be UTF-8; any other
    encoding raises ``UnicodeDecodeError`` from ``render``.
    """

    __slots__ = ()

    def render(
        self,
        ctx: Any,
        views: Views,
        writer: Writer,
        variables: Variables,
        path: str,
    ) -> None:
        writer.write(views.fs.read_bytes(path).decode("utf-8"))
