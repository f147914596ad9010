"""Pluggable rendering engines.

An engine renders one resolved view file to a writer.  Engines are
registered on ``Views`` by file extension; the extension of the
resolved path picks the engine.

Built-in engines:

- ``RawEngine`` — copies the file verbatim (``txt html htm xml json yaml js``)
- ``TemplateEngine`` — compiles ``tpl`` files with kida, cached per path
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

from roost._internal.types import Variables, Writer
from roost.engines import raw, tpl
from roost.engines.raw import RawEngine
from roost.engines.tpl import MissingKey, TemplateEngine

if TYPE_CHECKING:
    from roost.views import Views

__all__ = ["Engine", "MissingKey", "RawEngine", "TemplateEngine", "default_engines"]


class Engine(Protocol):
    """Render the view file at *path* to *writer*.

    *ctx* is the caller's opaque per-request value, forwarded as-is.
    Failures are raised, never returned.
    """

    def render(
        self,
        ctx: Any,
        views: Views,
        writer: Writer,
        variables: Variables,
        path: str,
    ) -> None: ...


def default_engines(
    missing_key: MissingKey = MissingKey.ZERO,
    *,
    autoescape: bool = True,
) -> dict[str, Engine]:
    """Build the built-in extension → engine map.

    All raw extensions share one ``RawEngine``; ``tpl`` gets a fresh
    ``TemplateEngine`` (and therefore a fresh compile cache).
    """
    passthrough = RawEngine()
    engines: dict[str, Engine] = dict.fromkeys(raw.EXTENSIONS, passthrough)
    template_engine = TemplateEngine(missing_key, autoescape=autoescape)
    for ext in tpl.EXTENSIONS:
        engines[ext] = template_engine
    return engines
