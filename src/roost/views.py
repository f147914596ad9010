"""Views — the render pipeline.

A ``Views`` instance is built once and shared by every concurrent render
call.  It resolves a ``RenderRequest`` to a view file, optionally wraps
the output in a layout, and dispatches each file to the engine
registered for its extension.

Render outcomes (``RenderMode``):

1. ``CONTENT``            -> write ``content`` verbatim
2. ``CONTENT_IN_LAYOUT``  -> resolve layout, render it around ``content``
3. ``TEMPLATE``           -> resolve template, render it to the writer
4. ``TEMPLATE_IN_LAYOUT`` -> render template into a pooled buffer, then
                             resolve the layout for that template's format
                             and render it around the buffer's text

Free-threading safety:
    - Filesystem, engine map, helpers and search paths are read-only
      after construction
    - Scratch buffers are borrowed per call from a lock-guarded pool
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from types import MappingProxyType
from typing import Any

from roost._internal.types import SafeContent, Variables, Writer
from roost.buffers import BufferPool
from roost.config import ViewsConfig
from roost.engines import Engine, MissingKey, default_engines
from roost.errors import ConfigurationError, UnsupportedExtension
from roost.fs import DirectoryFS, ViewFS
from roost.request import RenderMode, RenderRequest
from roost.resolution import (
    ResolvedTemplate,
    extension_of,
    iter_search_paths,
    resolve_layout,
    resolve_template,
)

logger = logging.getLogger("roost.views")

# Variable carrying pre-rendered content into a layout
CONTENT_VAR = "Content"


class Views:
    """A view tree plus the engines that render it.

    Usage::

        views = Views(
            MemoryFS({"application/index.html.tpl": "<p>{{ msg }}</p>"}),
            engines=default_engines(),
        )
        out = io.StringIO()
        views.render(RenderRequest(writer=out, action="index", variables={"msg": "hi"}))

    Args:
        fs: Read-only view filesystem.
        engines: Extension (without the dot) → engine.
        search_paths: Prefixes searched in order; the first listed has the
            highest priority.  None configured searches the root only.
        helpers: Values exposed to every template.
        buffers: Scratch buffer pool for two-pass layout renders.
    """

    __slots__ = ("_buffers", "engines", "fs", "helpers", "search_paths")

    def __init__(
        self,
        fs: ViewFS,
        engines: Mapping[str, Engine],
        *,
        search_paths: tuple[str, ...] | list[str] = (),
        helpers: Mapping[str, Any] | None = None,
        buffers: BufferPool | None = None,
    ) -> None:
        self.fs = fs
        self.engines: Mapping[str, Engine] = MappingProxyType(dict(engines))
        self.search_paths: tuple[str, ...] = tuple(iter_search_paths(search_paths))
        self.helpers: Mapping[str, Any] = MappingProxyType(dict(helpers or {}))
        self._buffers = buffers if buffers is not None else BufferPool()

    @classmethod
    def from_config(cls, config: ViewsConfig) -> Views:
        """Build a ``Views`` over ``config.view_dir`` with the built-in engines.

        Raises:
            ConfigurationError: A config value is out of range.
        """
        try:
            missing_key = MissingKey(config.missing_key)
        except ValueError:
            choices = ", ".join(m.value for m in MissingKey)
            msg = f"missing_key must be one of {choices}, got {config.missing_key!r}"
            raise ConfigurationError(msg) from None
        if config.buffer_pool_size < 0 or config.max_buffer_size < 0:
            msg = "buffer_pool_size and max_buffer_size must not be negative"
            raise ConfigurationError(msg)

        return cls(
            DirectoryFS(config.view_dir),
            default_engines(missing_key, autoescape=config.autoescape),
            search_paths=config.search_paths,
            helpers=config.helpers,
            buffers=BufferPool(config.buffer_pool_size, config.max_buffer_size),
        )

    # -- Pipeline --

    def render(self, request: RenderRequest) -> None:
        """Render *request* to ``request.writer``.

        Any resolution or engine error aborts the render and propagates
        unchanged.  Bytes already written to the writer are not rolled
        back; with a layout, the writer is only touched once, at the end.
        """
        match request.mode:
            case RenderMode.CONTENT:
                request.writer.write(request.content)

            case RenderMode.CONTENT_IN_LAYOUT:
                formats = request.effective_formats()
                layout = resolve_layout(self, request, formats[0] if formats else "")
                self._render_layout(request, layout, request.content)

            case RenderMode.TEMPLATE:
                resolved = resolve_template(self, request)
                self.render_template(
                    resolved.path, request.writer, request.variables, ctx=request.ctx
                )

            case RenderMode.TEMPLATE_IN_LAYOUT:
                self._render_in_layout(request)

    def _render_in_layout(self, request: RenderRequest) -> None:
        resolved = resolve_template(self, request)
        with self._buffers.borrow() as buf:
            self.render_template(resolved.path, buf, request.variables, ctx=request.ctx)
            layout = resolve_layout(self, request, resolved.format)
            self._render_layout(request, layout, buf.getvalue())

    def _render_layout(self, request: RenderRequest, layout: str, content: str) -> None:
        """Render *layout* around *content*.

        The layout sees the caller's variables as well as ``Content``, so a
        layout may reference page variables; under ``missing_key="error"``
        a layout referencing a name the caller did not bind fails.
        ``Content`` is ``SafeContent`` and overrides a caller ``Content``.
        """
        variables = {**(request.variables or {}), CONTENT_VAR: SafeContent(content)}
        self.render_template(layout, request.writer, variables, ctx=request.ctx)

    # -- Resolution --

    def find_template(self, request: RenderRequest) -> ResolvedTemplate:
        """Resolve *request* to an action or partial file without rendering."""
        return resolve_template(self, request)

    def find_layout(self, request: RenderRequest, fmt: str) -> str:
        """Resolve the layout for *request* in format *fmt* without rendering."""
        return resolve_layout(self, request, fmt)

    # -- Dispatch --

    def render_template(
        self,
        path: str,
        writer: Writer,
        variables: Variables | None = None,
        *,
        ctx: Any = None,
    ) -> None:
        """Render the file at *path* with the engine for its extension.

        Raises:
            UnsupportedExtension: No engine is registered for the extension.
        """
        ext = extension_of(path)
        engine = self.engines.get(ext)
        if engine is None:
            raise UnsupportedExtension(ext)
        engine.render(ctx, self, writer, variables or {}, path)

    def __repr__(self) -> str:
        return f"Views({self.fs!r}, engines={sorted(self.engines)}, search_paths={self.search_paths})"
