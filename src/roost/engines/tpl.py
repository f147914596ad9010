"""Compiling template engine backed by kida.

Sources are compiled lazily, on first render, and cached by path for
the lifetime of the engine.  View files are assumed immutable while the
process runs, so a cached entry is never recompiled.

Missing-key policies:
    - ``ZERO``: the environment is lenient (``strict_undefined=False``);
      unbound names, missing map keys and missing attributes render empty
    - ``INVALID``: unbound names and missing map keys render
      ``INVALID_MARKER``; a missing attribute on a non-map object is an
      ``ExecutionError``
    - ``ERROR``: anything undefined is an ``ExecutionError``

Free-threading safety:
    - Cache reads are plain dict lookups (atomic, no lock)
    - Compile-and-store runs under the engine's ``threading.Lock``
    - Compiled kida templates are immutable and render concurrently
    - Two threads racing on the same uncached path may both compile;
      the later store replaces an equivalent entry
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any

from kida import Environment
from kida.exceptions import TemplateRuntimeError, UndefinedError
from kida.template import Markup

from roost._internal.types import SafeContent, Variables, Writer
from roost.errors import CompileError, ExecutionError

if TYPE_CHECKING:
    from kida.template import Template

    from roost.views import Views

logger = logging.getLogger("roost.engines")

EXTENSIONS: tuple[str, ...] = ("tpl",)

# Rendered in place of an undefined variable under MissingKey.INVALID
INVALID_MARKER = "<no value>"

# kida's UndefinedError.kind for a failed ``obj.name`` / ``obj[name]``
_ATTRIBUTE_KIND = "attribute/key"


class MissingKey(Enum):
    """What an undefined template variable renders as."""

    ZERO = "zero"
    ERROR = "error"
    INVALID = "invalid"


@dataclass(frozen=True, slots=True)
class CompiledTemplate:
    """A cache entry: the compiled template and the policy it runs under."""

    path: str
    template: Template
    missing_key: MissingKey


class _MarkedDict(dict):
    """Map whose missing keys read as the invalid-value marker."""

    __slots__ = ()

    def __missing__(self, key: str) -> Markup:
        return Markup(INVALID_MARKER)


def _mark_missing(value: Any) -> Any:
    """Copy maps (and the lists and tuples holding them) into ``_MarkedDict``."""
    if isinstance(value, dict):
        return _MarkedDict({k: _mark_missing(v) for k, v in value.items()})
    if isinstance(value, list):
        return [_mark_missing(v) for v in value]
    if type(value) is tuple:
        return tuple(_mark_missing(v) for v in value)
    return value


class TemplateEngine:
    """Render ``.tpl`` view files with kida, compiling each source once.

    Usage::

        engine = TemplateEngine(MissingKey.ERROR)
        views = Views(fs, engines={"tpl": engine})

    Args:
        missing_key: Policy for variables a template references but the
            render call does not bind.
        env: kida ``Environment`` used to compile sources.  Defaults to an
            environment with *autoescape*, lenient about undefined values
            under ``ZERO`` and strict otherwise.
        autoescape: Only used when *env* is not given.
    """

    __slots__ = ("_cache", "_env", "_lock", "missing_key")

    def __init__(
        self,
        missing_key: MissingKey = MissingKey.ZERO,
        *,
        env: Environment | None = None,
        autoescape: bool = True,
    ) -> None:
        self.missing_key = missing_key
        if env is None:
            env = Environment(
                autoescape=autoescape,
                strict_undefined=missing_key is not MissingKey.ZERO,
            )
        self._env = env
        self._cache: dict[str, CompiledTemplate] = {}
        self._lock = threading.Lock()

    def render(
        self,
        ctx: Any,
        views: Views,
        writer: Writer,
        variables: Variables,
        path: str,
    ) -> None:
        entry = self._cache.get(path)
        if entry is None:
            entry = self._compile(views, path)

        context: dict[str, Any] = {**views.helpers}
        for name, value in (variables or {}).items():
            if isinstance(value, SafeContent):
                value = Markup(value)
            elif self.missing_key is MissingKey.INVALID:
                value = _mark_missing(value)
            context[name] = value

        writer.write(self._execute(entry, context))

    def is_cached(self, path: str) -> bool:
        return path in self._cache

    def _compile(self, views: Views, path: str) -> CompiledTemplate:
        with self._lock:
            data = views.fs.read_bytes(path)
            try:
                template = self._env.from_string(data.decode("utf-8"))
            except Exception as exc:
                logger.warning("compile failed for %s: %s", path, exc)
                raise CompileError(path, str(exc)) from exc
            entry = CompiledTemplate(path, template, self.missing_key)
            self._cache[path] = entry
        logger.debug("compiled %s (missing_key=%s)", path, self.missing_key.value)
        return entry

    @staticmethod
    def _execute(entry: CompiledTemplate, context: dict[str, Any]) -> str:
        """Render *entry*, applying its missing-key policy to unbound names.

        kida raises ``UndefinedError`` for an unbound top-level name.  Under
        ``ZERO`` and ``INVALID`` the name is bound to a filler value and the
        render is retried; each name is filled at most once.  Missing keys
        and attributes (``kind="attribute/key"``) are never filled: the
        environment and the marked maps already decided them.
        """
        while True:
            try:
                return entry.template.render(context)
            except UndefinedError as exc:
                name = getattr(exc, "name", None)
                if (
                    entry.missing_key is MissingKey.ERROR
                    or not name
                    or name in context
                    or getattr(exc, "kind", None) == _ATTRIBUTE_KIND
                    or "." in name
                ):
                    raise ExecutionError(entry.path, str(exc), variable=name) from exc
                if entry.missing_key is MissingKey.ZERO:
                    context[name] = ""
                else:
                    context[name] = Markup(INVALID_MARKER)
            except TemplateRuntimeError as exc:
                raise ExecutionError(entry.path, str(exc)) from exc
