"""Template and layout resolution.

Both searches walk a fixed, nested priority order and stop at the first
file whose extension has a registered engine.  A miss on one candidate
is not an error; only exhausting every candidate is, and the resulting
``TemplateNotFound`` lists every pattern tried, in order.

Template search order (outermost first)::

    format -> {namespace}/{controller}, {namespace}, application -> variant -> search path

    {search_path}/{dir}/{base}.{format}(+{variant}).*

Layout search order::

    layout name -> layouts/{namespace}, layouts -> variant -> search path

    {search_path}/layouts/{namespace}/{layout}.{format}(+{variant}).*
"""

from __future__ import annotations

import logging
import posixpath
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from typing import TYPE_CHECKING

from roost.errors import InvalidRequest, TemplateNotFound

if TYPE_CHECKING:
    from roost.request import RenderRequest
    from roost.views import Views

logger = logging.getLogger("roost.views")

APPLICATION_DIR = "application"
LAYOUTS_DIR = "layouts"


@dataclass(frozen=True, slots=True)
class ResolvedTemplate:
    """A resolved view file and the format it was found under."""

    path: str
    format: str


def resolve_template(views: Views, request: RenderRequest) -> ResolvedTemplate:
    """Find the action or partial template that best matches *request*.

    Raises:
        InvalidRequest: Neither an action nor a partial was given.  No
            filesystem access happens in that case.
        TemplateNotFound: Every candidate pattern missed.
    """
    base = request.base_name
    if not base:
        raise InvalidRequest("no action or partial defined")

    directories = _unique(
        _join(request.namespace, request.controller),
        _join(request.namespace),
        APPLICATION_DIR,
    )
    tried: list[str] = []
    for fmt in request.effective_formats():
        patterns = (
            _join(prefix, directory, _filename(base, fmt, variant) + ".*")
            for directory in directories
            for variant in request.effective_variants()
            for prefix in views.search_paths
        )
        path = _first_match(views, patterns, tried)
        if path is not None:
            logger.debug("template %s resolved after %d tries", path, len(tried))
            return ResolvedTemplate(path, fmt)

    logger.debug("template %r not found after %d tries", base, len(tried))
    raise TemplateNotFound("template", tuple(tried))


def resolve_layout(views: Views, request: RenderRequest, fmt: str) -> str:
    """Find the layout that wraps content rendered in format *fmt*.

    *fmt* is a single concrete format, not a preference list: the layout
    must match the content it wraps.

    Raises:
        TemplateNotFound: Every candidate pattern missed.
    """
    scopes = (request.namespace, "") if request.namespace else ("",)
    patterns = (
        _join(prefix, LAYOUTS_DIR, scope, _filename(name, fmt, variant) + ".*")
        for name in request.layout_names()
        for scope in scopes
        for variant in request.effective_variants()
        for prefix in views.search_paths
    )
    tried: list[str] = []
    path = _first_match(views, patterns, tried)
    if path is None:
        logger.debug("layout not found after %d tries", len(tried))
        raise TemplateNotFound("layout", tuple(tried))
    logger.debug("layout %s resolved after %d tries", path, len(tried))
    return path


def _first_match(views: Views, patterns: Iterable[str], tried: list[str]) -> str | None:
    """Glob each pattern in turn; return the first file with an engine.

    Every pattern consumed is appended to *tried*.
    """
    for pattern in patterns:
        tried.append(pattern)
        for path in views.fs.glob(pattern):
            if extension_of(path) in views.engines:
                return path
    return None


def _filename(base: str, fmt: str, variant: str) -> str:
    name = base
    if fmt:
        name += "." + fmt
    if variant:
        name += "+" + variant
    return name


def _join(*parts: str) -> str:
    """Join path parts, dropping empty ones (``""`` for no parts at all)."""
    return posixpath.join(*filter(None, parts)) if any(parts) else ""


def _unique(*directories: str) -> tuple[str, ...]:
    seen: list[str] = []
    for directory in directories:
        if directory and directory not in seen:
            seen.append(directory)
    return tuple(seen)


def extension_of(path: str) -> str:
    """Engine extension of *path*: everything after the final ``.``."""
    _, dot, ext = posixpath.basename(path).rpartition(".")
    return ext if dot else ""


def iter_search_paths(search_paths: Iterable[str]) -> Iterator[str]:
    """Normalize configured search-path prefixes; none configured ≡ ``("",)``."""
    prefixes = [p.strip("/") for p in search_paths]
    yield from prefixes or [""]
