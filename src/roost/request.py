"""Render request descriptor.

A ``RenderRequest`` is a per-call value object: what to render, where to
write it, and which preferences steer the search.  It is frozen; the
pipeline derives narrowed copies with ``dataclasses.replace`` instead of
mutating it.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from roost._internal.types import Variables, Writer
from roost.negotiation import formats_for_accept

PARTIAL_PREFIX = "_"


class RenderMode(Enum):
    """The four terminal outcomes of ``Views.render()``."""

    CONTENT = "content"
    CONTENT_IN_LAYOUT = "content_in_layout"
    TEMPLATE = "template"
    TEMPLATE_IN_LAYOUT = "template_in_layout"


@dataclass(frozen=True, slots=True)
class RenderRequest:
    """Describe one view render.

    Usage::

        views.render(RenderRequest(
            writer=out,
            controller="posts",
            action="index",
            variables={"posts": posts},
            variants=("mobile", ""),
            use_layout=True,
        ))

    Search preferences:

    - ``variants``: empty means "no variant".  Include ``""`` explicitly
      to fall back to the plain view after the listed variants.
    - ``formats``: empty means "derive from ``accept``", which in turn
      defaults to ``("html", "json")``.

    ``content`` short-circuits resolution entirely.  Otherwise ``action``
    wins over ``partial``.  ``ctx`` is forwarded untouched to engines.
    """

    writer: Writer
    variables: Variables = field(default_factory=dict)
    content: str = ""
    action: str = ""
    partial: str = ""
    controller: str = ""
    namespace: str = ""
    variants: tuple[str, ...] = ()
    formats: tuple[str, ...] = ()
    accept: str = ""
    use_layout: bool = False
    layout: str = ""
    ctx: Any = None

    @property
    def base_name(self) -> str:
        """File base name: the action, or the partial with its prefix."""
        if self.action:
            return self.action
        if self.partial:
            return PARTIAL_PREFIX + self.partial
        return ""

    @property
    def mode(self) -> RenderMode:
        if self.content:
            return RenderMode.CONTENT_IN_LAYOUT if self.use_layout else RenderMode.CONTENT
        return RenderMode.TEMPLATE_IN_LAYOUT if self.use_layout else RenderMode.TEMPLATE

    def effective_variants(self) -> tuple[str, ...]:
        return self.variants or ("",)

    def effective_formats(self) -> tuple[str, ...]:
        return self.formats or formats_for_accept(self.accept)

    def layout_names(self) -> tuple[str, ...]:
        """Layout candidates, most specific first."""
        if self.layout:
            return (self.layout,)
        if self.controller:
            return (self.controller, "application")
        return ("application",)
