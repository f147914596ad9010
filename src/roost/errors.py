"""Roost exception hierarchy.

Shared by the resolvers, the render pipeline, and the engines so every
module raises and catches the same types.  Filesystem and writer
``OSError``s are never wrapped; they reach the caller unchanged.
"""


class RoostError(Exception):
    """Base for all roost-specific errors."""


class ConfigurationError(RoostError):
    """Raised when a ``ViewsConfig`` is invalid.

    Typically caught at startup, inside ``Views.from_config()``.
    """


class InvalidRequest(RoostError):  # noqa: N818 — mirrors the request taxonomy
    """A render request names no content, no action and no partial."""


class TemplateNotFound(RoostError):  # noqa: N818 — conventional name
    """No candidate file matched during a resolution search.

    Carries every attempted glob pattern, in the order they were tried,
    so a missing view can be diagnosed without re-running the search.
    """

    def __init__(self, kind: str, tried: tuple[str, ...]) -> None:
        self.kind = kind
        self.tried = tried
        super().__init__(f"{kind} not found. Tried: {', '.join(tried)}")


class UnsupportedExtension(RoostError):  # noqa: N818
    """The resolved file's extension has no registered engine."""

    def __init__(self, extension: str) -> None:
        self.extension = extension
        super().__init__(f"no engine for {extension!r}")


class CompileError(RoostError):
    """Template source failed to compile.  Never cached."""

    def __init__(self, path: str, detail: str) -> None:
        self.path = path
        super().__init__(f"{path}: {detail}")


class ExecutionError(RoostError):
    """A compiled template failed while rendering.

    ``variable`` is set when the failure is a missing-key policy
    violation.
    """

    def __init__(self, path: str, detail: str, *, variable: str | None = None) -> None:
        self.path = path
        self.variable = variable
        super().__init__(f"{path}: {detail}")
