"""Roost — view resolution and layout rendering for Python web apps.

Maps a logical view request (action or partial, controller, namespace,
format, variant) to a concrete file in a view tree, renders it with the
engine registered for its extension, and optionally wraps the result in
a layout.

Basic usage::

    import io

    from roost import RenderRequest, Views, ViewsConfig

    views = Views.from_config(ViewsConfig(view_dir="views", search_paths=("", "plugin")))

    out = io.StringIO()
    views.render(RenderRequest(
        writer=out,
        controller="posts",
        action="index",
        variables={"posts": posts},
        use_layout=True,
    ))

View tree naming::

    {namespace}/{controller}/{action}.{format}(+{variant}).{engine}
    {namespace}/{controller}/_{partial}.{format}(+{variant}).{engine}
    layouts/{namespace}/{layout}.{format}(+{variant}).{engine}
"""

__version__ = "0.1.0-dev"
__all__ = [
    "BufferPool",
    "CompileError",
    "ConfigurationError",
    "DirectoryFS",
    "Engine",
    "ExecutionError",
    "InvalidRequest",
    "MemoryFS",
    "MissingKey",
    "RawEngine",
    "RenderMode",
    "RenderRequest",
    "ResolvedTemplate",
    "RoostError",
    "TemplateEngine",
    "TemplateNotFound",
    "UnsupportedExtension",
    "ViewFS",
    "Views",
    "ViewsConfig",
    "default_engines",
    "formats_for_accept",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import roost`` fast and defers importing kida until an
    engine is actually needed.
    """
    if name == "Views":
        from roost.views import Views

        return Views

    if name == "ViewsConfig":
        from roost.config import ViewsConfig

        return ViewsConfig

    if name in ("RenderRequest", "RenderMode"):
        from roost import request as _request

        return getattr(_request, name)

    if name == "ResolvedTemplate":
        from roost.resolution import ResolvedTemplate

        return ResolvedTemplate

    if name in ("Engine", "MissingKey", "RawEngine", "TemplateEngine", "default_engines"):
        from roost import engines as _engines

        return getattr(_engines, name)

    if name in ("ViewFS", "DirectoryFS", "MemoryFS"):
        from roost import fs as _fs

        return getattr(_fs, name)

    if name == "BufferPool":
        from roost.buffers import BufferPool

        return BufferPool

    if name == "formats_for_accept":
        from roost.negotiation import formats_for_accept

        return formats_for_accept

    if name in (
        "CompileError",
        "ConfigurationError",
        "ExecutionError",
        "InvalidRequest",
        "RoostError",
        "TemplateNotFound",
        "UnsupportedExtension",
    ):
        from roost import errors as _errors

        return getattr(_errors, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
