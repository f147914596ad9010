"""Accept header → view formats.

Formats are file extensions (``html``, ``json``, ...).  The caller's
order is preserved; quality parameters are dropped, not sorted on.
"""

import mimetypes

DEFAULT_FORMATS: tuple[str, ...] = ("html", "json")


def formats_for_accept(accept: str | None) -> tuple[str, ...]:
    """Map an Accept-style preference string to an ordered format list.

    Each comma-separated entry has everything from ``;`` onward stripped
    and is mapped to its conventional extensions.  Unknown or malformed
    types are skipped.  An absent or ``*/*`` header, or one where nothing
    maps, yields ``DEFAULT_FORMATS``.

    Example::

        formats_for_accept("application/json;q=0.9, text/html")
        # -> ("json", "html", "htm", ...) in mimetypes order
    """
    if not accept or accept.strip() == "*/*":
        return DEFAULT_FORMATS

    formats: list[str] = []
    for entry in accept.split(","):
        mime_type = entry.split(";", 1)[0].strip()
        if not mime_type or "/" not in mime_type:
            continue
        for ext in mimetypes.guess_all_extensions(mime_type):
            fmt = ext.removeprefix(".")
            if fmt not in formats:
                formats.append(fmt)

    return tuple(formats) or DEFAULT_FORMATS
