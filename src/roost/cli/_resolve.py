"""``roost resolve`` — show where a request resolves in the view tree.

Prints the template path and its format, plus the layout path when
``--use-layout`` is given.  On a miss, prints every pattern tried and
exits with code 1.
"""

import argparse
import sys

from roost.cli._request import build_request, build_views, fail
from roost.errors import RoostError, TemplateNotFound
from roost.request import RenderMode


def run_resolve(args: argparse.Namespace) -> None:
    try:
        views = build_views(args)
        request = build_request(args)
    except (RoostError, ValueError) as exc:
        fail(exc)

    try:
        if request.mode in (RenderMode.TEMPLATE, RenderMode.TEMPLATE_IN_LAYOUT):
            resolved = views.find_template(request)
            print(f"template: {resolved.path}")
            print(f"format:   {resolved.format}")
            fmt = resolved.format
        else:
            formats = request.effective_formats()
            fmt = formats[0] if formats else ""

        if request.use_layout:
            print(f"layout:   {views.find_layout(request, fmt)}")
    except TemplateNotFound as exc:
        print(f"Error: {exc.kind} not found. Tried:", file=sys.stderr)
        for pattern in exc.tried:
            print(f"  {pattern}", file=sys.stderr)
        raise SystemExit(1) from exc
    except RoostError as exc:
        fail(exc)
