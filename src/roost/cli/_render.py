"""``roost render`` — render a request to stdout."""

import argparse
import sys

from roost.cli._request import build_request, build_views, fail
from roost.errors import RoostError


def run_render(args: argparse.Namespace) -> None:
    try:
        views = build_views(args)
        request = build_request(args, sys.stdout)
    except (RoostError, ValueError) as exc:
        fail(exc)

    try:
        views.render(request)
    except (RoostError, OSError) as exc:
        fail(exc)
