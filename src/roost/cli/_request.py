"""Shared helpers turning parsed CLI arguments into roost objects."""

import argparse
import sys
from typing import Any, NoReturn, TextIO

from roost.config import ViewsConfig
from roost.request import RenderRequest
from roost.views import Views


def build_views(args: argparse.Namespace) -> Views:
    """Build a ``Views`` over ``args.view_dir``."""
    config = ViewsConfig(
        view_dir=args.view_dir,
        search_paths=tuple(args.search_paths),
        missing_key=getattr(args, "missing_key", "zero"),
    )
    return Views.from_config(config)


def build_request(args: argparse.Namespace, writer: TextIO | None = None) -> RenderRequest:
    """Build a ``RenderRequest`` from the shared request arguments."""
    return RenderRequest(
        writer=writer if writer is not None else sys.stdout,
        variables=parse_variables(getattr(args, "variables", [])),
        content=getattr(args, "content", ""),
        action=args.action,
        partial=args.partial,
        controller=args.controller,
        namespace=args.namespace,
        variants=tuple(args.variants),
        formats=tuple(args.formats),
        accept=args.accept,
        use_layout=args.use_layout,
        layout=args.layout,
    )


def parse_variables(pairs: list[str]) -> dict[str, Any]:
    """Parse ``KEY=VALUE`` pairs.  Values stay strings.

    Raises:
        ValueError: A pair has no ``=`` or an empty key.
    """
    variables: dict[str, Any] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            msg = f"expected KEY=VALUE, got {pair!r}"
            raise ValueError(msg)
        variables[key] = value
    return variables


def fail(exc: Exception) -> NoReturn:
    """Report *exc* on stderr and exit with status 1."""
    print(f"Error: {exc}", file=sys.stderr)
    raise SystemExit(1) from exc
