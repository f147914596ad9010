"""Roost CLI — inspect and render view trees from the shell.

Entry point registered as ``roost`` in ``pyproject.toml``::

    [project.scripts]
    roost = "roost.cli:main"
"""

import argparse
import logging
import sys


def _add_request_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("view_dir", help="Root directory of the view tree")

    target = parser.add_mutually_exclusive_group()
    target.add_argument("--action", default="", help="Action to resolve (e.g. index)")
    target.add_argument("--partial", default="", help="Partial to resolve (e.g. menu)")

    parser.add_argument("--controller", default="", help="Controller name")
    parser.add_argument("--namespace", default="", help="Namespace name")
    parser.add_argument(
        "--format",
        dest="formats",
        action="append",
        default=[],
        help="Preferred format, repeatable (default: derived from --accept)",
    )
    parser.add_argument(
        "--variant",
        dest="variants",
        action="append",
        default=[],
        help="Preferred variant, repeatable; pass '' to allow no variant",
    )
    parser.add_argument("--accept", default="", help="Accept header value")
    parser.add_argument(
        "--search-path",
        dest="search_paths",
        action="append",
        default=[],
        help="Search path prefix, repeatable, highest priority first",
    )
    parser.add_argument("--layout", default="", help="Explicit layout name")
    parser.add_argument("--use-layout", action="store_true", help="Wrap the view in a layout")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log resolution details")


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for the ``roost`` command."""
    parser = argparse.ArgumentParser(
        prog="roost",
        description="Roost — view resolution and layout rendering.",
    )
    subparsers = parser.add_subparsers(dest="command")

    # -- roost resolve ----------------------------------------------------
    resolve_parser = subparsers.add_parser(
        "resolve", help="Show which view (and layout) a request resolves to"
    )
    _add_request_arguments(resolve_parser)

    # -- roost render -----------------------------------------------------
    render_parser = subparsers.add_parser("render", help="Render a request to stdout")
    _add_request_arguments(render_parser)
    render_parser.add_argument(
        "--var",
        dest="variables",
        action="append",
        default=[],
        metavar="KEY=VALUE",
        help="Template variable, repeatable",
    )
    render_parser.add_argument("--content", default="", help="Literal content to render")
    render_parser.add_argument(
        "--missing-key",
        choices=("zero", "error", "invalid"),
        default="zero",
        help="How undefined template variables render",
    )

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")

    if args.command == "resolve":
        from roost.cli._resolve import run_resolve

        run_resolve(args)
    elif args.command == "render":
        from roost.cli._render import run_render

        run_render(args)
