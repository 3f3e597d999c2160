"""Command line interface for the stencil project generator."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Iterable, Sequence

from .config import GeneratorSettings
from .errors import StencilError
from .scaffold import ProjectScaffolder


def _parse_key_value_pairs(pairs: Iterable[str]) -> dict[str, str]:
    context: dict[str, str] = {}
    for pair in pairs:
        if "=" not in pair:
            raise argparse.ArgumentTypeError(
                f"invalid key/value pair '{pair}'. Expected KEY=VALUE syntax."
            )
        key, value = pair.split("=", 1)
        key = key.strip()
        if not key:
            raise argparse.ArgumentTypeError("keys must not be empty")
        context[key] = value
    return context


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Generate projects from templates")
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Log progress (repeat for debug output)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    create_parser = subparsers.add_parser("create", help="create a new project from a template")
    create_parser.add_argument(
        "template",
        help="Template name, optionally REPO%%ROOT%%TEMPLATE#TAG for git hosted templates",
    )
    create_parser.add_argument("name", help="Project name, either qualifier/name or a bare name")
    create_parser.add_argument(
        "-d",
        "--target-dir",
        type=Path,
        help="Directory to generate into (defaults to the project name)",
    )
    create_parser.add_argument(
        "-c",
        "--context",
        metavar="KEY=VALUE",
        action="append",
        default=[],
        help="Extra values exposed to the template",
    )
    create_parser.add_argument(
        "-s",
        "--search-root",
        type=Path,
        action="append",
        default=[],
        help="Additional directory searched for templates",
    )

    return parser


def _configure_logging(verbosity: int) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity > 1:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


def _handle_create(args: argparse.Namespace) -> int:
    settings = GeneratorSettings.from_env()
    if args.search_root:
        settings.search_roots = list(args.search_root) + settings.search_roots

    options: dict[str, object] = dict(_parse_key_value_pairs(args.context))
    options["template"] = args.template
    options["name"] = args.name
    if args.target_dir is not None:
        options["target-dir"] = str(args.target_dir)

    scaffolder = ProjectScaffolder(settings)
    try:
        result = scaffolder.create(options)
    except StencilError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    if result.post_process_error is not None:
        print(f"warning: {result.post_process_error}", file=sys.stderr)
    print(f"Project created at {result.target_dir}")
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.verbose)
    if args.command == "create":
        try:
            return _handle_create(args)
        except argparse.ArgumentTypeError as exc:
            parser.error(str(exc))
    parser.error("no command provided")
    return 2


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
