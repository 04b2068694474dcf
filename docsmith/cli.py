"""Command line entry point for ``python -m docsmith`` and ``docsmith``."""

from __future__ import annotations

import argparse
from pathlib import Path
from typing import Optional, Sequence

from docsmith import __version__
from docsmith.builder import Build, BuildError, BuildRule
from docsmith.config import ConfigError, Settings, check_input_format
from docsmith.model import DecodeError, unmarshal_file
from docsmith.utils import print_error, print_success, print_summary_table

EXIT_OK = 0
EXIT_UNSUPPORTED_FORMAT = 1
EXIT_DECODE = 2
EXIT_BUILD_SETUP = 3
EXIT_APPLY = 4
EXIT_USAGE = 5


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="docsmith",
        description="Render a document workspace through a template project",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  docsmith --in book.json --id book --template ./templates/latex --out build --name pdf\n"
            "  docsmith --in book.json --id book --template https://example.com/tpl.git --out build --name html\n"
        ),
    )
    parser.add_argument(
        "--format", default=None, help="Input format of --in (default: $DOCSMITH_INPUT_FORMAT or json)"
    )
    parser.add_argument("--in", dest="input", default="", help="The input markup file, as defined by --format")
    parser.add_argument("--out", default=".", help="The folder to place the generated files (default: .)")
    parser.add_argument("--id", dest="identifier", default="", help="The id of the subtree to generate from")
    parser.add_argument(
        "--template", default="", help="Local folder or remote git repository containing the template"
    )
    parser.add_argument("--name", default="", help="Subfolder name in --out for the generated output")
    parser.add_argument("--version", action="version", version=f"docsmith {__version__}")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run one build rule described by the command line and return an exit code."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if not args.input or not args.template:
        print_error("Error: --in and --template are required\n")
        parser.print_help()
        return EXIT_USAGE

    settings = Settings.from_env()
    if args.format is not None:
        settings.input_format = args.format
    try:
        settings.input_format = check_input_format(settings.input_format)
    except ConfigError as exc:
        print_error(f"Error: {exc}")
        return EXIT_UNSUPPORTED_FORMAT

    try:
        workspace = unmarshal_file(args.input)
    except DecodeError as exc:
        print_error(f"Error: Cannot parse markup of '{args.input}': {exc}")
        return EXIT_DECODE

    try:
        build = Build(workspace, Path(args.out), settings=settings)
    except BuildError as exc:
        print_error(f"Error: Cannot create build: {exc}")
        return EXIT_BUILD_SETUP

    build.add_rule(BuildRule(identifier=args.identifier, template=args.template, name=args.name))
    with build:
        try:
            results = build.apply()
        except BuildError as exc:
            print_error(f"Error: Cannot apply build transformation: {exc}")
            return EXIT_APPLY

    print_summary_table(
        {path.name: str(path.parent) for paths in results.values() for path in paths},
        title="Artefacts",
    )
    print_success("Build completed successfully!")
    return EXIT_OK


if __name__ == "__main__":
    raise SystemExit(main())
