"""Main CLI entry point for schemagate.

Provides commands: inspect
"""

import argparse
import logging
import sys
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

from schemagate.cli.inspect import inspect_command

logger = logging.getLogger("schemagate.cli")


def setup_logging(verbose: bool = False, console: Optional[Console] = None) -> None:
    """Setup logging configuration with Rich integration.

    Args:
        verbose: Enable verbose logging.
        console: Rich Console instance for coordinated output (optional).
    """
    if verbose:
        level = logging.DEBUG
    else:
        level = logging.WARNING

    handler = RichHandler(
        console=console or Console(stderr=True),
        show_time=True,
        show_path=False,
        markup=False,
        rich_tracebacks=True,
        tracebacks_show_locals=verbose,
        log_time_format="[%H:%M:%S]",
    )

    # Configure root logger
    logging.basicConfig(
        level=level,
        format="[%(name)s] [%(levelname)s] %(message)s",
        handlers=[handler],
    )


def main() -> int:
    """Main CLI entry point.

    Returns:
        int: Exit code.
    """
    parser = argparse.ArgumentParser(
        description="schemagate - feature-gated GraphQL schema preprocessing",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    inspect_parser = subparsers.add_parser(
        "inspect",
        help="Preprocess a schema and print the resulting SDL",
    )
    inspect_parser.add_argument(
        "target",
        help=(
            "Schema location as 'package.module:attribute'. The attribute may be "
            "a SchemaConfig, a GraphQLSchema or a callable returning either."
        ),
    )
    inspect_parser.add_argument(
        "-c",
        "--config",
        help=(
            "Optional preprocessor configuration. Can be a path to a TOML/JSON "
            "file (e.g. schemagate.toml, pyproject.toml) or an inline TOML/JSON "
            "string. When omitted, every toggle is off."
        ),
    )
    inspect_parser.add_argument(
        "--beta",
        action="store_true",
        help="Enable beta features regardless of the configuration source",
    )
    inspect_parser.add_argument(
        "-o",
        "--output",
        help="Write SDL to this file instead of stdout",
    )
    inspect_parser.add_argument(
        "--report",
        action="store_true",
        help="Log the types, fields, arguments and enum values that were removed",
    )
    inspect_parser.add_argument(
        "--report-json",
        help="Write the removal report as JSON to this file",
    )

    args = parser.parse_args()

    setup_logging(args.verbose)

    if args.command == "inspect":
        return inspect_command(args)
    else:
        parser.print_help()
        return 1


if __name__ == "__main__":
    sys.exit(main())
