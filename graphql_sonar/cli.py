"""Command-line interface for graphql-sonar."""

import argparse
import logging
from typing import List, Optional

from rich.logging import RichHandler

from .codegen import generate, list_operations
from .errors import CodegenError


def configure_logging(verbose: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        handlers=[RichHandler(show_path=False)],
    )


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the graphql-sonar CLI."""
    parser = argparse.ArgumentParser(
        description="Generate GraphQL client functions for endpoint checks"
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable debug logging"
    )
    subparsers = parser.add_subparsers(dest="subcommand", help="Subcommands")

    # Generate subcommand
    parser_generate = subparsers.add_parser(
        "generate", help="Generate a client module from operation documents"
    )
    parser_generate.add_argument("--schema", help="Path to the schema SDL file")
    parser_generate.add_argument(
        "--operations", help="Document file, directory or glob of operations"
    )
    parser_generate.add_argument(
        "--output", help="Generated module path, defaults to sonar_client.py"
    )

    # List subcommand
    parser_list = subparsers.add_parser(
        "list", help="List operations found in the documents"
    )
    parser_list.add_argument(
        "--operations", help="Document file, directory or glob of operations"
    )

    args = parser.parse_args(argv)
    configure_logging(args.verbose)

    if args.subcommand == "generate":
        if not args.schema:
            print("Missing schema")
            return 1
        if not args.operations:
            print("Missing operations path")
            return 1
        try:
            generate(args.schema, args.operations, args.output)
        except (CodegenError, OSError) as e:
            print(f"Error generating client: {str(e)}")
            return 1
    elif args.subcommand == "list":
        if not args.operations:
            print("Missing operations path")
            return 1
        try:
            operations = list_operations(args.operations)
        except CodegenError as e:
            print(str(e))
            return 1
        for name, kind in operations:
            print(f"{name} ({kind})")
    else:
        parser.print_help()
        return 1

    return 0
