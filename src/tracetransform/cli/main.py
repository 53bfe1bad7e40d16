"""
Tracetransform CLI entry point.

Routes commands to the command implementations in tracetransform.cli.
"""

import argparse
import sys
from typing import List, Optional

from .functionals import FunctionalsCommand
from .transform import TransformCommand


def create_parser() -> argparse.ArgumentParser:
    """
    Create the main argument parser with subcommands.

    Returns:
        Configured ArgumentParser
    """
    from tracetransform import __version__

    parser = argparse.ArgumentParser(
        prog="tracetransform",
        description="Trace transform feature extraction for grayscale images",
        epilog="""
Examples:
  # Compute Radon and T1 sinograms reduced by P1 and P2
  tracetransform transform -i lena.pgm -T radon -T 1 -P 1 -P 2

  # List the available functionals
  tracetransform functionals

For more help on a specific command:
  tracetransform <command> --help
        """,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument("--version", action="version", version=f"tracetransform v{__version__}")

    subparsers = parser.add_subparsers(
        title="commands", description="Available commands", dest="command", required=True
    )

    commands = [
        TransformCommand(),
        FunctionalsCommand(),
    ]

    for command in commands:
        cmd_parser = subparsers.add_parser(
            command.name,
            help=command.help,
            description=command.description,
            formatter_class=argparse.RawDescriptionHelpFormatter,
        )
        command.add_arguments(cmd_parser)
        cmd_parser.set_defaults(command_handler=command)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main CLI entry point.

    Args:
        argv: Arguments to parse (default: sys.argv[1:])

    Returns:
        Exit code
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    try:
        return args.command_handler.execute(args)
    except KeyboardInterrupt:
        print("\n\nInterrupted by user", file=sys.stderr)
        return 130
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
