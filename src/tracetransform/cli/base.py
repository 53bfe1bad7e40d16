"""Command base class and logging setup shared by the tracetransform subcommands."""

import logging
import sys
from abc import ABC, abstractmethod
from argparse import ArgumentParser, Namespace
from pathlib import Path

_LOG_LEVELS = {
    "quiet": logging.WARNING,
    "normal": logging.INFO,
    "verbose": logging.DEBUG,
    "debug": logging.DEBUG,
}


def configure_logging(verbosity: str) -> None:
    """
    Configure the root logger for a CLI run.

    Args:
        verbosity: One of "quiet", "normal", "verbose", "debug"; "debug" adds
            timestamps and level prefixes
    """
    if verbosity not in _LOG_LEVELS:
        raise ValueError(f"Unknown verbosity: {verbosity}")

    if verbosity == "debug":
        fmt = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
    else:
        fmt = "%(message)s"

    logging.basicConfig(level=_LOG_LEVELS[verbosity], format=fmt, force=True)


class CLICommand(ABC):
    """
    One `tracetransform <name>` subcommand.

    The router builds a subparser from name/help/description, lets the
    command register its arguments, then calls execute() with the parsed
    namespace and exits with its return value.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Subcommand token on the command line."""

    @property
    @abstractmethod
    def help(self) -> str:
        """One-line summary shown by `tracetransform --help`."""

    @property
    @abstractmethod
    def description(self) -> str:
        """Long text (with examples) shown by `tracetransform <name> --help`."""

    @abstractmethod
    def add_arguments(self, parser: ArgumentParser) -> None:
        """Register this command's options on its subparser."""

    @abstractmethod
    def execute(self, args: Namespace) -> int:
        """Run the command; returns the process exit code."""

    def error(self, message: str, exit_code: int = 1) -> int:
        """Report `message` on stderr and hand back `exit_code`."""
        print(f"Error: {message}", file=sys.stderr)
        return exit_code

    def validate_file_exists(self, path: Path, description: str = "File") -> bool:
        """Check an input path, reporting a missing one on stderr."""
        if path.exists():
            return True
        self.error(f"{description} not found: {path}")
        return False
