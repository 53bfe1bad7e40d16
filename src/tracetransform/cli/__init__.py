"""
Tracetransform CLI package.

Provides modular command implementations for the tracetransform CLI.
"""

from .base import CLICommand, configure_logging
from .functionals import FunctionalsCommand
from .transform import TransformCommand

__all__ = [
    "CLICommand",
    "configure_logging",
    "FunctionalsCommand",
    "TransformCommand",
]
