"""Functionals command: list the available T- and P-functionals."""

from argparse import ArgumentParser, Namespace

from .base import CLICommand


class FunctionalsCommand(CLICommand):
    """Command to print the functional catalog."""

    @property
    def name(self) -> str:
        return "functionals"

    @property
    def help(self) -> str:
        return "List available T- and P-functionals"

    @property
    def description(self) -> str:
        return """
List the functionals accepted by the transform command.

Examples:
  tracetransform functionals
  tracetransform functionals --kind p
        """

    def add_arguments(self, parser: ArgumentParser) -> None:
        parser.add_argument(
            "--kind",
            choices=["t", "p", "all"],
            default="all",
            help="Which functionals to list (default: all)",
        )

    def execute(self, args: Namespace) -> int:
        from tracetransform.functionals import list_pfunctionals, list_tfunctionals

        if args.kind in ("t", "all"):
            print("T-functionals:")
            for name, description in list_tfunctionals():
                print(f"  {name:<8} {description}")

        if args.kind == "all":
            print()

        if args.kind in ("p", "all"):
            print("P-functionals:")
            for name, description in list_pfunctionals():
                print(f"  {name:<8} {description}")

        return 0
