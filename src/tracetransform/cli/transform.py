"""
Transform command for the tracetransform CLI.

Computes the trace transform features of one image and writes the feature
table (plus optional traces, sinograms and HDF5 export).
"""

import sys
import time
from argparse import ArgumentParser, Namespace
from pathlib import Path
from typing import Any, Dict

from .base import CLICommand, configure_logging


class TransformCommand(CLICommand):
    """Command to compute trace transform features of an image."""

    @property
    def name(self) -> str:
        return "transform"

    @property
    def help(self) -> str:
        return "Compute trace transform features of an image"

    @property
    def description(self) -> str:
        return """
Compute the trace transform of an image.

Every T-functional produces a sinogram (one column per sampled angle). Every
P-functional then reduces each sinogram column to one value. The resulting
feature table has one row per angle and one column per (T, P) pair, labelled
"<T>-<P>".

T-functionals: radon (or 0), T1..T5 (or 1..5)
P-functionals: P1..P3 (or 1..3), H<order> (Hermite; cannot be mixed with P1..P3)

Examples:
  # Radon and T1 with two circus functions
  tracetransform transform -i lena.pgm -T radon -T 1 -P 1 -P 2

  # Orthonormal regime with Hermite functionals, on the CPU
  tracetransform transform -i lena.pgm -T 1 -P H1 -P H2 --device cpu

  # Use a YAML configuration and export everything to HDF5
  tracetransform transform --config configs/default.yaml --hdf5 results/run.h5

  # Validate the configuration without computing anything
  tracetransform transform -i lena.pgm -T 1 -P 1 --dry-run
        """

    def add_arguments(self, parser: ArgumentParser) -> None:
        """Add transform command arguments."""
        parser.add_argument(
            "-i", "--input",
            dest="image",
            type=Path,
            metavar="IMAGE",
            help="Image to process (overrides input_image from the config)",
        )

        # Functional selection
        functional_group = parser.add_argument_group("functional selection")

        functional_group.add_argument(
            "-T", "--t-functional",
            dest="tfunctionals",
            action="append",
            metavar="TOKEN",
            help="T-functional (repeatable)",
        )

        functional_group.add_argument(
            "-P", "--p-functional",
            dest="pfunctionals",
            action="append",
            metavar="TOKEN",
            help="P-functional (repeatable)",
        )

        # Configuration
        config_group = parser.add_argument_group("configuration")

        config_group.add_argument(
            "--config",
            type=Path,
            metavar="PATH",
            help="Path to run configuration YAML (optional)",
        )

        config_group.add_argument(
            "--device",
            choices=["cuda", "cpu"],
            help="Device for computation (default: cuda if available)",
        )

        config_group.add_argument(
            "--dtype",
            choices=["float32", "float64"],
            help="Buffer precision (default: float32)",
        )

        config_group.add_argument(
            "--angle-step",
            type=float,
            metavar="DEG",
            help="Angular sampling step in degrees (default: 1.0)",
        )

        config_group.add_argument(
            "--angle-batch",
            type=int,
            metavar="N",
            help="Angles rotated per kernel launch (default: 32)",
        )

        # Output
        output_group = parser.add_argument_group("output")

        output_group.add_argument(
            "--output-dir",
            type=Path,
            metavar="PATH",
            help="Directory for the feature table (default: current directory)",
        )

        output_group.add_argument(
            "--hdf5",
            type=Path,
            metavar="PATH",
            help="Also write the full run to an HDF5 file",
        )

        output_group.add_argument(
            "--write-traces",
            action="store_true",
            help="Write one file per (T, P) circus function",
        )

        output_group.add_argument(
            "--write-sinograms",
            action="store_true",
            help="Write one file per T-functional sinogram",
        )

        # Diagnostics
        diag_group = parser.add_argument_group("diagnostics")
        verbosity = diag_group.add_mutually_exclusive_group()

        verbosity.add_argument(
            "-q", "--quiet",
            dest="verbosity",
            action="store_const",
            const="quiet",
            help="Only display errors and warnings",
        )

        verbosity.add_argument(
            "-v", "--verbose",
            dest="verbosity",
            action="store_const",
            const="verbose",
            help="Display some more details",
        )

        verbosity.add_argument(
            "-d", "--debug",
            dest="verbosity",
            action="store_const",
            const="debug",
            help="Display even more details",
        )

        diag_group.add_argument(
            "--profile",
            action="store_true",
            help="Report per-stage timings",
        )

        diag_group.add_argument(
            "--dry-run",
            action="store_true",
            help="Validate configuration without computing features",
        )

    def execute(self, args: Namespace) -> int:
        """Execute the trace transform."""
        from tracetransform.errors import TraceTransformError

        try:
            config = self._build_config(args)
        except (ValueError, FileNotFoundError) as e:
            return self.error(str(e))

        configure_logging(config.verbosity)

        if config.input_image is None:
            return self.error("No input image given (-i IMAGE or input_image in config)")
        if not self.validate_file_exists(config.input_image, "Image"):
            return 1

        if config.verbosity != "quiet" or args.dry_run:
            self._print_config_summary(config)

        if args.dry_run:
            print("\n✓ Configuration valid (dry-run mode, no features computed)")
            return 0

        try:
            return self._run_transform(config)
        except TraceTransformError as e:
            return self.error(str(e))
        except KeyboardInterrupt:
            print("\n\nTransform interrupted by user", file=sys.stderr)
            return 130

    def _build_config(self, args: Namespace):
        """Load the YAML config (if any) and apply command-line overrides."""
        from tracetransform.config import TraceTransformConfig, load_config

        overrides = self._collect_overrides(args)

        if args.config:
            if not args.config.exists():
                raise FileNotFoundError(f"Config not found: {args.config}")
            return load_config(args.config, overrides=overrides)

        if "tfunctionals" not in overrides:
            raise ValueError("At least one T-functional is required (-T)")
        if "device" not in overrides:
            overrides["device"] = self._default_device()
        return TraceTransformConfig(**overrides)

    def _collect_overrides(self, args: Namespace) -> Dict[str, Any]:
        overrides: Dict[str, Any] = {}

        if args.image is not None:
            overrides["input_image"] = args.image
        if args.tfunctionals:
            overrides["tfunctionals"] = args.tfunctionals
        if args.pfunctionals:
            overrides["pfunctionals"] = args.pfunctionals
        if args.device:
            overrides["device"] = args.device
        if args.dtype:
            overrides["dtype"] = args.dtype
        if args.angle_step is not None:
            overrides["angle_step"] = args.angle_step
        if args.angle_batch is not None:
            overrides["angle_batch"] = args.angle_batch
        if args.verbosity:
            overrides["verbosity"] = args.verbosity
        if args.profile:
            overrides["profile"] = True

        output: Dict[str, Any] = {}
        if args.output_dir is not None:
            output["directory"] = args.output_dir
        if args.hdf5 is not None:
            output["hdf5_path"] = args.hdf5
        if args.write_traces:
            output["write_traces"] = True
        if args.write_sinograms:
            output["write_sinograms"] = True
        if output:
            overrides["output"] = output

        return overrides

    @staticmethod
    def _default_device() -> str:
        import torch

        return "cuda" if torch.cuda.is_available() else "cpu"

    def _print_config_summary(self, config) -> None:
        """Print configuration summary."""
        print("\n" + "=" * 60)
        print("TRACE TRANSFORM CONFIGURATION")
        print("=" * 60)

        selection = config.selection()
        print(f"\nImage:          {config.input_image}")
        print(f"T-functionals:  {', '.join(t.name for t in selection.tfunctionals)}")
        if selection.pfunctionals:
            regime = "orthonormal" if selection.orthonormal else "regular"
            print(f"P-functionals:  {', '.join(p.name for p in selection.pfunctionals)} ({regime})")
        else:
            print("P-functionals:  none (sinograms only)")

        print(f"\nExecution:")
        print(f"  Device:         {config.device} ({config.dtype})")
        print(f"  Angle step:     {config.angle_step}°")
        print(f"  Angle batch:    {config.angle_batch}")

        print(f"\nOutput:")
        print(f"  Directory:      {config.output.directory}")
        print(f"  Traces:         {'yes' if config.output.write_traces else 'no'}")
        print(f"  Sinograms:      {'yes' if config.output.write_sinograms else 'no'}")
        if config.output.hdf5_path is not None:
            print(f"  HDF5:           {config.output.hdf5_path}")

        print("=" * 60 + "\n")

    def _run_transform(self, config) -> int:
        """
        Run the pipeline.

        Pipeline:
        1. Load the image
        2. Compute sinograms and circus functions
        3. Write the requested outputs
        """
        from tracetransform.io import load_image, save_result
        from tracetransform.transform import TraceTransformer

        start_time = time.time()

        image = load_image(config.input_image)
        transformer = TraceTransformer(config)
        result = transformer.transform(image)
        written = save_result(result, config.output, config)

        elapsed = time.time() - start_time
        if config.verbosity != "quiet":
            rows, cols = result.features.shape
            print(f"\n✓ Trace transform complete ({elapsed:.1f}s): {rows} angles x {cols} features")
            for path in written:
                print(f"  {path}")

        return 0
