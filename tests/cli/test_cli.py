"""Tests for the tracetransform command line interface."""

import numpy as np
import pytest
from PIL import Image

from tracetransform.backend import TorchBackend
from tracetransform.cli import configure_logging
from tracetransform.cli.main import create_parser, main
from tracetransform.errors import KernelLaunchError


@pytest.fixture
def image_path(tmp_path):
    """Small synthetic grayscale PNG."""
    rng = np.random.default_rng(5)
    pixels = (rng.random((10, 8)) * 255).astype(np.uint8)
    path = tmp_path / "synthetic.png"
    Image.fromarray(pixels).save(path)
    return path


@pytest.fixture
def blob_path(tmp_path):
    """Centered Gaussian blob, so Hermite alignment has offsets on both sides."""
    y, x = np.mgrid[0:15, 0:15]
    pixels = (255 * np.exp(-((x - 7) ** 2 + (y - 7) ** 2) / 8.0)).astype(np.uint8)
    path = tmp_path / "blob.png"
    Image.fromarray(pixels).save(path)
    return path


def transform_args(image_path, output_dir, *extra):
    return [
        "transform",
        "-i", str(image_path),
        "--device", "cpu",
        "--angle-step", "45",
        "--output-dir", str(output_dir),
        "-q",
        *extra,
    ]


class TestParser:
    """Test argument parsing."""

    def test_repeatable_functionals(self):
        parser = create_parser()
        args = parser.parse_args(["transform", "-T", "0", "-T", "1", "-P", "1", "-P", "H3"])
        assert args.tfunctionals == ["0", "1"]
        assert args.pfunctionals == ["1", "H3"]

    def test_verbosity_flags_exclusive(self):
        parser = create_parser()
        with pytest.raises(SystemExit):
            parser.parse_args(["transform", "-T", "0", "-q", "-v"])

    def test_command_required(self):
        with pytest.raises(SystemExit):
            create_parser().parse_args([])


class TestTransformCommand:
    """Test the transform command end to end."""

    def test_success(self, image_path, tmp_path):
        out = tmp_path / "out"
        code = main(transform_args(image_path, out, "-T", "radon", "-T", "1", "-P", "1", "-P", "2"))

        assert code == 0
        lines = (out / "circus.csv").read_text().splitlines()
        assert lines[0] == "Radon-P1,Radon-P2,T1-P1,T1-P2"
        assert len(lines) == 1 + 8

    def test_hermite_with_exports(self, blob_path, tmp_path):
        out = tmp_path / "out"
        code = main(transform_args(
            blob_path, out, "-T", "radon", "-P", "H1",
            "--dtype", "float64", "--write-sinograms", "--hdf5", str(out / "run.h5"),
        ))

        assert code == 0
        assert (out / "sinogram_Radon.csv").exists()
        assert (out / "run.h5").exists()

    def test_bad_token(self, image_path, tmp_path, capsys):
        code = main(transform_args(image_path, tmp_path, "-T", "T9", "-P", "1"))

        assert code == 1
        assert "Unknown T-functional" in capsys.readouterr().err

    def test_mixed_regimes(self, image_path, tmp_path, capsys):
        code = main(transform_args(image_path, tmp_path, "-T", "1", "-P", "1", "-P", "H2"))

        assert code == 1
        assert "Cannot mix regular and orthonormal" in capsys.readouterr().err
        assert not (tmp_path / "circus.csv").exists()

    def test_missing_hermite_order(self, image_path, tmp_path, capsys):
        code = main(transform_args(image_path, tmp_path, "-T", "1", "-P", "H"))

        assert code == 1
        assert "Missing order parameter" in capsys.readouterr().err

    def test_missing_tfunctional(self, image_path, tmp_path, capsys):
        code = main(transform_args(image_path, tmp_path, "-P", "1"))

        assert code == 1
        assert "T-functional" in capsys.readouterr().err

    def test_missing_image(self, tmp_path, capsys):
        code = main(transform_args(tmp_path / "nope.png", tmp_path, "-T", "1"))

        assert code == 1
        assert "Image not found" in capsys.readouterr().err

    def test_kernel_failure_aborts(self, image_path, tmp_path, capsys, monkeypatch):
        original = TorchBackend.trace

        def trace(self, lines, tfunctional, *args):
            if tfunctional.name == "T1":
                raise KernelLaunchError(f"Kernel failed for {tfunctional.name}")
            return original(self, lines, tfunctional, *args)

        monkeypatch.setattr(TorchBackend, "trace", trace)
        out = tmp_path / "out"
        code = main(transform_args(image_path, out, "-T", "radon", "-T", "1", "-P", "1"))

        assert code == 1
        assert "Error: Kernel failed for T1" in capsys.readouterr().err
        assert not (out / "circus.csv").exists()

    def test_dry_run(self, image_path, tmp_path, capsys):
        code = main(transform_args(image_path, tmp_path, "-T", "radon", "-P", "P3", "--dry-run"))

        assert code == 0
        assert "Configuration valid" in capsys.readouterr().out
        assert not (tmp_path / "circus.csv").exists()

    def test_config_file(self, image_path, tmp_path):
        config_path = tmp_path / "run.yaml"
        config_path.write_text(
            f"input_image: {image_path}\n"
            "tfunctionals: [T2]\n"
            "pfunctionals: [P1]\n"
            "device: cpu\n"
            "angle_step: 90\n"
            "verbosity: quiet\n"
            f"output:\n  directory: {tmp_path / 'from_config'}\n"
        )

        code = main(["transform", "--config", str(config_path), "-P", "P2"])

        assert code == 0
        lines = (tmp_path / "from_config" / "circus.csv").read_text().splitlines()
        assert lines[0] == "T2-P2"
        assert len(lines) == 1 + 4

    def test_missing_config(self, tmp_path, capsys):
        code = main(["transform", "--config", str(tmp_path / "missing.yaml")])

        assert code == 1
        assert "Config not found" in capsys.readouterr().err


class TestFunctionalsCommand:
    """Test the catalog listing."""

    def test_lists_everything(self, capsys):
        assert main(["functionals"]) == 0
        out = capsys.readouterr().out
        assert "Radon" in out
        assert "T5" in out
        assert "H<order>" in out

    def test_p_only(self, capsys):
        assert main(["functionals", "--kind", "p"]) == 0
        out = capsys.readouterr().out
        assert "P-functionals" in out
        assert "T-functionals" not in out


class TestConfigureLogging:
    """Test verbosity to logging level mapping."""

    @pytest.mark.parametrize("verbosity,level", [
        ("quiet", 30),
        ("normal", 20),
        ("verbose", 10),
        ("debug", 10),
    ])
    def test_levels(self, verbosity, level):
        import logging

        configure_logging(verbosity)
        assert logging.getLogger().level == level

    def test_unknown_verbosity(self):
        with pytest.raises(ValueError, match="Unknown verbosity"):
            configure_logging("loud")
