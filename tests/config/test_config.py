"""Tests for configuration schemas and YAML loading."""

from pathlib import Path

import pytest
import yaml
from pydantic import ValidationError

from tracetransform.config import (
    OutputConfig,
    TraceTransformConfig,
    load_config,
    merge_configs,
    save_config,
    substitute_params,
)
from tracetransform.errors import FunctionalSpecError


class TestTraceTransformConfig:
    """Test schema validation of a run configuration."""

    def test_defaults(self):
        config = TraceTransformConfig(tfunctionals=["radon"])
        assert config.pfunctionals == []
        assert config.device == "cuda"
        assert config.dtype == "float32"
        assert config.angle_step == 1.0
        assert config.verbosity == "normal"
        assert config.output.table_name == "circus.csv"

    def test_scalar_tokens_normalized(self):
        config = TraceTransformConfig(tfunctionals="radon", pfunctionals=2)
        assert config.tfunctionals == ["radon"]
        assert config.pfunctionals == ["2"]

    def test_selection(self):
        config = TraceTransformConfig(tfunctionals=["0", "t1"], pfunctionals=["h1", "H2"])
        selection = config.selection()
        assert [t.name for t in selection.tfunctionals] == ["Radon", "T1"]
        assert selection.orthonormal

    def test_mixed_regimes_rejected(self):
        with pytest.raises(ValidationError, match="Cannot mix regular and orthonormal"):
            TraceTransformConfig(tfunctionals=["radon"], pfunctionals=["P1", "H3"])

    def test_unknown_tfunctional_rejected(self):
        with pytest.raises(ValidationError, match="Unknown T-functional"):
            TraceTransformConfig(tfunctionals=["T8"])

    def test_missing_hermite_order_rejected(self):
        with pytest.raises(ValidationError, match="Missing order parameter"):
            TraceTransformConfig(tfunctionals=["radon"], pfunctionals=["H"])

    def test_selection_error_is_a_value_error(self):
        with pytest.raises(ValueError) as excinfo:
            TraceTransformConfig(tfunctionals=["radon"], pfunctionals=["P1", "H2"])
        assert isinstance(excinfo.value, ValidationError)
        assert not isinstance(excinfo.value, FunctionalSpecError)

    def test_empty_tfunctionals_rejected(self):
        with pytest.raises(ValidationError):
            TraceTransformConfig(tfunctionals=[])

    @pytest.mark.parametrize("step", [0.0, -5.0, 400.0])
    def test_angle_step_bounds(self, step):
        with pytest.raises(ValidationError):
            TraceTransformConfig(tfunctionals=["radon"], angle_step=step)

    def test_unknown_device_rejected(self):
        with pytest.raises(ValidationError):
            TraceTransformConfig(tfunctionals=["radon"], device="tpu")

    def test_unknown_verbosity_rejected(self):
        with pytest.raises(ValidationError):
            TraceTransformConfig(tfunctionals=["radon"], verbosity="loud")


class TestOutputConfig:
    """Test output settings validation."""

    def test_hdf5_suffix(self):
        assert OutputConfig(hdf5_path=Path("run.h5")).hdf5_path == Path("run.h5")
        with pytest.raises(ValidationError, match="HDF5"):
            OutputConfig(hdf5_path=Path("run.csv"))

    def test_table_name_is_plain(self):
        with pytest.raises(ValidationError, match="plain file name"):
            OutputConfig(table_name="sub/circus.csv")


class TestLoader:
    """Test YAML loading with substitution and overrides."""

    @pytest.fixture
    def config_file(self, tmp_path):
        path = tmp_path / "run.yaml"
        path.write_text(
            "input_image: images/${IMAGE}.pgm\n"
            "tfunctionals: [radon, T1]\n"
            "pfunctionals: [P1, P2]\n"
            "device: cpu\n"
            "output:\n"
            "  directory: results/${IMAGE}\n"
        )
        return path

    def test_load_with_runtime_params(self, config_file):
        config = load_config(config_file, runtime_params={"IMAGE": "lena"})
        assert config.input_image == Path("images/lena.pgm")
        assert config.output.directory == Path("results/lena")
        assert config.tfunctionals == ["radon", "T1"]

    def test_load_with_environment(self, config_file, monkeypatch):
        monkeypatch.setenv("IMAGE", "barbara")
        config = load_config(config_file)
        assert config.input_image == Path("images/barbara.pgm")

    def test_missing_param(self, config_file, monkeypatch):
        monkeypatch.delenv("IMAGE", raising=False)
        with pytest.raises(ValueError, match="Missing parameter: IMAGE"):
            load_config(config_file)

    def test_overrides_merge(self, config_file):
        config = load_config(
            config_file,
            runtime_params={"IMAGE": "lena"},
            overrides={"pfunctionals": ["H1"], "output": {"write_traces": True}},
        )
        assert config.pfunctionals == ["H1"]
        assert config.output.write_traces is True
        assert config.output.directory == Path("results/lena")

    def test_invalid_selection_in_file(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("tfunctionals: [radon]\npfunctionals: [P2, H1]\n")
        with pytest.raises(ValueError, match="Cannot mix"):
            load_config(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "missing.yaml")

    def test_not_a_mapping(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- radon\n- T1\n")
        with pytest.raises(ValueError, match="YAML dict"):
            load_config(path)

    def test_save_roundtrip(self, tmp_path):
        config = TraceTransformConfig(
            tfunctionals=["radon", "T3"],
            pfunctionals=["H2"],
            device="cpu",
            angle_step=2.0,
        )
        path = tmp_path / "saved" / "run.yaml"
        save_config(config, path)

        assert yaml.safe_load(path.read_text())["pfunctionals"] == ["H2"]
        assert load_config(path) == config


class TestHelpers:
    """Test substitution and merging helpers."""

    def test_whole_value_keeps_type(self):
        assert substitute_params({"angle_step": "${step}"}, {"step": 2.5}) == {"angle_step": 2.5}

    def test_nested_substitution(self):
        result = substitute_params({"a": ["${x}", {"b": "p_${x}"}]}, {"x": "1"})
        assert result == {"a": ["1", {"b": "p_1"}]}

    def test_deep_merge(self):
        base = {"output": {"directory": "a", "write_traces": False}, "device": "cpu"}
        merged = merge_configs(base, {"output": {"write_traces": True}})
        assert merged == {"output": {"directory": "a", "write_traces": True}, "device": "cpu"}
        assert base["output"]["write_traces"] is False
