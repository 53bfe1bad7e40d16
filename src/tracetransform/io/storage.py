"""
Result storage for trace transform runs.

Tabular outputs (CSV):
    <directory>/circus.csv          Feature table, header = "<T>-<P>" labels,
                                    one row per angle
    <directory>/trace_<T>-<P>.csv   Single-column circus function (write_traces)
    <directory>/sinogram_<T>.csv    Uncorrected sinogram (write_sinograms)

HDF5 schema (optional, one file per run):
    /
        @created - ISO timestamp
        @config - JSON run configuration
    /features [A, T*P]
        @labels - JSON list of column labels
    /sinograms/
        <T> [rows, A]
            @center - alignment center row (orthonormal regime only)
"""

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional

import h5py
import numpy as np

from tracetransform.config.schema import OutputConfig, TraceTransformConfig
from tracetransform.transform.circus import FeatureMatrix
from tracetransform.transform.pipeline import TraceResult

logger = logging.getLogger(__name__)


def write_feature_table(path: Path, features: FeatureMatrix) -> None:
    """
    Write a feature matrix as CSV with a label header row.

    Args:
        path: Output file
        features: Feature matrix
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    np.savetxt(
        path,
        features.values,
        delimiter=",",
        header=",".join(features.labels),
        comments="",
    )


def write_trace(path: Path, values: np.ndarray, label: str) -> None:
    """Write one circus function as a single-column CSV."""
    path.parent.mkdir(parents=True, exist_ok=True)
    np.savetxt(path, np.asarray(values).reshape(-1, 1), delimiter=",", header=label, comments="")


def write_sinogram(path: Path, sinogram: np.ndarray) -> None:
    """Write a sinogram as CSV, one row per sample position."""
    path.parent.mkdir(parents=True, exist_ok=True)
    np.savetxt(path, sinogram, delimiter=",")


def read_feature_table(path: Path) -> FeatureMatrix:
    """Read a feature table written by write_feature_table()."""
    with open(path, 'r') as f:
        header = f.readline().strip()
    labels = header.split(",") if header else []
    values = np.loadtxt(path, delimiter=",", skiprows=1, ndmin=2)
    return FeatureMatrix(values=values, labels=labels)


class HDF5ResultWriter:
    """
    HDF5 writer for a complete trace transform run.

    Example:
        ```python
        with HDF5ResultWriter(Path("results/lena.h5"), overwrite=True) as writer:
            writer.write_features(result.features)
            for name, sinogram in result.sinograms.items():
                writer.write_sinogram(name, sinogram, result.centers.get(name))
        ```
    """

    def __init__(
        self,
        path: Path,
        config: Optional[TraceTransformConfig] = None,
        overwrite: bool = False
    ):
        """
        Initialize HDF5 result writer.

        Args:
            path: Output HDF5 file
            config: Run configuration stored as metadata
            overwrite: Replace an existing file instead of failing
        """
        self.path = path
        self.config = config
        self.overwrite = overwrite
        self.file: Optional[h5py.File] = None

    def __enter__(self):
        if self.path.exists() and not self.overwrite:
            raise FileExistsError(f"Output file exists (use overwrite): {self.path}")

        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.file = h5py.File(self.path, 'w')
        self.file.attrs['created'] = datetime.now().isoformat()
        if self.config is not None:
            self.file.attrs['config'] = self.config.model_dump_json()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self.file is not None:
            self.file.close()
            self.file = None

    def _require_open(self) -> h5py.File:
        if self.file is None:
            raise RuntimeError("HDF5ResultWriter used outside of a with-block")
        return self.file

    def write_features(self, features: FeatureMatrix) -> None:
        f = self._require_open()
        dataset = f.create_dataset('features', data=features.values)
        dataset.attrs['labels'] = json.dumps(features.labels)

    def write_sinogram(self, name: str, sinogram: np.ndarray, center: Optional[int] = None) -> None:
        f = self._require_open()
        group = f.require_group('sinograms')
        dataset = group.create_dataset(name, data=sinogram, compression='gzip')
        if center is not None:
            dataset.attrs['center'] = center


def read_hdf5_result(path: Path) -> Dict[str, object]:
    """
    Read back a run written by HDF5ResultWriter.

    Returns:
        Dict with "features" (FeatureMatrix), "sinograms" (name -> array),
        "centers" (name -> int) and "config" (dict or None)
    """
    with h5py.File(path, 'r') as f:
        dataset = f['features']
        features = FeatureMatrix(
            values=dataset[()],
            labels=json.loads(dataset.attrs['labels'])
        )

        sinograms: Dict[str, np.ndarray] = {}
        centers: Dict[str, int] = {}
        if 'sinograms' in f:
            for name, sino in f['sinograms'].items():
                sinograms[name] = sino[()]
                if 'center' in sino.attrs:
                    centers[name] = int(sino.attrs['center'])

        config = json.loads(f.attrs['config']) if 'config' in f.attrs else None

    return {
        'features': features,
        'sinograms': sinograms,
        'centers': centers,
        'config': config,
    }


def save_result(
    result: TraceResult,
    output: OutputConfig,
    config: Optional[TraceTransformConfig] = None
) -> List[Path]:
    """
    Write every output requested by an output configuration.

    Args:
        result: Trace transform result
        output: Output settings
        config: Run configuration (stored in HDF5 metadata)

    Returns:
        Paths of the written files
    """
    written: List[Path] = []
    features = result.features

    table_path = output.directory / output.table_name
    write_feature_table(table_path, features)
    written.append(table_path)

    if output.write_traces:
        for index, label in enumerate(features.labels):
            trace_path = output.directory / f"trace_{label}.csv"
            write_trace(trace_path, features.values[:, index], label)
            written.append(trace_path)

    if output.write_sinograms:
        for name, sinogram in result.sinograms.items():
            sinogram_path = output.directory / f"sinogram_{name}.csv"
            write_sinogram(sinogram_path, sinogram)
            written.append(sinogram_path)

    if output.hdf5_path is not None:
        with HDF5ResultWriter(output.hdf5_path, config=config, overwrite=True) as writer:
            writer.write_features(features)
            for name, sinogram in result.sinograms.items():
                writer.write_sinogram(name, sinogram, result.centers.get(name))
        written.append(output.hdf5_path)

    for path in written:
        logger.debug(f"Wrote {path}")
    return written
