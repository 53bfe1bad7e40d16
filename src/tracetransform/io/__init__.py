"""Image input and result output."""

from tracetransform.io.image import load_image
from tracetransform.io.storage import (
    HDF5ResultWriter,
    read_feature_table,
    read_hdf5_result,
    save_result,
    write_feature_table,
    write_sinogram,
    write_trace,
)

__all__ = [
    "load_image",
    "HDF5ResultWriter",
    "read_feature_table",
    "read_hdf5_result",
    "save_result",
    "write_feature_table",
    "write_sinogram",
    "write_trace",
]
