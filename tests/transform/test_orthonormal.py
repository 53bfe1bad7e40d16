"""Tests for the orthonormal sinogram corrector.

Sinograms are built from one-hot columns, whose weighted median is the
position of the spike, so that column offsets can be chosen exactly.
"""

import pytest
import torch

from tracetransform.backend import TorchBackend
from tracetransform.errors import AlignmentError
from tracetransform.transform.orthonormal import (
    align_sinogram,
    alignment_offsets,
    nearest_orthonormal,
    nearest_orthonormal_sinogram,
    sinogram_center,
)


@pytest.fixture
def backend():
    return TorchBackend(device="cpu", dtype="float64")


def spike_sinogram(rows, spikes):
    """Sinogram [rows, len(spikes)] with a unit spike per column."""
    sinogram = torch.zeros(rows, len(spikes), dtype=torch.float64)
    for col, row in enumerate(spikes):
        sinogram[row, col] = 1.0
    return sinogram


@pytest.fixture
def centered_sinogram():
    """Columns dominated by their center row, so every offset is zero."""
    torch.manual_seed(0)
    sinogram = torch.rand(5, 4, dtype=torch.float64)
    sinogram[2] += 10.0
    return sinogram


class TestAlignment:
    """Test offset computation and column shifting."""

    def test_center(self):
        assert sinogram_center(11) == 5
        assert sinogram_center(10) == 4
        assert sinogram_center(1) == 0

    def test_offsets(self):
        sinogram = spike_sinogram(11, [3, 5, 8])
        assert alignment_offsets(sinogram).tolist() == [-2, 0, 3]

    def test_padding_and_shift(self, backend):
        sinogram = spike_sinogram(11, [3, 5, 8])
        aligned, highest = align_sinogram(backend, sinogram, alignment_offsets(sinogram))

        assert highest == 3
        assert tuple(aligned.shape) == (16, 3)
        # Every spike lands on center + max offset
        assert aligned[8].tolist() == [1.0, 1.0, 1.0]
        assert aligned.sum().item() == 3.0

    def test_corrected_center(self, backend):
        sinogram = spike_sinogram(11, [3, 5, 8])
        corrected, center = nearest_orthonormal_sinogram(backend, sinogram)

        assert center == sinogram_center(11) + 3
        assert tuple(corrected.shape) == (16, 3)

    def test_zero_offsets_need_no_padding(self, backend, centered_sinogram):
        offsets = alignment_offsets(centered_sinogram)
        assert offsets.tolist() == [0, 0, 0, 0]

        aligned, highest = align_sinogram(backend, centered_sinogram, offsets)
        assert highest == 0
        assert torch.equal(aligned, centered_sinogram)

    def test_offsets_on_one_side_rejected(self, backend):
        sinogram = spike_sinogram(11, [6, 8, 7])
        with pytest.raises(AlignmentError, match="Degenerate"):
            nearest_orthonormal_sinogram(backend, sinogram)

    def test_offsets_below_center_rejected(self, backend):
        sinogram = spike_sinogram(11, [0, 4, 2])
        with pytest.raises(AlignmentError):
            nearest_orthonormal_sinogram(backend, sinogram)

    def test_empty_sinogram_rejected(self, backend):
        with pytest.raises(AlignmentError, match="empty"):
            nearest_orthonormal_sinogram(backend, torch.zeros(0, 3, dtype=torch.float64))


class TestNearestOrthonormal:
    """Test the SVD projection step."""

    def test_zero_offsets_match_plain_projection(self, backend, centered_sinogram):
        corrected, center = nearest_orthonormal_sinogram(backend, centered_sinogram)

        assert center == 2
        expected = nearest_orthonormal(backend, centered_sinogram)
        assert torch.allclose(corrected, expected, atol=1e-12)

    def test_tall_matrix_has_orthonormal_columns(self, backend):
        torch.manual_seed(1)
        matrix = torch.randn(7, 4, dtype=torch.float64)
        result = nearest_orthonormal(backend, matrix)
        assert torch.allclose(result.t() @ result, torch.eye(4, dtype=torch.float64), atol=1e-10)

    def test_wide_matrix_has_orthonormal_rows(self, backend):
        torch.manual_seed(2)
        matrix = torch.randn(3, 6, dtype=torch.float64)
        result = nearest_orthonormal(backend, matrix)
        assert torch.allclose(result @ result.t(), torch.eye(3, dtype=torch.float64), atol=1e-10)

    def test_idempotent(self, backend):
        torch.manual_seed(3)
        once = nearest_orthonormal(backend, torch.randn(6, 5, dtype=torch.float64))
        twice = nearest_orthonormal(backend, once)
        assert torch.allclose(once, twice, atol=1e-10)

    def test_preserves_dtype(self):
        backend = TorchBackend(device="cpu", dtype="float32")
        matrix = torch.randn(5, 3)
        assert nearest_orthonormal(backend, matrix).dtype == torch.float32

    def test_input_not_modified(self, backend):
        sinogram = spike_sinogram(11, [3, 5, 8]) + 0.1
        before = sinogram.clone()
        nearest_orthonormal_sinogram(backend, sinogram)
        assert torch.equal(sinogram, before)
