"""Tests for stage timing."""

import torch

from tracetransform.profiling import StageTimer


class TestStageTimer:
    """Test per-stage timing collection on CPU."""

    def test_records_stages(self):
        timer = StageTimer(torch.device("cpu"))
        with timer.stage("sinogram", "Radon"):
            torch.ones(100).sum()
        with timer.stage("sinogram", "T1"):
            pass
        with timer.stage("circus", "Radon-P1"):
            pass

        assert len(timer) == 3
        assert [r.functional for r in timer.records] == ["Radon", "T1", "Radon-P1"]
        summary = timer.summary()
        assert set(summary) == {"sinogram", "circus"}
        assert summary["sinogram"] >= 0.0

    def test_disabled_records_nothing(self):
        timer = StageTimer(torch.device("cpu"), enabled=False)
        with timer.stage("sinogram"):
            pass
        assert len(timer) == 0
        assert timer.summary() == {}

    def test_clear(self):
        timer = StageTimer(torch.device("cpu"))
        with timer.stage("prepare"):
            pass
        timer.clear()
        assert len(timer) == 0
