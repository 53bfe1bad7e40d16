"""GPU-aware stage timing for the trace transform pipeline."""

import time
from collections import defaultdict
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional

import torch


@dataclass
class TimingRecord:
    """One timed pipeline stage, tagged with the functional it ran for."""

    stage: str
    functional: str
    elapsed_ms: float


class CUDATimer:
    """
    Wall-clock timer for one stage, measured with CUDA events on a GPU.

    On CPU devices it falls back to time.perf_counter().
    """

    def __init__(self, device: torch.device, enabled: bool = True):
        self.device = device
        self.enabled = enabled
        self.use_cuda = device.type == "cuda" and torch.cuda.is_available()
        self.start_time: Optional[float] = None
        self.end_time: Optional[float] = None

        if self.use_cuda and self.enabled:
            self.start_event = torch.cuda.Event(enable_timing=True)
            self.end_event = torch.cuda.Event(enable_timing=True)

    def __enter__(self):
        if not self.enabled:
            return self

        if self.use_cuda:
            torch.cuda.synchronize(self.device)
            self.start_event.record(torch.cuda.current_stream(self.device))
        else:
            self.start_time = time.perf_counter()
        return self

    def __exit__(self, *args):
        if not self.enabled:
            return

        if self.use_cuda:
            self.end_event.record(torch.cuda.current_stream(self.device))
            torch.cuda.synchronize(self.device)
        else:
            self.end_time = time.perf_counter()

    def elapsed_ms(self) -> float:
        """Get elapsed time in milliseconds."""
        if not self.enabled:
            return 0.0

        if self.use_cuda:
            return self.start_event.elapsed_time(self.end_event)
        if self.start_time is None or self.end_time is None:
            return 0.0
        return (self.end_time - self.start_time) * 1000.0


class StageTimer:
    """
    Collects per-stage timings (sinogram, correction, circus) of one run.

    When disabled, stage() is a no-op and no device synchronization happens.

    Usage:
        timer = StageTimer(device, enabled=config.profile)
        with timer.stage("sinogram", "T1"):
            sinogram = generator.generate(padded, tfunctional)
        timer.summary()
    """

    def __init__(self, device: torch.device, enabled: bool = True):
        self.device = device
        self.enabled = enabled
        self.records: List[TimingRecord] = []

    @contextmanager
    def stage(self, stage: str, functional: str = "") -> Iterator[None]:
        if not self.enabled:
            yield
            return

        timer = CUDATimer(self.device)
        with timer:
            yield
        self.records.append(
            TimingRecord(stage=stage, functional=functional, elapsed_ms=timer.elapsed_ms())
        )

    def summary(self) -> Dict[str, float]:
        """Total milliseconds per stage."""
        totals: Dict[str, float] = defaultdict(float)
        for record in self.records:
            totals[record.stage] += record.elapsed_ms
        return dict(totals)

    def clear(self) -> None:
        self.records.clear()

    def __len__(self) -> int:
        return len(self.records)
