"""
Shared fixtures: synthetic signals and a recording frame source.

Nothing here touches an audio device.
"""

from __future__ import annotations

import numpy as np
import pytest

from pitchcore.sources import Frame

SAMPLE_RATE = 44100
FRAME_SIZE = 4096


def sine(frequency: float, n: int = FRAME_SIZE, sample_rate: int = SAMPLE_RATE, amplitude: float = 0.5) -> np.ndarray:
    t = np.arange(n) / sample_rate
    return amplitude * np.sin(2.0 * np.pi * frequency * t)


class RecordingSource:
    """Frame source that yields a fixed frame and counts acquire/release calls."""

    def __init__(self, samples: np.ndarray, sample_rate: int = SAMPLE_RATE):
        self.samples = samples
        self.sample_rate = sample_rate
        self.acquired = 0
        self.released = 0
        self.reads = 0
        self.acquire_error: Exception | None = None
        self.read_error: Exception | None = None

    @property
    def held(self) -> bool:
        return self.acquired > self.released

    def acquire(self) -> None:
        if self.acquire_error is not None:
            raise self.acquire_error
        self.acquired += 1

    def release(self) -> None:
        self.released += 1

    def read(self, frame_size: int) -> Frame:
        if self.read_error is not None:
            raise self.read_error
        self.reads += 1
        return Frame(samples=self.samples[:frame_size], sample_rate=self.sample_rate)

    def __enter__(self) -> "RecordingSource":
        self.acquire()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.release()


@pytest.fixture
def a4_frame() -> np.ndarray:
    return sine(440.0)


@pytest.fixture
def silent_frame() -> np.ndarray:
    return np.zeros(FRAME_SIZE)


@pytest.fixture
def a4_source() -> RecordingSource:
    return RecordingSource(sine(440.0))
