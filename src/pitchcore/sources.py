"""Frame sources the engine pulls audio from.

A source is acquired once per engine session, read one frame per tick, and
released when the session ends. All sources work as context managers.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any, Optional, Protocol, Union

import numpy as np

from .errors import AcquisitionError, FrameSourceExhausted

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Frame:
    samples: np.ndarray
    sample_rate: int

    def __len__(self) -> int:
        return int(self.samples.size)


class FrameSource(Protocol):
    def acquire(self) -> None: ...

    def release(self) -> None: ...

    def read(self, frame_size: int) -> Frame: ...

    def __enter__(self) -> "FrameSource": ...

    def __exit__(self, *exc_info: Any) -> None: ...


class _ScopedSource:
    def acquire(self) -> None:
        pass

    def release(self) -> None:
        pass

    def __enter__(self):
        self.acquire()
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.release()


class SoundDeviceSource(_ScopedSource):
    """Microphone input through PortAudio, mono, blocking reads."""

    def __init__(
        self,
        sample_rate: int = 44100,
        device: Optional[Union[int, str]] = None,
        channels: int = 1,
        block_size: int = 0,
    ):
        self.sample_rate = sample_rate
        self.device = device
        self.channels = channels
        self.block_size = block_size
        self._stream = None

    @property
    def active(self) -> bool:
        return self._stream is not None

    def acquire(self) -> None:
        if self._stream is not None:
            return
        try:
            import sounddevice as sd
        except (ImportError, OSError) as exc:
            raise AcquisitionError(f"Audio input unavailable: {exc}") from exc

        try:
            stream = sd.InputStream(
                channels=self.channels,
                samplerate=self.sample_rate,
                blocksize=self.block_size,
                device=self.device,
                dtype="float32",
            )
            stream.start()
        except Exception as exc:
            raise AcquisitionError(f"Could not open input device {self.device!r}: {exc}") from exc

        self._stream = stream
        logger.info("Opened input device %r at %d Hz", self.device, self.sample_rate)

    def release(self) -> None:
        stream, self._stream = self._stream, None
        if stream is None:
            return
        try:
            stream.stop()
        finally:
            stream.close()
        logger.info("Closed input device %r", self.device)

    def read(self, frame_size: int) -> Frame:
        if self._stream is None:
            raise RuntimeError("SoundDeviceSource.read() called before acquire()")
        data, overflowed = self._stream.read(frame_size)
        if overflowed:
            logger.debug("Input overflow while reading %d samples", frame_size)
        return Frame(samples=np.asarray(data[:, 0], dtype=np.float64), sample_rate=self.sample_rate)


class ToneSource(_ScopedSource):
    """Phase-continuous sine generator."""

    def __init__(self, frequency: float, sample_rate: int = 44100, amplitude: float = 0.5):
        self.frequency = frequency
        self.sample_rate = sample_rate
        self.amplitude = amplitude
        self._position = 0

    def acquire(self) -> None:
        self._position = 0

    def read(self, frame_size: int) -> Frame:
        n = np.arange(self._position, self._position + frame_size)
        self._position += frame_size
        samples = self.amplitude * np.sin(2.0 * math.pi * self.frequency * n / self.sample_rate)
        return Frame(samples=samples, sample_rate=self.sample_rate)


class BufferSource(_ScopedSource):
    """Consecutive frames cut from an in-memory buffer."""

    def __init__(self, samples: np.ndarray, sample_rate: int, loop: bool = False):
        self.samples = np.asarray(samples, dtype=np.float64).ravel()
        self.sample_rate = sample_rate
        self.loop = loop
        self._offset = 0

    def acquire(self) -> None:
        self._offset = 0

    def read(self, frame_size: int) -> Frame:
        total = self.samples.size
        if self.loop and total:
            idx = (self._offset + np.arange(frame_size)) % total
            self._offset = (self._offset + frame_size) % total
            return Frame(samples=self.samples[idx], sample_rate=self.sample_rate)

        if self._offset + frame_size > total:
            raise FrameSourceExhausted(
                f"Buffer of {total} samples exhausted at offset {self._offset}"
            )
        chunk = self.samples[self._offset:self._offset + frame_size]
        self._offset += frame_size
        return Frame(samples=chunk, sample_rate=self.sample_rate)
