from __future__ import annotations

import logging
import math
import time
from dataclasses import dataclass
from typing import Optional

import numpy as np

from .config import AnalysisConfig
from .dsp import autocorrelation, parabolic_offset
from .notes import frequency_to_note

logger = logging.getLogger(__name__)

SCAN_MIN_HZ = 50.0
SCAN_MAX_HZ = 2000.0


@dataclass(frozen=True)
class AutocorrelationResult:
    frequency: float
    confidence: float
    amplitude: float
    lag: Optional[float] = None

    @property
    def found(self) -> bool:
        return self.lag is not None


@dataclass(frozen=True)
class PitchEstimate:
    frequency: float
    note: str
    octave: int
    cents: int
    confidence: float
    amplitude: float
    timestamp: float

    @property
    def name(self) -> str:
        return f"{self.note}{self.octave}"


class AutocorrelationEstimator:
    """Best-supported fundamental period of one frame.

    The lag search always covers ``min_freq``..``max_freq`` (50-2000 Hz by
    default), whatever acceptance range the caller configures afterwards.

    ``peak_tolerance`` picks the earliest lobe reaching
    ``(1 - peak_tolerance) * max`` instead of the absolute maximum, which
    keeps later multiples of the period from winning on edge noise. Zero
    gives the plain first-maximum rule. Lags still on the falling edge of the
    lag-0 lobe are never candidates, so a low tone whose period is far above
    ``min_lag`` is not read as ``sample_rate / min_lag``.

    With ``interpolate`` the integer lag is refined by a parabola through its
    neighbours; turn it off to get exactly ``sample_rate / lag``.
    """

    def __init__(
        self,
        sample_rate: int,
        min_freq: float = SCAN_MIN_HZ,
        max_freq: float = SCAN_MAX_HZ,
        peak_tolerance: float = 0.1,
        interpolate: bool = True,
    ):
        self.sample_rate = sample_rate
        self.min_freq = min_freq
        self.max_freq = max_freq
        self.peak_tolerance = peak_tolerance
        self.interpolate = interpolate
        self.min_lag = max(int(sample_rate // max_freq), 1)
        self.max_lag = int(sample_rate // min_freq)

    def estimate(self, frame: np.ndarray) -> AutocorrelationResult:
        x = np.asarray(frame, dtype=np.float64).ravel()
        if x.size == 0:
            return AutocorrelationResult(0.0, 0.0, 0.0)

        corr = autocorrelation(x)
        energy = float(corr[0])
        amplitude = math.sqrt(max(energy, 0.0) / x.size)

        lag = self._best_lag(corr)
        if lag is None or energy <= 0.0:
            return AutocorrelationResult(0.0, 0.0, amplitude)

        confidence = float(corr[lag]) / energy
        period: float = lag
        if self.interpolate and 1 <= lag < corr.size - 1:
            offset = parabolic_offset(corr[lag - 1], corr[lag], corr[lag + 1])
            if abs(offset) <= 1.0:
                period = lag + offset

        return AutocorrelationResult(
            frequency=self.sample_rate / period,
            confidence=confidence,
            amplitude=amplitude,
            lag=period,
        )

    def _best_lag(self, corr: np.ndarray) -> Optional[int]:
        stop = min(self.max_lag, math.ceil(corr.size / 2))
        start = max(self.min_lag, self._zero_lag_lobe_end(corr, stop))
        window = corr[start:stop]
        if window.size == 0:
            return None

        peak = float(window[int(np.argmax(window))])
        if peak <= 0.0:
            return None

        idx = int(np.flatnonzero(window >= (1.0 - self.peak_tolerance) * peak)[0])
        while idx + 1 < window.size and window[idx + 1] > window[idx]:
            idx += 1
        return idx + start

    @staticmethod
    def _zero_lag_lobe_end(corr: np.ndarray, stop: int) -> int:
        """First lag past the lobe around lag 0 (zero crossing or local minimum)."""
        lag = 1
        while lag + 1 < stop and corr[lag] > 0.0 and corr[lag + 1] < corr[lag]:
            lag += 1
        return lag


def accept(result: AutocorrelationResult, config: AnalysisConfig) -> bool:
    """Candidate filter: in range, confident enough, and an actual period was found."""
    if not result.found or result.frequency <= 0.0:
        return False
    if result.frequency not in config.frequency_range:
        return False
    return result.confidence >= config.confidence_threshold


def detect_pitch(
    frame: np.ndarray,
    config: AnalysisConfig,
    estimator: Optional[AutocorrelationEstimator] = None,
    timestamp: Optional[float] = None,
) -> Optional[PitchEstimate]:
    """Estimator, filter and note mapper for a single frame.

    Returns ``None`` when the frame is rejected.
    """
    if estimator is None:
        estimator = AutocorrelationEstimator(sample_rate=config.sample_rate)

    result = estimator.estimate(frame)
    if not accept(result, config):
        logger.debug(
            "Rejected frame: %.1f Hz, confidence %.3f", result.frequency, result.confidence
        )
        return None

    reading = frequency_to_note(result.frequency)
    return PitchEstimate(
        frequency=result.frequency,
        note=reading.note,
        octave=reading.octave,
        cents=reading.cents,
        confidence=result.confidence,
        amplitude=result.amplitude,
        timestamp=time.time() if timestamp is None else timestamp,
    )
