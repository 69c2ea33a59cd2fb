import math

import numpy as np


def autocorrelation(frame: np.ndarray) -> np.ndarray:
    """Unbiased autocorrelation ``r[L] = sum(x[i] * x[i + L]) / (N - L)`` for every lag.

    The frame is zero-padded to twice its length so the FFT product gives the
    linear (not circular) correlation.
    """
    x = np.asarray(frame, dtype=np.float64).ravel()
    n = x.size
    if n == 0:
        return np.zeros(0, dtype=np.float64)

    spectrum = np.fft.rfft(x, n=2 * n)
    corr = np.fft.irfft(np.abs(spectrum) ** 2, n=2 * n)[:n]
    return corr / (n - np.arange(n))


def parabolic_offset(y0: float, y1: float, y2: float) -> float:
    """Vertex offset of the parabola through three equally spaced points, in [-0.5, 0.5] for a peak."""
    denom = 2.0 * (y0 - 2.0 * y1 + y2)
    if abs(denom) <= 1e-12:
        return 0.0
    return (y0 - y2) / denom


def cents_between(frequency: float, reference: float) -> float:
    return 1200.0 * math.log2(frequency / reference)
