from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

from .dsp import cents_between


@dataclass(frozen=True)
class GuitarString:
    number: int
    note: str
    octave: int
    frequency: float

    @property
    def name(self) -> str:
        return f"{self.note}{self.octave}"


@dataclass(frozen=True)
class TuningReading:
    string: GuitarString
    cents: float
    status: str


STANDARD_TUNING: Tuple[GuitarString, ...] = (
    GuitarString(6, "E", 2, 82.41),
    GuitarString(5, "A", 2, 110.00),
    GuitarString(4, "D", 3, 146.83),
    GuitarString(3, "G", 3, 196.00),
    GuitarString(2, "B", 3, 246.94),
    GuitarString(1, "E", 4, 329.63),
)

PERFECT_CENTS = 5.0
CLOSE_CENTS = 15.0


def nearest_string(frequency: float) -> GuitarString:
    if frequency <= 0:
        raise ValueError(f"frequency must be positive, got {frequency}")
    return min(STANDARD_TUNING, key=lambda s: abs(cents_between(frequency, s.frequency)))


def tuning_status(cents: float) -> str:
    deviation = abs(cents)
    if deviation < PERFECT_CENTS:
        return "perfect"
    if deviation < CLOSE_CENTS:
        return "close"
    return "off"


def tune(frequency: float) -> TuningReading:
    """How far ``frequency`` is from the closest open string in standard tuning."""
    string = nearest_string(frequency)
    cents = cents_between(frequency, string.frequency)
    return TuningReading(string=string, cents=cents, status=tuning_status(cents))
