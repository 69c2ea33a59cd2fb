"""Frequency to equal-tempered note mapping."""

from __future__ import annotations

import math
from dataclasses import dataclass

NOTE_NAMES = ("C", "C#", "D", "D#", "E", "F", "F#", "G", "G#", "A", "A#", "B")

A4_HZ = 440.0
C0_HZ = A4_HZ * 2.0 ** -4.75
SEMITONE_RATIO = 2.0 ** (1.0 / 12.0)


@dataclass(frozen=True)
class NoteReading:
    note: str
    octave: int
    cents: int

    @property
    def is_note(self) -> bool:
        return self.note in NOTE_NAMES

    @property
    def name(self) -> str:
        return f"{self.note}{self.octave}"


NO_NOTE = NoteReading(note="N/A", octave=0, cents=0)


def frequency_to_note(frequency: float) -> NoteReading:
    """Nearest semitone above C0 plus the signed deviation from it in cents.

    Non-positive frequencies map to ``NO_NOTE``.
    """
    if frequency <= 0:
        return NO_NOTE

    semitone = _round_half_up(12.0 * math.log2(frequency / C0_HZ))
    expected = C0_HZ * SEMITONE_RATIO ** semitone
    cents = _round_half_up(1200.0 * math.log2(frequency / expected))
    return NoteReading(note=NOTE_NAMES[semitone % 12], octave=semitone // 12, cents=cents)


def note_to_frequency(note: str, octave: int) -> float:
    """Equal-tempered frequency of ``note`` in ``octave`` (``note_to_frequency("A", 4) == 440``)."""
    try:
        index = NOTE_NAMES.index(note)
    except ValueError:
        raise ValueError(f"Unknown note name {note!r}") from None
    return C0_HZ * SEMITONE_RATIO ** (octave * 12 + index)


def is_note_match(current: str, target: str, cents: float, tolerance: float = 10.0) -> bool:
    return current == target and abs(cents) <= tolerance


def _round_half_up(value: float) -> int:
    # Halves go toward +inf, so -49.5 cents rounds to -49 and 57.5 semitones to 58.
    return int(math.floor(value + 0.5))
