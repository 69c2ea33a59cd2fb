"""Tests for pitchcore.notes: frequency to note mapping."""

from __future__ import annotations

import math

import pytest

from pitchcore.notes import (
    C0_HZ,
    NO_NOTE,
    NOTE_NAMES,
    frequency_to_note,
    is_note_match,
    note_to_frequency,
)


class TestReferenceConstants:
    def test_c0(self) -> None:
        assert C0_HZ == pytest.approx(16.3516, abs=1e-4)

    def test_chromatic_order(self) -> None:
        assert NOTE_NAMES == ("C", "C#", "D", "D#", "E", "F", "F#", "G", "G#", "A", "A#", "B")


class TestFrequencyToNote:
    @pytest.mark.parametrize("n", list(range(-24, 109)))
    def test_equal_tempered_steps_have_zero_cents(self, n: int) -> None:
        reading = frequency_to_note(C0_HZ * 2 ** (n / 12))
        assert reading.cents == 0
        assert reading.note == NOTE_NAMES[n % 12]
        assert reading.octave == n // 12

    def test_a4(self) -> None:
        reading = frequency_to_note(440.0)
        assert (reading.note, reading.octave, reading.cents) == ("A", 4, 0)
        assert reading.name == "A4"

    def test_a_sharp_4(self) -> None:
        reading = frequency_to_note(466.16)
        assert (reading.note, reading.octave) == ("A#", 4)
        assert reading.cents == 0

    def test_just_above_midpoint_goes_up(self) -> None:
        # 453 Hz is above the A4/A#4 geometric midpoint (about 452.89 Hz).
        reading = frequency_to_note(453.0)
        assert (reading.note, reading.octave) == ("A#", 4)
        expected = math.floor(1200 * math.log2(453.0 / (440.0 * 2 ** (1 / 12))) + 0.5)
        assert reading.cents == expected == -50

    def test_just_below_midpoint_stays(self) -> None:
        reading = frequency_to_note(452.0)
        assert (reading.note, reading.octave) == ("A", 4)
        assert reading.cents == math.floor(1200 * math.log2(452.0 / 440.0) + 0.5) == 47

    def test_flat_reading(self) -> None:
        reading = frequency_to_note(435.0)
        assert reading.name == "A4"
        assert reading.cents == -20

    def test_octave_below_c0_is_negative(self) -> None:
        reading = frequency_to_note(C0_HZ / 2)
        assert (reading.note, reading.octave, reading.cents) == ("C", -1, 0)

    def test_b_minus_one(self) -> None:
        reading = frequency_to_note(C0_HZ * 2 ** (-1 / 12))
        assert (reading.note, reading.octave) == ("B", -1)

    @pytest.mark.parametrize("frequency", [0.0, -1.0, -440.0])
    def test_non_positive_is_no_note(self, frequency: float) -> None:
        reading = frequency_to_note(frequency)
        assert reading is NO_NOTE
        assert not reading.is_note

    def test_cents_stay_within_half_semitone(self) -> None:
        f = 100.0
        while f < 2000.0:
            assert -50 <= frequency_to_note(f).cents <= 50
            f *= 1.0137


class TestNoteToFrequency:
    def test_a4(self) -> None:
        assert note_to_frequency("A", 4) == pytest.approx(440.0)

    def test_low_e(self) -> None:
        assert note_to_frequency("E", 2) == pytest.approx(82.41, abs=0.01)

    def test_unknown_note(self) -> None:
        with pytest.raises(ValueError, match="Unknown note name"):
            note_to_frequency("H", 3)


class TestIsNoteMatch:
    def test_match_within_tolerance(self) -> None:
        assert is_note_match("A", "A", 8)

    def test_tolerance_is_inclusive(self) -> None:
        assert is_note_match("E", "E", -10)

    def test_outside_tolerance(self) -> None:
        assert not is_note_match("A", "A", 11)

    def test_different_note(self) -> None:
        assert not is_note_match("A", "A#", 0)

    def test_custom_tolerance(self) -> None:
        assert is_note_match("G", "G", 20, tolerance=25)
