"""Tests for pitchcore.tuning: nearest open string and tuning status."""

from __future__ import annotations

import pytest

from pitchcore.tuning import STANDARD_TUNING, nearest_string, tune, tuning_status


class TestNearestString:
    @pytest.mark.parametrize("string", STANDARD_TUNING, ids=lambda s: f"string{s.number}")
    def test_exact_open_strings(self, string) -> None:
        assert nearest_string(string.frequency) is string

    def test_slightly_sharp_a(self) -> None:
        assert nearest_string(112.0).name == "A2"

    def test_below_low_e(self) -> None:
        assert nearest_string(60.0).number == 6

    def test_above_high_e(self) -> None:
        assert nearest_string(600.0).number == 1

    def test_non_positive(self) -> None:
        with pytest.raises(ValueError, match="must be positive"):
            nearest_string(0.0)


class TestTuningStatus:
    @pytest.mark.parametrize(
        "cents, status",
        [(0.0, "perfect"), (-4.9, "perfect"), (5.0, "close"), (-14.9, "close"), (15.0, "off"), (-40.0, "off")],
    )
    def test_bands(self, cents: float, status: str) -> None:
        assert tuning_status(cents) == status


class TestTune:
    def test_in_tune(self) -> None:
        reading = tune(110.0)
        assert reading.string.number == 5
        assert reading.cents == pytest.approx(0.0)
        assert reading.status == "perfect"

    def test_flat_low_e(self) -> None:
        reading = tune(80.0)
        assert reading.string.name == "E2"
        assert reading.cents < -15
        assert reading.status == "off"
