from __future__ import annotations

import logging
from dataclasses import dataclass, fields, replace
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Union

from .errors import ConfigurationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FrequencyRange:
    min: float
    max: float

    @property
    def is_empty(self) -> bool:
        return self.min > self.max

    def __contains__(self, frequency: float) -> bool:
        return self.min <= frequency <= self.max


@dataclass(frozen=True)
class AnalysisConfig:
    """Settings for one analysis session.

    ``smoothing``, ``decibel_floor`` and ``decibel_ceiling`` are carried for
    capture collaborators; the estimator does not read them.
    """

    sample_rate: int = 44100
    frame_size: int = 4096
    smoothing: float = 0.8
    decibel_floor: float = -75.0
    decibel_ceiling: float = -10.0
    frequency_range: FrequencyRange = FrequencyRange(50.0, 2000.0)
    confidence_threshold: float = 0.75

    @property
    def resolution_hz(self) -> float:
        return self.sample_rate / self.frame_size


class Profile(str, Enum):
    GENERAL = "general"
    VOCAL = "vocal"
    GUITAR = "guitar"


GENERAL_CONFIG = AnalysisConfig()

# Larger frame for vocal nuance, lighter smoothing keeps vibrato.
VOCAL_CONFIG = AnalysisConfig(
    frame_size=8192,
    smoothing=0.6,
    decibel_floor=-80.0,
    frequency_range=FrequencyRange(80.0, 1100.0),
    confidence_threshold=0.7,
)

# E2..E4 open strings, heavier smoothing for a stable needle.
GUITAR_CONFIG = AnalysisConfig(
    frame_size=4096,
    smoothing=0.9,
    decibel_floor=-70.0,
    frequency_range=FrequencyRange(80.0, 350.0),
    confidence_threshold=0.8,
)

PROFILES: Dict[Profile, AnalysisConfig] = {
    Profile.GENERAL: GENERAL_CONFIG,
    Profile.VOCAL: VOCAL_CONFIG,
    Profile.GUITAR: GUITAR_CONFIG,
}

_ALIASES = {
    "sampleRate": "sample_rate",
    "frameSize": "frame_size",
    "fftSize": "frame_size",
    "smoothingTimeConstant": "smoothing",
    "decibelFloor": "decibel_floor",
    "minDecibels": "decibel_floor",
    "decibelCeiling": "decibel_ceiling",
    "maxDecibels": "decibel_ceiling",
    "frequencyRange": "frequency_range",
    "confidenceThreshold": "confidence_threshold",
}

_FIELD_NAMES = {f.name for f in fields(AnalysisConfig)}


def get_profile(profile: Union[Profile, str]) -> AnalysisConfig:
    try:
        return PROFILES[Profile(profile)]
    except ValueError:
        names = ", ".join(p.value for p in Profile)
        raise ConfigurationError(f"Unknown profile {profile!r}, expected one of: {names}") from None


def resolve_config(
    profile: Union[Profile, str] = Profile.GENERAL,
    overrides: Optional[Mapping[str, Any]] = None,
    **kwargs: Any,
) -> AnalysisConfig:
    """Merge sparse overrides onto a named profile.

    Keys may use the camelCase option names (``sampleRate``,
    ``frequencyRange.min``...) or the dataclass field names. Later values
    win: keyword arguments override the mapping, which overrides the profile.
    """
    base = get_profile(profile)
    merged: Dict[str, Any] = {}
    range_min = base.frequency_range.min
    range_max = base.frequency_range.max

    items = list((overrides or {}).items()) + list(kwargs.items())
    for raw_key, value in items:
        key = _canonical_key(raw_key)
        if key in ("frequency_range.min", "frequency_range.max"):
            if key.endswith("min"):
                range_min = float(value)
            else:
                range_max = float(value)
        elif key == "frequency_range":
            range_min, range_max = _merge_range(range_min, range_max, value)
        else:
            merged[key] = value

    merged["frequency_range"] = FrequencyRange(range_min, range_max)
    config = replace(base, **merged)
    if config.frequency_range.is_empty:
        logger.warning(
            "Frequency range %.1f-%.1f Hz is empty; no pitch will ever be accepted",
            config.frequency_range.min,
            config.frequency_range.max,
        )
    return config


def _canonical_key(raw_key: str) -> str:
    head, dot, tail = raw_key.partition(".")
    head = _ALIASES.get(head, head)
    if dot:
        if head != "frequency_range" or tail not in ("min", "max"):
            raise ConfigurationError(f"Unknown configuration option {raw_key!r}")
        return f"{head}.{tail}"
    if head not in _FIELD_NAMES:
        raise ConfigurationError(f"Unknown configuration option {raw_key!r}")
    return head


def _merge_range(current_min: float, current_max: float, value: Any) -> tuple[float, float]:
    if isinstance(value, FrequencyRange):
        return value.min, value.max
    if isinstance(value, Mapping):
        unknown = set(value) - {"min", "max"}
        if unknown:
            raise ConfigurationError(f"Unknown frequency range keys: {sorted(unknown)}")
        return float(value.get("min", current_min)), float(value.get("max", current_max))
    try:
        low, high = value
    except (TypeError, ValueError):
        raise ConfigurationError(f"Cannot read a frequency range from {value!r}") from None
    return float(low), float(high)
