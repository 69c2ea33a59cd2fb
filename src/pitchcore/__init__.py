"""Real-time single voice pitch detection."""

__version__ = "0.1.0"

from .config import (
    AnalysisConfig,
    FrequencyRange,
    Profile,
    PROFILES,
    get_profile,
    resolve_config,
)
from .engine import EngineState, PitchEngine
from .errors import (
    AcquisitionError,
    ConfigurationError,
    FrameSourceError,
    FrameSourceExhausted,
    PitchCoreError,
)
from .notes import NO_NOTE, NoteReading, frequency_to_note, is_note_match
from .pitch import (
    AutocorrelationEstimator,
    AutocorrelationResult,
    PitchEstimate,
    accept,
    detect_pitch,
)
from .scheduling import AsyncioScheduler, ManualScheduler
from .sources import BufferSource, Frame, SoundDeviceSource, ToneSource

__all__ = [
    "AnalysisConfig",
    "FrequencyRange",
    "Profile",
    "PROFILES",
    "get_profile",
    "resolve_config",
    "EngineState",
    "PitchEngine",
    "AcquisitionError",
    "ConfigurationError",
    "FrameSourceError",
    "FrameSourceExhausted",
    "PitchCoreError",
    "NO_NOTE",
    "NoteReading",
    "frequency_to_note",
    "is_note_match",
    "AutocorrelationEstimator",
    "AutocorrelationResult",
    "PitchEstimate",
    "accept",
    "detect_pitch",
    "AsyncioScheduler",
    "ManualScheduler",
    "BufferSource",
    "Frame",
    "SoundDeviceSource",
    "ToneSource",
]
