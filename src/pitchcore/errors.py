class PitchCoreError(Exception):
    """Base class for errors raised by pitchcore."""


class ConfigurationError(PitchCoreError, ValueError):
    """An override or profile name the resolver does not recognise."""


class AcquisitionError(PitchCoreError):
    """The frame source could not be acquired (device missing, permission denied...)."""


class FrameSourceError(PitchCoreError):
    """Reading a frame failed while the engine was running."""


class FrameSourceExhausted(PitchCoreError):
    """A finite frame source has no more frames to give."""
