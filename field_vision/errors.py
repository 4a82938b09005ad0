class VisionError(Exception):
    """Base class for errors raised by the vision core."""


class InvalidFrameSize(VisionError, ValueError):
    pass


class InvalidSensorArity(VisionError, ValueError):
    pass


class InvalidTableSize(VisionError, ValueError):
    pass


class InvalidOutputBufferSize(VisionError, ValueError):
    pass


class DegenerateProjection(VisionError):
    """The viewing ray never meets the requested plane."""
