class FrameError(ValueError):
    """A single frame cannot be processed and must be skipped."""


class UnreadableBufferError(FrameError):
    """Zero dimensions, inconsistent stride, short data or failed allocation."""


class UnsupportedPixelFormatError(FrameError):
    """Buffer is not laid out as 4-byte BGRA pixels."""
