class QOIError(ValueError):
    """Base class for every error raised by the codec."""


class InputSizeError(QOIError):
    """The raw pixel buffer does not hold width * height * channels bytes."""


class FormatError(QOIError):
    """The encoded stream is malformed (bad magic, truncated header or chunk)."""


class DesyncError(QOIError):
    """The decoded pixel count does not match the header."""
