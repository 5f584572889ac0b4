"""Exceptions raised by the codec layer. The pipeline turns them into failure kinds."""


class TranscodeError(Exception):
    """Base class for decode/encode failures."""


class InvalidImageError(TranscodeError):
    """The input bytes are not a decodable image."""


class EncodeFailedError(TranscodeError):
    """The image decoded but could not be written in the target format."""
