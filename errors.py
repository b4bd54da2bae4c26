"""
errors.py

Exception types raised by the bitmap decoder, the filters and the pipeline.
"""


class ImageFilterError(Exception):
    """Base class for every failure the tool reports to its caller."""


class DecodeError(ImageFilterError, ValueError):
    """Bytes are not a readable 24-bit uncompressed bitmap."""


class ConversionError(ImageFilterError):
    """The format converter could not produce bitmap bytes."""


class UnsupportedFormatError(ImageFilterError):
    """Input is not a bitmap and could not be converted into one."""


class InvalidParameterError(ImageFilterError, ValueError):
    """A filter parameter is out of range for the filter or the image."""


class OutputWriteError(ImageFilterError, OSError):
    """The filtered result could not be written."""
