# c64_map/errors.py
"""
Exceptions raised while converting a single image.

All of them derive from ConversionError so a batch can isolate one bad item
and keep going.
"""


class ConversionError(Exception):
    """Base class for per-image conversion failures."""


class DecodeError(ConversionError):
    """The source could not be interpreted as an image."""


class UnsupportedPixelFormatError(ConversionError):
    """The decoded pixels cannot be reduced to 8-bit RGB triples."""


class ImageIOError(ConversionError):
    """Reading the source or writing the destination failed."""


__all__ = [
    "ConversionError",
    "DecodeError",
    "UnsupportedPixelFormatError",
    "ImageIOError",
]
