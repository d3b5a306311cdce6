"""
Exception types raised by readers and writers.

Every failure crossing a parse/generate boundary is a ConversionError carrying
the stage that failed, so callers can report where a conversion broke.
"""

from typing import Optional

STAGE_CONTAINER_READ = "container read"
STAGE_CLASSIFICATION = "element classification"
STAGE_NUMBERING = "numbering resolution"
STAGE_IMAGE_LOAD = "image load"
STAGE_IMAGE_ENCODE = "image encode"
STAGE_CONTAINER_WRITE = "container write"


class ConversionError(Exception):
    """Base class for conversion failures."""

    def __init__(self, message: str, stage: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.stage = stage

    def __str__(self) -> str:
        if self.stage:
            return f"{self.stage}: {self.message}"
        return self.message


class FormatError(ConversionError, ValueError):
    """The input is not a valid instance of its format."""


class EncodingError(ConversionError):
    """Valid model data could not be serialized into the target container."""


class UnsupportedElement(ConversionError):
    """An element has no representation in the target format."""

    def __init__(self, element, message: Optional[str] = None, stage: Optional[str] = None):
        super().__init__(
            message or f"{type(element).__name__} is not supported by this format",
            stage,
        )
        self.element = element
