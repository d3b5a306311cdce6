"""
Base classes for output writers.

This module provides the abstract base class for all output writers and the
registry system for managing them.
"""

import base64
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, List, Optional, Type

from docx.image.exceptions import InvalidImageStreamError, UnexpectedEndOfFileError, UnrecognizedImageError
from docx.image.image import Image as DocxImage

from doc_transformer.core.document import Document, Element
from doc_transformer.core.errors import UnsupportedElement

logger = logging.getLogger(__name__)

FALLBACK_CONTENT_TYPE = "application/octet-stream"


def image_data_uri(data: bytes) -> str:
    """Encode image bytes as a base64 data URI, typed by python-docx's header sniffing."""
    try:
        content_type = DocxImage.from_blob(data).content_type
    except (UnrecognizedImageError, InvalidImageStreamError, UnexpectedEndOfFileError):
        content_type = FALLBACK_CONTENT_TYPE
    encoded = base64.b64encode(data).decode("ascii")
    return f"data:{content_type};base64,{encoded}"


class OutputWriter(ABC):
    """
    Abstract base class for document output writers.

    Subclasses must implement:
    - get_format_name(): Return the format name (e.g., 'json', 'docx')
    - get_extension(): Return the file extension for this format
    - write(doc, **options): Render the document to bytes

    Subclasses declare ELEMENT_HANDLERS, mapping every element type to the
    name of the method rendering it. Types the format cannot represent map to
    "_unsupported".

    Optionally override:
    - get_default_options(): Return default options for this writer
    """

    ELEMENT_HANDLERS: Dict[Type[Element], str] = {}

    @classmethod
    @abstractmethod
    def get_format_name(cls) -> str:
        """
        Return the format name for this writer.

        This is used to identify the writer (e.g., 'json', 'docx', 'html').
        """
        pass

    @classmethod
    @abstractmethod
    def get_extension(cls) -> str:
        """
        Return the file extension for this format.

        Should include the dot (e.g., '.json', '.docx').
        """
        pass

    @abstractmethod
    def write(self, doc: Document, **options) -> bytes:
        """
        Render the document.

        Args:
            doc: Document object to write
            **options: Format-specific options

        Returns:
            The encoded document

        Raises:
            EncodingError: If the output container cannot be finalized
        """
        pass

    @classmethod
    def get_default_options(cls) -> Dict[str, Any]:
        """
        Return default options for this writer.

        Override to provide format-specific defaults.
        """
        return {}

    def _options(self, options: Dict[str, Any]) -> Dict[str, Any]:
        return {**self.get_default_options(), **options}

    def _render_element(self, element: Element, *args):
        """Dispatch an element to its handler; raises UnsupportedElement."""
        handler_name = self.ELEMENT_HANDLERS.get(type(element))
        if handler_name is None:
            raise UnsupportedElement(element)
        return getattr(self, handler_name)(element, *args)

    def _render_elements(self, elements: Iterable[Element], *args) -> None:
        """Render elements in order, skipping the ones this format cannot hold."""
        for element in elements:
            try:
                self._render_element(element, *args)
            except UnsupportedElement as e:
                logger.warning("%s: skipping element: %s", self.get_format_name(), e)

    def _unsupported(self, element: Element, *args):
        raise UnsupportedElement(element)

    @classmethod
    def get_name(cls) -> str:
        """Return human-readable name for this writer."""
        return cls.__name__

    @classmethod
    def get_description(cls) -> str:
        """Return description of what this writer produces."""
        return cls.__doc__ or f"Writer for {cls.get_format_name()} format"


class WriterRegistry:
    """
    Registry for managing output writers.

    Provides methods for:
    - Registering writers
    - Finding the appropriate writer for a format
    - Listing all supported formats
    """

    _writers: Dict[str, Type[OutputWriter]] = {}

    @classmethod
    def register(cls, writer_class: Type[OutputWriter]) -> Type[OutputWriter]:
        """
        Register a writer class with the registry.

        Can be used as a decorator:
            @WriterRegistry.register
            class MyWriter(OutputWriter):
                ...
        """
        cls._writers[writer_class.get_format_name()] = writer_class
        return writer_class

    @classmethod
    def get_writer(cls, format_name: str) -> Optional[OutputWriter]:
        """
        Get a writer instance for the specified format.

        Args:
            format_name: Format name (e.g., 'json', 'docx') or extension

        Returns:
            Writer instance or None if format not supported
        """
        writer_cls = cls._writers.get(format_name.lower())
        if writer_cls:
            return writer_cls()
        return cls.get_writer_for_extension(format_name)

    @classmethod
    def get_writer_for_extension(cls, extension: str) -> Optional[OutputWriter]:
        """
        Get a writer instance for the specified file extension.

        Args:
            extension: File extension with or without dot (e.g., '.json' or 'json')
        """
        if not extension.startswith('.'):
            extension = '.' + extension
        extension = extension.lower()

        for writer_cls in cls._writers.values():
            if writer_cls.get_extension().lower() == extension:
                return writer_cls()

        return None

    @classmethod
    def get_supported_formats(cls) -> List[str]:
        """Get list of all supported format names."""
        return sorted(cls._writers.keys())

    @classmethod
    def get_supported_extensions(cls) -> List[str]:
        """Get list of all supported file extensions."""
        return sorted(w.get_extension() for w in cls._writers.values())

    @classmethod
    def get_all_writers(cls) -> Dict[str, Type[OutputWriter]]:
        """Get dictionary of all registered writers."""
        return cls._writers.copy()

    @classmethod
    def list_writers(cls) -> List[Dict]:
        """Get list of writer info for display."""
        return [
            {
                "name": writer_cls.get_name(),
                "format": writer_cls.get_format_name(),
                "extension": writer_cls.get_extension(),
                "description": writer_cls.get_description()
            }
            for writer_cls in cls._writers.values()
        ]
