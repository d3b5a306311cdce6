"""
Base classes for input readers.

This module provides the abstract base class for all input readers and the
registry system for managing them.
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, List, Optional, Type

from doc_transformer.core.document import Document
from doc_transformer.core.images import ImageLoader


class InputReader(ABC):
    """
    Abstract base class for document input readers.

    Subclasses must implement:
    - get_format_name(): Return the format name (e.g., 'docx', 'md')
    - get_extensions(): Return list of file extensions this reader handles
    - read(data): Parse raw bytes and return a Document

    Optionally override:
    - read_with_loader(data, image_loader): For formats that reference images
      instead of embedding them
    - get_priority(): Return priority for reader selection (higher = preferred)
    """

    @classmethod
    @abstractmethod
    def get_format_name(cls) -> str:
        """Return the format name for this reader (e.g., 'docx', 'md')."""
        pass

    @classmethod
    @abstractmethod
    def get_extensions(cls) -> List[str]:
        """
        Return list of file extensions this reader supports.

        Extensions should include the dot (e.g., ['.html', '.htm'])
        """
        pass

    @abstractmethod
    def read(self, data: bytes) -> Document:
        """
        Parse the bytes of a file, returning a Document object.

        Args:
            data: Raw file content

        Returns:
            Document object containing the parsed content

        Raises:
            FormatError: If the data is not a valid instance of the format
        """
        pass

    def read_with_loader(self, data: bytes, image_loader: Optional[ImageLoader]) -> Document:
        """
        Parse the bytes of a file, resolving image references with a loader.

        Formats that embed their images ignore the loader.
        """
        return self.read(data)

    def read_file(self, file_path: Path, image_loader: Optional[ImageLoader] = None) -> Document:
        """Read a file from disk."""
        data = Path(file_path).read_bytes()
        if image_loader is None:
            return self.read(data)
        return self.read_with_loader(data, image_loader)

    @classmethod
    def supports_file(cls, file_path: Path) -> bool:
        """Check if this reader can handle the given file."""
        return Path(file_path).suffix.lower() in [ext.lower() for ext in cls.get_extensions()]

    @classmethod
    def get_priority(cls) -> int:
        """
        Return priority for reader selection.

        Higher values = higher priority. When multiple readers support a file,
        the one with highest priority is used.
        """
        return 0

    @classmethod
    def get_name(cls) -> str:
        """Return human-readable name for this reader."""
        return cls.__name__

    @classmethod
    def get_description(cls) -> str:
        """Return description of what this reader handles."""
        return cls.__doc__ or f"Reader for {cls.get_extensions()}"


class ReaderRegistry:
    """
    Registry for managing input readers.

    Provides methods for:
    - Registering readers
    - Finding the appropriate reader for a format name or file
    - Listing all supported formats
    """

    _readers: Dict[str, Type[InputReader]] = {}

    @classmethod
    def register(cls, reader_class: Type[InputReader]) -> Type[InputReader]:
        """
        Register a reader class with the registry.

        Can be used as a decorator:
            @ReaderRegistry.register
            class MyReader(InputReader):
                ...
        """
        cls._readers[reader_class.get_format_name()] = reader_class
        return reader_class

    @classmethod
    def get_reader(cls, format_name: str) -> Optional[InputReader]:
        """
        Get a reader instance for the specified format.

        Accepts a format name ('md') or any of the reader's extensions
        ('markdown', '.markdown').
        """
        reader_cls = cls._readers.get(format_name.lower())
        if reader_cls:
            return reader_cls()
        reader_cls = cls.get_reader_by_extension(format_name)
        if reader_cls:
            return reader_cls()
        return None

    @classmethod
    def get_reader_for_file(cls, file_path: Path) -> Optional[InputReader]:
        """
        Get an appropriate reader instance for the given file.

        Returns the reader with highest priority that supports the file,
        or None if no reader supports it.
        """
        file_path = Path(file_path)

        supporting_readers = [
            reader_cls for reader_cls in cls._readers.values()
            if reader_cls.supports_file(file_path)
        ]

        if not supporting_readers:
            return None

        supporting_readers.sort(key=lambda r: r.get_priority(), reverse=True)
        return supporting_readers[0]()

    @classmethod
    def get_reader_by_extension(cls, extension: str) -> Optional[Type[InputReader]]:
        """
        Get reader class for a specific extension.

        Args:
            extension: File extension with or without dot (e.g., '.docx' or 'docx')
        """
        if not extension.startswith('.'):
            extension = '.' + extension
        extension = extension.lower()

        for reader_cls in cls._readers.values():
            if extension in [ext.lower() for ext in reader_cls.get_extensions()]:
                return reader_cls

        return None

    @classmethod
    def get_supported_formats(cls) -> List[str]:
        """Get list of all supported format names."""
        return sorted(cls._readers.keys())

    @classmethod
    def get_supported_extensions(cls) -> List[str]:
        """Get list of all supported file extensions."""
        extensions = set()
        for reader_cls in cls._readers.values():
            extensions.update(reader_cls.get_extensions())
        return sorted(extensions)

    @classmethod
    def get_all_readers(cls) -> Dict[str, Type[InputReader]]:
        """Get dictionary of all registered readers."""
        return cls._readers.copy()

    @classmethod
    def list_readers(cls) -> List[Dict]:
        """Get list of reader info for display."""
        return [
            {
                "name": reader_cls.get_name(),
                "format": reader_cls.get_format_name(),
                "extensions": reader_cls.get_extensions(),
                "priority": reader_cls.get_priority(),
                "description": reader_cls.get_description()
            }
            for reader_cls in cls._readers.values()
        ]
