"""
Format-independent entry point pairing a reader with a writer.

Every format implements the same contract: parse bytes into a Document,
generate bytes from a Document, and optionally parse with an image loader for
formats that reference images instead of embedding them.
"""

from typing import List, Optional

from doc_transformer.core.document import Document
from doc_transformer.core.images import ImageLoader
from doc_transformer.readers import InputReader, ReaderRegistry
from doc_transformer.writers import OutputWriter, WriterRegistry


class Transformer:
    """
    Reader/writer pair for one format.

    Either side may be missing when a format is only read or only written;
    calling the missing side raises ValueError.
    """

    def __init__(self, format_name: str, reader: Optional[InputReader], writer: Optional[OutputWriter]):
        self.format_name = format_name
        self.reader = reader
        self.writer = writer

    @classmethod
    def for_format(cls, name: str) -> "Transformer":
        """
        Build the transformer for a format name or file extension.

        Raises:
            ValueError: If neither a reader nor a writer handles the format
        """
        reader = ReaderRegistry.get_reader(name)
        writer = WriterRegistry.get_writer(name)
        if reader is None and writer is None:
            raise ValueError(
                f"Unknown format: {name}. "
                f"Available formats: {', '.join(available_formats())}"
            )
        format_name = (reader or writer).get_format_name()
        # An extension may be known to only one side ('.htm' has no writer)
        reader = reader or ReaderRegistry.get_reader(format_name)
        writer = writer or WriterRegistry.get_writer(format_name)
        return cls(format_name, reader, writer)

    def parse(self, data: bytes) -> Document:
        return self._require_reader().read(data)

    def parse_with_loader(self, data: bytes, image_loader: Optional[ImageLoader]) -> Document:
        return self._require_reader().read_with_loader(data, image_loader)

    def generate(self, doc: Document, **options) -> bytes:
        if self.writer is None:
            raise ValueError(f"Format {self.format_name} cannot be written")
        return self.writer.write(doc, **options)

    def _require_reader(self) -> InputReader:
        if self.reader is None:
            raise ValueError(f"Format {self.format_name} cannot be read")
        return self.reader


def available_formats() -> List[str]:
    """Names of every format with a reader or a writer."""
    return sorted(set(ReaderRegistry.get_supported_formats()) | set(WriterRegistry.get_supported_formats()))


def get_transformer(name: str) -> Transformer:
    return Transformer.for_format(name)
