"""
Input readers package for document parsing.

This package provides a plugin-based architecture for reading different document formats.
To add a new input format:

1. Create a new reader class inheriting from InputReader
2. Implement the required methods (get_format_name, get_extensions, read)
3. Register it with the @ReaderRegistry.register decorator
4. Import it here so it registers when the package loads

Example:
    from doc_transformer.readers.base import InputReader, ReaderRegistry

    @ReaderRegistry.register
    class MyFormatReader(InputReader):
        @classmethod
        def get_format_name(cls) -> str:
            return 'myformat'

        @classmethod
        def get_extensions(cls) -> list:
            return ['.myformat']

        def read(self, data: bytes) -> Document:
            # Parse and return Document
            ...
"""

from doc_transformer.readers.base import InputReader, ReaderRegistry
from doc_transformer.readers.docx_reader import DocxReader
from doc_transformer.readers.html_reader import HtmlReader
from doc_transformer.readers.json_reader import JsonReader
from doc_transformer.readers.markdown_reader import MarkdownReader
from doc_transformer.readers.text_reader import TextReader

__all__ = [
    "InputReader",
    "ReaderRegistry",
    "DocxReader",
    "HtmlReader",
    "JsonReader",
    "MarkdownReader",
    "TextReader",
]
