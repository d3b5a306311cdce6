"""
Output writers package for document generation.

This package provides a plugin-based architecture for writing documents to different formats.
To add a new output format:

1. Create a new writer class inheriting from OutputWriter
2. Implement the required methods (write, get_format_name, get_extension)
3. Declare ELEMENT_HANDLERS with a handler for every element type
4. Register it with the @WriterRegistry.register decorator

Example:
    from doc_transformer.writers.base import OutputWriter, WriterRegistry

    @WriterRegistry.register
    class MyFormatWriter(OutputWriter):
        ELEMENT_HANDLERS = {Text: "_text", ...}

        @classmethod
        def get_format_name(cls) -> str:
            return 'myformat'

        @classmethod
        def get_extension(cls) -> str:
            return '.myformat'

        def write(self, doc: Document, **options) -> bytes:
            # Render document
            ...
"""

from doc_transformer.writers.base import OutputWriter, WriterRegistry
from doc_transformer.writers.docx_writer import DocxWriter
from doc_transformer.writers.html_writer import HtmlWriter
from doc_transformer.writers.json_writer import JsonWriter
from doc_transformer.writers.markdown_writer import MarkdownWriter
from doc_transformer.writers.text_writer import TextWriter

__all__ = [
    "OutputWriter",
    "WriterRegistry",
    "DocxWriter",
    "HtmlWriter",
    "JsonWriter",
    "MarkdownWriter",
    "TextWriter",
]
