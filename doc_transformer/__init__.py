"""
Doc Transformer - conversion between a structural document model and file formats.

Every format is a reader/writer pair sharing one contract: readers parse bytes
into a Document, writers render a Document into bytes. The word-processor
(.docx) pair is the structurally demanding one; it rebuilds nested lists from
flat numbering metadata and synthesizes numbering definitions on output.

## Adding new capabilities:

1. To add a new input format:
   - Create a new reader class inheriting from InputReader
   - Implement the required methods
   - Register it with the reader registry

2. To add a new output format:
   - Create a new writer class inheriting from OutputWriter
   - Declare a handler for every element type in ELEMENT_HANDLERS
   - Register it with the writer registry

Example:
    from doc_transformer import Transformer

    doc = Transformer.for_format("md").parse(markdown_bytes)
    docx_bytes = Transformer.for_format("docx").generate(doc)
"""

from doc_transformer.core.document import (
    Document,
    Header,
    Hyperlink,
    Image,
    ListElement,
    ListItem,
    Paragraph,
    Table,
    Text,
)
from doc_transformer.core.errors import ConversionError, EncodingError, FormatError, UnsupportedElement
from doc_transformer.core.transformer import Transformer, get_transformer
from doc_transformer.readers import ReaderRegistry
from doc_transformer.writers import WriterRegistry

__version__ = "1.0.0"
__all__ = [
    "Document",
    "Header",
    "Hyperlink",
    "Image",
    "ListElement",
    "ListItem",
    "Paragraph",
    "Table",
    "Text",
    "ConversionError",
    "EncodingError",
    "FormatError",
    "UnsupportedElement",
    "Transformer",
    "get_transformer",
    "ReaderRegistry",
    "WriterRegistry",
]
