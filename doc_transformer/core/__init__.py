"""
Core components: the document model, error types and the format-independent
list and image algorithms shared by readers and writers.
"""

from doc_transformer.core.document import (
    ELEMENT_TYPES,
    Document,
    Element,
    Header,
    Hyperlink,
    Image,
    ImageDimension,
    ImageHandle,
    ListElement,
    ListItem,
    Paragraph,
    Table,
    TableCell,
    TableRow,
    Text,
)
from doc_transformer.core.errors import (
    ConversionError,
    EncodingError,
    FormatError,
    UnsupportedElement,
)

__all__ = [
    "ELEMENT_TYPES",
    "Document",
    "Element",
    "Header",
    "Hyperlink",
    "Image",
    "ImageDimension",
    "ImageHandle",
    "ListElement",
    "ListItem",
    "Paragraph",
    "Table",
    "TableCell",
    "TableRow",
    "Text",
    "ConversionError",
    "EncodingError",
    "FormatError",
    "UnsupportedElement",
]
