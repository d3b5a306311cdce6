"""
Reader for plain text files.
"""

import re
from typing import List

from doc_transformer.core.document import BODY_TEXT_SIZE, Document, Text
from doc_transformer.core.errors import STAGE_CONTAINER_READ, FormatError
from doc_transformer.readers.base import InputReader, ReaderRegistry

_BLOCK_SEPARATOR = re.compile(r"\n\s*\n")


@ReaderRegistry.register
class TextReader(InputReader):
    """Reader for plain text; every blank-line separated block is one paragraph."""

    @classmethod
    def get_format_name(cls) -> str:
        return "txt"

    @classmethod
    def get_extensions(cls) -> List[str]:
        return [".txt"]

    def read(self, data: bytes) -> Document:
        try:
            content = data.decode("utf-8-sig")
        except UnicodeDecodeError as e:
            raise FormatError(f"Input is not UTF-8 text: {e}", STAGE_CONTAINER_READ) from e

        doc = Document()
        content = content.replace("\r\n", "\n")
        for block in _BLOCK_SEPARATOR.split(content):
            block = block.strip()
            if block:
                doc.add(Text(text=block, size=BODY_TEXT_SIZE))
        return doc
