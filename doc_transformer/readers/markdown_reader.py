"""
Reader for Markdown documents.

Markdown is rendered to HTML with Python-Markdown and the result is walked by
the HTML reader, so both formats classify blocks the same way.
"""

from typing import List

import markdown

from doc_transformer.readers.base import ReaderRegistry
from doc_transformer.readers.html_reader import HtmlReader

MARKDOWN_EXTENSIONS = ["tables"]


@ReaderRegistry.register
class MarkdownReader(HtmlReader):
    """Reader for Markdown documents."""

    @classmethod
    def get_format_name(cls) -> str:
        return "md"

    @classmethod
    def get_extensions(cls) -> List[str]:
        return [".md", ".markdown"]

    def _parse_html(self, text: str):
        html = markdown.markdown(text, extensions=MARKDOWN_EXTENSIONS)
        return super()._parse_html(html)
