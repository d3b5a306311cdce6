"""
Text helpers shared by readers and writers.
"""

import re
from typing import Optional, Tuple

BULLET_MARKER = "- "
BULLET_INDENT = 4  # spaces per nesting level

_BULLET_RE = re.compile(r"^(?P<indent> *)- (?P<body>.*)$", re.DOTALL)


def sanitize_xml_text(text: str) -> str:
    """
    Remove characters that are not valid in XML.
    XML 1.0 valid characters: #x9 | #xA | #xD | [#x20-#xD7FF] | [#xE000-#xFFFD] | [#x10000-#x10FFFF]
    """

    def is_valid_xml_char(c):
        codepoint = ord(c)
        return (
            codepoint == 0x09  # Tab
            or codepoint == 0x0A  # Line feed
            or codepoint == 0x0D  # Carriage return
            or (0x20 <= codepoint <= 0xD7FF)
            or (0xE000 <= codepoint <= 0xFFFD)
            or (0x10000 <= codepoint <= 0x10FFFF)
        )

    return "".join(c for c in text if is_valid_xml_char(c))


def bullet_text(text: str, depth: int) -> str:
    """Prefix text with a literal dash bullet indented for the given depth."""
    return f"{' ' * (depth * BULLET_INDENT)}{BULLET_MARKER}{text}"


def parse_bullet_text(text: str) -> Optional[Tuple[int, str]]:
    """
    Recognize text produced by bullet_text().

    Returns (depth, body), or None when the text is not a dash bullet or its
    indentation is not a whole number of levels.
    """
    match = _BULLET_RE.match(text)
    if not match:
        return None
    spaces = len(match.group("indent"))
    if spaces % BULLET_INDENT:
        return None
    return spaces // BULLET_INDENT, match.group("body")


def collapse_whitespace(text: str) -> str:
    """Collapse runs of whitespace into single spaces and trim the ends."""
    return " ".join(text.split())
