"""
Drop chunks that hold only Markdown syntax and no retrievable content.
"""

import re
import unicodedata

MARKER_ONLY_PATTERNS = [
    re.compile(r"^#{1,6}\s*$"),  # heading marker
    re.compile(r"^[-=*]{3,}\s*$"),  # horizontal rule
    re.compile(r"^[-*+]\s*$|^\d+\.\s*$"),  # list marker
    re.compile(r"^>\s*$"),  # blockquote marker
    re.compile(r"^```\s*$|^~~~\s*$"),  # code fence marker
]

MARKDOWN_SYNTAX = re.compile(r"[#\-=*+>~`\[\](){}|\\_]")
WHITESPACE_RUN = re.compile(r"\s+")

MIN_CONTENT_CHARS = 3


def _is_content_char(ch: str) -> bool:
    # Letters cover CJK; "So" covers emoji and other pictographs
    return ch.isalpha() or unicodedata.category(ch) == "So"


def has_actual_content(text: str) -> bool:
    """True if ``text`` carries meaning beyond Markdown punctuation."""
    stripped = text.strip()
    if not stripped:
        return False

    if any(pattern.match(stripped) for pattern in MARKER_ONLY_PATTERNS):
        return False

    residue = MARKDOWN_SYNTAX.sub("", stripped)
    residue = WHITESPACE_RUN.sub(" ", residue).strip()
    if len(residue) < MIN_CONTENT_CHARS:
        return False

    # Digits and punctuation alone are not retrievable content
    return any(_is_content_char(ch) for ch in residue)
