"""
Boundary detection for the paragraph and sentence splitting strategies.

Boundaries are offsets into the text where a new unit starts. The end of
the text is always the last boundary so every strategy consumes all input.
"""

import re
from typing import List

# A run of whitespace-only lines: the boundary is the start of the next line
PARAGRAPH_BREAK = re.compile(r"\n(?:[ \t\r]*\n)+")

SENTENCE_END = re.compile(r"[.!?]+(?:\s+|$)")

# Capitalised word ending in a period right before the boundary ("Dr. ")
ABBREVIATION = re.compile(r"\b[A-Z][a-z]*\.\s*$")
DECIMAL_NUMBER = re.compile(r"\d+\.\d+")

ABBREVIATION_WINDOW = 20
DECIMAL_WINDOW = 10


def _with_text_end(boundaries: List[int], text: str) -> List[int]:
    if not boundaries or boundaries[-1] != len(text):
        boundaries.append(len(text))
    return boundaries


def find_paragraph_boundaries(text: str) -> List[int]:
    """Offsets following blank-line separators, plus the end of text."""
    boundaries = [m.end() for m in PARAGRAPH_BREAK.finditer(text)]
    return _with_text_end(boundaries, text)


def is_valid_sentence_boundary(text: str, pos: int) -> bool:
    """Reject candidates that look like abbreviations or decimal numbers."""
    if ABBREVIATION.search(text[max(0, pos - ABBREVIATION_WINDOW) : pos]):
        return False

    window = text[max(0, pos - DECIMAL_WINDOW) : min(len(text), pos + DECIMAL_WINDOW)]
    if DECIMAL_NUMBER.search(window):
        return False

    return True


def find_sentence_boundaries(text: str) -> List[int]:
    """Offsets following sentence-ending punctuation, plus the end of text."""
    boundaries = [
        m.end()
        for m in SENTENCE_END.finditer(text)
        if is_valid_sentence_boundary(text, m.end())
    ]
    return _with_text_end(boundaries, text)
