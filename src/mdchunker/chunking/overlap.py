"""
Overlap injection: prefix each chunk with the tail of the one before it.
"""

import re
from typing import List

from .types import Chunk

_WHITESPACE = re.compile(r"\s")


def overlap_tail(text: str, overlap_size: int) -> str:
    """Last ``overlap_size`` characters of ``text`` without a partial first word."""
    if overlap_size <= 0 or not text:
        return ""
    if len(text) <= overlap_size:
        return text.strip()

    tail = text[-overlap_size:]
    if not text[-overlap_size - 1].isspace() and not tail[0].isspace():
        # Cut landed inside a word; drop the fragment up to the next space
        space = _WHITESPACE.search(tail)
        if space:
            tail = tail[space.end() :]
    return tail.strip()


def apply_overlap(chunks: List[Chunk], overlap_size: int) -> List[Chunk]:
    """Prepend the previous chunk's word-aligned tail to every chunk after the first.

    Tails come from the chunks as they were before any injection. Only the
    text changes; spans and scores are kept.
    """
    if len(chunks) <= 1 or overlap_size <= 0:
        return list(chunks)

    overlapped = [chunks[0]]
    for previous, chunk in zip(chunks, chunks[1:]):
        tail = overlap_tail(previous.text, overlap_size)
        if tail:
            chunk = chunk._replace(text=f"{tail} {chunk.text}")
        overlapped.append(chunk)
    return overlapped
