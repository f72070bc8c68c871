"""
Section-aware Markdown chunking engine.

Pipeline: parse -> sections -> (optional) subsection merge -> one chunk per
fitting section or the fallback cascade for oversized ones -> overlap
injection -> syntax-only content filter.
"""

from __future__ import annotations

from typing import List, Optional, Tuple

from ..core.logging import log
from ..obs.events import emit_event
from .filters import has_actual_content
from .overlap import apply_overlap
from .parser import BlockParser, MarkdownBlockParser
from .scoring import section_score, section_type
from .sections import Section, extract_sections, merge_subsections
from .splitters import FallbackCascade
from .types import Chunk, ChunkingOptions, SplitMethod

COMPLETE_SCORE = 1.0


class MarkdownChunker:
    """Splits Markdown into bounded chunks that follow document structure.

    The chunker holds only configuration and a stateless parser, so one
    instance can serve many documents.
    """

    def __init__(
        self,
        options: Optional[ChunkingOptions] = None,
        parser: Optional[BlockParser] = None,
    ):
        self.options = options or ChunkingOptions()
        self.parser = parser or MarkdownBlockParser()

    def chunk(self, content: str) -> List[Chunk]:
        """Chunk ``content``; empty or blank input yields no chunks."""
        if not content.strip():
            return []

        if len(content) <= self.options.max_chunk_size:
            chunks = [self._complete_chunk(content)]
        else:
            sections = extract_sections(content, self.parser)
            if self.options.header_hierarchy:
                sections = merge_subsections(
                    sections, content, self.options.max_chunk_size
                )
            chunks = self.chunk_sections(sections)

        return self._finish(chunks, len(content))

    def chunk_sections(self, sections: List[Section]) -> List[Chunk]:
        """Turn sections into pre-overlap chunks."""
        cascade = FallbackCascade(self.options)
        chunks: List[Chunk] = []
        for section in sections:
            if len(section.text) <= self.options.max_chunk_size:
                chunks.append(self._section_chunk(section))
            else:
                chunks.extend(cascade.split(section))
        return chunks

    def _complete_chunk(self, content: str) -> Chunk:
        return Chunk(
            text=self.options.finalize_text(content),
            char_start=0,
            char_end=len(content),
            chunk_type="complete",
            score=COMPLETE_SCORE,
            heading_level=0,
            split_method=SplitMethod.WHOLE,
            is_section=False,
        )

    def _section_chunk(self, section: Section) -> Chunk:
        return Chunk(
            text=self.options.finalize_text(section.text),
            char_start=section.start,
            char_end=section.end,
            chunk_type=section_type(section),
            score=section_score(section, self.options),
            heading_level=section.level,
            split_method=SplitMethod.WHOLE,
            is_section=True,
        )

    def _finish(self, chunks: List[Chunk], length: int) -> List[Chunk]:
        # Keep/drop is judged on each chunk's own text, not the overlap prefix
        keep = [has_actual_content(chunk.text) for chunk in chunks]

        if self.options.overlap_size > 0:
            chunks = apply_overlap(chunks, self.options.overlap_size)

        result = [chunk for chunk, kept in zip(chunks, keep) if kept]
        dropped = len(chunks) - len(result)
        if dropped:
            log.debug("chunk.filtered", dropped=dropped)

        emit_event(
            "chunk.complete",
            chunks=len(result),
            dropped=dropped,
            doc_chars=length,
        )
        return result


def chunk_markdown(
    content: str,
    options: Optional[ChunkingOptions] = None,
    parser: Optional[BlockParser] = None,
) -> List[Chunk]:
    """Chunk a Markdown document with the given (or default) options."""
    return MarkdownChunker(options, parser).chunk(content)


def calculate_coverage(
    chunks: List[Chunk], original_text_length: int
) -> Tuple[float, List[Tuple[int, int]]]:
    """
    Calculate text coverage from chunks and identify gaps.

    Args:
        chunks: List of chunks with char_start/char_end
        original_text_length: Length of the original document text

    Returns:
        Tuple of (coverage_percentage, list_of_gaps)
        where gaps are (start, end) tuples of uncovered ranges
    """
    if original_text_length == 0:
        return 100.0, []

    covered_ranges = [
        (chunk.char_start, chunk.char_end)
        for chunk in chunks
        if chunk.char_start < chunk.char_end
    ]
    if not covered_ranges:
        return 0.0, [(0, original_text_length)]

    covered_ranges.sort(key=lambda x: x[0])

    # Merge overlapping or adjacent ranges
    merged_ranges = []
    current_start, current_end = covered_ranges[0]
    for start, end in covered_ranges[1:]:
        if start <= current_end:
            current_end = max(current_end, end)
        else:
            merged_ranges.append((current_start, current_end))
            current_start, current_end = start, end
    merged_ranges.append((current_start, current_end))

    covered_chars = sum(end - start for start, end in merged_ranges)
    coverage_pct = (covered_chars / original_text_length) * 100

    gaps = []
    last_end = 0
    for start, end in merged_ranges:
        if start > last_end:
            gaps.append((last_end, start))
        last_end = end
    if last_end < original_text_length:
        gaps.append((last_end, original_text_length))

    return coverage_pct, gaps
