"""
Fallback cascade for sections larger than the maximum chunk size.

Strategies are tried in order (paragraph, sentence, word window). A
strategy returns ``None`` when it finds fewer than two boundaries, handing
the section to the next one. The word window strategy always succeeds.
"""

from __future__ import annotations

from typing import List, Optional, Sequence, Tuple

from ..obs.events import emit_event
from .boundaries import find_paragraph_boundaries, find_sentence_boundaries
from .protected import ProtectedRangeGuard
from .sections import Section, section_slice
from .types import Chunk, ChunkingOptions, SplitMethod

WORD_SPLIT_SCORE = 0.1


class SplitStrategy:
    """Base class: turn one oversized section into chunks."""

    method: SplitMethod
    chunk_type: str
    terminal = False

    def __init__(self, options: ChunkingOptions):
        self.options = options

    @property
    def score(self) -> float:
        raise NotImplementedError

    def split(self, section: Section) -> Optional[List[Chunk]]:
        raise NotImplementedError

    def _make_chunk(
        self, section: Section, start: int, end: int, text: str
    ) -> Chunk:
        """Build a chunk for ``section.text[start:end]`` (relative offsets)."""
        return Chunk(
            text=text,
            char_start=section.start + start,
            char_end=section.start + end,
            chunk_type=self.chunk_type,
            score=self.score,
            heading_level=section.level,
            split_method=self.method,
            is_section=True,
        )


class _BoundarySplitter(SplitStrategy):
    """Greedy accumulation of boundary-delimited units into chunks."""

    separator = " "

    def find_boundaries(self, text: str) -> List[int]:
        raise NotImplementedError

    def split(self, section: Section) -> Optional[List[Chunk]]:
        boundaries = self.find_boundaries(section.text)
        if len(boundaries) < 2:
            return None
        return self._accumulate(section, boundaries)

    def _accumulate(
        self, section: Section, boundaries: Sequence[int]
    ) -> List[Chunk]:
        text = section.text
        base = section.start
        max_size = self.options.max_chunk_size
        min_size = self.options.min_chunk_size
        guard = ProtectedRangeGuard.from_section(section, self.options)

        pieces: List[Tuple[int, int]] = []
        buf_start = 0
        cursor = 0

        for boundary in boundaries:
            if boundary <= cursor:
                # Already swallowed by a protected range
                continue

            buf_len = cursor - buf_start
            unit_len = boundary - cursor
            overflows = buf_len > 0 and buf_len + unit_len > max_size
            # Undersized buffers keep growing, except for the first chunk
            if overflows and (buf_len >= min_size or not pieces):
                cut = cursor
                if guard.would_split(base + cut):
                    cut = guard.adjust(base + buf_start, base + cut) - base
                pieces.append((buf_start, cut))
                buf_start = cut
                cursor = max(boundary, cut)
            else:
                cursor = boundary

        chunks = [
            self._make_chunk(
                section, start, end, self.options.finalize_text(text[start:end])
            )
            for start, end in pieces
        ]

        tail = text[buf_start:]
        if tail.strip():
            if len(tail) < min_size and chunks:
                previous = chunks[-1]
                chunks[-1] = previous._replace(
                    text=previous.text
                    + self.separator
                    + self.options.finalize_text(tail),
                    char_end=section.end,
                )
            else:
                chunks.append(
                    self._make_chunk(
                        section,
                        buf_start,
                        len(text),
                        self.options.finalize_text(tail),
                    )
                )
        elif chunks:
            # Trailing whitespace still belongs to the last chunk's span
            chunks[-1] = chunks[-1]._replace(char_end=section.end)

        return chunks


class ParagraphSplitter(_BoundarySplitter):
    method = SplitMethod.PARAGRAPH
    chunk_type = "section_paragraph"
    separator = "\n\n"

    @property
    def score(self) -> float:
        return self.options.paragraph_weight

    def find_boundaries(self, text: str) -> List[int]:
        return find_paragraph_boundaries(text)


class SentenceSplitter(_BoundarySplitter):
    method = SplitMethod.SENTENCE
    chunk_type = "section_sentence"
    separator = " "

    @property
    def score(self) -> float:
        return self.options.sentence_weight

    def find_boundaries(self, text: str) -> List[int]:
        return find_sentence_boundaries(text)


class WordWindowSplitter(SplitStrategy):
    """Fixed-size windows whose right edge backs off to whitespace."""

    method = SplitMethod.WORD
    chunk_type = "section_word"
    terminal = True

    @property
    def score(self) -> float:
        return WORD_SPLIT_SCORE

    def split(self, section: Section) -> List[Chunk]:
        text = section.text
        max_size = self.options.max_chunk_size
        min_size = self.options.min_chunk_size

        if len(text) <= max_size:
            return [
                self._make_chunk(
                    section, 0, len(text), self.options.finalize_text(text)
                )
            ]

        guard = ProtectedRangeGuard.from_section(section, self.options)
        chunks: List[Chunk] = []
        start = 0
        while start < len(text):
            end = min(start + max_size, len(text))

            if end < len(text):
                edge = end
                while edge > start + min_size and not text[edge].isspace():
                    edge -= 1
                # No whitespace within reach: keep the hard cut
                if edge > start and text[edge].isspace():
                    end = edge

                if guard.would_split(section.start + end):
                    end = (
                        guard.adjust(section.start + start, section.start + end)
                        - section.start
                    )

            chunks.append(
                self._make_chunk(
                    section,
                    start,
                    end,
                    self.options.finalize_text(text[start:end]),
                )
            )
            start = end

        return chunks


def _only_protected(
    section: Section, chunk: Chunk, guard: ProtectedRangeGuard
) -> bool:
    """True if ``chunk`` holds protected ranges and only whitespace besides."""
    inside = [
        r
        for r in guard.ranges
        if chunk.char_start <= r.start and r.end <= chunk.char_end
    ]
    if not inside:
        return False

    base = section.start
    cursor = chunk.char_start
    for r in inside:
        if section.text[cursor - base : r.start - base].strip():
            return False
        cursor = r.end
    return not section.text[cursor - base : chunk.char_end - base].strip()


class FallbackCascade:
    """Ordered splitting strategies tried until one applies."""

    def __init__(
        self,
        options: ChunkingOptions,
        strategies: Optional[Sequence[SplitStrategy]] = None,
    ):
        self.options = options
        if strategies is None:
            strategies = [
                ParagraphSplitter(options),
                SentenceSplitter(options),
                WordWindowSplitter(options),
            ]
        self.strategies = list(strategies)
        if not self.strategies or not self.strategies[-1].terminal:
            self.strategies.append(WordWindowSplitter(options))

    def split(self, section: Section) -> List[Chunk]:
        return self._split_from(section, 0)

    def _split_from(self, section: Section, first: int) -> List[Chunk]:
        for index in range(first, len(self.strategies)):
            strategy = self.strategies[index]
            chunks = strategy.split(section)
            if chunks is None:
                continue
            emit_event(
                "chunk.split",
                method=strategy.method.value,
                section_start=section.start,
                section_end=section.end,
                chunks=len(chunks),
            )
            if strategy.terminal:
                return chunks
            return self._refine(section, chunks, index + 1)
        # The terminal strategy never returns None
        raise AssertionError("no terminal split strategy")

    def _refine(
        self, section: Section, chunks: List[Chunk], next_index: int
    ) -> List[Chunk]:
        """Re-split chunks that are still too large with the later strategies.

        A single paragraph longer than the limit ends up alone in a chunk;
        it is cut again by sentences, then by word windows. A chunk that is
        large only because it swallowed a protected range is kept as is.
        """
        guard = ProtectedRangeGuard.from_section(section, self.options)
        refined: List[Chunk] = []
        for chunk in chunks:
            if chunk.char_count <= self.options.max_chunk_size or _only_protected(
                section, chunk, guard
            ):
                refined.append(chunk)
                continue
            part = section_slice(section, chunk.char_start, chunk.char_end)
            refined.extend(self._split_from(part, next_index))
        return refined
