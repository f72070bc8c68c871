"""
Protected ranges: code blocks and tables that a chunk boundary must not cut.
"""

from typing import Iterable, List, NamedTuple, Optional

from .parser import Node, NodeKind
from .sections import Section
from .types import ChunkingOptions


class ProtectedRange(NamedTuple):
    start: int
    end: int
    kind: NodeKind

    def contains(self, position: int) -> bool:
        """True if ``position`` falls strictly inside the range."""
        return self.start < position < self.end


def find_protected_ranges(
    elements: Iterable[Node], options: ChunkingOptions
) -> List[ProtectedRange]:
    """Collect code block / table spans enabled by the respect options."""
    ranges = []
    for element in elements:
        if options.respect_code_blocks and element.kind is NodeKind.CODE_BLOCK:
            ranges.append(
                ProtectedRange(element.start, element.end, element.kind)
            )
        elif options.respect_tables and element.kind is NodeKind.TABLE:
            ranges.append(
                ProtectedRange(element.start, element.end, element.kind)
            )
    return ranges


class ProtectedRangeGuard:
    """Moves chunk boundaries out of protected ranges.

    All positions are absolute document offsets.
    """

    def __init__(self, ranges: Iterable[ProtectedRange] = ()):
        self.ranges = sorted(ranges, key=lambda r: r.start)

    @classmethod
    def from_section(
        cls, section: Section, options: ChunkingOptions
    ) -> "ProtectedRangeGuard":
        return cls(find_protected_ranges(section.elements, options))

    def range_at(self, boundary: int) -> Optional[ProtectedRange]:
        for r in self.ranges:
            if r.contains(boundary):
                return r
        return None

    def would_split(self, boundary: int) -> bool:
        """True iff ``boundary`` falls strictly inside a protected range."""
        return self.range_at(boundary) is not None

    def adjust(self, chunk_start: int, boundary: int) -> int:
        """Move ``boundary`` out of the range it would cut.

        If the range starts after ``chunk_start`` the boundary moves back to
        the range start, deferring the range to the next chunk. Otherwise it
        moves forward to the range end and the current chunk swallows the
        whole range, even past the size limit.
        """
        r = self.range_at(boundary)
        if r is None:
            return boundary
        if r.start > chunk_start:
            return r.start
        return r.end
