"""Tests for protected ranges and the boundary guard."""

from mdchunker.chunking.parser import Node, NodeKind
from mdchunker.chunking.protected import (
    ProtectedRange,
    ProtectedRangeGuard,
    find_protected_ranges,
)
from mdchunker.chunking.sections import extract_sections
from mdchunker.chunking.types import ChunkingOptions

CODE = ProtectedRange(10, 20, NodeKind.CODE_BLOCK)


def test_contains_is_strict():
    assert not CODE.contains(10)
    assert CODE.contains(11)
    assert CODE.contains(19)
    assert not CODE.contains(20)


class TestGuard:
    def test_would_split(self):
        guard = ProtectedRangeGuard([CODE])
        assert guard.would_split(15)
        assert not guard.would_split(10)
        assert not guard.would_split(25)

    def test_adjust_moves_back_to_range_start(self):
        guard = ProtectedRangeGuard([CODE])
        assert guard.adjust(0, 15) == 10

    def test_adjust_moves_forward_when_chunk_starts_at_range(self):
        guard = ProtectedRangeGuard([CODE])
        assert guard.adjust(10, 15) == 20
        assert guard.adjust(12, 15) == 20

    def test_adjust_leaves_safe_boundary(self):
        guard = ProtectedRangeGuard([CODE])
        assert guard.adjust(0, 25) == 25
        assert guard.adjust(0, 20) == 20

    def test_empty_guard(self):
        guard = ProtectedRangeGuard()
        assert not guard
        assert guard.range_at(5) is None
        assert guard.adjust(0, 5) == 5


class TestFindProtectedRanges:
    ELEMENTS = [
        Node(NodeKind.PARAGRAPH, 0, 5, "x" * 5),
        Node(NodeKind.CODE_BLOCK, 6, 16, "x" * 10),
        Node(NodeKind.TABLE, 17, 30, "x" * 13),
    ]

    def test_defaults_protect_code_and_tables(self):
        ranges = find_protected_ranges(self.ELEMENTS, ChunkingOptions())
        assert [(r.start, r.end, r.kind) for r in ranges] == [
            (6, 16, NodeKind.CODE_BLOCK),
            (17, 30, NodeKind.TABLE),
        ]

    def test_respect_flags(self):
        ranges = find_protected_ranges(
            self.ELEMENTS, ChunkingOptions(respect_code_blocks=False)
        )
        assert [r.kind for r in ranges] == [NodeKind.TABLE]

        ranges = find_protected_ranges(
            self.ELEMENTS, ChunkingOptions(respect_tables=False)
        )
        assert [r.kind for r in ranges] == [NodeKind.CODE_BLOCK]

    def test_guard_from_parsed_section(self):
        text = "Intro.\n\n```\ncode\n```\n\nOutro.\n"
        section = extract_sections(text)[0]
        guard = ProtectedRangeGuard.from_section(section, ChunkingOptions())

        fence_start = text.index("```")
        assert guard.ranges[0].start == fence_start
        assert guard.would_split(fence_start + 5)
