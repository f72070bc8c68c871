"""Tests for chunk-set verification."""

from mdchunker.chunking.engine import chunk_markdown
from mdchunker.chunking.types import Chunk, ChunkingOptions, SplitMethod
from mdchunker.chunking.verify import collect_protected_ranges, verify_chunks

CONTENT = "```\ncode line\n```\n\nAfter text here."


def _chunk(content, start, end, method=SplitMethod.WORD):
    return Chunk(
        text=content[start:end].strip(),
        char_start=start,
        char_end=end,
        chunk_type="section_word",
        score=0.1,
        split_method=method,
    )


class TestVerifyChunks:
    def test_engine_output_passes(self):
        text = (
            "# Guide\n\n"
            + "Some prose about the tool. " * 20
            + "\n\n```bash\n"
            + "echo step\n" * 80
            + "```\n\n| a | b |\n|---|---|\n| 1 | 2 |\n"
        )
        options = ChunkingOptions(max_chunk_size=300, min_chunk_size=30)
        chunks = chunk_markdown(text, options)
        report = verify_chunks(text, chunks, options)

        assert report["ok"], report
        assert report["coverage_pct"] >= 99.5
        assert report["protected_range_count"] == 2
        assert report["chunk_count"] == len(chunks)

    def test_split_code_block_detected(self):
        chunks = [_chunk(CONTENT, 0, 8), _chunk(CONTENT, 8, len(CONTENT))]
        report = verify_chunks(CONTENT, chunks, ChunkingOptions())

        assert not report["ok"]
        assert report["split_protected_ranges"] == [
            {"start": 0, "end": 17, "kind": "code_block"}
        ]

    def test_gap_detected(self):
        chunks = [_chunk(CONTENT, 0, 17)]
        report = verify_chunks(CONTENT, chunks, ChunkingOptions())

        assert not report["ok"]
        assert report["gaps"][0]["start"] == 17
        assert report["gaps"][0]["end"] == len(CONTENT)

    def test_whitespace_gap_ignored(self):
        chunks = [_chunk(CONTENT, 0, 17), _chunk(CONTENT, 19, len(CONTENT))]
        report = verify_chunks(CONTENT, chunks, ChunkingOptions())

        assert report["gaps"] == []
        assert report["ok"]

    def test_order_violation_detected(self):
        chunks = [_chunk(CONTENT, 0, 25), _chunk(CONTENT, 20, len(CONTENT))]
        report = verify_chunks(CONTENT, chunks, ChunkingOptions())

        assert not report["ok"]
        assert report["order_violations"] == [
            {"index": 0, "end": 25, "next_start": 20}
        ]

    def test_oversize_detected(self):
        content = "abcdefghijklmnopqrstuvwxyz"
        options = ChunkingOptions(max_chunk_size=10, min_chunk_size=0)
        report = verify_chunks(content, [_chunk(content, 0, 26)], options)

        assert not report["ok"]
        assert report["oversize"][0]["char_count"] == 26
        assert report["oversize"][0]["split_method"] == "word"

    def test_oversize_allowed_for_protected_range(self):
        options = ChunkingOptions(max_chunk_size=10, min_chunk_size=0)
        chunks = [_chunk(CONTENT, 0, 17), _chunk(CONTENT, 17, len(CONTENT))]
        report = verify_chunks(CONTENT, chunks, options)

        assert [o["char_start"] for o in report["oversize"]] == [17]


def test_collect_protected_ranges_respects_options():
    assert len(collect_protected_ranges(CONTENT, ChunkingOptions())) == 1
    assert (
        collect_protected_ranges(
            CONTENT, ChunkingOptions(respect_code_blocks=False)
        )
        == []
    )


def test_filtered_syntax_chunk_is_not_a_gap():
    text = "***\n\n# Title\n\n" + "Some words here. " * 10
    options = ChunkingOptions(max_chunk_size=100, min_chunk_size=10)
    chunks = chunk_markdown(text, options)
    report = verify_chunks(text, chunks, options)

    assert chunks[0].char_start == 5
    assert report["gaps"] == []
    assert report["ok"], report
