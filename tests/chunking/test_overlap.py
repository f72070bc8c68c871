"""Tests for overlap injection between adjacent chunks."""

from mdchunker.chunking.overlap import apply_overlap, overlap_tail
from mdchunker.chunking.types import Chunk


def _chunk(text, start, end):
    return Chunk(text=text, char_start=start, char_end=end, chunk_type="paragraph", score=0.5)


class TestOverlapTail:
    def test_partial_leading_word_dropped(self):
        text = "The quick brown fox jumps over the lazy dog"
        assert overlap_tail(text, 20) == "over the lazy dog"

    def test_cut_on_word_boundary_kept(self):
        assert overlap_tail("alpha beta", 4) == "beta"

    def test_short_text_used_whole(self):
        assert overlap_tail("hi there ", 50) == "hi there"

    def test_no_whitespace_keeps_cut(self):
        assert overlap_tail("abcdefghij", 4) == "ghij"

    def test_disabled(self):
        assert overlap_tail("some text", 0) == ""
        assert overlap_tail("", 10) == ""

    def test_tail_never_exceeds_size(self):
        text = "one two three four five six seven eight nine ten"
        for size in range(1, 30):
            assert len(overlap_tail(text, size)) <= size


class TestApplyOverlap:
    def test_second_chunk_gets_tail_prefix(self):
        a = _chunk("The quick brown fox jumps over the lazy dog", 0, 43)
        b = _chunk("Next chunk starts here.", 43, 66)

        result = apply_overlap([a, b], 20)

        assert result[0] == a
        assert result[1].text == "over the lazy dog Next chunk starts here."
        assert result[1].span == b.span
        assert result[1].score == b.score

    def test_tails_come_from_original_text(self):
        chunks = [
            _chunk("first chunk words", 0, 17),
            _chunk("second chunk words", 17, 35),
            _chunk("third", 35, 40),
        ]
        result = apply_overlap(chunks, 5)

        assert result[1].text == "words second chunk words"
        assert result[2].text == "words third"

    def test_single_chunk_unchanged(self):
        chunks = [_chunk("only one", 0, 8)]
        assert apply_overlap(chunks, 20) == chunks

    def test_zero_overlap_unchanged(self):
        chunks = [_chunk("a b", 0, 3), _chunk("c d", 3, 6)]
        assert apply_overlap(chunks, 0) == chunks
