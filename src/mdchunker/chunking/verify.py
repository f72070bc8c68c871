"""
Chunk-set verification: coverage, ordering, size bounds and protected ranges.
"""

from typing import Any, Dict, List, Optional

from .engine import calculate_coverage
from .filters import has_actual_content
from .parser import BlockParser, MarkdownBlockParser, MarkdownParseError
from .protected import ProtectedRange, find_protected_ranges
from .sections import flatten_nodes
from .types import Chunk, ChunkingOptions


def collect_protected_ranges(
    content: str,
    options: ChunkingOptions,
    parser: Optional[BlockParser] = None,
) -> List[ProtectedRange]:
    """Protected ranges of the whole document (empty if parsing fails)."""
    parser = parser or MarkdownBlockParser()
    try:
        root = parser.parse(content)
    except MarkdownParseError:
        return []
    return find_protected_ranges(flatten_nodes(root), options)


def verify_chunks(
    content: str,
    chunks: List[Chunk],
    options: Optional[ChunkingOptions] = None,
    parser: Optional[BlockParser] = None,
) -> Dict[str, Any]:
    """
    Check a chunk list produced for ``content`` against the chunking contract.

    Uncovered whitespace and uncovered syntax-only text (the chunks the
    content filter drops) are not reported as gaps.

    Returns:
        Verification results dictionary
    """
    options = options or ChunkingOptions()

    coverage_pct, gaps = calculate_coverage(chunks, len(content))
    content_gaps = [
        {"start": start, "end": end, "text": content[start:end][:80]}
        for start, end in gaps
        if has_actual_content(content[start:end])
    ]

    order_violations = [
        {"index": i, "end": previous.char_end, "next_start": chunk.char_start}
        for i, (previous, chunk) in enumerate(zip(chunks, chunks[1:]))
        if previous.char_end > chunk.char_start
    ]

    ranges = collect_protected_ranges(content, options, parser)

    split_ranges = []
    for r in ranges:
        if not any(c.char_start <= r.start and r.end <= c.char_end for c in chunks):
            split_ranges.append(
                {"start": r.start, "end": r.end, "kind": r.kind.value}
            )

    oversize = []
    for i, chunk in enumerate(chunks):
        if chunk.char_count <= options.max_chunk_size:
            continue
        # A chunk may exceed the limit only to keep a protected range whole
        holds_range = any(
            chunk.char_start <= r.start and r.end <= chunk.char_end
            for r in ranges
        )
        # Trailing remainders below min size are merged into the last chunk
        if holds_range or chunk.char_count <= (
            options.max_chunk_size + options.min_chunk_size
        ):
            continue
        oversize.append(
            {
                "index": i,
                "char_start": chunk.char_start,
                "char_end": chunk.char_end,
                "char_count": chunk.char_count,
                "split_method": chunk.split_method.value,
            }
        )

    ok = (
        not content_gaps
        and not order_violations
        and not split_ranges
        and not oversize
    )

    return {
        "ok": ok,
        "chunk_count": len(chunks),
        "coverage_pct": round(coverage_pct, 2),
        "gaps": content_gaps,
        "order_violations": order_violations,
        "split_protected_ranges": split_ranges,
        "oversize": oversize,
        "protected_range_count": len(ranges),
    }
