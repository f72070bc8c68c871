"""
Section extraction and hierarchical section merging.

Extraction is two pure passes: ``flatten_nodes`` turns the parsed tree into
an ordered list of block nodes, and ``group_sections`` cuts that list into
heading-anchored sections.
"""

from __future__ import annotations

from typing import Iterator, List, NamedTuple, Optional, Sequence, Tuple

from ..obs.events import emit_event
from .parser import (
    BlockParser,
    MarkdownBlockParser,
    MarkdownParseError,
    Node,
    NodeKind,
)


class Section(NamedTuple):
    """A contiguous document region anchored by a heading.

    ``level`` is the heading level (1-6) or 0 for the implicit section
    holding content before the first heading.
    """

    heading: Optional[Node]
    elements: Tuple[Node, ...]
    start: int
    end: int
    level: int
    text: str

    @property
    def span(self) -> Tuple[int, int]:
        return (self.start, self.end)


def flatten_nodes(root: Node) -> List[Node]:
    """Pre-order walk returning block nodes, skipping inline and root nodes."""

    def _walk(node: Node) -> Iterator[Node]:
        if node.kind.is_inline:
            return
        if node.kind is not NodeKind.DOCUMENT:
            yield node
        for child in node.children:
            yield from _walk(child)

    return list(_walk(root))


def group_sections(nodes: Sequence[Node], text: str) -> List[Section]:
    """Group ordered block nodes into heading-anchored sections.

    The first section always starts at offset 0 and the last one ends at
    ``len(text)``, so the sections tile the whole document.
    """
    sections: List[Section] = []

    heading: Optional[Node] = None
    elements: List[Node] = []
    start = 0
    level = 0
    is_open = False

    def _close(end: int) -> None:
        sections.append(
            Section(
                heading=heading,
                elements=tuple(elements),
                start=start,
                end=end,
                level=level,
                text=text[start:end],
            )
        )

    for node in nodes:
        if node.kind is NodeKind.HEADING:
            if is_open:
                _close(node.start)
                start = node.start
            # else: a leading heading absorbs any blank prefix from 0
            heading = node
            elements = [node]
            level = node.level
            is_open = True
            continue

        if not is_open:
            # Implicit section for content before the first heading
            heading, elements, start, level = None, [], 0, 0
            is_open = True

        if node.kind is not NodeKind.UNKNOWN:
            elements.append(node)

    if is_open:
        _close(len(text))

    return sections


def whole_document_section(text: str) -> Section:
    """Single implicit section spanning ``text``."""
    return Section(
        heading=None,
        elements=(),
        start=0,
        end=len(text),
        level=0,
        text=text,
    )


def extract_sections(
    text: str, parser: Optional[BlockParser] = None
) -> List[Section]:
    """Parse ``text`` and group it into sections.

    A parser failure degrades to one implicit section covering the whole
    document instead of aborting.
    """
    parser = parser or MarkdownBlockParser()
    try:
        root = parser.parse(text)
    except MarkdownParseError as e:
        emit_event("chunk.parse_fallback", reason=str(e), doc_chars=len(text))
        return [whole_document_section(text)]

    sections = group_sections(flatten_nodes(root), text)
    if not sections and text:
        return [whole_document_section(text)]
    return sections


def merge_subsections(
    sections: Sequence[Section], text: str, max_chunk_size: int
) -> List[Section]:
    """Fold descendant sections into their ancestor while the size allows.

    For each section, following sections with a strictly deeper level are
    absorbed until a sibling/ancestor heading is reached or the running
    text length would exceed ``max_chunk_size``.
    """
    if len(sections) <= 1:
        return list(sections)

    merged: List[Section] = []
    i = 0
    while i < len(sections):
        current = sections[i]
        total_size = len(current.text)

        j = i + 1
        while j < len(sections):
            following = sections[j]
            if following.level <= current.level:
                break
            if total_size + len(following.text) > max_chunk_size:
                break
            total_size += len(following.text)
            j += 1

        if j > i + 1:
            elements: List[Node] = []
            for k in range(i, j):
                elements.extend(sections[k].elements)
            end = sections[j - 1].end
            merged.append(
                Section(
                    heading=current.heading,
                    elements=tuple(elements),
                    start=current.start,
                    end=end,
                    level=current.level,
                    text=text[current.start : end],
                )
            )
            i = j
        else:
            merged.append(current)
            i += 1

    return merged


def section_slice(section: Section, start: int, end: int) -> Section:
    """Sub-section covering absolute offsets ``[start, end)`` of ``section``.

    Only elements lying fully inside the slice are kept.
    """
    heading = section.heading
    if heading is not None and not (start <= heading.start < end):
        heading = None
    return Section(
        heading=heading,
        elements=tuple(
            e for e in section.elements if start <= e.start and e.end <= end
        ),
        start=start,
        end=end,
        level=section.level,
        text=section.text[start - section.start : end - section.start],
    )
