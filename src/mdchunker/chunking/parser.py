"""
Markdown block parser producing typed nodes with character spans.

The chunker only needs block structure (where headings, fences, tables and
lists start and end), so this is a line-oriented scanner rather than a full
CommonMark implementation.
"""

from __future__ import annotations

import re
from enum import Enum
from typing import List, NamedTuple, Optional, Protocol, Tuple


class MarkdownParseError(ValueError):
    """Raised when a parse produces an inconsistent node tree."""


class NodeKind(str, Enum):
    """Node kinds produced by the parser."""

    DOCUMENT = "document"

    # Block kinds
    HEADING = "heading"
    PARAGRAPH = "paragraph"
    CODE_BLOCK = "code_block"
    TABLE = "table"
    LIST = "list"
    BLOCKQUOTE = "blockquote"
    RULE = "rule"
    UNKNOWN = "unknown"

    # Inline kinds
    TEXT = "text"
    EMPHASIS = "emphasis"
    LINK = "link"
    IMAGE = "image"
    CODE_SPAN = "code_span"

    @property
    def is_inline(self) -> bool:
        return self in INLINE_KINDS

    @property
    def is_block(self) -> bool:
        return self in BLOCK_KINDS


BLOCK_KINDS = frozenset(
    {
        NodeKind.HEADING,
        NodeKind.PARAGRAPH,
        NodeKind.CODE_BLOCK,
        NodeKind.TABLE,
        NodeKind.LIST,
        NodeKind.BLOCKQUOTE,
        NodeKind.RULE,
        NodeKind.UNKNOWN,
    }
)

INLINE_KINDS = frozenset(
    {
        NodeKind.TEXT,
        NodeKind.EMPHASIS,
        NodeKind.LINK,
        NodeKind.IMAGE,
        NodeKind.CODE_SPAN,
    }
)


class Node(NamedTuple):
    """A parsed node covering ``text[start:end]`` of the document."""

    kind: NodeKind
    start: int
    end: int
    text: str
    level: int = 0  # headings only
    children: Tuple["Node", ...] = ()


class BlockParser(Protocol):
    """Anything that turns Markdown text into a ``document`` node tree."""

    def parse(self, text: str) -> Node: ...


class _Line(NamedTuple):
    start: int
    end: int  # excludes the newline
    content: str

    @property
    def blank(self) -> bool:
        return not self.content.strip()


_LINE_RE = re.compile(r"[^\n]*\n|[^\n]+")

_FENCE_OPEN = re.compile(r"^ {0,3}(`{3,}|~{3,})(.*)$")
_ATX_HEADING = re.compile(r"^ {0,3}(#{1,6})(?:[ \t]+|$)")
_SETEXT_UNDERLINE = re.compile(r"^ {0,3}(=+|-+)[ \t]*$")
_RULE = re.compile(r"^ {0,3}([-*_])(?:[ \t]*\1){2,}[ \t]*$")
_LIST_ITEM = re.compile(r"^( {0,3})([-*+]|\d{1,9}[.)])(?:[ \t]+|$)")
_BLOCKQUOTE = re.compile(r"^ {0,3}>")
_TABLE_DELIMITER = re.compile(
    r"^ {0,3}\|?[ \t]*:?-+:?[ \t]*(?:\|[ \t]*:?-+:?[ \t]*)*\|?[ \t]*$"
)
_INDENTED_CODE = re.compile(r"^(?: {4}|\t)")
_CONTINUATION_INDENT = re.compile(r"^(?: {2,}|\t)")
_HTML_BLOCK = re.compile(r"^ {0,3}<(?:[A-Za-z][A-Za-z0-9-]*|!--|/[A-Za-z])")

_INLINE = re.compile(
    r"(?P<code_span>(?P<ticks>`+).+?(?P=ticks))"
    r"|(?P<image>!\[[^\]\n]*\]\([^)\n]*\))"
    r"|(?P<link>\[[^\]\n]*\]\([^)\n]*\))"
    r"|(?P<emphasis>(?P<marker>\*\*|__|\*|_)(?=\S).+?(?<=\S)(?P=marker))"
)

_INLINE_GROUPS = {
    "code_span": NodeKind.CODE_SPAN,
    "image": NodeKind.IMAGE,
    "link": NodeKind.LINK,
    "emphasis": NodeKind.EMPHASIS,
}


def _split_lines(text: str) -> List[_Line]:
    lines = []
    for match in _LINE_RE.finditer(text):
        start = match.start()
        end = match.end()
        if text[end - 1 : end] == "\n":
            end -= 1
        lines.append(_Line(start, end, text[start:end].rstrip("\r")))
    return lines


def _is_table_start(lines: List[_Line], i: int) -> bool:
    if i + 1 >= len(lines):
        return False
    header, delimiter = lines[i].content, lines[i + 1].content
    return (
        "|" in header
        and "|" in delimiter
        and bool(_TABLE_DELIMITER.match(delimiter))
    )


def _starts_block(line: str) -> bool:
    """True if ``line`` opens a block that interrupts a paragraph."""
    if _ATX_HEADING.match(line) or _FENCE_OPEN.match(line):
        return True
    if _RULE.match(line) or _BLOCKQUOTE.match(line):
        return True
    if _HTML_BLOCK.match(line):
        return True
    item = _LIST_ITEM.match(line)
    # An empty list item cannot interrupt a paragraph
    return bool(item and line[item.end() :].strip())


def parse_inline(text: str, offset: int) -> Tuple[Node, ...]:
    """Split a block's text into inline nodes with absolute offsets."""
    children: List[Node] = []
    cursor = 0
    for match in _INLINE.finditer(text):
        if match.start() > cursor:
            children.append(
                Node(
                    NodeKind.TEXT,
                    offset + cursor,
                    offset + match.start(),
                    text[cursor : match.start()],
                )
            )
        kind = next(
            _INLINE_GROUPS[name]
            for name in _INLINE_GROUPS
            if match.group(name) is not None
        )
        children.append(
            Node(kind, offset + match.start(), offset + match.end(), match[0])
        )
        cursor = match.end()
    if cursor < len(text):
        children.append(
            Node(NodeKind.TEXT, offset + cursor, offset + len(text), text[cursor:])
        )
    return tuple(children)


class MarkdownBlockParser:
    """Stateless Markdown block scanner.

    ``parse`` returns a ``document`` node whose children are block nodes in
    document order. Heading and paragraph nodes carry inline children.
    """

    def parse(self, text: str) -> Node:
        lines = _split_lines(text)
        blocks: List[Node] = []
        i = 0
        while i < len(lines):
            line = lines[i]
            if line.blank:
                i += 1
                continue

            node, i = self._parse_block(text, lines, i)
            blocks.append(node)

        root = Node(NodeKind.DOCUMENT, 0, len(text), text, 0, tuple(blocks))
        validate_tree(root, len(text))
        return root

    def _parse_block(
        self, text: str, lines: List[_Line], i: int
    ) -> Tuple[Node, int]:
        content = lines[i].content

        fence = _FENCE_OPEN.match(content)
        if fence and not (
            fence.group(1)[0] == "`" and "`" in fence.group(2)
        ):
            return self._parse_fence(text, lines, i, fence.group(1))

        heading = _ATX_HEADING.match(content)
        if heading:
            return (
                self._node(
                    NodeKind.HEADING,
                    text,
                    lines[i].start,
                    lines[i].end,
                    level=len(heading.group(1)),
                ),
                i + 1,
            )

        if _RULE.match(content):
            return (
                self._node(NodeKind.RULE, text, lines[i].start, lines[i].end),
                i + 1,
            )

        if _LIST_ITEM.match(content):
            return self._parse_list(text, lines, i)

        if _BLOCKQUOTE.match(content):
            return self._parse_blockquote(text, lines, i)

        if _is_table_start(lines, i):
            return self._parse_table(text, lines, i)

        if _INDENTED_CODE.match(content):
            return self._parse_indented_code(text, lines, i)

        if _HTML_BLOCK.match(content):
            j = i
            while j + 1 < len(lines) and not lines[j + 1].blank:
                j += 1
            return (
                self._node(NodeKind.UNKNOWN, text, lines[i].start, lines[j].end),
                j + 1,
            )

        return self._parse_paragraph(text, lines, i)

    def _node(
        self,
        kind: NodeKind,
        text: str,
        start: int,
        end: int,
        level: int = 0,
    ) -> Node:
        body = text[start:end]
        children: Tuple[Node, ...] = ()
        if kind in (NodeKind.HEADING, NodeKind.PARAGRAPH):
            children = parse_inline(body, start)
        return Node(kind, start, end, body, level, children)

    def _parse_fence(
        self, text: str, lines: List[_Line], i: int, marker: str
    ) -> Tuple[Node, int]:
        closing = re.compile(
            r"^ {0,3}" + re.escape(marker[0]) + "{" + str(len(marker)) + r",}[ \t]*$"
        )
        j = i + 1
        while j < len(lines):
            if closing.match(lines[j].content):
                break
            j += 1
        # Unterminated fences run to the end of the document
        last = min(j, len(lines) - 1)
        return (
            self._node(NodeKind.CODE_BLOCK, text, lines[i].start, lines[last].end),
            last + 1,
        )

    def _parse_indented_code(
        self, text: str, lines: List[_Line], i: int
    ) -> Tuple[Node, int]:
        j = i
        last = i
        while j < len(lines):
            if lines[j].blank:
                j += 1
                continue
            if not _INDENTED_CODE.match(lines[j].content):
                break
            last = j
            j += 1
        return (
            self._node(NodeKind.CODE_BLOCK, text, lines[i].start, lines[last].end),
            last + 1,
        )

    def _parse_table(
        self, text: str, lines: List[_Line], i: int
    ) -> Tuple[Node, int]:
        last = i + 1
        while (
            last + 1 < len(lines)
            and not lines[last + 1].blank
            and "|" in lines[last + 1].content
        ):
            last += 1
        return (
            self._node(NodeKind.TABLE, text, lines[i].start, lines[last].end),
            last + 1,
        )

    def _parse_blockquote(
        self, text: str, lines: List[_Line], i: int
    ) -> Tuple[Node, int]:
        last = i
        while last + 1 < len(lines):
            candidate = lines[last + 1]
            if candidate.blank:
                break
            if _BLOCKQUOTE.match(candidate.content):
                last += 1
                continue
            # Lazy continuation of the quoted paragraph
            if _starts_block(candidate.content):
                break
            last += 1
        return (
            self._node(NodeKind.BLOCKQUOTE, text, lines[i].start, lines[last].end),
            last + 1,
        )

    def _parse_list(
        self, text: str, lines: List[_Line], i: int
    ) -> Tuple[Node, int]:
        last = i
        j = i + 1
        while j < len(lines):
            candidate = lines[j]
            if candidate.blank:
                # Blank lines stay inside the list only if it continues
                k = j
                while k < len(lines) and lines[k].blank:
                    k += 1
                if k < len(lines) and (
                    _CONTINUATION_INDENT.match(lines[k].content)
                    or (
                        _LIST_ITEM.match(lines[k].content)
                        and not _RULE.match(lines[k].content)
                    )
                ):
                    j = k
                    continue
                break

            content = candidate.content
            if _RULE.match(content):
                break
            if _LIST_ITEM.match(content) or _CONTINUATION_INDENT.match(
                content
            ):
                last = j
                j += 1
                continue
            # Lazy continuation directly under an item line
            if j == last + 1 and not _starts_block(content):
                last = j
                j += 1
                continue
            break
        return (
            self._node(NodeKind.LIST, text, lines[i].start, lines[last].end),
            last + 1,
        )

    def _parse_paragraph(
        self, text: str, lines: List[_Line], i: int
    ) -> Tuple[Node, int]:
        last = i
        while last + 1 < len(lines):
            candidate = lines[last + 1]
            if candidate.blank:
                break
            underline = _SETEXT_UNDERLINE.match(candidate.content)
            if underline:
                level = 1 if underline.group(1)[0] == "=" else 2
                return (
                    self._node(
                        NodeKind.HEADING,
                        text,
                        lines[i].start,
                        candidate.end,
                        level=level,
                    ),
                    last + 2,
                )
            if _starts_block(candidate.content):
                break
            if _is_table_start(lines, last + 1):
                break
            last += 1
        return (
            self._node(NodeKind.PARAGRAPH, text, lines[i].start, lines[last].end),
            last + 1,
        )


def validate_tree(root: Node, length: int) -> None:
    """Check that every node lies inside its parent and siblings are ordered."""

    def _check(node: Node, lower: int, upper: int) -> None:
        if not (lower <= node.start <= node.end <= upper):
            raise MarkdownParseError(
                f"{node.kind.value} span [{node.start}, {node.end}) "
                f"outside [{lower}, {upper})"
            )
        previous_end: Optional[int] = None
        for child in node.children:
            if previous_end is not None and child.start < previous_end:
                raise MarkdownParseError(
                    f"{child.kind.value} at {child.start} overlaps "
                    f"previous sibling ending at {previous_end}"
                )
            _check(child, node.start, node.end)
            previous_end = child.end

    _check(root, 0, length)
