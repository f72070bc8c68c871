"""
Boundary scoring and dominant content-type classification for sections.
"""

from typing import Dict, Optional

from .parser import BLOCK_KINDS, NodeKind
from .sections import Section
from .types import ChunkingOptions

DEFAULT_ELEMENT_WEIGHT = 0.5

# Every block kind maps to the option that weights it; None uses the default.
_WEIGHT_FIELDS: Dict[NodeKind, Optional[str]] = {
    NodeKind.HEADING: "heading_weight",
    NodeKind.PARAGRAPH: "paragraph_weight",
    NodeKind.CODE_BLOCK: "code_block_weight",
    NodeKind.TABLE: "table_weight",
    NodeKind.LIST: "list_weight",
    NodeKind.BLOCKQUOTE: "blockquote_weight",
    NodeKind.RULE: "rule_weight",
    NodeKind.UNKNOWN: None,
}

if set(_WEIGHT_FIELDS) != BLOCK_KINDS:
    raise RuntimeError(
        "weight table out of sync with block kinds: "
        f"{sorted(k.value for k in BLOCK_KINDS ^ set(_WEIGHT_FIELDS))}"
    )


def element_weight(kind: NodeKind, options: ChunkingOptions) -> float:
    """Configured boundary weight for a block kind."""
    field = _WEIGHT_FIELDS.get(kind)
    if field is None:
        return DEFAULT_ELEMENT_WEIGHT
    return float(getattr(options, field))


def section_score(section: Section, options: ChunkingOptions) -> float:
    """Score a whole-section chunk.

    Sections with a heading score the heading weight; otherwise the highest
    element weight wins, falling back to the paragraph weight.
    """
    if section.heading is not None:
        return options.heading_weight

    max_weight = 0.0
    for element in section.elements:
        max_weight = max(max_weight, element_weight(element.kind, options))

    if max_weight > 0:
        return max_weight
    return options.paragraph_weight


def section_type(section: Section) -> str:
    """Dominant element kind of a section.

    Ties go to the kind seen first so the result is stable across runs.
    """
    if section.heading is not None:
        return "section"

    # dicts keep insertion order, which is first-seen order here
    counts: Dict[NodeKind, int] = {}
    for element in section.elements:
        counts[element.kind] = counts.get(element.kind, 0) + 1

    dominant = "mixed"
    max_count = 0
    for kind, count in counts.items():
        if count > max_count:
            max_count = count
            dominant = kind.value
    return dominant
