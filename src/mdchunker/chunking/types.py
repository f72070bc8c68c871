"""
Chunk record, split-method tags and chunking options.
"""

from __future__ import annotations

from enum import Enum
from typing import NamedTuple, Tuple

from pydantic import BaseModel, ConfigDict, Field, model_validator

from ..core.config import Settings


class SplitMethod(str, Enum):
    """How a chunk's boundaries were chosen."""

    WHOLE = "whole"  # complete document or a section that fit
    PARAGRAPH = "paragraph"
    SENTENCE = "sentence"
    WORD = "word"


class Chunk(NamedTuple):
    """A text chunk with its position in the source document."""

    text: str
    char_start: int
    char_end: int
    chunk_type: str
    score: float
    heading_level: int = 0
    split_method: SplitMethod = SplitMethod.WHOLE
    is_section: bool = True

    @property
    def span(self) -> Tuple[int, int]:
        return (self.char_start, self.char_end)

    @property
    def char_count(self) -> int:
        return self.char_end - self.char_start


class ChunkingOptions(BaseModel):
    """Options for section-aware Markdown chunking.

    Sizes are character counts. Weights are boundary-score contributions
    in the range 0-1.
    """

    model_config = ConfigDict(frozen=True)

    max_chunk_size: int = Field(default=1200, gt=0)
    min_chunk_size: int = Field(default=100, ge=0)
    overlap_size: int = Field(default=0, ge=0)

    sentence_weight: float = Field(default=0.3, ge=0, le=1)
    paragraph_weight: float = Field(default=0.5, ge=0, le=1)
    heading_weight: float = Field(default=1.0, ge=0, le=1)
    code_block_weight: float = Field(default=0.9, ge=0, le=1)
    list_weight: float = Field(default=0.4, ge=0, le=1)
    table_weight: float = Field(default=0.8, ge=0, le=1)
    blockquote_weight: float = Field(default=0.6, ge=0, le=1)
    rule_weight: float = Field(default=0.8, ge=0, le=1)

    preserve_formatting: bool = False
    respect_code_blocks: bool = True
    respect_tables: bool = True
    header_hierarchy: bool = True

    @model_validator(mode="after")
    def _check_bounds(self) -> "ChunkingOptions":
        if self.min_chunk_size > self.max_chunk_size:
            raise ValueError(
                f"min_chunk_size ({self.min_chunk_size}) must not exceed "
                f"max_chunk_size ({self.max_chunk_size})"
            )
        return self

    @classmethod
    def from_settings(cls, settings: Settings) -> "ChunkingOptions":
        return cls(
            max_chunk_size=settings.CHUNK_MAX_SIZE,
            min_chunk_size=settings.CHUNK_MIN_SIZE,
            overlap_size=settings.CHUNK_OVERLAP_SIZE,
            sentence_weight=settings.CHUNK_SENTENCE_WEIGHT,
            paragraph_weight=settings.CHUNK_PARAGRAPH_WEIGHT,
            heading_weight=settings.CHUNK_HEADING_WEIGHT,
            code_block_weight=settings.CHUNK_CODE_BLOCK_WEIGHT,
            list_weight=settings.CHUNK_LIST_WEIGHT,
            table_weight=settings.CHUNK_TABLE_WEIGHT,
            blockquote_weight=settings.CHUNK_BLOCKQUOTE_WEIGHT,
            rule_weight=settings.CHUNK_RULE_WEIGHT,
            preserve_formatting=settings.CHUNK_PRESERVE_FORMATTING,
            respect_code_blocks=settings.CHUNK_RESPECT_CODE_BLOCKS,
            respect_tables=settings.CHUNK_RESPECT_TABLES,
            header_hierarchy=settings.CHUNK_HEADER_HIERARCHY,
        )

    def finalize_text(self, text: str) -> str:
        """Apply the whitespace policy to chunk text."""
        return text if self.preserve_formatting else text.strip()
