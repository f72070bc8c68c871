"""
Markdown Chunking Package

Section-aware splitting of Markdown into bounded, ordered chunks that keep
code blocks and tables intact.
"""

from .engine import MarkdownChunker, calculate_coverage, chunk_markdown
from .handler import MarkdownHandler
from .tokens import TokenCountError, count_tokens
from .types import Chunk, ChunkingOptions, SplitMethod
from .verify import verify_chunks

__all__ = [
    "MarkdownChunker",
    "MarkdownHandler",
    "chunk_markdown",
    "calculate_coverage",
    "count_tokens",
    "verify_chunks",
    "Chunk",
    "ChunkingOptions",
    "SplitMethod",
    "TokenCountError",
]
