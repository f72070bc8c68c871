"""
Bridge from chunks to ingestion ``Source`` records.
"""

from typing import List, Optional

from ..core.logging import log
from ..core.models import DocumentConfig, Source
from .engine import MarkdownChunker
from .filters import has_actual_content
from .tokens import TokenCountError, count_tokens
from .types import ChunkingOptions

DEFAULT_EMBEDDING_MODEL = "text-embedding-3-small"


class MarkdownHandler:
    """Chunks Markdown documents and measures each chunk in tokens."""

    def __init__(
        self,
        options: Optional[ChunkingOptions] = None,
        config: Optional[DocumentConfig] = None,
        embedding_model: str = DEFAULT_EMBEDDING_MODEL,
    ):
        self.options = options or ChunkingOptions()
        self.config = config or DocumentConfig()
        self.embedding_model = embedding_model

    def chunk_document(self, content: str) -> List[Source]:
        """Chunk ``content`` into trimmed, token-counted sources.

        Raises:
            TokenCountError: if any chunk cannot be token counted
        """
        if not content:
            return []

        chunker = MarkdownChunker(self.options)
        sources: List[Source] = []
        for chunk in chunker.chunk(content):
            text = chunk.text.strip()
            if not has_actual_content(text):
                continue

            try:
                token_size = count_tokens(text, self.embedding_model)
            except Exception as e:
                raise TokenCountError(
                    f"failed to count tokens for chunk at {chunk.char_start}: {e}"
                ) from e

            sources.append(
                Source(
                    content=text,
                    token_size=token_size,
                    order_index=chunk.char_start,
                )
            )

        log.debug(
            "handler.chunk_document",
            sources=len(sources),
            model=self.embedding_model,
        )
        return sources

    def max_retries(self) -> int:
        return self.config.max_retries

    def backoff_seconds(self) -> float:
        return self.config.effective_backoff_seconds()

    def concurrency_count(self) -> int:
        return self.config.effective_concurrency_count()

    def glean_count(self) -> int:
        return self.config.glean_count

    def max_summaries_token_length(self) -> int:
        return self.config.effective_max_summaries_token_length()
