from pydantic import BaseModel, Field

from .config import Settings

DEFAULT_BACKOFF_SECONDS = 1.0
DEFAULT_CONCURRENCY_COUNT = 1
DEFAULT_MAX_SUMMARIES_TOKEN_LENGTH = 1200


class Source(BaseModel):
    """A chunk ready for the ingestion pipeline."""

    content: str
    token_size: int
    order_index: int  # character offset of the chunk in its document


class DocumentConfig(BaseModel):
    """Retry and batching knobs for network-bound consumers.

    The chunker never reads these; they travel with the handler so the
    ingestion side can pick them up. Zero means "use the default".
    """

    max_retries: int = Field(default=0, ge=0)
    backoff_seconds: float = Field(default=0.0, ge=0)
    concurrency_count: int = Field(default=0, ge=0)
    glean_count: int = Field(default=0, ge=0)
    max_summaries_token_length: int = Field(default=0, ge=0)

    @classmethod
    def from_settings(cls, settings: "Settings") -> "DocumentConfig":
        return cls(
            max_retries=settings.MAX_RETRIES,
            backoff_seconds=settings.BACKOFF_SECONDS,
            concurrency_count=settings.CONCURRENCY_COUNT,
            glean_count=settings.GLEAN_COUNT,
            max_summaries_token_length=settings.MAX_SUMMARIES_TOKEN_LENGTH,
        )

    def effective_backoff_seconds(self) -> float:
        return self.backoff_seconds or DEFAULT_BACKOFF_SECONDS

    def effective_concurrency_count(self) -> int:
        return self.concurrency_count or DEFAULT_CONCURRENCY_COUNT

    def effective_max_summaries_token_length(self) -> int:
        return (
            self.max_summaries_token_length
            or DEFAULT_MAX_SUMMARIES_TOKEN_LENGTH
        )
