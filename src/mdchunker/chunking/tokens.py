"""
Token counting for finalized chunks.
"""

from functools import lru_cache

import tiktoken

DEFAULT_ENCODING = "cl100k_base"


class TokenCountError(RuntimeError):
    """Raised when a chunk's tokens cannot be counted."""


@lru_cache(maxsize=16)
def _encoding_for(model: str) -> "tiktoken.Encoding":
    try:
        return tiktoken.encoding_for_model(model)
    except KeyError:
        # Unknown model name
        return tiktoken.get_encoding(DEFAULT_ENCODING)


def count_tokens(text: str, model: str = "text-embedding-3-small") -> int:
    """Count tokens using tiktoken for accurate OpenAI token counting."""
    try:
        return len(_encoding_for(model).encode(text, disallowed_special=()))
    except Exception as e:
        raise TokenCountError(
            f"failed to count tokens with model {model!r}: {e}"
        ) from e
