from pathlib import Path
from typing import Any, Dict, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Chunk size bounds (characters)
    CHUNK_MAX_SIZE: int = 1200
    CHUNK_MIN_SIZE: int = 100
    CHUNK_OVERLAP_SIZE: int = 0  # 0 disables overlap injection

    # Boundary weights (0-1)
    CHUNK_SENTENCE_WEIGHT: float = 0.3
    CHUNK_PARAGRAPH_WEIGHT: float = 0.5
    CHUNK_HEADING_WEIGHT: float = 1.0
    CHUNK_CODE_BLOCK_WEIGHT: float = 0.9
    CHUNK_LIST_WEIGHT: float = 0.4
    CHUNK_TABLE_WEIGHT: float = 0.8
    CHUNK_BLOCKQUOTE_WEIGHT: float = 0.6
    CHUNK_RULE_WEIGHT: float = 0.8

    # Structure handling
    CHUNK_PRESERVE_FORMATTING: bool = False
    CHUNK_RESPECT_CODE_BLOCKS: bool = True
    CHUNK_RESPECT_TABLES: bool = True
    CHUNK_HEADER_HIERARCHY: bool = True

    # Token counting for ingestion records
    TOKEN_MODEL: str = "text-embedding-3-small"

    # Passed through to callers that drive network-bound siblings
    MAX_RETRIES: int = 0
    BACKOFF_SECONDS: float = 0.0
    CONCURRENCY_COUNT: int = 0
    GLEAN_COUNT: int = 0
    MAX_SUMMARIES_TOKEN_LENGTH: int = 0

    # Observability
    LOG_FORMAT: str = "auto"  # json|plain|auto
    EVENTS_ENABLED: bool = Field(
        default=True,
        description="Emit structured chunk.* events through the logger",
    )

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    @classmethod
    def load_config(cls, config_file: Optional[str] = None) -> "Settings":
        """Load settings from a config file, falling back to env and defaults.

        Keys present in the file take precedence over environment variables.
        """
        config_data: Dict[str, Any] = {}

        config_path: Optional[Path]
        if config_file:
            config_path = Path(config_file)
        else:
            # Auto-discover .mdchunker.{yaml,yml,toml}
            for ext in ["yaml", "yml", "toml"]:
                config_path = Path(f".mdchunker.{ext}")
                if config_path.exists():
                    break
            else:
                config_path = None

        if config_path and config_path.exists():
            if config_path.suffix in [".yaml", ".yml"]:
                import yaml  # type: ignore[import-untyped]

                with open(config_path) as f:
                    config_data = yaml.safe_load(f) or {}
            elif config_path.suffix == ".toml":
                import tomllib

                with open(config_path, "rb") as f:
                    config_data = tomllib.load(f)

        # Init kwargs outrank environment variables in pydantic-settings
        return cls(**config_data)


# Default settings - replaced by load_config() during CLI startup
SETTINGS = Settings()
