"""Structure-aware Markdown chunking for retrieval pipelines."""

__version__ = "0.1.0"
