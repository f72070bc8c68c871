"""Global test configuration for mdchunker tests."""

import pytest
import structlog

from mdchunker.obs import events


@pytest.fixture(autouse=True)
def reset_observability():
    """Undo logging/event configuration done by CLI invocations."""
    yield
    events.set_events_enabled(True)
    structlog.reset_defaults()


@pytest.fixture
def cli_runner():
    """Provide a Typer CLI runner."""
    from typer.testing import CliRunner

    return CliRunner()


@pytest.fixture
def write_markdown(tmp_path):
    """Write a Markdown document to a temp file and return its path."""

    def _write(content: str, name: str = "doc.md"):
        path = tmp_path / name
        path.write_text(content, encoding="utf-8")
        return path

    return _write
