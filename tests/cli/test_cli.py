"""Tests for the mdchunker CLI."""

import json

import pytest

from mdchunker.chunking import engine as engine_module
from mdchunker.chunking import verify as verify_module
from mdchunker.core import config as config_module
from mdchunker.cli.main import app

SECTIONS = "# A\n\nbody A\n\n# B\n\nbody B"


@pytest.fixture(autouse=True)
def quiet_cli(monkeypatch, tmp_path):
    """Keep stdout free of events and isolate config discovery."""
    monkeypatch.setenv("EVENTS_ENABLED", "false")
    monkeypatch.chdir(tmp_path)
    # The CLI callback replaces the global settings
    monkeypatch.setattr(config_module, "SETTINGS", config_module.SETTINGS)


def _json_lines(output):
    records = [json.loads(line) for line in output.splitlines() if line.startswith("{")]
    # Log lines on stderr may be mixed in by older Click runners
    return [r for r in records if "event" not in r]


def test_version(cli_runner):
    from mdchunker import __version__

    result = cli_runner.invoke(app, ["version"])
    assert result.exit_code == 0
    assert __version__ in result.stdout


def test_config_lists_settings(cli_runner, monkeypatch):
    monkeypatch.setenv("CHUNK_MAX_SIZE", "777")

    result = cli_runner.invoke(app, ["config"])
    assert result.exit_code == 0
    assert "CHUNK_MAX_SIZE=777" in result.stdout
    assert "CHUNK_MIN_SIZE=100" in result.stdout


class TestChunkCommand:
    def test_json_output(self, cli_runner, write_markdown):
        path = write_markdown(SECTIONS)
        result = cli_runner.invoke(
            app,
            ["chunk", str(path), "--json", "--max-size", "15", "--min-size", "0"],
        )

        assert result.exit_code == 0, result.output
        records = _json_lines(result.stdout)
        assert [r["char_start"] for r in records] == [0, 13]
        assert records[0]["text"] == "# A\n\nbody A"
        assert records[0]["split_method"] == "whole"
        assert records[0]["chunk_type"] == "section"

    def test_config_file_option(self, cli_runner, write_markdown, tmp_path):
        path = write_markdown(SECTIONS)
        config = tmp_path / "custom.yaml"
        config.write_text("CHUNK_MAX_SIZE: 15\nCHUNK_MIN_SIZE: 0\n")

        result = cli_runner.invoke(
            app, ["--config", str(config), "chunk", str(path), "--json"]
        )

        assert result.exit_code == 0, result.output
        assert len(_json_lines(result.stdout)) == 2

    def test_table_output(self, cli_runner, write_markdown):
        path = write_markdown("Small document with a few words.")
        result = cli_runner.invoke(app, ["chunk", str(path), "--preview"])

        assert result.exit_code == 0, result.output
        assert "complete" in result.stdout
        assert "Small document with a few words." in result.stdout

    def test_missing_file(self, cli_runner, tmp_path):
        result = cli_runner.invoke(app, ["chunk", str(tmp_path / "nope.md")])
        assert result.exit_code == 1

    def test_invalid_options(self, cli_runner, write_markdown):
        path = write_markdown(SECTIONS)
        result = cli_runner.invoke(
            app, ["chunk", str(path), "--max-size", "10", "--min-size", "50"]
        )
        assert result.exit_code == 2


class TestVerifyCommand:
    def test_passing_document(self, cli_runner, write_markdown):
        text = "# Guide\n\n" + "Some prose about the tool. " * 20 + "\n"
        path = write_markdown(text)

        result = cli_runner.invoke(app, ["verify", str(path), "--max-size", "200"])

        assert result.exit_code == 0, result.output
        report = _json_lines(result.stdout)[-1]
        assert report["ok"] is True
        assert report["chunk_count"] > 1

    def test_failing_report_exits_1(self, cli_runner, write_markdown, monkeypatch):
        def _failing(content, chunks, options=None, parser=None):
            return {
                "ok": False,
                "chunk_count": len(chunks),
                "coverage_pct": 50.0,
                "gaps": [{"start": 0, "end": 5, "text": "hello"}],
                "order_violations": [],
                "split_protected_ranges": [],
                "oversize": [],
                "protected_range_count": 0,
            }

        monkeypatch.setattr(verify_module, "verify_chunks", _failing)
        path = write_markdown("Some text to verify here.")

        result = cli_runner.invoke(app, ["verify", str(path)])
        assert result.exit_code == 1

    def test_chunking_error_exits_1(self, cli_runner, write_markdown, monkeypatch):
        def _broken(content, options=None, parser=None):
            raise RuntimeError("parser exploded")

        monkeypatch.setattr(engine_module, "chunk_markdown", _broken)
        path = write_markdown("Some text to verify here.")

        result = cli_runner.invoke(app, ["verify", str(path)])
        assert result.exit_code == 1
        assert not _json_lines(result.stdout)
