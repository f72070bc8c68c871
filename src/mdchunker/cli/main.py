import json
from pathlib import Path
from typing import List, Optional, cast

import typer
from rich.console import Console
from rich.table import Table

from ..core import config as config_module
from ..core.logging import LogFormat, log, setup_logging
from ..obs.events import set_events_enabled

app = typer.Typer(add_completion=False, help="Section-aware Markdown chunker")
console = Console(stderr=True)

PREVIEW_LINES = 5


@app.callback()
def _init(
    config_file: Optional[str] = typer.Option(
        None,
        "--config",
        help="Config file (.mdchunker.yaml auto-discovered)",
    ),
) -> None:
    settings = config_module.Settings.load_config(config_file)
    config_module.SETTINGS = settings
    log_format = settings.LOG_FORMAT
    if log_format not in ("json", "plain", "auto"):
        log_format = "auto"
    setup_logging(cast(LogFormat, log_format))
    set_events_enabled(settings.EVENTS_ENABLED)


@app.command()
def version() -> None:
    from .. import __version__

    typer.echo(__version__)


@app.command()
def config() -> None:
    """Print the effective settings."""
    for k, v in config_module.SETTINGS.model_dump().items():
        typer.echo(f"{k}={v}")


def _read_document(path: Path) -> str:
    if not path.exists():
        typer.echo(f"❌ File not found: {path}", err=True)
        raise typer.Exit(1)
    return path.read_text(encoding="utf-8")


def _build_options(
    max_size: Optional[int],
    min_size: Optional[int],
    overlap: Optional[int],
    preserve_formatting: Optional[bool],
):
    from pydantic import ValidationError

    from ..chunking.types import ChunkingOptions

    base = ChunkingOptions.from_settings(config_module.SETTINGS)
    overrides = {
        "max_chunk_size": max_size,
        "min_chunk_size": min_size,
        "overlap_size": overlap,
        "preserve_formatting": preserve_formatting,
    }
    overrides = {k: v for k, v in overrides.items() if v is not None}
    if not overrides:
        return base

    try:
        # model_copy skips validation, so rebuild from a dict
        return ChunkingOptions(**{**base.model_dump(), **overrides})
    except ValidationError as e:
        typer.echo(f"❌ Invalid chunking options: {e}", err=True)
        raise typer.Exit(2) from e


def _print_chunk_table(chunks: List, preview: bool) -> None:
    table = Table(title=f"{len(chunks)} chunks")
    table.add_column("#", style="bold cyan", justify="right")
    table.add_column("Type", style="bold")
    table.add_column("Score", justify="right")
    table.add_column("Span", justify="right")
    table.add_column("Chars", style="bold green", justify="right")
    table.add_column("Level", justify="right")
    table.add_column("Method")

    for i, c in enumerate(chunks, 1):
        table.add_row(
            str(i),
            c.chunk_type,
            f"{c.score:.3f}",
            f"{c.char_start}-{c.char_end}",
            str(len(c.text)),
            f"H{c.heading_level}" if c.heading_level > 0 else "-",
            c.split_method.value,
        )

    out = Console()
    out.print(table)

    if not preview:
        return
    for i, c in enumerate(chunks, 1):
        lines = c.text.strip().split("\n")
        out.print(f"[bold]=== Chunk {i} ===[/bold]")
        for line in lines[:PREVIEW_LINES]:
            out.print(f"  {line}", markup=False)
        if len(lines) > PREVIEW_LINES:
            out.print(f"  ... ({len(lines) - PREVIEW_LINES} more lines)")
        out.print()


@app.command()
def chunk(
    file: Path = typer.Argument(..., help="Markdown file to chunk"),
    max_size: Optional[int] = typer.Option(
        None, "--max-size", help="Maximum chunk size in characters"
    ),
    min_size: Optional[int] = typer.Option(
        None, "--min-size", help="Minimum chunk size in characters"
    ),
    overlap: Optional[int] = typer.Option(
        None, "--overlap", help="Characters of overlap carried into each chunk"
    ),
    preserve_formatting: Optional[bool] = typer.Option(
        None,
        "--preserve-formatting/--trim",
        help="Keep surrounding whitespace in chunk text",
    ),
    as_json: bool = typer.Option(
        False, "--json", help="Print chunks as NDJSON on stdout"
    ),
    preview: bool = typer.Option(
        False, "--preview", help="Show the first lines of every chunk"
    ),
) -> None:
    """
    Chunk a Markdown file into section-aware pieces.

    Example:
        mdchunker chunk README.md                    # Table of chunks
        mdchunker chunk README.md --max-size 800    # Smaller chunks
        mdchunker chunk README.md --json            # NDJSON for pipelines
    """
    from ..chunking.engine import chunk_markdown

    content = _read_document(file)
    options = _build_options(max_size, min_size, overlap, preserve_formatting)

    try:
        chunks = chunk_markdown(content, options)
    except Exception as e:
        log.error("cli.chunk_failed", file=str(file), error=str(e))
        typer.echo(f"❌ Chunking failed: {e}", err=True)
        raise typer.Exit(1) from e

    if as_json:
        for c in chunks:
            record = c._asdict()
            record["split_method"] = c.split_method.value
            typer.echo(json.dumps(record, ensure_ascii=False))
        return

    _print_chunk_table(chunks, preview)


@app.command()
def verify(
    file: Path = typer.Argument(..., help="Markdown file to chunk and verify"),
    max_size: Optional[int] = typer.Option(None, "--max-size"),
    min_size: Optional[int] = typer.Option(None, "--min-size"),
    overlap: Optional[int] = typer.Option(None, "--overlap"),
) -> None:
    """
    Chunk a file and check the result: coverage, ordering, size bounds and
    intact code blocks/tables. Exits 1 when any check fails.
    """
    from ..chunking.engine import chunk_markdown
    from ..chunking.verify import verify_chunks

    content = _read_document(file)
    options = _build_options(max_size, min_size, overlap, None)

    try:
        chunks = chunk_markdown(content, options)
    except Exception as e:
        log.error("cli.verify_failed", file=str(file), error=str(e))
        typer.echo(f"❌ Chunking failed: {e}", err=True)
        raise typer.Exit(1) from e

    report = verify_chunks(content, chunks, options)

    table = Table(title="Chunk Verification")
    table.add_column("Check", style="bold cyan")
    table.add_column("Result", style="bold green", justify="right")
    table.add_row("Chunks", str(report["chunk_count"]))
    table.add_row("Coverage", f"{report['coverage_pct']}%")
    table.add_row("Protected ranges", str(report["protected_range_count"]))
    table.add_row("Content gaps", str(len(report["gaps"])))
    table.add_row("Order violations", str(len(report["order_violations"])))
    table.add_row("Split ranges", str(len(report["split_protected_ranges"])))
    table.add_row("Oversize", str(len(report["oversize"])))
    console.print(table)

    typer.echo(json.dumps(report))

    if not report["ok"]:
        console.print("[bold red]❌ Verification failed[/bold red]")
        raise typer.Exit(1)
    console.print("[bold green]✅ All checks passed[/bold green]")


if __name__ == "__main__":
    app()
