"""Command line interface.

Usage:
    vocab-enrich lookup vetted
    vocab-enrich import-words words.txt --store data/vocabulary.csv
    vocab-enrich batch --store data/vocabulary.csv --incomplete
    vocab-enrich batch walk vetted --dry-run
    vocab-enrich serve --port 8000
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

import typer
from dotenv import load_dotenv
from tqdm import tqdm

from vocab_enrich.config import EnrichmentSettings, build_service
from vocab_enrich.enrichment.models import BatchProgress
from vocab_enrich.errors import EnrichmentError
from vocab_enrich.storage.backends import CSVStore

logger = logging.getLogger(__name__)

app = typer.Typer(help="Dictionary lookup and enrichment of vocabulary words")


def _settings(store: Path | None = None) -> EnrichmentSettings:
    try:
        settings = EnrichmentSettings.from_env()
    except ValueError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(2) from exc
    if store is not None:
        settings.store_path = store
    return settings


def _read_words(path: Path) -> list[str]:
    words = [line.strip() for line in path.read_text(encoding="utf-8").splitlines()]
    return [w for w in words if w and not w.startswith("#")]


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
):
    """Load .env and configure logging."""
    load_dotenv()
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s - %(levelname)s - %(message)s",
    )


@app.command()
def lookup(
    word: str = typer.Argument(..., help="Word to look up"),
):
    """Look up one word and print the structured record as JSON."""
    service = build_service(_settings())
    try:
        result = service.enrich_word(word, client_id="cli")
    except (EnrichmentError, ValueError) as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(1) from exc
    typer.echo(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))


@app.command("import-words")
def import_words(
    words_file: Path = typer.Argument(..., exists=True, dir_okay=False, help="One word per line"),
    store: Path = typer.Option(..., "--store", "-s", help="Vocabulary CSV file"),
):
    """Add words from a text file to the vocabulary store."""
    vocab_store = CSVStore(store)
    try:
        known = {record.word.lower() for record in vocab_store.select_all()}
        new_words = []
        for word in _read_words(words_file):
            if word.lower() not in known:
                known.add(word.lower())
                new_words.append(word)
        created = vocab_store.insert(new_words)
    except EnrichmentError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(1) from exc
    typer.echo(f"Imported {len(created)} new words into {store}")


@app.command()
def batch(
    words: list[str] | None = typer.Argument(None, help="Words to enrich"),
    words_file: Path | None = typer.Option(
        None, "--file", "-f", exists=True, dir_okay=False, help="Read words from a file"
    ),
    store: Path | None = typer.Option(None, "--store", "-s", help="Vocabulary CSV file"),
    incomplete: bool = typer.Option(
        False, "--incomplete", help="Enrich every store word missing a definition"
    ),
    keep_unenriched: bool = typer.Option(
        False, "--keep-unenriched", help="Do not delete words no dictionary knows"
    ),
    dry_run: bool = typer.Option(False, "--dry-run", help="Do not write to the store"),
    chunk_size: int | None = typer.Option(None, "--chunk-size", help="Words per chunk"),
):
    """Enrich many words in chunks and reconcile the store."""
    settings = _settings(store)
    if dry_run:
        settings.store_path = None
    if chunk_size is not None:
        settings.batch_chunk_size = chunk_size

    word_list = list(words or [])
    if words_file is not None:
        word_list.extend(_read_words(words_file))
    if incomplete and settings.store_path is None:
        typer.echo("Error: --incomplete needs --store (and no --dry-run)", err=True)
        raise typer.Exit(2)
    if not incomplete and not word_list:
        typer.echo("Error: no words given", err=True)
        raise typer.Exit(2)

    service = build_service(settings)
    service.batch_options["delete_unenriched"] = not keep_unenriched

    with tqdm(total=0, desc="Enriching", unit="word") as bar:

        def on_progress(progress: BatchProgress) -> None:
            bar.total = progress.total
            bar.update(progress.processed - bar.n)

        if incomplete:
            report = service.fill_incomplete(on_progress=on_progress)
        else:
            report = service.enrich_batch(word_list, on_progress=on_progress)

    typer.echo(report.summary())
    if not report.completed:
        raise typer.Exit(1)


@app.command()
def serve(
    host: str = typer.Option("127.0.0.1", "--host", help="Bind address"),
    port: int = typer.Option(8000, "--port", "-p", help="Port"),
    store: Path | None = typer.Option(None, "--store", "-s", help="Vocabulary CSV file"),
):
    """Run the HTTP API."""
    import uvicorn

    from vocab_enrich.api import create_app

    service = build_service(_settings(store))
    uvicorn.run(create_app(service), host=host, port=port)


if __name__ == "__main__":
    app()
