#!/usr/bin/env python3
"""CLI for building and querying the repository index."""

import json
import logging
from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from repoindex.config import (
    DATA_DIR,
    LANCEDB_DIR,
    MAX_FILE_SIZE,
    REPOSITORY_ROOT,
    SEARCH_LIMIT,
    SOURCE_AREAS,
    TABLE_NAME,
)

console = Console()

# Errors that abort a command with exit status 1
FATAL_ERRORS = (OSError, RuntimeError, ValueError)


def _fail(message: str) -> None:
    console.print(f"[red]Error: {message}[/red]")
    raise SystemExit(1)


def _print_stats(stats: dict) -> None:
    table = Table(title="Index Statistics")
    table.add_column("Type", style="cyan")
    table.add_column("Count", justify="right")

    for record_type, count in sorted(stats["by_type"].items()):
        table.add_row(record_type, str(count))

    console.print(table)
    console.print(f"Total items: {stats['total_items']}")
    console.print(f"Total indexed size: {stats['total_size_human']}")


@click.group()
@click.version_option()
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
def cli(verbose: bool) -> None:
    """RepoIndex - catalog a repository's files, routes, schema and configuration."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG)


@cli.command()
@click.option("--rebuild", is_flag=True, help="Clear the index before indexing")
@click.option(
    "--root",
    type=click.Path(file_okay=False, path_type=Path),
    help="Repository root (defaults to the configured root)",
)
def index(rebuild: bool, root: Path | None) -> None:
    """Index the repository.

    Without --rebuild, new records are added next to the existing ones.
    """
    from repoindex.config import IndexSettings
    from repoindex.indexer import index_repository
    from repoindex.query import QueryEngine
    from repoindex.store import RecordStore

    settings = IndexSettings(root=root) if root else IndexSettings()
    try:
        store = RecordStore()
        index_repository(settings, rebuild=rebuild, store=store)
        stats = QueryEngine(store).stats()
    except FATAL_ERRORS as e:
        _fail(str(e))

    console.print()
    _print_stats(stats)


@cli.command()
@click.argument("query")
@click.option("--type", "record_type", help="Only records of this type")
@click.option("--category", help="Only records in this category")
@click.option("-n", "--limit", default=SEARCH_LIMIT, show_default=True, help="Number of results")
@click.option("--json", "as_json", is_flag=True, help="Output results as JSON")
def search(
    query: str,
    record_type: str | None,
    category: str | None,
    limit: int,
    as_json: bool,
) -> None:
    """Search indexed records by name, description, content or path."""
    from repoindex.query import QueryEngine

    try:
        results = QueryEngine().search(query, type=record_type, category=category, limit=limit)
    except FATAL_ERRORS as e:
        _fail(str(e))

    if as_json:
        click.echo(json.dumps([r.to_dict() for r in results], indent=2, ensure_ascii=True))
        return

    if not results:
        console.print("[yellow]No results found[/yellow]")
        return

    table = Table(title=f"Results for '{query}'")
    table.add_column("Type", style="cyan")
    table.add_column("Category")
    table.add_column("Name", style="bold")
    table.add_column("Path", style="dim")
    table.add_column("ID", style="dim")

    for r in results:
        table.add_row(r.type.value, r.category or "", r.name, r.path or "", r.id or "")

    console.print(table)


@cli.command()
@click.argument("record_id")
@click.option("--json", "as_json", is_flag=True, help="Output the record as JSON")
def show(record_id: str, as_json: bool) -> None:
    """Show a single record with its metadata."""
    from repoindex.query import QueryEngine

    try:
        record = QueryEngine().get_record(record_id)
    except FATAL_ERRORS as e:
        _fail(str(e))

    if record is None:
        _fail(f"Record not found: {record_id}")

    if as_json:
        click.echo(json.dumps(record.to_dict(), indent=2, ensure_ascii=True))
        return

    table = Table(show_header=False)
    table.add_column("Field", style="cyan")
    table.add_column("Value")

    table.add_row("Name", record.name)
    table.add_row("Type", record.type.value)
    table.add_row("Category", record.category or "-")
    table.add_row("Path", record.path or "-")
    table.add_row("Description", record.description)
    if record.size is not None:
        table.add_row("Size", str(record.size))
    if record.last_modified:
        table.add_row("Last modified", record.last_modified)

    console.print(table)
    console.print("\n[bold]Metadata[/bold]")
    console.print_json(json.dumps(record.metadata_dict()))
    if record.content_preview:
        console.print("\n[bold]Preview[/bold]")
        console.print(record.content_preview, markup=False, highlight=False)


@cli.command()
@click.option("--json", "as_json", is_flag=True, help="Output statistics as JSON")
def stats(as_json: bool) -> None:
    """Show index statistics."""
    from repoindex.query import QueryEngine

    try:
        index_stats = QueryEngine().stats()
    except FATAL_ERRORS as e:
        _fail(str(e))

    if as_json:
        click.echo(json.dumps(index_stats, indent=2, ensure_ascii=True))
        return

    if not index_stats["total_items"]:
        console.print("[yellow]Index is empty[/yellow]")
        console.print("\n[dim]Build it with: repoindex index[/dim]")
        return

    _print_stats(index_stats)


@cli.command()
@click.option("--host", default="127.0.0.1", help="Host to bind to")
@click.option("--port", "-p", default=8430, help="Port to bind to")
def api(host: str, port: int) -> None:
    """Start the REST API server."""
    from repoindex.api_server import run_server

    console.print("[cyan]Starting RepoIndex REST API server...[/cyan]")
    console.print(f"[dim]Server: http://{host}:{port}[/dim]")
    console.print(f"[dim]OpenAPI docs: http://{host}:{port}/docs[/dim]\n")
    run_server(host=host, port=port)


@cli.command()
@click.option("--path", is_flag=True, help="Show config file path only")
def config(path: bool) -> None:
    """Show current configuration."""
    from repoindex.config import get_config_path

    config_path = get_config_path()

    if path:
        console.print(str(config_path))
        return

    console.print("[bold]RepoIndex Configuration[/bold]\n")
    console.print(f"[dim]Config file: {config_path}[/dim]\n")

    table = Table(show_header=False)
    table.add_column("Setting", style="cyan")
    table.add_column("Value")

    table.add_row("Repository root", str(REPOSITORY_ROOT))
    table.add_row("Data directory", str(DATA_DIR))
    table.add_row("Index location", str(LANCEDB_DIR))
    table.add_row("Table", TABLE_NAME)
    table.add_row("Max file size", str(MAX_FILE_SIZE))
    table.add_row("Areas", ", ".join(SOURCE_AREAS))

    console.print(table)
    console.print("\n[dim]Environment variables can override config file settings.[/dim]")


if __name__ == "__main__":
    cli()
