"""Library Health CLI entry point."""

from __future__ import annotations

import json
import logging
import uuid
from pathlib import Path
from typing import Optional

import typer

from libhealth.config import DEFAULT_CONFIG_PATH, HealthConfig, load_config, write_default_config
from libhealth.errors import HealthCheckError
from libhealth.logging_config import setup_logging
from libhealth.runtime import build_scanner
from libhealth.server import run_server
from libhealth.store import ResultStore


__version__ = "0.1.0"

app = typer.Typer(add_completion=False, help="Library metadata health check CLI")
logger = logging.getLogger("libhealth")


def _ensure_config() -> HealthConfig:
    try:
        return load_config()
    except FileNotFoundError:
        typer.echo("[ERROR] config.ini not found. Run: libhealth init --catalog /path/to/catalog.json")
        raise typer.Exit(code=1)


def _configure_logging(config: HealthConfig) -> None:
    log_file = setup_logging(config.data_dir, config.log_level)
    if log_file is not None:
        logger.debug(f"Logging to {log_file}")


def _parse_uuid(value: str, name: str) -> uuid.UUID:
    try:
        return uuid.UUID(value)
    except ValueError:
        typer.echo(f"[ERROR] {name} is not a valid GUID: {value}")
        raise typer.Exit(code=1)


@app.command()
def init(
    catalog: Path = typer.Option(..., "--catalog", help="Path to the catalog JSON export"),
) -> None:
    """Initialize config.ini with default settings."""
    write_default_config(DEFAULT_CONFIG_PATH, catalog)
    typer.echo(f"[OK] Config created at {DEFAULT_CONFIG_PATH}")


@app.command()
def libraries() -> None:
    """List libraries in the catalog."""
    config = _ensure_config()
    scanner = build_scanner(config, ResultStore(config.results_path))
    try:
        found = scanner.get_libraries()
    except (FileNotFoundError, HealthCheckError) as exc:
        typer.echo(f"[ERROR] {exc}")
        raise typer.Exit(code=1)

    if not found:
        typer.echo("[INFO] The catalog has no libraries")
        return
    for lib in found:
        typer.echo(f"{lib.id}  {lib.name}  ({lib.collection_type or 'unknown'})")


@app.command()
def scan(
    library_id: str = typer.Argument(..., help="Library ID to scan"),
) -> None:
    """Scan a library and store its health report."""
    config = _ensure_config()
    _configure_logging(config)

    scanner = build_scanner(config, ResultStore(config.results_path))
    try:
        result = scanner.start_scan(_parse_uuid(library_id, "libraryId"))
    except (FileNotFoundError, HealthCheckError) as exc:
        typer.echo(f"[ERROR] {exc}")
        raise typer.Exit(code=1)

    typer.echo(
        f"✓ Scan completed: {result.library_name} - "
        f"{result.total_items} items, {result.issues_found} issues."
    )


@app.command()
def results(
    library_id: Optional[str] = typer.Argument(None, help="Only show this library"),
    as_json: bool = typer.Option(False, "--json", help="Print full results as JSON"),
) -> None:
    """Show stored scan results."""
    config = _ensure_config()
    store = ResultStore(config.results_path)

    if library_id:
        found = store.get(_parse_uuid(library_id, "libraryId"))
        if found is None:
            typer.echo("[INFO] No scan result for this library")
            raise typer.Exit(code=1)
        stored = [found]
    else:
        stored = store.get_all()

    if as_json:
        typer.echo(json.dumps([r.model_dump(mode="json", by_alias=True) for r in stored], indent=2))
        return

    if not stored:
        typer.echo("[INFO] No scan results stored")
        return

    for result in stored:
        completed = result.completed_at.isoformat() if result.completed_at else "running"
        typer.echo(f"{result.library_name} ({result.library_id})")
        typer.echo(f"  Completed: {completed}")
        typer.echo(f"  Items scanned: {result.total_items}")
        typer.echo(f"  Issues found: {result.issues_found}")
        for issue in result.issues:
            typer.echo(f"    [{issue.severity.value}] {issue.type.value}: {issue.item_name}")


@app.command()
def delete(
    library_id: str = typer.Argument(..., help="Library ID whose result to delete"),
) -> None:
    """Delete the stored result for a library."""
    config = _ensure_config()
    store = ResultStore(config.results_path)
    if store.delete(_parse_uuid(library_id, "libraryId")):
        typer.echo("[OK] Scan result deleted")
    else:
        typer.echo("[INFO] No scan result for this library")
        raise typer.Exit(code=1)


@app.command()
def serve(
    host: Optional[str] = typer.Option(None, "--host", help="Server host"),
    port: Optional[int] = typer.Option(None, "--port", help="Server port"),
) -> None:
    """Start the Library Health API server."""
    config = _ensure_config()
    _configure_logging(config)

    logger.info(f"Using catalog {config.catalog_path}")
    run_server(config, host=host, port=port)


if __name__ == "__main__":
    app()
