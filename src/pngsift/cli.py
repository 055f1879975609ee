"""Command line interface for PngSift."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.progress import Progress
from rich.table import Table

from pngsift.config import AppConfig
from pngsift.index.indexer import Indexer
from pngsift.index.search import filter_index
from pngsift.models import IndexStats
from pngsift.relocate import relocate_images
from pngsift.utils.files import count_image_files, directory_exists, discover_jobs
from pngsift.utils.text import split_search_terms


console = Console()
app = typer.Typer(help="PngSift - filter PNG images by their embedded text metadata")


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="[%(levelname)s] %(message)s")


def _prompt_for_folder() -> Path:
    while True:
        answer = typer.prompt("Please enter a valid folder path")
        if directory_exists(answer):
            return Path(answer)
        console.print("[yellow]Invalid folder path, or the directory does not exist.[/yellow]")


def _resolve_folder(folder: Optional[Path]) -> Path:
    if folder is None:
        return _prompt_for_folder()
    if not directory_exists(folder):
        raise typer.BadParameter(f"Folder not found: {folder}")
    return folder


def _build_index(folder: Path, config: AppConfig) -> tuple[Dict[str, str], IndexStats]:
    jobs = discover_jobs(folder, config.extension)
    shown = escape(str(folder))
    console.print(f"There are {len(jobs)} {config.extension} files in [bold]{shown}[/bold].")
    if not jobs:
        return {}, IndexStats()

    with Progress(console=console, transient=True) as progress:
        task = progress.add_task("Reading metadata", total=len(jobs))
        indexer = Indexer(config, progress=lambda _job: progress.advance(task))
        return indexer.index_jobs(jobs)


def _metadata_table(index: Dict[str, str]) -> Table:
    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Image")
    table.add_column("Metadata")
    for identity in sorted(index):
        metadata = index[identity].strip().replace("\n", " | ")
        table.add_row(escape(identity), escape(metadata[:180]) or "[dim]-[/dim]")
    return table


@app.command()
def scan(
    folder: Optional[Path] = typer.Argument(None, help="Folder containing PNG images."),
    workers: Optional[int] = typer.Option(None, "--workers", "-w", min=1, help="Worker threads"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
) -> None:
    """Show the text metadata of every PNG in a folder."""
    _setup_logging(verbose)
    config = AppConfig(workers=workers)
    folder = _resolve_folder(folder)

    index, stats = _build_index(folder, config)
    if not index:
        console.print("[yellow]No PNG files found.[/yellow]")
        return

    console.print(_metadata_table(index))
    console.print(
        f"With metadata: {stats.with_metadata}, empty: {stats.empty}, failed: {stats.failed}"
    )


@app.command("filter")
def filter_images(
    folder: Optional[Path] = typer.Argument(None, help="Folder containing PNG images."),
    terms: Optional[str] = typer.Argument(None, help="Comma separated tags to search for."),
    workers: Optional[int] = typer.Option(None, "--workers", "-w", min=1, help="Worker threads"),
    output_subfolder: str = typer.Option(
        AppConfig().output_subfolder, "--output-subfolder", help="Folder receiving the matches"
    ),
    dry_run: bool = typer.Option(False, "--dry-run", help="List matches without moving them"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
) -> None:
    """Move the PNGs whose metadata contains every tag into a subfolder."""
    _setup_logging(verbose)
    config = AppConfig(workers=workers, output_subfolder=output_subfolder)
    folder = _resolve_folder(folder)

    index, _ = _build_index(folder, config)
    if not index:
        console.print("[yellow]No PNG files found.[/yellow]")
        return

    if terms is None:
        terms = typer.prompt("Please enter comma separated tags", default="", show_default=False)
    search_terms = split_search_terms(terms)
    console.print(f"You are searching for: {escape(terms)}")

    matches = filter_index(index, search_terms)
    if matches:
        console.print(_metadata_table(matches))

    if dry_run:
        if matches:
            console.print(f"{len(matches)} matching images (dry run, nothing moved).")
        else:
            console.print("[yellow]No matches found.[/yellow]")
        return

    # The output folder is recreated on every run, even when nothing matched.
    try:
        report = relocate_images(
            sorted(matches),
            folder,
            extension=config.extension,
            subfolder=config.output_subfolder,
        )
    except OSError as exc:
        console.print(f"[red]Failed to create directory: {escape(str(exc))}[/red]")
        raise typer.Exit(1) from exc

    if not matches:
        console.print("[yellow]No matches found.[/yellow]")
        return
    destination = escape(str(report.destination))
    console.print(f"Moved {len(report.moved)} images to [bold]{destination}[/bold].")
    for identity, error in report.failed:
        console.print(f"[red]Failed to move {escape(identity)}{config.extension}: {escape(error)}[/red]")


@app.command()
def count(
    folder: Path = typer.Argument(..., help="Folder containing PNG images."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
) -> None:
    """Count the PNG files in a folder."""
    _setup_logging(verbose)
    folder = _resolve_folder(folder)
    console.print(f"{count_image_files(folder, AppConfig().extension)}")
