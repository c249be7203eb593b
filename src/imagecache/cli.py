"""Click CLI for imagecache — batch maintenance of the disk cache."""

from __future__ import annotations

import asyncio
import logging
import sys

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from imagecache.config.hierarchy import load_config_hierarchy
from imagecache.errors.exceptions import ImageCacheError
from imagecache.jobs.reports import CacheStatistics, CategoryStats, CleanupReport, MigrationReport

console = Console()
error_console = Console(stderr=True)

_BYTES_PER_MB = 1024 * 1024


def _setup_logging(verbosity: int) -> None:
    """Configure logging based on verbosity level."""
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG

    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=error_console, show_time=False, show_path=False)],
    )


def _resolve_cache_dir(cache_dir: str | None) -> str:
    config = load_config_hierarchy(cache_dir=cache_dir)
    return str(config.cache_dir)


def _mb(size: int) -> str:
    return f"{size / _BYTES_PER_MB:.2f} MB"


cache_dir_option = click.option(
    "--cache-dir",
    type=click.Path(file_okay=False),
    default=None,
    help="Cache root directory (defaults to $CACHE_DIR or ./cache).",
)
verbose_option = click.option(
    "-v", "--verbose", count=True, help="Increase verbosity (-v info, -vv debug)."
)


@click.group()
@click.version_option(package_name="imagecache")
def cli() -> None:
    """imagecache — sharded disk cache maintenance for transformed images."""


@cli.command()
@cache_dir_option
@verbose_option
def migrate(cache_dir: str | None, verbose: int) -> None:
    """Move flat cache files into sharded subdirectories."""
    _setup_logging(verbose)
    from imagecache.jobs.migrate import migrate_cache

    root = _resolve_cache_dir(cache_dir)
    console.print(f"Starting cache transfer from {root}...")

    def progress(done: int, total: int, report: MigrationReport) -> None:
        console.print(
            f"Processed {done}/{total} files... ({report.moved} moved, "
            f"{report.skipped} skipped, {report.errors} errors)"
        )

    try:
        report = asyncio.run(migrate_cache(root, progress=progress))
    except ImageCacheError as e:
        error_console.print(f"[red]Error:[/red] {e}")
        sys.exit(1)

    if report.total_files == 0:
        console.print("No files found in cache directory. Nothing to transfer.")
        return

    table = Table(title="Transfer Summary", show_header=True)
    table.add_column("Result", style="cyan")
    table.add_column("Files", justify="right")
    table.add_row("Moved", str(report.moved))
    table.add_row("Skipped", str(report.skipped))
    table.add_row("  Too short (< 2 chars)", str(report.skipped_too_short))
    table.add_row("  Shard directory names", str(report.skipped_shard_name))
    table.add_row("  Already exists at target", str(report.skipped_already_exists))
    table.add_row("Errors", str(report.errors))
    console.print(table)


@cli.command()
@cache_dir_option
@verbose_option
def cleanup(cache_dir: str | None, verbose: int) -> None:
    """Delete flat cache files that already exist in a shard."""
    _setup_logging(verbose)
    from imagecache.jobs.cleanup import cleanup_duplicates

    root = _resolve_cache_dir(cache_dir)
    console.print(f"Starting cleanup of duplicate files in {root}...")

    def progress(done: int, total: int, report: CleanupReport) -> None:
        console.print(
            f"Processed {done}/{total} files... ({report.deleted} deleted, "
            f"{report.kept} kept, {report.errors} errors)"
        )

    try:
        report = asyncio.run(cleanup_duplicates(root, progress=progress))
    except ImageCacheError as e:
        error_console.print(f"[red]Error:[/red] {e}")
        sys.exit(1)

    if report.total_files == 0:
        console.print("No files found in cache directory. Nothing to cleanup.")
        return

    table = Table(title="Cleanup Summary", show_header=True)
    table.add_column("Result", style="cyan")
    table.add_column("Value", justify="right")
    table.add_row("Deleted duplicates", str(report.deleted))
    table.add_row("Kept (not in shards)", str(report.kept))
    table.add_row("Errors", str(report.errors))
    table.add_row("Space freed", f"{report.mb_freed:.2f} MB")
    console.print(table)


@cli.command()
@cache_dir_option
@click.option("--workers", type=int, default=None, help="Concurrent shard scans.")
@click.option("--json", "as_json", is_flag=True, default=False, help="Print the report as JSON.")
@verbose_option
def stats(cache_dir: str | None, workers: int | None, as_json: bool, verbose: int) -> None:
    """Show entry counts, sizes, and shard distribution."""
    _setup_logging(verbose)
    from imagecache.jobs.stats import collect_statistics

    config = load_config_hierarchy(cache_dir=cache_dir, scan_workers=workers)
    try:
        report = asyncio.run(
            collect_statistics(config.cache_dir, scan_workers=config.scan_workers)
        )
    except ImageCacheError as e:
        error_console.print(f"[red]Error:[/red] {e}")
        sys.exit(1)

    if as_json:
        click.echo(report.model_dump_json(by_alias=True, indent=2))
        return
    _print_statistics(report)


def _category_row(table: Table, label: str, category: CategoryStats) -> None:
    table.add_row(label, f"{category.count:,}", _mb(category.bytes))


def _print_statistics(report: CacheStatistics) -> None:
    console.print(f"Cache directory: {report.cache_dir}")
    table = Table(title="Cache Statistics", show_header=True)
    table.add_column("Category", style="cyan")
    table.add_column("Entries", justify="right")
    table.add_column("Size", justify="right")
    _category_row(table, "Normal images", report.normal_images)
    _category_row(table, "Transparent images", report.transparent_images)
    _category_row(table, "Uncategorized", report.uncategorized)
    table.add_row("Total", f"{report.entries:,}", _mb(report.image_bytes))
    table.add_row("Metadata", "", _mb(report.metadata_bytes))
    console.print(table)

    dist = report.shards
    console.print(
        f"Shards: {dist.non_empty} non-empty, {dist.empty} empty "
        f"(entries per shard min {dist.min_entries}, max {dist.max_entries}, "
        f"mean {dist.mean_entries:.1f}, median {dist.median_entries:.1f})"
    )

    for title, shards in (
        ("Busiest Shards", report.busiest_shards),
        ("Quietest Shards", report.quietest_shards),
    ):
        if not shards:
            continue
        shard_table = Table(title=title, show_header=True)
        shard_table.add_column("Shard", style="cyan")
        shard_table.add_column("Entries", justify="right")
        shard_table.add_column("Size", justify="right")
        shard_table.add_column("Normal", justify="right")
        shard_table.add_column("Transparent", justify="right")
        shard_table.add_column("Uncategorized", justify="right")
        for shard in shards:
            shard_table.add_row(
                shard.name,
                str(shard.entries),
                _mb(shard.image_bytes + shard.metadata_bytes),
                str(shard.normal_images.count),
                str(shard.transparent_images.count),
                str(shard.uncategorized.count),
            )
        console.print(shard_table)


def main() -> None:
    """Entry point for the CLI."""
    cli()
