"""
Command-line interface for music-tags.

This module implements the CLI using Click. It is the host that owns the
library store, the run gate and the cancellation token, and hands them to
TagProcessor.

Commands:
    music-tags scan <directory>             Import audio files into the library
    music-tags process                      Extract configured fields into tags
    music-tags remove <names>               Remove tags by Name from tracks
    music-tags remove <names> --from-parents
                                            ... and from albums and artists
    music-tags inspect <file>               Show a file's tag block and the
                                            configured fields resolved from it
    music-tags status                       Show configuration and library counts

Options:
    --config <path>                         Use this config.yaml instead of ./config.yaml
    --verbose                               Debug output on the console

Usage:
    # Import a music folder, then tag every track with its BPM and KEY
    music-tags scan ~/Music
    music-tags process

    # Undo it
    music-tags remove "BPM, KEY" --from-parents

Configuration:
    The CLI requires a config.yaml file (see config.example.yaml) with:
    - library.database: path of the SQLite library store
    - extraction.tag_names: comma-separated fields to extract
    - extraction.tag_delimiters: characters that split one value into several tags
    - extraction.overwrite_existing_tags / propagate_tags_to_parents

Interrupting:
    Ctrl+C during process or remove cancels the run: items not yet
    started are skipped, items already modified are still saved.
"""

import signal
import sys
from contextlib import contextmanager
from pathlib import Path
from typing import Callable, Generator

import click

from music_tags import __version__
from music_tags.core.config import Config, load_config
from music_tags.core.exceptions import (
    ConfigError,
    LibraryError,
    MusicTagsError,
    RunInProgressError,
)
from music_tags.core.logger import (
    format_pass_summary,
    get_logger,
    setup_logging,
    shutdown_logging,
)
from music_tags.core.progress import PassProgressBar
from music_tags.extraction.extractor import FieldExtractor
from music_tags.extraction.handle import open_metadata
from music_tags.library.database import LibraryDatabase
from music_tags.library.scanner import scan_directory
from music_tags.processing.cancellation import CancellationToken
from music_tags.processing.gate import RunGate
from music_tags.processing.processor import RunSummary, TagProcessor

logger = get_logger(__name__)


# One gate per process: process and remove never overlap
_RUN_GATE = RunGate()


@click.group()
@click.option(
    "--config", "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    metavar="<config.yaml>",
    help="Path to config file (default: ./config.yaml)"
)
@click.option(
    "--verbose", "-v",
    is_flag=True,
    help="Show debug messages on the console"
)
@click.version_option(version=__version__, prog_name="music-tags")
@click.pass_context
def cli(ctx: click.Context, config_path: Path | None, verbose: bool) -> None:
    """
    music-tags: turn embedded audio metadata into library tags.
    """
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path
    ctx.obj["verbose"] = verbose


@cli.command()
@click.argument(
    "directory",
    type=click.Path(exists=True, file_okay=False, path_type=Path)
)
@click.pass_context
def scan(ctx: click.Context, directory: Path) -> None:
    """Import the audio files below DIRECTORY into the library."""

    def action(config: Config, database: LibraryDatabase) -> None:
        stats = scan_directory(database, directory)
        click.echo(
            f"Imported {stats.tracks_imported}/{stats.files_found} files "
            f"({stats.albums} albums, {stats.artists} artists, {stats.failed} unreadable)"
        )

    _run_command(ctx.obj, action)


@cli.command()
@click.pass_context
def process(ctx: click.Context) -> None:
    """Extract the configured fields from every track into its tags."""

    def action(config: Config, database: LibraryDatabase) -> None:
        processor = _make_processor(database, config)
        with _cancel_on_interrupt() as token:
            summary = processor.process_all_items(token)
        _print_summary(summary)

    _run_command(ctx.obj, action)


@cli.command()
@click.argument("names", type=str)
@click.option(
    "--from-parents",
    is_flag=True,
    help="Also remove the tags from albums and artists"
)
@click.pass_context
def remove(ctx: click.Context, names: str, from_parents: bool) -> None:
    """
    Remove every tag whose Name is in NAMES (comma-separated).
    """

    def action(config: Config, database: LibraryDatabase) -> None:
        processor = _make_processor(database, config)
        with _cancel_on_interrupt() as token:
            summary = processor.remove_tags(names, also_from_parents=from_parents, token=token)
        _print_summary(summary)

    _run_command(ctx.obj, action)


@cli.command()
@click.argument(
    "file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path)
)
@click.pass_context
def inspect(ctx: click.Context, file: Path) -> None:
    """Show FILE's tag block and what each configured field resolves to."""

    def action(config: Config, database: LibraryDatabase) -> None:
        with open_metadata(file) as handle:
            click.echo(f"{file} [{handle.format.value}]")
            for key, text in handle.describe_fields():
                click.echo(f"  {key:<28} {text}")

        extractor = FieldExtractor(config.extraction)
        resolved = extractor.resolve_all(file)
        if not resolved:
            click.echo("\nNo tag names configured")
            return

        click.echo("\nConfigured fields:")
        for name, value in resolved.items():
            click.echo(f"  {name:<28} {value if value is not None else '-'}")
        click.echo("\nTags:")
        for tag in extractor.extract_from_file(file):
            click.echo(f"  {tag}")

    _run_command(ctx.obj, action, needs_database=False)


@cli.command()
@click.pass_context
def status(ctx: click.Context) -> None:
    """Show the active configuration and library counts."""

    def action(config: Config, database: LibraryDatabase) -> None:
        extraction = config.extraction
        click.echo(f"Database:          {config.library.database}")
        click.echo(f"Fields:            {', '.join(extraction.field_names) or '-'}")
        click.echo(f"Delimiters:        {extraction.delimiters or '-'}")
        click.echo(f"Overwrite:         {extraction.overwrite_existing_tags}")
        click.echo(f"Propagate:         {extraction.propagate_tags_to_parents}")

        stats = database.get_stats()
        click.echo(f"Tracks:            {stats['tracks']}")
        click.echo(f"Albums:            {stats['albums']}")
        click.echo(f"Artists:           {stats['artists']}")
        click.echo(f"Tagged items:      {stats['tagged_items']}")

    _run_command(ctx.obj, action)


CommandAction = Callable[[Config, LibraryDatabase | None], None]


def _run_command(options: dict, action: CommandAction, needs_database: bool = True) -> None:
    """
    Load configuration, set up logging, open the library and run `action`.

    Args:
        options: Dictionary with CLI options from click context.
        action: Command body.
        needs_database: Open the library store before running.

    Raises:
        SystemExit: On fatal errors (with appropriate exit code).
    """
    database: LibraryDatabase | None = None

    try:
        config = _load_configuration(options["config_path"])

        setup_logging(config.library.log_directory, verbose=options["verbose"])
        logger.debug("music-tags starting")

        if needs_database:
            database = _initialize_database(config.library.database)

        action(config, database)

    except ConfigError as e:
        click.echo(f"Configuration error: {e.message}", err=True)
        sys.exit(1)

    except LibraryError as e:
        click.echo(f"Library error: {e.message}", err=True)
        logger.error(f"Library error: {e.message}", exc_info=True)
        sys.exit(2)

    except RunInProgressError as e:
        click.echo(f"Error: {e.message}", err=True)
        sys.exit(3)

    except MusicTagsError as e:
        click.echo(f"Error: {e.message}", err=True)
        logger.error(f"Error: {e.message}", exc_info=True)
        sys.exit(4)

    except KeyboardInterrupt:
        click.echo("\nInterrupted by user", err=True)
        logger.info("Interrupted by user")
        sys.exit(130)

    except Exception as e:
        click.echo(f"Unexpected error: {e}", err=True)
        logger.exception("Unexpected error")
        sys.exit(1)

    finally:
        if database is not None:
            database.close()
        shutdown_logging()


def _load_configuration(config_path: Path | None) -> Config:
    """
    Load and validate configuration.

    Raises:
        ConfigError: If configuration is invalid or missing.
    """
    return load_config(config_path)


def _initialize_database(db_path: Path) -> LibraryDatabase:
    """
    Open the library store.

    Raises:
        LibraryError: If the database cannot be initialized.
    """
    return LibraryDatabase(db_path)


def _make_processor(database: LibraryDatabase, config: Config) -> TagProcessor:
    return TagProcessor(
        database,
        config,
        gate=_RUN_GATE,
        progress_factory=lambda total, label: PassProgressBar(total, label),
    )


@contextmanager
def _cancel_on_interrupt() -> Generator[CancellationToken, None, None]:
    """
    Yield a token that the first Ctrl+C cancels instead of raising.

    A second Ctrl+C falls back to the previous handler.
    """
    token = CancellationToken()
    previous = signal.getsignal(signal.SIGINT)

    def handler(signum, frame):
        if token.is_cancelled:
            signal.signal(signal.SIGINT, previous)
            raise KeyboardInterrupt
        click.echo("\nCancelling, waiting for running items...", err=True)
        token.cancel()

    signal.signal(signal.SIGINT, handler)
    try:
        yield token
    finally:
        signal.signal(signal.SIGINT, previous)


def _print_summary(summary: RunSummary) -> None:
    for stats in summary.passes:
        click.echo(format_pass_summary(
            stats.label,
            stats.processed,
            stats.updated,
            stats.failed + stats.persist_failed,
        ))
    if summary.cancelled:
        click.echo("Run cancelled", err=True)
    if not summary.passes:
        click.echo("Nothing to do")


def main() -> None:
    """
    Entry point for the CLI.

    This function is called when running `music-tags` from the command line.
    """
    cli()


if __name__ == "__main__":
    main()
