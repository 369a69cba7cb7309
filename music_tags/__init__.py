"""
music-tags: turn embedded audio metadata into library tags.

This package reads named fields (BPM, KEY, MOOD, any ID3 frame, Vorbis
comment, MP4 atom or ASF attribute) out of audio files and stores them
as `Name:Value` tags on the tracks of a music library, optionally rolling
them up to albums and artists.

Architecture:
    A full run is a sequence of bounded parallel passes:

    extract (extraction/, tagging/): one pass over every track
        - Open the file with mutagen
        - Resolve each configured field name to a strategy
          (standard field, dedicated frame, custom probe chain)
        - Split values on the configured delimiters
        - Merge into the track's tags under the overwrite policy

    albums / artists (tagging/propagation.py): optional
        - Union every child track's tags into the parent

    remove-* (tagging/removal.py): bulk removal by tag Name

    Modified items are saved once per pass through the library service.

Modules:
    core/        - Configuration, logging, progress bars, exceptions
    extraction/  - Metadata access and field resolution
    tagging/     - Tag parsing, splitting, merging, removal, propagation
    library/     - Item model, SQLite library store, directory scanner
    processing/  - Parallel runner, cancellation, run gate, TagProcessor
    cli.py       - Command-line interface

Usage:
    Command Line:
        music-tags scan ~/Music
        music-tags process
        music-tags remove "BPM,KEY" --from-parents

    Python API:
        from music_tags import LibraryDatabase, TagProcessor, load_config

        config = load_config()
        database = LibraryDatabase(config.library.database)
        summary = TagProcessor(database, config).process_all_items()

Configuration:
    Requires a config.yaml file in the current directory:

        library:
          database: "~/Music/music-tags.db"

        extraction:
          tag_names: "BPM, KEY, MOOD"
          tag_delimiters: ";/"
          overwrite_existing_tags: false
          propagate_tags_to_parents: true

        processing:
          threads: null

Dependencies:
    - mutagen: Audio metadata reading
    - click: CLI framework
    - rich: Progress bars
    - tqdm: Log output that does not break progress bars
    - pyyaml: Configuration file parsing
"""

__version__ = "0.1.0"
__author__ = "music-tags"
__license__ = "MIT"

# Convenience imports for common usage
from music_tags.core import (
    Config,
    ConfigError,
    ExtractionError,
    LibraryError,
    MusicTagsError,
    PersistenceError,
    RunInProgressError,
    get_logger,
    load_config,
    setup_logging,
)
from music_tags.extraction import FieldExtractor, open_metadata
from music_tags.library import Item, ItemKind, ItemQuery, LibraryDatabase
from music_tags.processing import CancellationToken, RunGate, TagProcessor

__all__ = [
    # Version
    "__version__",
    # Core
    "Config",
    "load_config",
    "setup_logging",
    "get_logger",
    # Exceptions
    "MusicTagsError",
    "ConfigError",
    "LibraryError",
    "PersistenceError",
    "ExtractionError",
    "RunInProgressError",
    # Library
    "Item",
    "ItemKind",
    "ItemQuery",
    "LibraryDatabase",
    # Processing
    "FieldExtractor",
    "open_metadata",
    "CancellationToken",
    "RunGate",
    "TagProcessor",
]
