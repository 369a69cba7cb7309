"""
Field extractor.

Turns an audio file plus the extraction configuration into the list of
`Name:Value` tags to merge into the track. The Name is the field name as
configured (trimmed); each value produced by the delimiter split becomes
its own tag.
"""

from collections.abc import Callable
from contextlib import AbstractContextManager
from pathlib import Path

from music_tags.core.config import ExtractionConfig
from music_tags.core.logger import get_logger
from music_tags.extraction.handle import MetadataHandle, open_metadata
from music_tags.extraction.resolver import resolve
from music_tags.tagging.splitter import split_tag_value
from music_tags.tagging.tags import make_tag


logger = get_logger(__name__)


MetadataReader = Callable[[Path], AbstractContextManager[MetadataHandle]]


def extract_field(handle: MetadataHandle, field_name: str) -> str | None:
    """Resolve `field_name` and run its strategy against the handle."""
    strategy = resolve(field_name)
    value = strategy.extract(handle)
    logger.debug(f"{field_name} ({strategy.kind.value}) -> {value!r}")
    return value


def extract_configured_tags(handle: MetadataHandle, config: ExtractionConfig) -> list[str]:
    """
    Extract every configured field and build the tags.

    Args:
        handle: Open metadata of one file.
        config: Extraction configuration snapshot.

    Returns:
        Tags in configured field order, split values in value order.
        Fields with no value contribute nothing.
    """
    delimiters = config.delimiters
    tags: list[str] = []
    for field_name in config.field_names:
        value = extract_field(handle, field_name)
        if not value:
            continue
        for piece in split_tag_value(value, delimiters):
            tags.append(make_tag(field_name, piece))
    return tags


class FieldExtractor:
    """
    Extracts configured tags from audio files.

    The container reader is injectable so tests can hand in metadata
    built in memory instead of real files.

    Attributes:
        config: Extraction configuration snapshot for the run.
        reader: Callable returning a context manager that yields a
                MetadataHandle for a path. Defaults to open_metadata.
    """

    def __init__(self, config: ExtractionConfig, reader: MetadataReader | None = None) -> None:
        self.config = config
        self.reader = reader or open_metadata

    def extract_from_file(self, path: Path) -> list[str]:
        """
        Open the file and extract the configured tags.

        Raises:
            ExtractionError: If the file cannot be opened or parsed.
        """
        with self.reader(path) as handle:
            return extract_configured_tags(handle, self.config)

    def resolve_all(self, path: Path) -> dict[str, str | None]:
        """Raw (unsplit) value of each configured field, for inspection."""
        with self.reader(path) as handle:
            return {name: extract_field(handle, name) for name in self.config.field_names}
