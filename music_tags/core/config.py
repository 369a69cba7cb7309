"""
Configuration management for music-tags.

This module handles loading, validating, and providing access to the
application configuration stored in config.yaml.

The configuration file contains:
    - Location of the library database and of the log files
    - The field names to extract from audio files
    - Delimiter characters used to split multi-valued fields
    - The overwrite and propagate-to-parents policies
    - An optional override of the worker thread count

Configuration File Location:
    By default config.yaml is read from the current working directory.
    The CLI accepts --config to point somewhere else.

Example config.yaml:
    library:
      database: "~/Music/.music-tags/library.db"
      log_directory: "~/Music/.music-tags"     # Optional

    extraction:
      tag_names: "BPM, KEY, MOOD, ENERGY"
      tag_delimiters: "/;|"
      overwrite_existing_tags: false
      propagate_tags_to_parents: true

    processing:
      threads: null   # Optional: fixed worker count for extraction
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from music_tags.core.exceptions import ConfigError
from music_tags.tagging.tags import parse_delimiters, parse_field_names


# Default configuration file name (in current working directory)
CONFIG_FILENAME = "config.yaml"


@dataclass(frozen=True)
class LibraryConfig:
    """
    Library store configuration.

    Attributes:
        database: Absolute path of the SQLite library database.
                  Path expansion is performed (~ is expanded to home directory).
        log_directory: Directory where the run logs are written.
                       Defaults to the database's parent directory.
    """
    database: Path
    log_directory: Path


@dataclass(frozen=True)
class ExtractionConfig:
    """
    Extraction behavior configuration.

    The raw strings are kept as configured; field_names and delimiters
    are derived on access so a malformed value degrades to "fewer names"
    instead of failing the run.

    Attributes:
        tag_names: Comma-separated field names, e.g. "BPM, KEY, MOOD".
                   Each name becomes the Name part of the produced tags.
        tag_delimiters: Characters that split one extracted value into
                        several tags. Empty means values are never split.
        overwrite_existing_tags: Replace an item's existing tag of the same
                                 Name instead of keeping it.
        propagate_tags_to_parents: After processing tracks, union their
                                   tags into albums and artists.
    """
    tag_names: str = ""
    tag_delimiters: str = ""
    overwrite_existing_tags: bool = False
    propagate_tags_to_parents: bool = False

    @property
    def field_names(self) -> list[str]:
        """Configured field names, cleaned and in configured order."""
        return parse_field_names(self.tag_names)

    @property
    def delimiters(self) -> str:
        """Distinct delimiter characters, empty when splitting is disabled."""
        return parse_delimiters(self.tag_delimiters)


@dataclass(frozen=True)
class ProcessingConfig:
    """
    Worker pool configuration.

    Attributes:
        threads: Fixed number of concurrent extraction workers.
                 None means derive it from the CPU count.
    """
    threads: int | None = None


@dataclass(frozen=True)
class Config:
    """
    Complete application configuration.

    This is the main configuration object that aggregates all configuration
    sections. It is created by load_config() and should be treated as
    immutable (frozen dataclass); every run reads one snapshot.

    Attributes:
        library: Library store and log locations.
        extraction: Field names, delimiters and merge policies.
        processing: Worker pool settings.
    """
    library: LibraryConfig
    extraction: ExtractionConfig
    processing: ProcessingConfig


def load_config(config_path: Path | None = None) -> Config:
    """
    Load and validate configuration from config.yaml.

    Args:
        config_path: Optional explicit path to config file.
                     If None, looks for config.yaml in current working directory.

    Returns:
        Config: A frozen dataclass containing all configuration values.

    Raises:
        ConfigError: If the config file is not found, has invalid YAML syntax,
                     is missing required fields, or contains values of the
                     wrong type.

    Behavior:
        1. Locate config file (explicit path or CWD/config.yaml)
        2. Read and parse YAML content
        3. Validate structure (required sections exist)
        4. Parse library, extraction and processing sections
        5. Create and return frozen Config object

    Thread Safety:
        This function is NOT thread-safe. It should be called once at
        application startup, before any threads are created.
    """
    if config_path is None:
        config_path = Path.cwd() / CONFIG_FILENAME

    if not config_path.exists():
        raise ConfigError(
            f"Configuration file not found: {config_path}",
            details={"file_path": str(config_path)}
        )

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            content = f.read()
    except IOError as e:
        raise ConfigError(
            f"Failed to read configuration file: {e}",
            details={"file_path": str(config_path), "original_error": str(e)}
        ) from e

    try:
        raw_config = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise ConfigError(
            f"Invalid YAML syntax in configuration file: {e}",
            details={"file_path": str(config_path), "original_error": str(e)}
        ) from e

    if not isinstance(raw_config, dict):
        raise ConfigError(
            "Configuration file must contain a YAML dictionary",
            details={"file_path": str(config_path)}
        )

    _validate_config(raw_config)

    return Config(
        library=_parse_library_config(raw_config["library"]),
        extraction=_parse_extraction_config(raw_config.get("extraction")),
        processing=_parse_processing_config(raw_config.get("processing")),
    )


def _validate_config(raw_config: dict[str, Any]) -> None:
    """
    Validate the raw configuration dictionary structure.

    Args:
        raw_config: Dictionary parsed from config.yaml.

    Raises:
        ConfigError: If a required section is missing or a section is
                     not a dictionary.
    """
    if not raw_config.get("library"):
        raise ConfigError(
            "Missing required section: 'library'",
            details={"missing_section": "library"}
        )

    for section in ("library", "extraction", "processing"):
        value = raw_config.get(section)
        if value is not None and not isinstance(value, dict):
            raise ConfigError(
                f"Section '{section}' must be a dictionary",
                details={"section": section}
            )


def _parse_library_config(library_section: dict[str, Any]) -> LibraryConfig:
    """
    Parse and validate the library configuration section.

    Expands ~ to home directory and converts to absolute Paths.
    Does NOT create any directory.

    Raises:
        ConfigError: If database is missing or empty.
    """
    database = library_section.get("database", "")

    if not isinstance(database, str) or not database.strip():
        raise ConfigError(
            "'library.database' must be a non-empty string",
            details={"field": "library.database"}
        )

    db_path = Path(database.strip()).expanduser().resolve()

    log_dir_raw = library_section.get("log_directory")
    if log_dir_raw is not None:
        if not isinstance(log_dir_raw, str) or not log_dir_raw.strip():
            raise ConfigError(
                "'library.log_directory' must be a non-empty string",
                details={"field": "library.log_directory"}
            )
        log_dir = Path(log_dir_raw.strip()).expanduser().resolve()
    else:
        log_dir = db_path.parent

    return LibraryConfig(database=db_path, log_directory=log_dir)


def _parse_extraction_config(extraction_section: dict[str, Any] | None) -> ExtractionConfig:
    """
    Parse the extraction configuration section.

    Applies defaults if the section is missing or fields are not specified.
    tag_names and tag_delimiters only need to be strings; their contents
    are interpreted leniently later.

    Raises:
        ConfigError: If a field has the wrong type.
    """
    if extraction_section is None:
        return ExtractionConfig()

    tag_names = _get_string(extraction_section, "tag_names")
    tag_delimiters = _get_string(extraction_section, "tag_delimiters")
    overwrite = _get_bool(extraction_section, "overwrite_existing_tags")
    propagate = _get_bool(extraction_section, "propagate_tags_to_parents")

    return ExtractionConfig(
        tag_names=tag_names,
        tag_delimiters=tag_delimiters,
        overwrite_existing_tags=overwrite,
        propagate_tags_to_parents=propagate,
    )


def _parse_processing_config(processing_section: dict[str, Any] | None) -> ProcessingConfig:
    """
    Parse the processing configuration section.

    Raises:
        ConfigError: If threads is set but is not a positive integer.
    """
    if processing_section is None:
        return ProcessingConfig()

    raw_threads = processing_section.get("threads")
    if raw_threads is None:
        return ProcessingConfig()

    if isinstance(raw_threads, bool) or not isinstance(raw_threads, int) or raw_threads < 1:
        raise ConfigError(
            "'processing.threads' must be a positive integer or null",
            details={"field": "processing.threads", "value": raw_threads}
        )

    return ProcessingConfig(threads=raw_threads)


def _get_string(section: dict[str, Any], key: str) -> str:
    value = section.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ConfigError(
            f"'extraction.{key}' must be a string",
            details={"field": f"extraction.{key}", "value": value}
        )
    return value


def _get_bool(section: dict[str, Any], key: str) -> bool:
    value = section.get(key)
    if value is None:
        return False
    if not isinstance(value, bool):
        raise ConfigError(
            f"'extraction.{key}' must be true or false",
            details={"field": f"extraction.{key}", "value": value}
        )
    return value
