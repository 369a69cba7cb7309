"""
Core module for music-tags.

This module provides the foundational components used throughout the application:
    - exceptions: Custom exception classes for error handling
    - logger: Logging system with multiple outputs
    - config: Configuration loading and validation
    - progress: Rich progress bars for parallel passes

Usage:
    from music_tags.core import (
        Config, load_config,
        setup_logging, get_logger,
        MusicTagsError, ConfigError, LibraryError
    )
"""

from music_tags.core.exceptions import (
    ConfigError,
    ExtractionError,
    LibraryError,
    MusicTagsError,
    PersistenceError,
    RunInProgressError,
)
from music_tags.core.logger import (
    get_logger,
    log_item_failure,
    setup_logging,
    shutdown_logging,
)
from music_tags.core.config import (
    Config,
    ExtractionConfig,
    LibraryConfig,
    ProcessingConfig,
    load_config,
)
from music_tags.core.progress import PassProgressBar

__all__ = [
    # Config
    "Config",
    "LibraryConfig",
    "ExtractionConfig",
    "ProcessingConfig",
    "load_config",
    # Exceptions
    "MusicTagsError",
    "ConfigError",
    "LibraryError",
    "PersistenceError",
    "ExtractionError",
    "RunInProgressError",
    # Logger
    "setup_logging",
    "get_logger",
    "log_item_failure",
    "shutdown_logging",
    # Progress
    "PassProgressBar",
]
