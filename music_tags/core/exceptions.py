"""
Exception classes for music-tags.

This module defines all custom exceptions used throughout the application.
Each exception is designed to provide clear, actionable error messages
and to distinguish between failures that abort a run and failures that
only cost a single item.

Exception Hierarchy:
    MusicTagsError (base)
        ConfigError - Configuration file issues
        LibraryError - Library store / query issues (aborts a run)
        PersistenceError - Writing one item back to the library failed
        ExtractionError - Reading one audio file failed
        RunInProgressError - Another processing or removal run holds the gate
"""


class MusicTagsError(Exception):
    """
    Base exception for all music-tags errors.

    All custom exceptions in this project inherit from this class,
    allowing callers to catch all music-tags errors with a single
    except clause if desired.

    Attributes:
        message: Human-readable error description.
        details: Optional dictionary with additional context (e.g., item id, path).

    Example:
        try:
            processor.process_all_items()
        except MusicTagsError as e:
            logger.error(f"Run failed: {e.message}")
            if e.details:
                logger.debug(f"Details: {e.details}")
    """

    def __init__(self, message: str, details: dict | None = None) -> None:
        """
        Initialize the base exception.

        Args:
            message: Human-readable error description that will be shown to the user.
            details: Optional dictionary containing additional context about the error.
                     Common keys include:
                     - 'item_id': Library id of the item involved
                     - 'path': Audio file path
                     - 'original_error': The underlying exception if wrapping another error
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        """Return the error message for display."""
        return self.message


class ConfigError(MusicTagsError):
    """
    Raised when there's an issue with the configuration file.

    This is a CRITICAL error that should stop program execution.

    Common causes:
        - config.yaml not found
        - config.yaml has invalid YAML syntax
        - Required fields missing (library.database)
        - Invalid field values (e.g., non-boolean overwrite flag)

    Note:
        Malformed *contents* of tag_names or tag_delimiters never raise;
        unparseable segments are simply dropped.
    """
    pass


class LibraryError(MusicTagsError):
    """
    Raised when the library store cannot be opened or queried.

    This is a CRITICAL error for the current run: without the item list
    there is no partial progress to make. The next run retries.

    Common causes:
        - database file corrupted or locked
        - schema version mismatch
        - parent directory missing
    """
    pass


class PersistenceError(MusicTagsError):
    """
    Raised when writing a single item back to the library fails.

    This is a NON-CRITICAL error - the bulk processor logs it and carries
    on with the other items. The item's changes are lost for this run.
    """
    pass


class ExtractionError(MusicTagsError):
    """
    Raised when an audio file cannot be opened or parsed.

    This is a NON-CRITICAL error - the item is skipped for this run.

    Common causes:
        - file missing or moved since the last scan
        - permission denied
        - unsupported or corrupted container

    Example:
        raise ExtractionError(
            "Unsupported audio format",
            details={'path': '/music/track.xyz'}
        )
    """
    pass


class RunInProgressError(MusicTagsError):
    """
    Raised when a processing or removal run is requested while another
    run already holds the run gate.

    Attributes:
        active_run: Name of the run currently holding the gate.
    """

    def __init__(self, message: str, active_run: str | None = None) -> None:
        super().__init__(message, details={"active_run": active_run})
        self.active_run = active_run
