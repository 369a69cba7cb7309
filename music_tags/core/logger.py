"""
Logging configuration for music-tags.

This module sets up the logging system with multiple outputs:
    - Console: Real-time progress with tqdm-compatible formatting
    - log_full.log: Complete log of all events (DEBUG and above)
    - log_errors.log: Only ERROR and CRITICAL level messages
    - item_failures.log: Items that could not be processed or persisted

Everything shown on screen is also saved to file, then filtered into
specialized files.

Log File Locations:
    All log files are created in a 'logs' subdirectory of the configured
    log directory. Each run gets its own timestamped files.

Usage:
    from music_tags.core.logger import setup_logging, get_logger

    setup_logging(log_dir)  # Call once at startup
    logger = get_logger(__name__)  # Get logger for each module

    logger.info("Starting extraction run")
"""

import logging
import sys
import threading
from datetime import datetime
from pathlib import Path
from typing import TextIO

from tqdm import tqdm


# Log format for file output (detailed with timestamp)
FILE_LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(threadName)s | %(name)s | %(message)s"
FILE_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Log format for console output (compact, tqdm-friendly)
CONSOLE_LOG_FORMAT = "%(levelname)s: %(message)s"

LOGS_SUBDIRECTORY = "logs"


class Colors:
    """ANSI color codes for terminal output."""
    RESET = "\033[0m"
    RED = "\033[31m"
    GREEN = "\033[32m"
    YELLOW = "\033[33m"
    BLUE = "\033[34m"
    CYAN = "\033[36m"
    WHITE = "\033[37m"
    BOLD = "\033[1m"


class ColoredConsoleFormatter(logging.Formatter):
    """
    Formatter that colors the level name on console output.

    Colors:
        - DEBUG: Blue
        - INFO: Green
        - WARNING: Yellow
        - ERROR: Red
        - CRITICAL: Bold Red
    """

    LEVEL_COLORS = {
        logging.DEBUG: Colors.BLUE,
        logging.INFO: Colors.GREEN,
        logging.WARNING: Colors.YELLOW,
        logging.ERROR: Colors.RED,
        logging.CRITICAL: Colors.BOLD + Colors.RED,
    }

    def format(self, record: logging.LogRecord) -> str:
        color = self.LEVEL_COLORS.get(record.levelno, Colors.WHITE)
        colored_levelname = f"{color}{record.levelname}{Colors.RESET}"
        return f"{colored_levelname}: {record.getMessage()}"


class TqdmLoggingHandler(logging.Handler):
    """
    Logging handler that writes to console without breaking progress bars.

    Uses tqdm.write(), which prints above any active bar instead of
    tearing through it.

    Attributes:
        stream: The output stream (defaults to sys.stderr).
    """

    def __init__(self, stream: TextIO = sys.stderr) -> None:
        super().__init__()
        self.stream = stream

    def emit(self, record: logging.LogRecord) -> None:
        try:
            msg = self.format(record)
            tqdm.write(msg, file=self.stream)
        except Exception:
            self.handleError(record)


class ItemFailureHandler(logging.Handler):
    """
    Handler that captures per-item failures for the item failures report.

    Listens for log records carrying item failure information and writes
    them to item_failures.log in a simple, greppable format:

        [extract] 3f2a...  Song Title
            /music/Artist/Album/01 Song Title.flac
            Unsupported audio format

    The handler looks for specific extra fields in log records:
        - 'failed_item_id': Library id of the item
        - 'failed_item_name': Display name of the item
        - 'failed_item_path': Audio file path (tracks only, optional)
        - 'failed_item_stage': Pass label where it failed (e.g., "extract")
        - 'failed_item_reason': Short reason

    Only records containing 'failed_item_id' are written.

    Attributes:
        report_path: Path to the item_failures.log file.
        report_file: Open file handle (opened by open()).

    Usage:
        log_item_failure(logger, item, "persist", "database is locked")
    """

    def __init__(self, report_path: Path) -> None:
        super().__init__()
        self.report_path = report_path
        self.report_file: TextIO | None = None
        self._write_lock = threading.Lock()

    def open(self) -> None:
        """
        Open the report file for writing.

        Called by setup_logging() after handler is created.
        File is opened in write mode (overwrites existing content).
        """
        self.report_file = open(self.report_path, "w", encoding="utf-8")

    def emit(self, record: logging.LogRecord) -> None:
        """
        Write failed item info to the report if present in the log record.

        Worker threads log failures concurrently, so writes are serialized
        with a lock to keep each entry contiguous.
        """
        if not hasattr(record, "failed_item_id"):
            return

        if self.report_file is None:
            return

        try:
            item_id = getattr(record, "failed_item_id", "?")
            name = getattr(record, "failed_item_name", "Unknown")
            path = getattr(record, "failed_item_path", None)
            stage = getattr(record, "failed_item_stage", "?")
            reason = getattr(record, "failed_item_reason", "")

            lines = [f"[{stage}] {item_id}  {name}\n"]
            if path:
                lines.append(f"    {path}\n")
            lines.append(f"    {reason}\n\n")

            with self._write_lock:
                self.report_file.writelines(lines)
                self.report_file.flush()
        except Exception:
            self.handleError(record)

    def close(self) -> None:
        """
        Close the report file handle.

        Safe to call multiple times.
        """
        if self.report_file is not None:
            try:
                self.report_file.close()
            except OSError:
                pass
            self.report_file = None
        super().close()


class ErrorOnlyFilter(logging.Filter):
    """
    Filter that only allows ERROR and CRITICAL level records.

    Used by the error log file handler to exclude DEBUG, INFO, and WARNING.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        return record.levelno >= logging.ERROR


def setup_logging(log_dir: Path, verbose: bool = False) -> Path:
    """
    Configure the logging system for the application.

    This function should be called ONCE at application startup, after
    the configuration is loaded but before any other operations.

    Args:
        log_dir: Directory where log files will be created.
                 Logs are stored in a 'logs' subdirectory.
        verbose: Show DEBUG messages on the console as well.

    Returns:
        Path of the logs subdirectory that was written to.

    Behavior:
        1. Create log_dir/logs if it doesn't exist
        2. Generate timestamp for this run's log files
        3. Configure root logger level to DEBUG
        4. Console handler (TqdmLoggingHandler), INFO or DEBUG
        5. log_full_{timestamp}.log, DEBUG
        6. log_errors_{timestamp}.log, ERROR+ via ErrorOnlyFilter
        7. item_failures_{timestamp}.log via ItemFailureHandler

    Thread Safety:
        This function is NOT thread-safe. Call it once from the main
        thread before starting any worker threads.
    """
    logs_dir = log_dir / LOGS_SUBDIRECTORY
    logs_dir.mkdir(parents=True, exist_ok=True)

    timestamp = datetime.now().strftime("%Y-%m-%d_%H-%M-%S")

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)

    # Remove any existing handlers
    for handler in root_logger.handlers[:]:
        handler.close()
        root_logger.removeHandler(handler)

    console_handler = TqdmLoggingHandler()
    console_handler.setLevel(logging.DEBUG if verbose else logging.INFO)
    console_handler.setFormatter(ColoredConsoleFormatter())
    root_logger.addHandler(console_handler)

    full_log_path = logs_dir / f"log_full_{timestamp}.log"
    full_handler = logging.FileHandler(full_log_path, mode="w", encoding="utf-8")
    full_handler.setLevel(logging.DEBUG)
    full_handler.setFormatter(logging.Formatter(FILE_LOG_FORMAT, FILE_DATE_FORMAT))
    root_logger.addHandler(full_handler)

    error_log_path = logs_dir / f"log_errors_{timestamp}.log"
    error_handler = logging.FileHandler(error_log_path, mode="w", encoding="utf-8")
    error_handler.setLevel(logging.DEBUG)  # Filter handles the level restriction
    error_handler.setFormatter(logging.Formatter(FILE_LOG_FORMAT, FILE_DATE_FORMAT))
    error_handler.addFilter(ErrorOnlyFilter())
    root_logger.addHandler(error_handler)

    failures_path = logs_dir / f"item_failures_{timestamp}.log"
    failures_handler = ItemFailureHandler(failures_path)
    failures_handler.open()
    root_logger.addHandler(failures_handler)

    # mutagen is chatty at DEBUG about malformed frames
    logging.getLogger("mutagen").setLevel(logging.WARNING)

    return logs_dir


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance for a module.

    Args:
        name: The logger name, typically __name__ of the calling module.

    Returns:
        logging.Logger: A logger instance configured by setup_logging().

    Note:
        Loggers obtained before setup_logging() is called have no
        handlers of their own and propagate to whatever the root has.
    """
    return logging.getLogger(name)


def log_item_failure(
    logger: logging.Logger,
    item_id: str,
    item_name: str,
    stage: str,
    reason: str,
    path: str | None = None
) -> None:
    """
    Log an item that failed during a pass.

    Logs an ERROR with the extra fields ItemFailureHandler picks up, so
    the failure shows on console, in log_errors and in item_failures.

    Args:
        logger: The logger to use for the message.
        item_id: Library id of the item.
        item_name: Display name of the item.
        stage: Pass label where the failure happened.
        reason: Description of why it failed.
        path: Audio file path, when the item has one.

    Example:
        log_item_failure(
            logger,
            item_id=item.id,
            item_name=item.name,
            stage="extract",
            reason="Unsupported audio format",
            path="/music/a.xyz"
        )
    """
    logger.error(
        f"{stage} failed for '{item_name}' ({item_id}): {reason}",
        extra={
            "failed_item_id": item_id,
            "failed_item_name": item_name,
            "failed_item_path": path,
            "failed_item_stage": stage,
            "failed_item_reason": reason,
        }
    )


def format_pass_summary(label: str, processed: int, updated: int, failed: int) -> str:
    """
    Format an end-of-pass summary line with colors.

    Returns:
        Colored message string.
    """
    return (
        f"{label}: processed {processed}, "
        f"updated {Colors.GREEN}{updated}{Colors.RESET}, "
        f"failed {Colors.RED}{failed}{Colors.RESET}"
    )


def shutdown_logging() -> None:
    """
    Flush, close and detach all root handlers.

    Typically called in a finally block at application exit.
    """
    root_logger = logging.getLogger()

    for handler in root_logger.handlers[:]:
        try:
            handler.flush()
            handler.close()
        except (OSError, ValueError):
            pass
        root_logger.removeHandler(handler)
