"""
Run gate: keeps a full processing run and a bulk removal run from
overlapping.

The gate is owned by the host (the CLI, or whatever embeds the
processor) and handed to TagProcessor, so two processors sharing one
gate exclude each other while independent processors do not.
"""

import threading
from contextlib import contextmanager
from typing import Generator

from music_tags.core.exceptions import RunInProgressError
from music_tags.core.logger import get_logger


logger = get_logger(__name__)


class RunGate:
    """
    Non-blocking mutual exclusion between named runs.

    Usage:
        gate = RunGate()
        with gate.hold("process"):
            ...
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._active_run: str | None = None

    @property
    def active_run(self) -> str | None:
        return self._active_run

    @contextmanager
    def hold(self, run_name: str) -> Generator[None, None, None]:
        """
        Hold the gate for the duration of the block.

        Raises:
            RunInProgressError: If another run already holds the gate.
        """
        if not self._lock.acquire(blocking=False):
            raise RunInProgressError(
                f"Cannot start '{run_name}': '{self._active_run}' is already running",
                active_run=self._active_run
            )
        self._active_run = run_name
        logger.debug(f"Run gate acquired by '{run_name}'")
        try:
            yield
        finally:
            self._active_run = None
            self._lock.release()
            logger.debug(f"Run gate released by '{run_name}'")
