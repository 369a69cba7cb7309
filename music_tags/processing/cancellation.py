"""
Cooperative cancellation signal shared by a run's workers.
"""

import threading


class CancellationToken:
    """
    One-way cancellation flag.

    Workers check it before waiting for a slot and again right after
    getting one; work already in progress is never interrupted.

    Example:
        token = CancellationToken()
        signal.signal(signal.SIGINT, lambda *_: token.cancel())
        processor.process_all_items(token)
    """

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def is_cancelled(self) -> bool:
        return self._event.is_set()

    def wait(self, timeout: float | None = None) -> bool:
        """Block until cancelled or the timeout passes. Returns is_cancelled."""
        return self._event.wait(timeout)

    def __repr__(self) -> str:
        return f"CancellationToken(cancelled={self.is_cancelled})"
