"""
Bounded parallel passes over library items.

A pass applies one action to every item of a list on a thread pool,
with at most `max_concurrency` actions running at once, then persists
the items the action modified. Every pass in the application (track
extraction, album/artist propagation, removal) goes through
run_parallel().

Pass lifecycle:
    1. Submit one worker per item to a ThreadPoolExecutor
    2. Each worker checks the cancellation token, waits for a semaphore
       slot, checks the token again, runs the action, releases the slot
    3. Items whose action returned True are collected under a lock
    4. After every worker has finished, each collected item is persisted
       with one update_item() call, fanned out on a second pool
    5. Return PassStats

Failure isolation:
    An exception from the action or from update_item() costs that one
    item only: it is logged (and written to the item failures report),
    counted, and the pass carries on. Nothing is retried within a run.
"""

import os
import threading
import time
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor, as_completed
from contextlib import nullcontext
from dataclasses import dataclass, field

from music_tags.core.logger import get_logger, log_item_failure
from music_tags.core.progress import PassProgressBar
from music_tags.library.models import Item, LibraryService
from music_tags.processing.cancellation import CancellationToken


logger = get_logger(__name__)


MAX_EXTRACTION_CONCURRENCY = 32
RESERVED_CPUS = 3
MAX_REMOVAL_CONCURRENCY = 10

# Progress is logged once per this many finished items
PROGRESS_LOG_INTERVAL = 100

# How often a worker waiting for a slot re-checks the token (seconds)
SLOT_POLL_INTERVAL = 0.1


ItemAction = Callable[[Item], bool]
ProgressFactory = Callable[[int, str], PassProgressBar]


def calculate_max_concurrency(cpu_count: int | None = None) -> int:
    """
    Concurrency cap for extraction and propagation passes.

    Leaves a few cores for the host: cpu_count - 3, clamped to 1..32.
    """
    if cpu_count is None:
        cpu_count = os.cpu_count() or 1
    return min(MAX_EXTRACTION_CONCURRENCY, max(1, cpu_count - RESERVED_CPUS))


def calculate_removal_concurrency(cpu_count: int | None = None) -> int:
    """
    Concurrency cap for removal passes.

    Removal touches no files, so it runs wider: cpu_count * 2, at most 10.
    """
    if cpu_count is None:
        cpu_count = os.cpu_count() or 1
    return max(1, min(cpu_count * 2, MAX_REMOVAL_CONCURRENCY))


@dataclass
class PassStats:
    """
    Statistics from one parallel pass.

    Attributes:
        label: Pass name, e.g. "extract" or "albums".
        total: Items in the pass.
        processed: Items whose action completed.
        modified: Items whose action changed their tags.
        updated: Modified items persisted successfully.
        failed: Items whose action raised.
        persist_failed: Modified items whose update failed.
        skipped: Items not started because the run was cancelled.
        cancelled: Cancellation was requested during the pass.
        duration: Wall-clock seconds.
    """
    label: str
    total: int = 0
    processed: int = 0
    modified: int = 0
    updated: int = 0
    failed: int = 0
    persist_failed: int = 0
    skipped: int = 0
    cancelled: bool = False
    duration: float = 0.0


@dataclass
class _PassState:
    modified_items: list[Item] = field(default_factory=list)
    finished: int = 0
    lock: threading.Lock = field(default_factory=threading.Lock)


_SKIPPED = None


def _acquire_slot(semaphore: threading.BoundedSemaphore, token: CancellationToken) -> bool:
    """Wait for a slot, giving up as soon as the token is cancelled."""
    while not semaphore.acquire(timeout=SLOT_POLL_INTERVAL):
        if token.is_cancelled:
            return False
    return True


def run_parallel(
    items: list[Item],
    label: str,
    action: ItemAction,
    max_concurrency: int,
    library: LibraryService,
    token: CancellationToken | None = None,
    progress_factory: ProgressFactory | None = None,
) -> PassStats:
    """
    Run `action` over `items` with bounded concurrency, then persist.

    Args:
        items: Items of the pass. Each item is handled by exactly one worker.
        label: Pass name used in logs and stats.
        action: Mutates one item in place; returns True if it changed.
        max_concurrency: Maximum number of actions running at once.
        library: Receives one update_item() per modified item.
        token: Cancellation token; None means not cancelable.
        progress_factory: Builds a progress bar (total, label); None for no bar.

    Returns:
        PassStats for the pass.

    Cancellation:
        Items still waiting for a slot are skipped. Items already
        modified are still persisted.
    """
    token = token or CancellationToken()
    stats = PassStats(label=label, total=len(items))
    if not items:
        logger.info(f"[{label}] Nothing to do")
        return stats

    started = time.monotonic()
    max_concurrency = max(1, max_concurrency)
    semaphore = threading.BoundedSemaphore(max_concurrency)
    state = _PassState()
    total = len(items)

    logger.info(f"[{label}] Processing {total} items (max {max_concurrency} concurrent)")

    def worker(item: Item) -> bool | None:
        if token.is_cancelled:
            return _SKIPPED
        if not _acquire_slot(semaphore, token):
            return _SKIPPED
        try:
            if token.is_cancelled:
                return _SKIPPED
            changed = action(item)
            if changed:
                with state.lock:
                    state.modified_items.append(item)
            return changed
        finally:
            semaphore.release()
            with state.lock:
                state.finished += 1
                finished = state.finished
            if finished % PROGRESS_LOG_INTERVAL == 0:
                logger.info(f"[{label}] Progress: {finished}/{total}")

    progress_cm = progress_factory(total, label) if progress_factory else nullcontext()
    pool_size = min(total, max_concurrency * 2)

    with progress_cm as progress:
        with ThreadPoolExecutor(max_workers=pool_size, thread_name_prefix=label) as executor:
            future_to_item = {executor.submit(worker, item): item for item in items}

            for future in as_completed(future_to_item):
                item = future_to_item[future]
                try:
                    changed = future.result()
                except Exception as e:
                    stats.failed += 1
                    log_item_failure(
                        logger,
                        item_id=item.id,
                        item_name=item.display_name,
                        stage=label,
                        reason=str(e),
                        path=str(item.path) if item.path else None,
                    )
                    if progress is not None:
                        progress.update(failed=True)
                    continue

                if changed is _SKIPPED:
                    stats.skipped += 1
                    continue

                stats.processed += 1
                if changed:
                    stats.modified += 1
                if progress is not None:
                    progress.update(modified=bool(changed))

    stats.cancelled = token.is_cancelled
    if stats.cancelled:
        logger.warning(f"[{label}] Cancelled: {stats.skipped} items not started")

    _persist_modified(state.modified_items, label, max_concurrency, library, stats)

    stats.duration = time.monotonic() - started
    logger.info(
        f"[{label}] Done: {stats.processed}/{stats.total} processed, "
        f"{stats.updated} updated, {stats.failed + stats.persist_failed} failed "
        f"({stats.duration:.1f}s)"
    )
    return stats


def _persist_modified(
    items: list[Item],
    label: str,
    max_concurrency: int,
    library: LibraryService,
    stats: PassStats,
) -> None:
    """One update_item() per modified item, in parallel, failures isolated."""
    if not items:
        return

    logger.info(f"[{label}] Persisting {len(items)} modified items")

    with ThreadPoolExecutor(max_workers=min(len(items), max_concurrency),
                            thread_name_prefix=f"{label}-persist") as executor:
        future_to_item = {executor.submit(library.update_item, item): item for item in items}

        for future in as_completed(future_to_item):
            item = future_to_item[future]
            try:
                future.result()
                stats.updated += 1
            except Exception as e:
                stats.persist_failed += 1
                log_item_failure(
                    logger,
                    item_id=item.id,
                    item_name=item.display_name,
                    stage=f"{label}/persist",
                    reason=str(e),
                    path=str(item.path) if item.path else None,
                )
