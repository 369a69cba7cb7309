"""
Tag processor: the operations a host runs against the library.

    process_all_items()  - extract configured fields from every track,
                           merge into its tags, persist, then optionally
                           propagate to albums and artists
    process_item()       - the same for a single track, persisted at once
    remove_tags()        - strip named tags from tracks and optionally
                           from albums and artists

Full-library operations are idempotent per item: rerunning them only
touches items whose tags would change.

Usage:
    processor = TagProcessor(library, config, gate=RunGate())
    summary = processor.process_all_items(token)
    print(summary.updated)
"""

from collections.abc import Iterable
from contextlib import nullcontext
from dataclasses import dataclass, field

from music_tags.core.config import Config
from music_tags.core.exceptions import ExtractionError
from music_tags.core.logger import get_logger
from music_tags.extraction.extractor import FieldExtractor, MetadataReader
from music_tags.library.models import Item, ItemKind, ItemQuery, LibraryService
from music_tags.processing.cancellation import CancellationToken
from music_tags.processing.gate import RunGate
from music_tags.processing.runner import (
    PassStats,
    ProgressFactory,
    calculate_max_concurrency,
    calculate_removal_concurrency,
    run_parallel,
)
from music_tags.tagging.merge import merge_tags
from music_tags.tagging.propagation import propagate_tags
from music_tags.tagging.removal import remove_tags_from_item
from music_tags.tagging.tags import parse_tag_names


logger = get_logger(__name__)


PROCESS_RUN = "process"
REMOVE_RUN = "remove"


@dataclass
class RunSummary:
    """
    Result of a full run: one PassStats per pass, in execution order.
    """
    run: str
    passes: list[PassStats] = field(default_factory=list)

    @property
    def cancelled(self) -> bool:
        return any(p.cancelled for p in self.passes)

    @property
    def processed(self) -> int:
        return sum(p.processed for p in self.passes)

    @property
    def updated(self) -> int:
        return sum(p.updated for p in self.passes)

    @property
    def failed(self) -> int:
        return sum(p.failed + p.persist_failed for p in self.passes)

    def get_pass(self, label: str) -> PassStats | None:
        for stats in self.passes:
            if stats.label == label:
                return stats
        return None


class TagProcessor:
    """
    Runs extraction, propagation and removal over a library.

    Attributes:
        library: Library service supplying items and persisting tags.
        config: Configuration snapshot for runs started by this processor.
        extractor: FieldExtractor built from config.extraction.
        gate: Optional RunGate shared with other processors.
        progress_factory: Optional progress bar factory passed to each pass.

    Thread Safety:
        A processor may be used from several threads; full runs
        serialize through the gate when one is supplied.
    """

    def __init__(
        self,
        library: LibraryService,
        config: Config,
        reader: MetadataReader | None = None,
        gate: RunGate | None = None,
        progress_factory: ProgressFactory | None = None,
    ) -> None:
        self.library = library
        self.config = config
        self.extractor = FieldExtractor(config.extraction, reader=reader)
        self.gate = gate
        self.progress_factory = progress_factory

    @property
    def extraction_concurrency(self) -> int:
        threads = self.config.processing.threads
        return threads if threads is not None else calculate_max_concurrency()

    def _hold_gate(self, run_name: str):
        if self.gate is None:
            return nullcontext()
        return self.gate.hold(run_name)

    # =========================================================================
    # Extraction
    # =========================================================================

    def process_all_items(self, token: CancellationToken | None = None) -> RunSummary:
        """
        Extract, merge and persist tags for every track in the library.

        When propagate_tags_to_parents is enabled, album and artist passes
        follow once every track has been persisted.

        Raises:
            LibraryError: If the track query fails. Nothing is processed.
            RunInProgressError: If the gate is held by another run.
        """
        token = token or CancellationToken()
        summary = RunSummary(run=PROCESS_RUN)

        with self._hold_gate(PROCESS_RUN):
            field_names = self.config.extraction.field_names
            if field_names:
                logger.info(f"Extracting fields: {', '.join(field_names)}")
                tracks = self.library.query_items(ItemQuery(kind=ItemKind.TRACK))
                logger.info(f"Found {len(tracks)} tracks")

                summary.passes.append(run_parallel(
                    tracks,
                    "extract",
                    self._apply_extraction,
                    self.extraction_concurrency,
                    self.library,
                    token,
                    self.progress_factory,
                ))
            else:
                logger.warning("No tag names configured, nothing to extract")

            if self.config.extraction.propagate_tags_to_parents:
                if token.is_cancelled:
                    logger.warning("Run cancelled, skipping propagation to parents")
                else:
                    summary.passes.extend(self.propagate_tags_to_parents(token))

        self._log_summary(summary)
        return summary

    def process_item(self, item: Item) -> bool:
        """
        Extract and merge tags for one track and persist it immediately.

        Returns:
            True if the track's tags changed and were saved.

        Raises:
            ExtractionError: If the track's file cannot be read.
            PersistenceError: If saving fails.
        """
        changed = self._apply_extraction(item)
        if changed:
            self.library.update_item(item)
            logger.info(f"Updated tags for '{item.display_name}'")
        return changed

    def _apply_extraction(self, item: Item) -> bool:
        if item.path is None:
            raise ExtractionError(
                f"Item has no file path: {item.display_name}",
                details={"item_id": item.id}
            )

        new_tags = self.extractor.extract_from_file(item.path)
        if not new_tags:
            return False

        result = merge_tags(item.tags, new_tags, self.config.extraction.overwrite_existing_tags)
        if result.modified:
            item.tags = result.tags
            logger.debug(f"Added {len(result.added)} tags to '{item.display_name}'")
        return result.modified

    # =========================================================================
    # Propagation
    # =========================================================================

    def propagate_tags_to_parents(self, token: CancellationToken | None = None) -> list[PassStats]:
        """
        Union track tags into albums (direct children), then artists
        (every attributed track).

        Raises:
            LibraryError: If the album or artist query fails.
        """
        token = token or CancellationToken()
        passes = []

        albums = self.library.query_items(ItemQuery(kind=ItemKind.ALBUM))
        passes.append(run_parallel(
            albums,
            "albums",
            lambda album: propagate_tags(
                album, self.library.query_items(ItemQuery(kind=ItemKind.TRACK, parent_id=album.id))
            ),
            calculate_max_concurrency(),
            self.library,
            token,
            self.progress_factory,
        ))

        if token.is_cancelled:
            logger.warning("Run cancelled, skipping artist propagation")
            return passes

        artists = self.library.query_items(ItemQuery(kind=ItemKind.ARTIST))
        passes.append(run_parallel(
            artists,
            "artists",
            lambda artist: propagate_tags(
                artist, self.library.query_items(ItemQuery(kind=ItemKind.TRACK, artist_id=artist.id))
            ),
            calculate_max_concurrency(),
            self.library,
            token,
            self.progress_factory,
        ))
        return passes

    # =========================================================================
    # Removal
    # =========================================================================

    def remove_tags(
        self,
        names: str | Iterable[str],
        also_from_parents: bool = False,
        token: CancellationToken | None = None,
    ) -> RunSummary:
        """
        Remove every tag whose Name is in `names` from all tracks, and
        optionally from all albums and artists.

        Args:
            names: Comma-separated names, or an iterable of names.
            also_from_parents: Run album and artist passes after tracks.
            token: Cancellation token.

        Raises:
            LibraryError: If an item query fails.
            RunInProgressError: If the gate is held by another run.
        """
        token = token or CancellationToken()
        summary = RunSummary(run=REMOVE_RUN)

        raw = names if isinstance(names, str) else ",".join(names)
        name_set = parse_tag_names(raw)

        with self._hold_gate(REMOVE_RUN):
            if not name_set:
                logger.warning("No tag names given, nothing to remove")
                return summary

            logger.info(f"Removing tags: {', '.join(sorted(name_set))}")
            cap = calculate_removal_concurrency()

            kinds = [ItemKind.TRACK]
            if also_from_parents:
                kinds += [ItemKind.ALBUM, ItemKind.ARTIST]

            for kind in kinds:
                if token.is_cancelled:
                    logger.warning(f"Run cancelled, skipping {kind.value} removal")
                    break
                items = self.library.query_items(ItemQuery(kind=kind))
                summary.passes.append(run_parallel(
                    items,
                    f"remove-{kind.value}s",
                    lambda item: remove_tags_from_item(item, name_set),
                    cap,
                    self.library,
                    token,
                    self.progress_factory,
                ))

        self._log_summary(summary)
        return summary

    def _log_summary(self, summary: RunSummary) -> None:
        state = "cancelled" if summary.cancelled else "complete"
        logger.info(
            f"Run '{summary.run}' {state}: {summary.processed} processed, "
            f"{summary.updated} updated, {summary.failed} failed"
        )
