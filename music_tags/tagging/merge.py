"""
Tag merge engine.

Decides an item's final tag list from its existing tags and a batch of
newly extracted tags, under the overwrite policy.

Rules for each new tag, compared by Name (case-insensitive) against the
item's pre-existing tags only:
    - no existing tag with that Name: append
    - existing tag, overwrite on: drop every existing tag with that Name,
      then append
    - existing tag, overwrite off: skip

Several new tags may share a Name (a split value such as "Rock/Pop"
yields GENRE:Rock and GENRE:Pop); they are all appended. Exact duplicate
strings within one batch are appended once.
"""

from dataclasses import dataclass, field

from music_tags.core.logger import get_logger
from music_tags.tagging.tags import get_tag_name


logger = get_logger(__name__)


@dataclass
class MergeResult:
    """
    Outcome of a merge.

    Attributes:
        tags: The merged tag list.
        modified: At least one tag was appended.
        added: The tags that were appended, in order.
        skipped: New tags dropped because their Name already existed.
    """
    tags: list[str]
    modified: bool
    added: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)


def merge_tags(existing: list[str], new: list[str], overwrite: bool) -> MergeResult:
    """
    Merge new tags into an existing tag list.

    Neither input list is mutated. Untouched existing tags keep their
    order; appended tags follow at the end in input order.

    Args:
        existing: The item's current tags.
        new: Tags produced by extraction for this item.
        overwrite: Replace existing tags of the same Name.

    Returns:
        MergeResult with the merged list and the modified flag.

    Example:
        >>> merge_tags(["BPM:120"], ["BPM:128", "KEY:Am"], overwrite=False).tags
        ['BPM:120', 'KEY:Am']
    """
    merged = list(existing)
    existing_names = {
        name.lower() for name in (get_tag_name(tag) for tag in existing) if name is not None
    }
    cleared: set[str] = set()
    added: list[str] = []
    skipped: list[str] = []

    for tag in new:
        name = get_tag_name(tag)
        if name is None:
            logger.warning(f"Invalid tag format (no colon separator): {tag}")
            continue

        if tag in added:
            continue

        key = name.lower()
        if key in existing_names:
            if not overwrite:
                logger.debug(f"Skipping tag '{tag}' (overwrite disabled)")
                skipped.append(tag)
                continue
            if key not in cleared:
                merged = [t for t in merged if not _has_name(t, key)]
                cleared.add(key)

        merged.append(tag)
        added.append(tag)

    return MergeResult(tags=merged, modified=bool(added), added=added, skipped=skipped)


def _has_name(tag: str, key: str) -> bool:
    name = get_tag_name(tag)
    return name is not None and name.lower() == key
