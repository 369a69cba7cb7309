"""
Removal of named tags from library items.
"""

from music_tags.library.models import Item
from music_tags.tagging.tags import get_tag_name


def filter_removed_tags(tags: list[str], names: set[str]) -> list[str]:
    """
    Return the tags whose Name is not in the removal set.

    Args:
        tags: Tag list to filter.
        names: Lower-cased Names to remove (see parse_tag_names()).

    Tags without a colon can never match and are always kept.

    Example:
        >>> filter_removed_tags(["BPM:120", "KEY:C", "NOCOLON"], {"bpm"})
        ['KEY:C', 'NOCOLON']
    """
    kept = []
    for tag in tags:
        name = get_tag_name(tag)
        if name is not None and name.lower() in names:
            continue
        kept.append(tag)
    return kept


def remove_tags_from_item(item: Item, names: set[str]) -> bool:
    """
    Strip every tag whose Name is in `names` from the item, in place.

    Returns:
        True if at least one tag was removed.
    """
    if not names or not item.tags:
        return False

    kept = filter_removed_tags(item.tags, names)
    if len(kept) == len(item.tags):
        return False

    item.tags = kept
    return True
