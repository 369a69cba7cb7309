"""
Propagation of track tags up to albums and artists.

Propagation is a one-way union: a parent gains every distinct child tag
it does not already carry (whole tag compared case-insensitively), and
never loses one. Running it twice adds nothing the second time.
"""

from music_tags.library.models import Item


def collect_child_tags(children: list[Item]) -> list[str]:
    """
    Distinct tags across all children, case-insensitively, sorted.

    The first spelling seen wins when two children differ only in case.
    """
    seen: dict[str, str] = {}
    for child in children:
        for tag in child.tags:
            seen.setdefault(tag.lower(), tag)
    return sorted(seen.values())


def propagate_tags(parent: Item, children: list[Item]) -> bool:
    """
    Union the children's tags into the parent, in place.

    Args:
        parent: Album or artist to update.
        children: Tracks whose tags are aggregated.

    Returns:
        True if the parent's tag list grew.
    """
    present = {tag.lower() for tag in parent.tags}
    additions = []
    for tag in collect_child_tags(children):
        if tag.lower() not in present:
            additions.append(tag)
            present.add(tag.lower())

    if not additions:
        return False

    parent.tags = parent.tags + additions
    return True
