"""
Tagging module for music-tags.

Pure functions over `Name:Value` tag lists:
    - tags: Name parsing, quote stripping, config string parsing
    - splitter: Split raw values on delimiter characters
    - merge: Merge new tags under the overwrite policy
    - removal: Strip named tags from items
    - propagation: Union child tags into albums and artists
"""

from music_tags.tagging.tags import (
    get_tag_name,
    make_tag,
    parse_delimiters,
    parse_field_names,
    parse_tag_names,
    strip_surrounding_quotes,
)
from music_tags.tagging.splitter import split_tag_value
from music_tags.tagging.merge import MergeResult, merge_tags
from music_tags.tagging.removal import filter_removed_tags, remove_tags_from_item
from music_tags.tagging.propagation import collect_child_tags, propagate_tags

__all__ = [
    "get_tag_name",
    "make_tag",
    "parse_delimiters",
    "parse_field_names",
    "parse_tag_names",
    "strip_surrounding_quotes",
    "split_tag_value",
    "MergeResult",
    "merge_tags",
    "filter_removed_tags",
    "remove_tags_from_item",
    "collect_child_tags",
    "propagate_tags",
]
