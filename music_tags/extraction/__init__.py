"""
Extraction module for music-tags.

Reads named fields out of audio metadata containers via mutagen:
    - handle: MetadataHandle, per-format capability tables, open_metadata()
    - frame_ids: Friendly name to ID3v2 frame id map
    - probes: Per-container probes, the key probe and the custom chain
    - resolver: Field name to extraction strategy
    - extractor: Configured field names to `Name:Value` tags

Usage:
    from music_tags.extraction import FieldExtractor

    extractor = FieldExtractor(config.extraction)
    tags = extractor.extract_from_file(track.path)
"""

from music_tags.extraction.frame_ids import FRAME_ID_MAP, lookup_frame_id
from music_tags.extraction.handle import (
    MetadataHandle,
    StandardTags,
    TagFormat,
    open_metadata,
)
from music_tags.extraction.resolver import StrategyKind, clean_field_name, resolve
from music_tags.extraction.extractor import (
    FieldExtractor,
    extract_configured_tags,
    extract_field,
)

__all__ = [
    "FRAME_ID_MAP",
    "lookup_frame_id",
    "MetadataHandle",
    "StandardTags",
    "TagFormat",
    "open_metadata",
    "StrategyKind",
    "clean_field_name",
    "resolve",
    "FieldExtractor",
    "extract_configured_tags",
    "extract_field",
]
