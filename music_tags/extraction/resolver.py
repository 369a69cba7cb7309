"""
Tag name resolver.

Maps a configured field name to the one strategy that extracts it. The
name is cleaned first (every quote character removed, trimmed,
upper-cased), then resolved in this order, first match wins:

    1. Standard fields  - ARTIST, ALBUM, GENRE, YEAR, COMPOSER, BPM,
                          PUBLISHER, COPYRIGHT, COMMENT
    2. Special fields   - KEY, MOOD, CONTENTGROUP, LANGUAGE
    3. Anything else    - the generic custom chain

Usage:
    strategy = resolve("bpm")
    value = strategy.extract(handle)   # "128" or None
"""

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

from music_tags.core.logger import get_logger
from music_tags.extraction.handle import MetadataHandle, StandardTags
from music_tags.extraction.probes import (
    probe_custom_chain,
    probe_id3_text_frame,
    probe_key,
)


logger = get_logger(__name__)


class StrategyKind(str, Enum):
    STANDARD = "standard"
    SPECIAL = "special"
    CUSTOM = "custom"


def clean_field_name(name: str) -> str:
    """Remove every quote character, trim and upper-case."""
    return name.replace('"', "").replace("'", "").strip().upper()


# Standard field -> (accessor, numeric)
_STANDARD_FIELDS: dict[str, tuple[Callable[[StandardTags], str | int], bool]] = {
    "ARTIST": (lambda s: s.artist, False),
    "ALBUM": (lambda s: s.album, False),
    "GENRE": (lambda s: s.genre, False),
    "YEAR": (lambda s: s.year, True),
    "COMPOSER": (lambda s: s.composer, False),
    "BPM": (lambda s: s.bpm, True),
    "PUBLISHER": (lambda s: s.publisher, False),
    "COPYRIGHT": (lambda s: s.copyright, False),
    "COMMENT": (lambda s: s.comment, False),
}

# Special field -> the only ID3 frame read for it
_SPECIAL_FRAMES = {
    "MOOD": "TMOO",
    "CONTENTGROUP": "TIT1",
    "LANGUAGE": "TLAN",
}


@dataclass(frozen=True)
class StandardFieldStrategy:
    """Read a standard accessor; numbers count only when greater than zero."""
    field_name: str
    accessor: Callable[[StandardTags], str | int]
    numeric: bool
    kind: StrategyKind = StrategyKind.STANDARD

    def extract(self, handle: MetadataHandle) -> str | None:
        try:
            value = self.accessor(handle.standard)
        except Exception as e:
            logger.warning(f"Error reading standard field {self.field_name}: {e}")
            return None

        if self.numeric:
            return str(value) if isinstance(value, int) and value > 0 else None
        return value or None


@dataclass(frozen=True)
class KeyStrategy:
    """Musical key probe only."""
    field_name: str = "KEY"
    kind: StrategyKind = StrategyKind.SPECIAL

    def extract(self, handle: MetadataHandle) -> str | None:
        return probe_key(handle)


@dataclass(frozen=True)
class SpecialFrameStrategy:
    """One dedicated ID3 text frame; other containers yield nothing."""
    field_name: str
    frame_id: str
    kind: StrategyKind = StrategyKind.SPECIAL

    def extract(self, handle: MetadataHandle) -> str | None:
        return probe_id3_text_frame(handle, self.frame_id)


@dataclass(frozen=True)
class CustomChainStrategy:
    field_name: str
    kind: StrategyKind = StrategyKind.CUSTOM

    def extract(self, handle: MetadataHandle) -> str | None:
        return probe_custom_chain(handle, self.field_name)


ExtractionStrategy = StandardFieldStrategy | KeyStrategy | SpecialFrameStrategy | CustomChainStrategy


def resolve(field_name: str) -> ExtractionStrategy:
    """
    Resolve a configured field name to its extraction strategy.

    Args:
        field_name: Name as configured, in any case, possibly quoted.

    Returns:
        Exactly one strategy; unknown names get the custom chain.
    """
    name = clean_field_name(field_name)

    if name in _STANDARD_FIELDS:
        accessor, numeric = _STANDARD_FIELDS[name]
        return StandardFieldStrategy(field_name=name, accessor=accessor, numeric=numeric)

    if name == "KEY":
        return KeyStrategy()

    if name in _SPECIAL_FRAMES:
        return SpecialFrameStrategy(field_name=name, frame_id=_SPECIAL_FRAMES[name])

    return CustomChainStrategy(field_name=name)
