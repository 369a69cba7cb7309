"""
Container probes used by the extraction strategies.

Each probe looks in one place of one container family and returns the
joined text it found, or None. Multi-valued results are quote-stripped,
emptied values dropped, de-duplicated (case-sensitive, first occurrence
kept) and joined with commas.

A probe never raises: any error inside it is logged and reported as
"no value" so the next probe in a chain still runs.
"""

from collections.abc import Callable, Iterable

from music_tags.core.logger import get_logger
from music_tags.extraction.frame_ids import lookup_frame_id, looks_like_frame_id
from music_tags.extraction.handle import MP4_FREEFORM_PREFIX, MetadataHandle
from music_tags.tagging.tags import strip_surrounding_quotes


logger = get_logger(__name__)


# Vorbis spellings of the musical key, tried in order
VORBIS_KEY_FIELDS = (
    "KEY",
    "TKEY",
    "MUSICAL_KEY",
    "KEY_SIGNATURE",
    "INITIAL_KEY",
    "INITIALKEY",
    "AB:KEY",
    "AB KEY",
    "AB_KEY",
)


def join_values(values: Iterable[str]) -> str | None:
    """
    Quote-strip, drop empties, de-duplicate and comma-join.

    Example:
        >>> join_values(['"Rock"', "Pop", "Rock", ""])
        'Rock,Pop'
    """
    cleaned = [strip_surrounding_quotes(v) for v in values if v]
    distinct = list(dict.fromkeys(v for v in cleaned if v))
    return ",".join(distinct) if distinct else None


def _guarded(description: str, probe: Callable[[], str | None]) -> str | None:
    try:
        return probe()
    except Exception as e:
        logger.warning(f"Error probing {description}: {e}")
        return None


# =============================================================================
# Per-container probes
# =============================================================================

def probe_id3_text_frame(handle: MetadataHandle, frame_id: str) -> str | None:
    """All text values of the ID3 frames with this id."""
    if handle.id3 is None:
        return None

    def probe() -> str | None:
        result = join_values(handle.id3_values(frame_id))
        logger.debug(f"ID3 frame '{frame_id}': {result!r}")
        return result

    return _guarded(f"ID3 frame {frame_id}", probe)


def probe_id3_user_text(handle: MetadataHandle, description: str) -> str | None:
    """
    Values of TXXX frames whose description equals `description`.

    Compared case-insensitively against both the raw description and the
    description with surrounding quotes stripped, since some taggers save
    the quotes.
    """
    if handle.id3 is None:
        return None

    def probe() -> str | None:
        wanted = description.lower()
        values: list[str] = []
        for frame in handle.id3_frames("TXXX"):
            desc = frame.desc or ""
            if desc.lower() == wanted or strip_surrounding_quotes(desc).lower() == wanted:
                values.extend(str(text) for text in frame.text)
        return join_values(values)

    return _guarded(f"TXXX frame {description}", probe)


def probe_vorbis_comment(handle: MetadataHandle, name: str) -> str | None:
    if handle.vorbis is None:
        return None
    return _guarded(
        f"Vorbis comment {name}",
        lambda: join_values(handle.vorbis_values(name))
    )


def probe_mp4_tag(handle: MetadataHandle, name: str) -> str | None:
    """The MP4 atom by name, then the iTunes freeform atom of that name."""
    if handle.mp4 is None:
        return None

    def probe() -> str | None:
        result = join_values(handle.mp4_values(name))
        if result:
            return result
        return join_values(handle.mp4_values(MP4_FREEFORM_PREFIX + name))

    return _guarded(f"MP4 tag {name}", probe)


def probe_asf_tag(handle: MetadataHandle, name: str) -> str | None:
    if handle.asf is None:
        return None
    return _guarded(
        f"ASF attribute {name}",
        lambda: join_values(handle.asf_values(name))
    )


def probe_standard_field(handle: MetadataHandle, name: str) -> str | None:
    """Generic property of the format's capability table."""
    return _guarded(
        f"standard field {name}",
        lambda: join_values(handle.standard.get_values(name))
    )


# =============================================================================
# Chains
# =============================================================================

def probe_custom_chain(handle: MetadataHandle, name: str) -> str | None:
    """
    Generic lookup for any field name, first non-empty result wins.

    Order:
        1. Vorbis comment
        2. MP4 atom, then iTunes freeform atom
        3. ASF attribute
        4. ID3 TXXX frame by description
        5. ID3 text frame via the friendly-name map
        6. ID3 text frame using a 4-character name as the frame id
        7. Standard capability table
    """
    result = (
        probe_vorbis_comment(handle, name)
        or probe_mp4_tag(handle, name)
        or probe_asf_tag(handle, name)
        or probe_id3_user_text(handle, name)
    )
    if result:
        return result

    frame_id = lookup_frame_id(name)
    if frame_id is not None:
        result = probe_id3_text_frame(handle, frame_id)
        if result:
            return result

    if looks_like_frame_id(name):
        result = probe_id3_text_frame(handle, name.upper())
        if result:
            return result

    return probe_standard_field(handle, name)


def probe_key(handle: MetadataHandle) -> str | None:
    """
    Musical key, first non-empty of:

        1. The standard initial-key accessor
        2. ID3 TKEY, else the first TXXX frame whose description
           contains "key"
        3. Vorbis comments under the VORBIS_KEY_FIELDS spellings
    """
    initial_key = _guarded("initial key", lambda: handle.standard.initial_key)
    if initial_key:
        return strip_surrounding_quotes(initial_key)

    if handle.id3 is not None:
        result = _guarded("ID3 key frames", lambda: _id3_key(handle))
        if result:
            return result

    if handle.vorbis is not None:
        for field_name in VORBIS_KEY_FIELDS:
            result = probe_vorbis_comment(handle, field_name)
            if result:
                return result

    return None


def _id3_key(handle: MetadataHandle) -> str | None:
    for value in handle.id3_values("TKEY"):
        cleaned = strip_surrounding_quotes(value)
        if cleaned:
            return cleaned

    for frame in handle.id3_frames("TXXX"):
        if "key" not in (frame.desc or "").lower():
            continue
        for text in frame.text:
            cleaned = strip_surrounding_quotes(str(text))
            if cleaned:
                logger.debug(f"Key found in TXXX '{frame.desc}': {cleaned}")
                return cleaned
    return None
