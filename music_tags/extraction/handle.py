"""
Read-only view of an audio file's metadata containers.

mutagen does the container parsing. This module wraps whatever tag
object mutagen returns in a MetadataHandle exposing one sub-view per
container family, plus a `standard` view that answers common fields
(artist, album, BPM, key, ...) the same way regardless of format.

Container families:
    id3     - ID3v2 frames (MP3, WAV, AIFF)
    vorbis  - Vorbis comments (FLAC, Ogg Vorbis, Opus)
    mp4     - iTunes-style atoms (M4A, MP4, AAC)
    asf     - ASF attributes (WMA)

Usage:
    from music_tags.extraction.handle import open_metadata

    with open_metadata(track.path) as handle:
        print(handle.format, handle.standard.bpm)
"""

import re
from contextlib import contextmanager
from enum import Enum
from pathlib import Path
from typing import Any, Generator

import mutagen
from mutagen._vorbis import VComment
from mutagen.asf import ASFBaseAttribute, ASFTags
from mutagen.id3 import ID3Tags
from mutagen.mp4 import MP4Tags

from music_tags.core.exceptions import ExtractionError
from music_tags.core.logger import get_logger


logger = get_logger(__name__)


MP4_FREEFORM_PREFIX = "----:com.apple.iTunes:"


class TagFormat(str, Enum):
    """Container family of a file's tag block."""
    ID3 = "id3"
    VORBIS = "vorbis"
    MP4 = "mp4"
    ASF = "asf"
    NONE = "none"


# =============================================================================
# Standard capability tables
# =============================================================================
#
# Each table maps a normalized field name to the container keys holding it,
# tried in order. Normalization drops everything but letters and digits and
# lower-cases, so "Album Artist", "album_artist" and "AlbumArtist" agree.

_ID3_FIELDS: dict[str, tuple[str, ...]] = {
    "title": ("TIT2",),
    "artist": ("TPE1",),
    "album": ("TALB",),
    "albumartist": ("TPE2",),
    "genre": ("TCON",),
    "year": ("TDRC", "TYER", "TORY"),
    "composer": ("TCOM",),
    "bpm": ("TBPM",),
    "publisher": ("TPUB",),
    "copyright": ("TCOP",),
    "comment": ("COMM",),
    "initialkey": ("TKEY",),
    "conductor": ("TPE3",),
    "grouping": ("TIT1", "GRP1"),
    "lyrics": ("USLT",),
    "track": ("TRCK",),
    "disc": ("TPOS",),
    "isrc": ("TSRC",),
    "subtitle": ("TIT3",),
}

_VORBIS_FIELDS: dict[str, tuple[str, ...]] = {
    "title": ("TITLE",),
    "artist": ("ARTIST",),
    "album": ("ALBUM",),
    "albumartist": ("ALBUMARTIST", "ALBUM ARTIST"),
    "genre": ("GENRE",),
    "year": ("DATE", "YEAR", "ORIGINALDATE"),
    "composer": ("COMPOSER",),
    "bpm": ("BPM", "TEMPO"),
    "publisher": ("ORGANIZATION", "LABEL", "PUBLISHER"),
    "copyright": ("COPYRIGHT",),
    "comment": ("COMMENT", "DESCRIPTION"),
    "initialkey": ("INITIALKEY",),
    "conductor": ("CONDUCTOR",),
    "grouping": ("GROUPING", "CONTENTGROUP"),
    "lyrics": ("LYRICS", "UNSYNCEDLYRICS"),
    "track": ("TRACKNUMBER",),
    "disc": ("DISCNUMBER",),
    "isrc": ("ISRC",),
    "subtitle": ("SUBTITLE",),
}

_MP4_FIELDS: dict[str, tuple[str, ...]] = {
    "title": ("\xa9nam",),
    "artist": ("\xa9ART",),
    "album": ("\xa9alb",),
    "albumartist": ("aART",),
    "genre": ("\xa9gen",),
    "year": ("\xa9day",),
    "composer": ("\xa9wrt",),
    "bpm": ("tmpo",),
    "publisher": (MP4_FREEFORM_PREFIX + "LABEL", MP4_FREEFORM_PREFIX + "PUBLISHER"),
    "copyright": ("cprt",),
    "comment": ("\xa9cmt",),
    "initialkey": (MP4_FREEFORM_PREFIX + "initialkey",),
    "conductor": (MP4_FREEFORM_PREFIX + "CONDUCTOR",),
    "grouping": ("\xa9grp",),
    "lyrics": ("\xa9lyr",),
    "track": ("trkn",),
    "disc": ("disk",),
    "isrc": (MP4_FREEFORM_PREFIX + "ISRC",),
    "subtitle": (MP4_FREEFORM_PREFIX + "SUBTITLE",),
}

_ASF_FIELDS: dict[str, tuple[str, ...]] = {
    "title": ("Title",),
    "artist": ("Author",),
    "album": ("WM/AlbumTitle",),
    "albumartist": ("WM/AlbumArtist",),
    "genre": ("WM/Genre",),
    "year": ("WM/Year",),
    "composer": ("WM/Composer",),
    "bpm": ("WM/BeatsPerMinute",),
    "publisher": ("WM/Publisher",),
    "copyright": ("Copyright",),
    "comment": ("Description",),
    "initialkey": ("WM/InitialKey",),
    "conductor": ("WM/Conductor",),
    "grouping": ("WM/ContentGroupDescription",),
    "lyrics": ("WM/Lyrics",),
    "track": ("WM/TrackNumber",),
    "disc": ("WM/PartOfSet",),
    "isrc": ("WM/ISRC",),
    "subtitle": ("WM/SubTitle",),
}

# Alternative spellings of the generic property names
_FIELD_ALIASES = {
    "performer": "artist",
    "performers": "artist",
    "firstperformer": "artist",
    "artists": "artist",
    "albumartists": "albumartist",
    "firstalbumartist": "albumartist",
    "genres": "genre",
    "firstgenre": "genre",
    "composers": "composer",
    "firstcomposer": "composer",
    "beatsperminute": "bpm",
    "tempo": "bpm",
    "key": "initialkey",
    "contentgroup": "grouping",
    "label": "publisher",
    "organization": "publisher",
    "description": "comment",
    "date": "year",
    "tracknumber": "track",
    "discnumber": "disc",
}


def normalize_field_name(name: str) -> str:
    key = re.sub(r"[^0-9a-z]", "", name.lower())
    return _FIELD_ALIASES.get(key, key)


def value_to_text(value: Any) -> str:
    """Render one raw container value as text."""
    if isinstance(value, ASFBaseAttribute):
        value = value.value
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    if isinstance(value, tuple):
        # MP4 trkn/disk pairs: (number, total)
        return str(value[0]) if value and value[0] else ""
    if isinstance(value, bool):
        return "1" if value else "0"
    return str(value)


class StandardTags:
    """
    Format-independent accessors over a MetadataHandle.

    Replaces property-by-name reflection with explicit per-format tables:
    get_field() answers any name in the table for the handle's format and
    nothing else.
    """

    def __init__(self, handle: "MetadataHandle") -> None:
        self._handle = handle
        self._table = {
            TagFormat.ID3: _ID3_FIELDS,
            TagFormat.VORBIS: _VORBIS_FIELDS,
            TagFormat.MP4: _MP4_FIELDS,
            TagFormat.ASF: _ASF_FIELDS,
        }.get(handle.format, {})

    def supported_fields(self) -> list[str]:
        return sorted(self._table)

    def get_values(self, name: str) -> list[str]:
        """All non-empty values of a generic field, from the first key that has any."""
        keys = self._table.get(normalize_field_name(name))
        if not keys:
            return []

        handle = self._handle
        for key in keys:
            if handle.format is TagFormat.ID3:
                values = handle.id3_values(key)
            elif handle.format is TagFormat.VORBIS:
                values = handle.vorbis_values(key)
            elif handle.format is TagFormat.MP4:
                values = handle.mp4_values(key)
            else:
                values = handle.asf_values(key)
            values = [v for v in values if v]
            if values:
                return values
        return []

    def get_field(self, name: str) -> str | None:
        """First non-empty value of a generic field, or None."""
        values = self.get_values(name)
        return values[0] if values else None

    def _first(self, name: str) -> str:
        return self.get_field(name) or ""

    @property
    def title(self) -> str:
        return self._first("title")

    @property
    def artist(self) -> str:
        return self._first("artist")

    @property
    def album(self) -> str:
        return self._first("album")

    @property
    def album_artist(self) -> str:
        return self._first("albumartist")

    @property
    def genre(self) -> str:
        return self._first("genre")

    @property
    def composer(self) -> str:
        return self._first("composer")

    @property
    def publisher(self) -> str:
        return self._first("publisher")

    @property
    def copyright(self) -> str:
        return self._first("copyright")

    @property
    def comment(self) -> str:
        return self._first("comment")

    @property
    def initial_key(self) -> str:
        return self._first("initialkey")

    @property
    def year(self) -> int:
        """Four-digit year from the date field, 0 when absent."""
        match = re.search(r"\d{4}", self._first("year"))
        return int(match.group(0)) if match else 0

    @property
    def bpm(self) -> int:
        """Integer BPM, 0 when absent or unparseable."""
        raw = self._first("bpm").strip()
        try:
            return int(float(raw)) if raw else 0
        except ValueError:
            return 0


class MetadataHandle:
    """
    Metadata of one audio file, split into container sub-views.

    Exactly one of id3, vorbis, mp4 and asf is non-None, matching the
    tag block mutagen found; all are None for a file without tags.

    Attributes:
        tags: The raw mutagen tag object (or None).
        path: The file the tags came from, for log messages.
        format: TagFormat of the tag block.
        standard: StandardTags view.
    """

    def __init__(self, tags: Any, path: Path | None = None) -> None:
        self.tags = tags
        self.path = path
        self.format = self._detect_format(tags)
        self.standard = StandardTags(self)

    @staticmethod
    def _detect_format(tags: Any) -> TagFormat:
        if isinstance(tags, ID3Tags):
            return TagFormat.ID3
        if isinstance(tags, VComment):
            return TagFormat.VORBIS
        if isinstance(tags, MP4Tags):
            return TagFormat.MP4
        if isinstance(tags, ASFTags):
            return TagFormat.ASF
        return TagFormat.NONE

    def __repr__(self) -> str:
        return f"MetadataHandle(format={self.format.value}, path={self.path})"

    @property
    def id3(self) -> ID3Tags | None:
        return self.tags if self.format is TagFormat.ID3 else None

    @property
    def vorbis(self) -> VComment | None:
        return self.tags if self.format is TagFormat.VORBIS else None

    @property
    def mp4(self) -> MP4Tags | None:
        return self.tags if self.format is TagFormat.MP4 else None

    @property
    def asf(self) -> ASFTags | None:
        return self.tags if self.format is TagFormat.ASF else None

    # -------------------------------------------------------------------------
    # Raw per-container reads (values as text, unstripped, empties kept out)
    # -------------------------------------------------------------------------

    def id3_frames(self, frame_id: str) -> list[Any]:
        """All frames whose hash key starts with frame_id (TXXX, COMM, ...)."""
        if self.id3 is None:
            return []
        return self.id3.getall(frame_id)

    def id3_values(self, frame_id: str) -> list[str]:
        """Text values of every frame with this id."""
        frames = self.id3_frames(frame_id)
        if frame_id == "COMM":
            # Prefer the plain comment over iTunes' tool-specific ones
            frames = sorted(frames, key=lambda f: f.desc != "")

        values = []
        for frame in frames:
            text = getattr(frame, "text", None)
            if isinstance(text, list):
                values.extend(value_to_text(t) for t in text)
            elif text is not None:
                values.append(value_to_text(text))
        return [v for v in values if v]

    def vorbis_values(self, name: str) -> list[str]:
        if self.vorbis is None:
            return []
        try:
            return [v for v in self.vorbis[name] if v]
        except (KeyError, ValueError):
            # ValueError: not a legal Vorbis key (e.g., contains '=')
            return []

    def mp4_values(self, name: str) -> list[str]:
        """Values of an MP4 atom, matching the atom name case-insensitively."""
        if self.mp4 is None:
            return []
        key = self._find_key(self.mp4.keys(), name)
        if key is None:
            return []
        raw = self.mp4[key]
        if not isinstance(raw, list):
            raw = [raw]
        return [text for text in (value_to_text(v) for v in raw) if text]

    def asf_values(self, name: str) -> list[str]:
        """Values of an ASF attribute, matching the attribute name case-insensitively."""
        if self.asf is None:
            return []
        key = self._find_key(self.asf.keys(), name)
        if key is None:
            return []
        return [text for text in (value_to_text(v) for v in self.asf[key]) if text]

    @staticmethod
    def _find_key(keys: Any, name: str) -> str | None:
        keys = list(keys)
        if name in keys:
            return name
        lowered = name.lower()
        for key in keys:
            if key.lower() == lowered:
                return key
        return None

    def describe_fields(self) -> list[tuple[str, str]]:
        """
        Every field in the tag block as (key, text) pairs.

        Binary payloads (pictures, private frames) are summarized by size.
        Used by the `inspect` command.
        """
        fields: list[tuple[str, str]] = []
        if self.id3 is not None:
            for key in sorted(self.id3.keys()):
                frame = self.id3[key]
                if hasattr(frame, "text"):
                    fields.append((key, ", ".join(map(str, frame.text))))
                else:
                    fields.append((key, f"<{type(frame).__name__} frame>"))
        elif self.vorbis is not None:
            for key, value in self.vorbis:
                fields.append((key.upper(), value))
        elif self.mp4 is not None:
            for key in sorted(self.mp4.keys()):
                for value in self.mp4[key]:
                    if key == "covr":
                        fields.append((key, f"<{len(value)} bytes>"))
                    else:
                        fields.append((key, value_to_text(value)))
        elif self.asf is not None:
            for key, value in self.asf:
                if isinstance(value.value, bytes):
                    fields.append((key, f"<{len(value.value)} bytes>"))
                else:
                    fields.append((key, value_to_text(value)))
        return fields


@contextmanager
def open_metadata(path: Path) -> Generator[MetadataHandle, None, None]:
    """
    Open an audio file and yield its MetadataHandle.

    The file handle is closed on every exit path, including exceptions
    raised inside the with-block.

    Raises:
        ExtractionError: If the file is missing or unreadable, or mutagen
                         does not recognize the container.
    """
    path = Path(path)
    if not path.is_file():
        raise ExtractionError(
            f"Audio file not found: {path}",
            details={"path": str(path)}
        )

    try:
        fileobj = open(path, "rb")
    except OSError as e:
        raise ExtractionError(
            f"Cannot open audio file: {e}",
            details={"path": str(path), "original_error": str(e)}
        ) from e

    try:
        try:
            audio = mutagen.File(fileobj)
        except mutagen.MutagenError as e:
            raise ExtractionError(
                f"Cannot read metadata: {e}",
                details={"path": str(path), "original_error": str(e)}
            ) from e

        if audio is None:
            raise ExtractionError(
                "Unsupported audio format",
                details={"path": str(path)}
            )

        logger.debug(f"Opened {path.name} ({type(audio).__name__})")
        yield MetadataHandle(audio.tags, path)
    finally:
        fileobj.close()
