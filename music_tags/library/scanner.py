"""
Directory scanner that fills the library store.

Walks a directory for audio files, reads title/album/artist through the
standard metadata view, and registers tracks, albums and artists. Ids are
derived deterministically (uuid5) from the file path and the album/artist
names, so rescanning updates rows instead of duplicating them, and
existing tag lists survive a rescan.
"""

import uuid
from dataclasses import dataclass
from pathlib import Path

from music_tags.core.exceptions import ExtractionError
from music_tags.core.logger import get_logger
from music_tags.extraction.handle import open_metadata
from music_tags.library.database import LibraryDatabase
from music_tags.library.models import Item, ItemKind


logger = get_logger(__name__)


SUPPORTED_EXTENSIONS = (
    ".mp3", ".flac", ".ogg", ".oga", ".opus", ".m4a", ".mp4", ".aac",
    ".wma", ".asf", ".wav", ".aif", ".aiff",
)

UNKNOWN_ALBUM = "Unknown Album"
UNKNOWN_ARTIST = "Unknown Artist"

# Separators used by taggers that store several artists in one value
ARTIST_SEPARATORS = (";", " / ", "\x00")

_ID_NAMESPACE = uuid.uuid5(uuid.NAMESPACE_URL, "music-tags")


def make_id(kind: ItemKind, *parts: str) -> str:
    key = "\x1f".join([kind.value] + [p.strip().lower() for p in parts])
    return str(uuid.uuid5(_ID_NAMESPACE, key))


@dataclass
class ScanStats:
    """Statistics for a directory scan."""
    files_found: int = 0
    tracks_imported: int = 0
    failed: int = 0
    albums: int = 0
    artists: int = 0


def find_audio_files(directory: Path) -> list[Path]:
    """All files below `directory` with a supported extension, sorted."""
    return sorted(
        p for p in directory.rglob("*")
        if p.suffix.lower() in SUPPORTED_EXTENSIONS and p.is_file()
    )


def split_artists(values: list[str]) -> list[str]:
    """Individual artist names from raw artist values, order kept."""
    names: list[str] = []
    for value in values:
        pieces = [value]
        for sep in ARTIST_SEPARATORS:
            pieces = [part for piece in pieces for part in piece.split(sep)]
        for piece in pieces:
            piece = piece.strip()
            if piece and piece.lower() not in (n.lower() for n in names):
                names.append(piece)
    return names


def read_track(path: Path) -> tuple[Item, Item, list[Item]]:
    """
    Build the track, album and artist items for one file.

    Raises:
        ExtractionError: If the file cannot be read.
    """
    with open_metadata(path) as handle:
        standard = handle.standard
        title = standard.title or path.stem
        album_name = standard.album or UNKNOWN_ALBUM
        artist_names = split_artists(standard.get_values("artist"))
        album_artist = standard.album_artist or (artist_names[0] if artist_names else UNKNOWN_ARTIST)

    if not artist_names:
        artist_names = [album_artist]

    album = Item(
        id=make_id(ItemKind.ALBUM, album_artist, album_name),
        name=album_name,
        kind=ItemKind.ALBUM,
    )
    artists = [
        Item(id=make_id(ItemKind.ARTIST, name), name=name, kind=ItemKind.ARTIST)
        for name in artist_names
    ]
    track = Item(
        id=make_id(ItemKind.TRACK, str(path.resolve())),
        name=title,
        kind=ItemKind.TRACK,
        path=path.resolve(),
        album_id=album.id,
        artist_ids=[artist.id for artist in artists],
    )
    return track, album, artists


def scan_directory(database: LibraryDatabase, directory: Path) -> ScanStats:
    """
    Import every audio file below `directory` into the library.

    Unreadable files are logged and skipped.

    Returns:
        ScanStats for the scan.
    """
    stats = ScanStats()
    seen_albums: set[str] = set()
    seen_artists: set[str] = set()

    files = find_audio_files(directory)
    stats.files_found = len(files)
    logger.info(f"Found {len(files)} audio files in {directory}")

    for path in files:
        try:
            track, album, artists = read_track(path)
        except ExtractionError as e:
            logger.warning(f"Skipping {path}: {e}")
            stats.failed += 1
            continue

        # Parents first so the track's links resolve
        if album.id not in seen_albums:
            database.upsert_item(album)
            seen_albums.add(album.id)
        for artist in artists:
            if artist.id not in seen_artists:
                database.upsert_item(artist)
                seen_artists.add(artist.id)

        database.upsert_item(track)
        stats.tracks_imported += 1
        logger.debug(f"Imported {track.name} ({path})")

    stats.albums = len(seen_albums)
    stats.artists = len(seen_artists)
    logger.info(
        f"Scan complete: {stats.tracks_imported} tracks, {stats.albums} albums, "
        f"{stats.artists} artists, {stats.failed} unreadable"
    )
    return stats
