"""
Data models for the music library.

These dataclasses are the shapes exchanged between the processing core
and whatever library store backs it (the bundled SQLite store, or a fake
in tests).

Item kinds:
    TRACK  - an audio file on disk; owns a path
    ALBUM  - aggregate of its direct child tracks
    ARTIST - aggregate of every track attributed to the artist
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Protocol


class ItemKind(str, Enum):
    """Kind of library item. Values are stored verbatim in the database."""
    TRACK = "track"
    ALBUM = "album"
    ARTIST = "artist"


@dataclass
class Item:
    """
    A library item and its tag list.

    Attributes:
        id: Stable library id.
        name: Display name (track title, album title, artist name).
        kind: TRACK, ALBUM or ARTIST.
        path: Audio file path. Tracks only.
        album_id: Id of the album the track belongs to. Tracks only.
        artist_ids: Ids of the artists the track is attributed to. Tracks only.
        tags: Ordered `Name:Value` strings. Exact duplicates are tolerated.

    Thread Safety:
        An Item is mutated only by the worker handling it within a pass.
    """
    id: str
    name: str
    kind: ItemKind
    path: Path | None = None
    album_id: str | None = None
    artist_ids: list[str] = field(default_factory=list)
    tags: list[str] = field(default_factory=list)

    @property
    def display_name(self) -> str:
        return self.name or self.id


@dataclass(frozen=True)
class ItemQuery:
    """
    Filter for LibraryService.query_items().

    Attributes:
        kind: Only items of this kind.
        parent_id: Only direct children of this album.
        artist_id: Only tracks attributed to this artist.
    """
    kind: ItemKind
    parent_id: str | None = None
    artist_id: str | None = None


class LibraryService(Protocol):
    """
    What the processing core needs from a library store.

    query_items() materializes the whole result set and raises
    LibraryError when the query itself fails. update_item() persists one
    item's tag list and raises PersistenceError on failure; it is safe to
    call concurrently for distinct items.
    """

    def query_items(self, query: ItemQuery) -> list[Item]:
        ...

    def update_item(self, item: Item) -> None:
        ...
