"""Test configuration and fixtures"""

import tempfile
import threading
from contextlib import contextmanager
from pathlib import Path

import pytest
from mutagen._vorbis import VCommentDict
from mutagen.asf import ASFTags
from mutagen.flac import FLAC
from mutagen.id3 import ID3
from mutagen.mp4 import MP4Tags

from music_tags.core.config import Config, ExtractionConfig, LibraryConfig, ProcessingConfig
from music_tags.core.exceptions import ExtractionError, PersistenceError
from music_tags.extraction.handle import MetadataHandle
from music_tags.library.models import Item, ItemKind, ItemQuery


# "fLaC" + a single (last) STREAMINFO block: 44.1 kHz, stereo, 16 bit, no samples
FLAC_STUB = (
    b"fLaC"
    + b"\x80\x00\x00\x22"
    + b"\x10\x00\x10\x00"
    + b"\x00\x00\x00\x00\x00\x00"
    + b"\x0a\xc4\x42\xf0\x00\x00\x00\x00"
    + b"\x00" * 16
)


def write_flac(path: Path, **comments: str | list[str]) -> Path:
    """Write a tiny FLAC file carrying the given Vorbis comments."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(FLAC_STUB)
    audio = FLAC(str(path))
    audio.add_tags()
    for key, value in comments.items():
        audio[key] = value
    audio.save()
    return path


@pytest.fixture
def temp_dir():
    """Create temporary directory for tests"""
    with tempfile.TemporaryDirectory() as temp_dir:
        yield Path(temp_dir)


# =============================================================================
# In-memory metadata
# =============================================================================

@pytest.fixture
def id3_tags():
    return ID3()


@pytest.fixture
def vorbis_tags():
    return VCommentDict()


@pytest.fixture
def mp4_tags():
    return MP4Tags()


@pytest.fixture
def asf_tags():
    return ASFTags()


@pytest.fixture
def make_handle():
    """Wrap a mutagen tag object in a MetadataHandle."""
    def factory(tags):
        return MetadataHandle(tags, Path("/music/test"))
    return factory


class FakeReader:
    """
    Stand-in for open_metadata that serves prepared tag objects by path.

    Paths without an entry raise ExtractionError like a missing file.
    """

    def __init__(self, files: dict | None = None):
        self.files = dict(files or {})
        self.opened: list[Path] = []
        self._lock = threading.Lock()

    @contextmanager
    def __call__(self, path):
        with self._lock:
            self.opened.append(Path(path))
        tags = self.files.get(Path(path))
        if tags is None:
            raise ExtractionError(f"Audio file not found: {path}", details={"path": str(path)})
        yield MetadataHandle(tags, Path(path))


@pytest.fixture
def fake_reader():
    return FakeReader()


# =============================================================================
# Library
# =============================================================================

class FakeLibrary:
    """
    In-memory LibraryService.

    query_items() hands out copies, as a real store would, and
    update_item() stores a copy of the tag list. Ids listed in
    `fail_updates` raise PersistenceError.
    """

    def __init__(self, items: list[Item] | None = None):
        self.items: dict[str, Item] = {}
        self.updates: list[str] = []
        self.fail_updates: set[str] = set()
        self._lock = threading.Lock()
        for item in items or []:
            self.add(item)

    def add(self, item: Item) -> Item:
        self.items[item.id] = item
        return item

    def _copy(self, item: Item) -> Item:
        return Item(
            id=item.id,
            name=item.name,
            kind=item.kind,
            path=item.path,
            album_id=item.album_id,
            artist_ids=list(item.artist_ids),
            tags=list(item.tags),
        )

    def query_items(self, query: ItemQuery) -> list[Item]:
        with self._lock:
            result = [i for i in self.items.values() if i.kind is query.kind]
            if query.parent_id is not None:
                result = [i for i in result if i.album_id == query.parent_id]
            if query.artist_id is not None:
                result = [i for i in result if query.artist_id in i.artist_ids]
            return [self._copy(i) for i in result]

    def update_item(self, item: Item) -> None:
        if item.id in self.fail_updates:
            raise PersistenceError(f"Cannot save {item.id}", details={"item_id": item.id})
        with self._lock:
            self.updates.append(item.id)
            self.items[item.id].tags = list(item.tags)

    def tags_of(self, item_id: str) -> list[str]:
        return self.items[item_id].tags


@pytest.fixture
def library():
    return FakeLibrary()


def make_track(track_id: str, album_id: str | None = None, artist_ids=None, tags=None) -> Item:
    return Item(
        id=track_id,
        name=f"Track {track_id}",
        kind=ItemKind.TRACK,
        path=Path(f"/music/{track_id}.mp3"),
        album_id=album_id,
        artist_ids=list(artist_ids or []),
        tags=list(tags or []),
    )


# =============================================================================
# Configuration
# =============================================================================

@pytest.fixture
def make_config(temp_dir):
    """Build a Config snapshot with extraction overrides."""
    def factory(threads: int | None = None, **extraction) -> Config:
        return Config(
            library=LibraryConfig(
                database=temp_dir / "library.db",
                log_directory=temp_dir,
            ),
            extraction=ExtractionConfig(**extraction),
            processing=ProcessingConfig(threads=threads),
        )
    return factory
