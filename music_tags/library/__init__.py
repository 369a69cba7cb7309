"""
Library module for music-tags.

The library is the collaborator the processing core reads items from and
writes tag lists back to:
    - models: Item, ItemKind, ItemQuery, LibraryService protocol
    - database: SQLite-backed LibraryDatabase
    - scanner: Directory import (music_tags.library.scanner)
"""

from music_tags.library.models import Item, ItemKind, ItemQuery, LibraryService
from music_tags.library.database import LibraryDatabase

__all__ = [
    "Item",
    "ItemKind",
    "ItemQuery",
    "LibraryService",
    "LibraryDatabase",
]
