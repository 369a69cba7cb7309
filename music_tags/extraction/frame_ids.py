"""
Friendly field names mapped to ID3v2 frame identifiers.

Lets a user configure `FILETYPE` or `MOOD` and have it read the matching
ID3v2 text frame (`TFLT`, `TMOO`). Several names intentionally alias the
same frame, e.g. KEY and INITIALKEY both read TKEY.

Lookups are case-insensitive. The map is consulted only after the
format-native probes have come up empty.
"""

from types import MappingProxyType


FRAME_ID_MAP = MappingProxyType({
    # Audio file and technical information
    "FILETYPE": "TFLT",
    "MEDIATYPE": "TMED",
    "ENCODEDBY": "TENC",
    "ENCODERSETTINGS": "TSSE",
    "LENGTH": "TLEN",

    # Content descriptors
    "CONTENTTYPE": "TCON",
    "CONTENTGROUP": "TIT1",
    "SUBTITLE": "TIT3",
    "LANGUAGE": "TLAN",
    "MOOD": "TMOO",

    # Musical key and tempo
    "KEY": "TKEY",
    "INITIALKEY": "TKEY",
    "BPM": "TBPM",

    # People and organizations
    "ORIGINALARTIST": "TOPE",
    "LYRICIST": "TEXT",
    "COMPOSER": "TCOM",
    "CONDUCTOR": "TPE3",
    "REMIXER": "TPE4",
    "INVOLVEDPEOPLE": "TIPL",
    "MUSICIANCREDITS": "TMCL",
    "BAND": "TPE2",

    # Original release information
    "ORIGINALALBUM": "TOAL",
    "ORIGINALFILENAME": "TOFN",
    "ORIGINALYEAR": "TORY",
    "ORIGINALDATE": "TDOR",
    "ORIGINALLYRICIST": "TOLY",

    # Rights and legal
    "COPYRIGHT": "TCOP",
    "PUBLISHER": "TPUB",
    "OWNER": "TOWN",
    "PRODUCEDNOTICE": "TPRO",

    # Identifiers
    "ISRC": "TSRC",
    "RADIOSTATION": "TRSN",
    "RADIOSTATIONOWNER": "TRSO",

    # Sorting
    "ALBUMSORTORDER": "TSOA",
    "PERFORMERSORTORDER": "TSOP",
    "TITLESORTORDER": "TSOT",
    "ALBUMARTISTSORT": "TSO2",
    "COMPOSERSORT": "TSOC",

    # Ownership
    "FILEOWNER": "TOWN",
    "INTERNETRADIOSTATION": "TRSN",

    # Multi-disc sets
    "SETSUBTITLE": "TSST",

    "PLAYLISTDELAY": "TDLY",
})


def lookup_frame_id(name: str) -> str | None:
    """Return the ID3v2 frame id for a friendly name, or None."""
    return FRAME_ID_MAP.get(name.strip().upper())


def looks_like_frame_id(name: str) -> bool:
    """True for exactly four ASCII letters or digits, e.g. `TFLT`."""
    return len(name) == 4 and name.isascii() and name.isalnum()
