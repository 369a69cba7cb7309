"""
Helpers for working with `Name:Value` tag strings.

A tag's Name is everything before the LAST colon and its Value is the
rest (`AB:KEY:C#m` parses as Name `AB:KEY`, Value `C#m`). Names are
compared case-insensitively everywhere; values are kept verbatim.
"""

QUOTE_CHARS = "\"'"


def get_tag_name(tag: str) -> str | None:
    """
    Return the Name part of a tag, or None if the tag has no colon.

    Examples:
        >>> get_tag_name("BPM:128")
        'BPM'
        >>> get_tag_name("AB:KEY:Am")
        'AB:KEY'
        >>> get_tag_name("novalue") is None
        True
    """
    index = tag.rfind(":")
    if index < 0:
        return None
    return tag[:index]


def make_tag(name: str, value: str) -> str:
    return f"{name}:{value}"


def strip_surrounding_quotes(value: str) -> str:
    """
    Remove one pair of matching quotes wrapping the whole value.

    Only strips when the value is at least two characters long and starts
    and ends with the same quote character; anything else is returned
    untouched, so `"abc'` and a lone `"` stay as they are.
    """
    if len(value) >= 2 and value[0] == value[-1] and value[0] in QUOTE_CHARS:
        return value[1:-1]
    return value


def parse_field_names(raw: str | None) -> list[str]:
    """
    Parse the configured comma-separated field names.

    An outer pair of double quotes around the whole string is removed,
    then each comma-separated entry is trimmed and stripped of any
    leading/trailing quote characters. Empty entries are dropped and the
    configured order is kept. Never raises.

    Example:
        >>> parse_field_names('"BPM, \\'KEY\\', ,MOOD"')
        ['BPM', 'KEY', 'MOOD']
    """
    if not raw:
        return []

    text = raw.strip()
    if len(text) >= 2 and text.startswith('"') and text.endswith('"'):
        text = text[1:-1]

    names = []
    for entry in text.split(","):
        name = entry.strip().strip(QUOTE_CHARS).strip()
        if name:
            names.append(name)
    return names


def parse_delimiters(raw: str | None) -> str:
    """
    Return the distinct delimiter characters in configured order.

    An empty or whitespace-only setting disables splitting. Whitespace is
    only a delimiter when it is mixed with other characters, so
    `"; "` splits on both but `"   "` disables splitting.
    """
    if not raw or not raw.strip():
        return ""
    return "".join(dict.fromkeys(raw))


def parse_tag_names(raw: str | None) -> set[str]:
    """
    Parse a comma-separated list of tag names to remove.

    Entries are trimmed and lower-cased; empty entries are ignored.

    Example:
        >>> sorted(parse_tag_names(" Mood, BPM ,, "))
        ['bpm', 'mood']
    """
    if not raw:
        return set()
    return {entry.strip().lower() for entry in raw.split(",") if entry.strip()}
