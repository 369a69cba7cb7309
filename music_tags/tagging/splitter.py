"""
Splitting of extracted raw values into discrete tag values.
"""

import re

from music_tags.core.logger import get_logger


logger = get_logger(__name__)


def split_tag_value(value: str, delimiters: str) -> list[str]:
    """
    Split a raw extracted value on any of the delimiter characters.

    Args:
        value: Raw value as returned by the field extractor.
        delimiters: Delimiter characters; empty disables splitting.

    Returns:
        The trimmed, non-empty pieces in order. Without delimiters, or when
        the value contains none of them, a singleton list holding the
        original value unchanged.

    Never raises: on any internal failure the original value is returned
    as a singleton.

    Example:
        >>> split_tag_value("Rock/Pop|Jazz", "/|")
        ['Rock', 'Pop', 'Jazz']
    """
    if not delimiters:
        return [value]

    try:
        if not any(d in value for d in delimiters):
            return [value]

        pattern = "[" + re.escape(delimiters) + "]"
        pieces = [piece.strip() for piece in re.split(pattern, value)]
        return [piece for piece in pieces if piece]
    except Exception as e:
        logger.warning(f"Failed to split value '{value}' with '{delimiters}': {e}")
        return [value]
