"""
Word-boundary message chunking for the mesh payload limit.
"""

from typing import List

DEFAULT_FRAGMENT_BYTES = 75


def byte_length(text: str) -> int:
    """Length of text encoded as UTF-8."""
    return len(text.encode("utf-8"))


def chunk_message(text: str, limit: int = DEFAULT_FRAGMENT_BYTES) -> List[str]:
    """
    Split a message into fragments of at most ``limit`` UTF-8 bytes.

    Words are accumulated greedily and fragments are closed at the last
    space that keeps them within the limit. A word longer than the limit
    is never broken and becomes a fragment on its own. Joining the
    fragments with single spaces gives back the original text.

    Args:
        text: Message to split
        limit: Maximum fragment size in bytes

    Returns:
        Fragments in message order
    """
    if not text:
        return []

    fragments: List[str] = []
    words = text.split(" ")
    current = words[0]

    for word in words[1:]:
        candidate = f"{current} {word}"
        if byte_length(candidate) <= limit:
            current = candidate
        else:
            fragments.append(current)
            current = word

    fragments.append(current)
    return fragments
