"""Path traversal and character-range checks."""

from __future__ import annotations

_TRAVERSAL_SEGMENTS = frozenset({".", ".."})


def is_normalized(path: str | None) -> bool:
    """Return True if ``path`` has no ``.`` or ``..`` segment.

    Rejects ".", "..", "./x", "/./", "/.", "/..", "/a/../b". Percent-encoded
    dots are not decoded here; the encoded blocklist covers those.
    """
    if not path:
        return True
    return not any(segment in _TRAVERSAL_SEGMENTS for segment in path.split("/"))


def contains_only_printable_ascii(value: str | None) -> bool:
    """Return True if every character is in the printable ASCII range U+0020..U+007E."""
    if not value:
        return True
    return all(" " <= ch <= "~" for ch in value)
