"""Encoded and decoded URL blocklists.

The encoded blocklist is matched against the request target as received and
every other raw representation of the URL. The decoded blocklist is matched
against the percent-decoded path only. Matching is plain substring containment.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from http_firewall.models.options import FirewallOptions

ENCODED_PERCENT = "%25"
PERCENT = "%"
FORBIDDEN_ENCODED_PERIOD = ("%2e", "%2E")
FORBIDDEN_SEMICOLON = (";", "%3b", "%3B")
FORBIDDEN_FORWARDSLASH = ("%2f", "%2F")
FORBIDDEN_DOUBLE_FORWARDSLASH = ("//", "%2f%2f", "%2f%2F", "%2F%2f", "%2F%2F")
FORBIDDEN_BACKSLASH = ("\\", "%5c", "%5C")
FORBIDDEN_NULL = ("\0", "%00")
FORBIDDEN_LF = ("\n", "%0a", "%0A")
FORBIDDEN_CR = ("\r", "%0d", "%0D")
FORBIDDEN_LINE_SEPARATOR = ("\u2028",)
FORBIDDEN_PARAGRAPH_SEPARATOR = ("\u2029",)


class _OrderedSet:
    """Insertion-ordered string set used only while building a BlocklistPair."""

    def __init__(self) -> None:
        self._items: dict[str, None] = {}

    def add_all(self, values: Iterable[str]) -> None:
        for value in values:
            self._items[value] = None

    def remove_all(self, values: Iterable[str]) -> None:
        for value in values:
            self._items.pop(value, None)

    def freeze(self) -> tuple[str, ...]:
        return tuple(self._items)


@dataclass(frozen=True)
class BlocklistPair:
    """Frozen pair of forbidden substrings."""

    encoded: tuple[str, ...]
    decoded: tuple[str, ...]

    def first_encoded_match(self, fields: Iterable[str | None]) -> tuple[str, str] | None:
        """Return ``(field, literal)`` for the first encoded literal found in any field."""
        values = [f for f in fields if f]
        for forbidden in self.encoded:
            for value in values:
                if forbidden in value:
                    return value, forbidden
        return None

    def first_decoded_match(self, path: str | None) -> str | None:
        """Return the first decoded literal contained in the decoded path."""
        if not path:
            return None
        for forbidden in self.decoded:
            if forbidden in path:
                return forbidden
        return None


def build_blocklists(options: FirewallOptions) -> BlocklistPair:
    """Build the blocklists for ``options``, starting from the strict baseline."""
    encoded = _OrderedSet()
    decoded = _OrderedSet()

    def both(add: bool, values: Iterable[str]) -> None:
        values = tuple(values)
        for target in (encoded, decoded):
            if add:
                target.add_all(values)
            else:
                target.remove_all(values)

    both(True, FORBIDDEN_SEMICOLON)
    both(True, FORBIDDEN_FORWARDSLASH)
    both(True, FORBIDDEN_DOUBLE_FORWARDSLASH)
    both(True, FORBIDDEN_BACKSLASH)
    both(True, FORBIDDEN_NULL)
    both(True, FORBIDDEN_LF)
    both(True, FORBIDDEN_CR)
    encoded.add_all([ENCODED_PERCENT])
    encoded.add_all(FORBIDDEN_ENCODED_PERIOD)
    decoded.add_all([PERCENT])
    encoded.add_all(FORBIDDEN_LINE_SEPARATOR)
    encoded.add_all(FORBIDDEN_PARAGRAPH_SEPARATOR)

    if options.allow_semicolon:
        both(False, FORBIDDEN_SEMICOLON)
    if options.allow_url_encoded_slash:
        both(False, FORBIDDEN_FORWARDSLASH)
    if options.allow_url_encoded_double_slash:
        both(False, FORBIDDEN_DOUBLE_FORWARDSLASH)
    if options.allow_url_encoded_period:
        encoded.remove_all(FORBIDDEN_ENCODED_PERIOD)
    if options.allow_back_slash:
        both(False, FORBIDDEN_BACKSLASH)
    if options.allow_null:
        both(False, FORBIDDEN_NULL)
    if options.allow_url_encoded_percent:
        encoded.remove_all([ENCODED_PERCENT])
        decoded.remove_all([PERCENT])
    if options.allow_url_encoded_carriage_return:
        both(False, FORBIDDEN_CR)
    if options.allow_url_encoded_line_feed:
        both(False, FORBIDDEN_LF)
    if options.allow_url_encoded_paragraph_separator:
        encoded.remove_all(FORBIDDEN_PARAGRAPH_SEPARATOR)
    if options.allow_url_encoded_line_separator:
        encoded.remove_all(FORBIDDEN_LINE_SEPARATOR)

    # Caller entries extend the baseline, they never replace it
    decoded.add_all(options.decoded_url_blocklist)
    encoded.add_all(options.encoded_url_blocklist)

    return BlocklistPair(encoded=encoded.freeze(), decoded=decoded.freeze())
