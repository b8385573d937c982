"""
=============================================================================
HEADER MAP
=============================================================================

Case-insensitive, order-preserving multimap of HTTP header fields.

=============================================================================
STORAGE LAYOUT
=============================================================================

    Input:                          Internal storage:
    ┌──────────────────────────┐    ┌─────────────────────────────────────┐
    │ Content-Type: text/html  │    │ "content-type" → ("Content-Type",   │
    │ Accept: text/html        │ ─► │                   ["text/html"])    │
    │ ACCEPT: application/json │    │ "accept"       → ("Accept",         │
    └──────────────────────────┘    │                   ["text/html",     │
                                    │                    "application/    │
                                    │                     json"])         │
                                    └─────────────────────────────────────┘

- Lookups lowercase the name, so "ACCEPT", "Accept" and "accept" are
  the same header (RFC 7230 §3.2).
- The first casing seen is the one written back out.
- Names iterate in insertion order, values in append order.

=============================================================================
IMMUTABILITY
=============================================================================

set(), append() and remove() never touch the receiver. They copy the
internal dict and value lists and return a new HeaderMap, so two maps
never share mutable state:

    a = HeaderMap({"Accept": "text/html"})
    b = a.append("Accept", "application/json")
    a.get("accept")   # ["text/html"]
    b.get("accept")   # ["text/html", "application/json"]

=============================================================================
"""

import re
from collections.abc import Iterable, Iterator, Mapping
from typing import Union

from .errors import InvalidHeaderNameError, InvalidHeaderValueError


# =============================================================================
# FIELD GRAMMAR (RFC 7230 §3.2)
# =============================================================================
#
#   field-name  = token
#   token       = 1*tchar
#   tchar       = "!" / "#" / "$" / "%" / "&" / "'" / "*" / "+" / "-" / "."
#               / "^" / "_" / "`" / "|" / "~" / DIGIT / ALPHA
#
#   obs-fold    = CRLF 1*( SP / HTAB )
#
# A CR or LF is only legal inside a value as part of an obs-fold. Values
# go on the wire as ISO-8859-1, so characters above U+00FF are refused.
#
TOKEN_PATTERN = re.compile(r"^[!#$%&'*+\-.^_`|~0-9A-Za-z]+\Z")
VALUE_PATTERN = re.compile(r"^(?:[^\r\n\x00\u0100-\U0010ffff]|\r\n[ \t])*\Z")

HeaderValue = Union[str, int, float]
HeaderValues = Union[HeaderValue, Iterable[HeaderValue]]


def normalize_name(name: str) -> str:
    """Validate a header name and return its lookup key."""
    if not isinstance(name, str) or not TOKEN_PATTERN.match(name):
        raise InvalidHeaderNameError(f"Invalid header name: {name!r}", component=str(name))
    return name.lower()


def normalize_values(name: str, values: HeaderValues) -> list[str]:
    """
    Validate header values and return them as a list of trimmed strings.

    Accepts a single value or an iterable of values. Numbers are
    stringified; bool is rejected, it has no wire representation.
    """
    if isinstance(values, (str, int, float)):
        values = [values]
    elif isinstance(values, (bytes, bytearray)) or not isinstance(values, Iterable):
        raise InvalidHeaderValueError(
            f"Header {name!r} value must be a string or a sequence of strings",
            component=name,
        )

    result = []
    for value in values:
        if isinstance(value, bool) or not isinstance(value, (str, int, float)):
            raise InvalidHeaderValueError(
                f"Header {name!r} value must be a string, got {type(value).__name__}",
                component=name,
            )
        value = str(value)
        if not VALUE_PATTERN.match(value):
            raise InvalidHeaderValueError(
                f"Header {name!r} value contains a bare CR, LF, NUL or a non-Latin-1 character: {value!r}",
                component=name,
            )
        result.append(value.strip(" \t"))

    if not result:
        raise InvalidHeaderValueError(f"Header {name!r} needs at least one value", component=name)
    return result


class HeaderMap:
    """
    Immutable case-insensitive multimap of header names to ordered values.

    Construct from a mapping of name → value(s), an iterable of
    (name, value) pairs, or another HeaderMap.
    """

    __slots__ = ("_entries",)

    def __init__(
        self,
        headers: Union["HeaderMap", Mapping[str, HeaderValues], Iterable[tuple[str, HeaderValue]], None] = None,
    ):
        self._entries: dict[str, tuple[str, list[str]]] = {}

        if headers is None:
            return
        if isinstance(headers, HeaderMap):
            self._entries = headers._copy_entries()
            return

        pairs = headers.items() if isinstance(headers, Mapping) else headers
        for name, values in pairs:
            self._add(name, values)

    # =========================================================================
    # INTERNAL HELPERS
    # =========================================================================

    def _copy_entries(self) -> dict[str, tuple[str, list[str]]]:
        # New dict and new value lists; the strings themselves are immutable
        return {key: (name, list(values)) for key, (name, values) in self._entries.items()}

    def _add(self, name: str, values: HeaderValues) -> None:
        key = normalize_name(name)
        values = normalize_values(name, values)
        if key in self._entries:
            self._entries[key][1].extend(values)
        else:
            self._entries[key] = (name, values)

    def _derive(self) -> "HeaderMap":
        clone = HeaderMap.__new__(HeaderMap)
        clone._entries = self._copy_entries()
        return clone

    # =========================================================================
    # DERIVATION
    # =========================================================================

    def set(self, name: str, values: HeaderValues) -> "HeaderMap":
        """Return a copy where ``name`` holds exactly ``values``."""
        key = normalize_name(name)
        values = normalize_values(name, values)
        clone = self._derive()
        original = clone._entries[key][0] if key in clone._entries else name
        clone._entries[key] = (original, values)
        return clone

    def append(self, name: str, values: HeaderValues) -> "HeaderMap":
        """Return a copy with ``values`` added after any existing values."""
        clone = self._derive()
        clone._add(name, values)
        return clone

    def remove(self, name: str) -> "HeaderMap":
        """Return a copy without ``name``. Absent names are not an error."""
        key = normalize_name(name)
        clone = self._derive()
        clone._entries.pop(key, None)
        return clone

    def copy(self) -> "HeaderMap":
        return self._derive()

    # =========================================================================
    # LOOKUP
    # =========================================================================

    def get(self, name: str) -> list[str]:
        """All values for ``name`` in order, or [] when absent."""
        if not isinstance(name, str):
            return []
        entry = self._entries.get(name.lower())
        return list(entry[1]) if entry else []

    def get_line(self, name: str) -> str:
        """
        Values for ``name`` joined with ", ".

        This is the combined field value of RFC 7230 §3.2.2. Returns ""
        when the header is absent.
        """
        return ", ".join(self.get(name))

    def has(self, name: str) -> bool:
        return isinstance(name, str) and name.lower() in self._entries

    def names(self) -> list[str]:
        """Header names in insertion order, with their original casing."""
        return [name for name, _ in self._entries.values()]

    def items(self) -> list[tuple[str, list[str]]]:
        return [(name, list(values)) for name, values in self._entries.values()]

    def to_dict(self) -> dict[str, list[str]]:
        return {name: list(values) for name, values in self._entries.values()}

    def lines(self) -> list[str]:
        """Header lines as written on the wire, without CRLF."""
        return [f"{name}: {', '.join(values)}" for name, values in self._entries.values()]

    # =========================================================================
    # PROTOCOLS
    # =========================================================================

    def __contains__(self, name: object) -> bool:
        return self.has(name)

    def __iter__(self) -> Iterator[str]:
        return iter(self.names())

    def __len__(self) -> int:
        return len(self._entries)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, HeaderMap):
            return NotImplemented
        return {k: v for k, (_, v) in self._entries.items()} == {
            k: v for k, (_, v) in other._entries.items()
        }

    __hash__ = None

    def __repr__(self) -> str:
        return f"HeaderMap({self.to_dict()!r})"

    def __str__(self) -> str:
        return "\r\n".join(self.lines())
