"""
=============================================================================
MESSAGE CORE
=============================================================================

The state every HTTP message carries, whatever its start line:
protocol version, headers and body.

=============================================================================
COMPOSITION
=============================================================================

Request and Response do not inherit message state. Each one embeds a
MessageCore value and exposes the shared surface through MessageSurface:

    ┌──────────────────────────┐       ┌──────────────────────────┐
    │ Request                  │       │ Response                 │
    │  method, uri, target ... │       │  status_code, reason ... │
    │  message ──────────┐     │       │  message ──────────┐     │
    └────────────────────┼─────┘       └────────────────────┼─────┘
                         ▼                                  ▼
                 ┌───────────────────────────────────────────────┐
                 │ MessageCore                                   │
                 │  protocol_version   headers: HeaderMap        │
                 │  body: Stream                                 │
                 └───────────────────────────────────────────────┘

=============================================================================
DERIVATION PROTOCOL
=============================================================================

Every with_* method:

    1. shallow-clones the enclosing value
    2. builds a new HeaderMap whenever headers change (and copies it on
       every derivation, so two messages never share one)
    3. replaces only the targeted field
    4. leaves the receiver untouched

    original = Response(200)
    derived  = original.with_header("X-Trace", "abc")
    original.has_header("X-Trace")   # False
    derived.has_header("X-Trace")    # True

The body Stream is the exception: derived messages share it until
with_body() swaps it out. with_body() never closes the old stream.

=============================================================================
"""

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from typing import Any, Union

from .config import PROTOCOL_VERSION_PATTERN, get_config
from .errors import InvalidArgumentError
from .headers import HeaderMap, HeaderValues
from .stream import Stream


BodyInput = Union[Stream, str, bytes, bytearray, None, Any]
HeadersInput = Union[HeaderMap, Mapping[str, HeaderValues], None, Any]


def filter_protocol_version(version: Any) -> str:
    if not isinstance(version, str) or not PROTOCOL_VERSION_PATTERN.match(version):
        raise InvalidArgumentError(
            f"Invalid protocol version: {version!r}", component="protocol_version"
        )
    return version


def to_stream(body: BodyInput) -> Stream:
    """
    Coerce a body argument into a Stream.

        Stream           used as-is (shared, not copied)
        str / bytes      wrapped in an in-memory stream
        None             empty in-memory stream
        binary file-like wrapped; text file objects are rejected
    """
    if isinstance(body, Stream):
        return body
    if body is None:
        return Stream()
    if isinstance(body, str):
        return Stream.from_string(body)
    if isinstance(body, (bytes, bytearray, memoryview)):
        return Stream.from_bytes(body)
    if callable(getattr(body, "read", None)):
        try:
            return Stream(body)
        except TypeError as e:
            raise InvalidArgumentError(str(e), component="body") from e
    raise InvalidArgumentError(
        f"Body must be a Stream, str, bytes or file-like object, got {type(body).__name__}",
        component="body",
    )


def to_headers(headers: HeadersInput) -> HeaderMap:
    """Always returns a fresh HeaderMap, never the argument itself."""
    if headers is None:
        return HeaderMap()
    return HeaderMap(headers)


@dataclass(frozen=True)
class MessageCore:
    """
    Protocol version, headers and body of one HTTP message.

    Construction accepts loose inputs (dict headers, str body) and
    normalizes them. The HeaderMap is copied on every construction,
    including the ones done by the with_* methods.
    """

    headers: HeaderMap = field(default_factory=HeaderMap)
    body: Stream = field(default_factory=Stream)
    protocol_version: str = ""

    # Holds a HeaderMap, which is not hashable
    __hash__ = None

    def __post_init__(self):
        version = self.protocol_version or get_config().protocol_version
        object.__setattr__(self, "protocol_version", filter_protocol_version(version))
        object.__setattr__(self, "headers", to_headers(self.headers))
        object.__setattr__(self, "body", to_stream(self.body))

    # =========================================================================
    # READ SURFACE
    # =========================================================================

    def get_headers(self) -> dict[str, list[str]]:
        """Original-case name → list of values, as a fresh dict."""
        return self.headers.to_dict()

    def has_header(self, name: str) -> bool:
        return self.headers.has(name)

    def get_header(self, name: str) -> list[str]:
        return self.headers.get(name)

    def get_header_line(self, name: str) -> str:
        return self.headers.get_line(name)

    # =========================================================================
    # DERIVATION
    # =========================================================================

    def with_protocol_version(self, version: str) -> "MessageCore":
        return replace(self, protocol_version=filter_protocol_version(version))

    def with_header(self, name: str, value: HeaderValues) -> "MessageCore":
        return replace(self, headers=self.headers.set(name, value))

    def with_added_header(self, name: str, value: HeaderValues) -> "MessageCore":
        return replace(self, headers=self.headers.append(name, value))

    def without_header(self, name: str) -> "MessageCore":
        return replace(self, headers=self.headers.remove(name))

    def with_body(self, body: BodyInput) -> "MessageCore":
        return replace(self, body=to_stream(body))


class MessageSurface:
    """
    Shared message API for values that embed a MessageCore.

    The host class stores its core in ``message`` and must not be
    mutated after __init__; _derive() is the only way to change a field.
    """

    message: MessageCore

    def _derive(self, **changes: Any):
        # Shallow clone without going through __init__ or frozen __setattr__
        clone = object.__new__(type(self))
        clone.__dict__.update(self.__dict__)
        # A fresh core means a fresh HeaderMap, even when headers are unchanged
        changes.setdefault("message", replace(self.message))
        for name, value in changes.items():
            object.__setattr__(clone, name, value)
        return clone

    @property
    def protocol_version(self) -> str:
        return self.message.protocol_version

    @property
    def headers(self) -> HeaderMap:
        return self.message.headers

    @property
    def body(self) -> Stream:
        return self.message.body

    def get_headers(self) -> dict[str, list[str]]:
        return self.message.get_headers()

    def has_header(self, name: str) -> bool:
        return self.message.has_header(name)

    def get_header(self, name: str) -> list[str]:
        return self.message.get_header(name)

    def get_header_line(self, name: str) -> str:
        return self.message.get_header_line(name)

    def with_protocol_version(self, version: str):
        return self._derive(message=self.message.with_protocol_version(version))

    def with_header(self, name: str, value: HeaderValues):
        """Replace every value of ``name`` (case-insensitive)."""
        return self._derive(message=self.message.with_header(name, value))

    def with_added_header(self, name: str, value: HeaderValues):
        """Append ``value`` to ``name``, creating the header if needed."""
        return self._derive(message=self.message.with_added_header(name, value))

    def without_header(self, name: str):
        return self._derive(message=self.message.without_header(name))

    def with_body(self, body: BodyInput):
        """
        Swap the body.

        The previous Stream is left open; whoever still holds it owns it.
        """
        return self._derive(message=self.message.with_body(body))

    def _wire_head(self, start_line: str) -> bytes:
        lines = [start_line] + self.message.headers.lines()
        return ("\r\n".join(lines) + "\r\n\r\n").encode("latin-1")

    def _wire_body(self) -> bytes:
        # Best-effort coercion: an unreadable body serializes as empty
        return self.message.body.to_bytes()

    def to_bytes(self) -> bytes:
        """
        Serialize for a transport: start line, header lines, blank line,
        body.

        No headers are added. Content-Length and friends are the
        transport's business.
        """
        return self._wire_head(self.start_line) + self._wire_body()

    @property
    def start_line(self) -> str:
        raise NotImplementedError
