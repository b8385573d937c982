"""
=============================================================================
HTTP RESPONSE VALUE
=============================================================================

An immutable HTTP response: status code, reason phrase, headers, body.

=============================================================================
HTTP RESPONSE ANATOMY
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                     HTTP RESPONSE STRUCTURE                         │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │    HTTP/1.1 200 OK\r\n                   ◄── status_line            │
    │    ────┬─── ─┬─ ─┬─                                                  │
    │        │     │   │                                                   │
    │    Version  Code Reason phrase                                       │
    │                                                                      │
    │    Content-Type: application/json\r\n                                │
    │    \r\n                                                              │
    │    {"message": "Hello World"}                                        │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

The reason phrase defaults to the registered phrase for the code
(status_codes.REASON_PHRASES) and to "" for unregistered codes.

=============================================================================
"""

import re
from dataclasses import dataclass
from typing import Any, Optional

from .errors import InvalidArgumentError
from .message import BodyInput, HeadersInput, MessageCore, MessageSurface
from .status_codes import reason_phrase as default_reason_phrase

# reason-phrase = *( HTAB / SP / VCHAR / obs-text )
REASON_PATTERN = re.compile(r"^[\t\x20-\x7e\x80-\xff]*\Z")


def filter_status(code: Any) -> int:
    """
    Validate a status code.

    Must be a non-negative int (bool excluded). Codes are conventionally
    100-599, but extension and legacy codes outside that range pass.
    """
    if isinstance(code, bool) or not isinstance(code, int):
        raise InvalidArgumentError(
            f"Status code must be an integer, got {type(code).__name__}", component="status"
        )
    if code < 0:
        raise InvalidArgumentError(
            f"Invalid status code {code}; must not be negative",
            component="status",
        )
    return int(code)


def _filter_reason(reason: Any, code: int) -> str:
    if reason is None:
        reason = ""
    if not isinstance(reason, str) or not REASON_PATTERN.match(reason):
        raise InvalidArgumentError(f"Invalid reason phrase: {reason!r}", component="reason_phrase")
    return reason or default_reason_phrase(code)


@dataclass(frozen=True, init=False)
class Response(MessageSurface):
    """
    Represents an HTTP response as an immutable value.

    Example:
        response = Response(404)
        response.status_line                   # "HTTP/1.1 404 Not Found"
        teapot = response.with_status(418, "Short and stout")
    """

    status_code: int
    reason_phrase: str
    message: MessageCore

    __hash__ = None

    def __init__(
        self,
        status: int = 200,
        headers: HeadersInput = None,
        body: BodyInput = None,
        reason_phrase: str = "",
        protocol_version: Optional[str] = None,
    ):
        status = filter_status(status)
        object.__setattr__(self, "status_code", status)
        object.__setattr__(self, "reason_phrase", _filter_reason(reason_phrase, status))
        object.__setattr__(
            self,
            "message",
            MessageCore(headers=headers, body=body, protocol_version=protocol_version or ""),
        )

    def with_status(self, code: int, reason_phrase: str = "") -> "Response":
        """
        Return a copy with a new status.

        An empty reason phrase is replaced by the registered phrase for
        ``code``.

        Raises:
            InvalidArgumentError: For a non-integer or negative code.
        """
        code = filter_status(code)
        return self._derive(status_code=code, reason_phrase=_filter_reason(reason_phrase, code))

    # =========================================================================
    # STATUS CATEGORIES
    # =========================================================================

    @property
    def is_informational(self) -> bool:
        return 100 <= self.status_code < 200

    @property
    def is_success(self) -> bool:
        return 200 <= self.status_code < 300

    @property
    def is_redirect(self) -> bool:
        return 300 <= self.status_code < 400

    @property
    def is_client_error(self) -> bool:
        return 400 <= self.status_code < 500

    @property
    def is_server_error(self) -> bool:
        return 500 <= self.status_code < 600

    # =========================================================================
    # SERIALIZATION
    # =========================================================================

    @property
    def status_line(self) -> str:
        """
        The HTTP status line.

        Format: HTTP-VERSION SP STATUS-CODE SP REASON-PHRASE
        Example: "HTTP/1.1 200 OK"

        The trailing space stays when the reason phrase is empty, as
        RFC 9112 §4 requires.
        """
        return f"HTTP/{self.protocol_version} {self.status_code} {self.reason_phrase}"

    @property
    def start_line(self) -> str:
        return self.status_line
