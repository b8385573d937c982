"""
=============================================================================
HTTP MESSAGE ERRORS
=============================================================================

Every error raised by this package derives from HTTPMessageError, so
callers can catch the whole family with one except clause.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                        ERROR HIERARCHY                              │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │  HTTPMessageError                                                   │
    │   ├── InvalidArgumentError (ValueError)                             │
    │   │    ├── MalformedUriError                                        │
    │   │    ├── InvalidHeaderNameError                                   │
    │   │    └── InvalidHeaderValueError                                  │
    │   └── StreamError (OSError)                                         │
    │        ├── StreamUnreadableError ─┐                                 │
    │        ├── StreamUnwritableError ─┼── StreamDetachedError           │
    │        └── StreamNotSeekableError ┘                                 │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Errors are raised eagerly, at the call that received the bad input.
A value that was constructed successfully never fails later when it
is serialized.

=============================================================================
"""

from typing import Optional


class HTTPMessageError(Exception):
    """Base exception for the httpmessage package."""


# =============================================================================
# ARGUMENT ERRORS
# =============================================================================

class InvalidArgumentError(HTTPMessageError, ValueError):
    """
    Raised when a component passed to a constructor or ``with_*`` method
    is malformed.

    Carries the name of the offending component (``"port"``, ``"method"``,
    a header name, ...) so callers can report which part was rejected.
    """

    def __init__(self, message: str, component: Optional[str] = None):
        super().__init__(message)
        self.component = component


class MalformedUriError(InvalidArgumentError):
    """Raised when a raw string cannot be parsed as a URI."""


class InvalidHeaderNameError(InvalidArgumentError):
    """Raised when a header name is not a valid RFC 7230 token."""


class InvalidHeaderValueError(InvalidArgumentError):
    """Raised when a header value contains a bare CR, LF or NUL."""


# =============================================================================
# STREAM ERRORS
# =============================================================================

class StreamError(HTTPMessageError, OSError):
    """A stream operation failed."""


class StreamUnreadableError(StreamError):
    pass


class StreamUnwritableError(StreamError):
    pass


class StreamNotSeekableError(StreamError):
    pass


class StreamDetachedError(
    StreamUnreadableError, StreamUnwritableError, StreamNotSeekableError
):
    """
    Raised by any I/O call on a stream after ``detach()``.

    Subclasses all three capability errors: a detached stream is neither
    readable, writable nor seekable.
    """
