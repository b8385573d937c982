"""
=============================================================================
HTTPMESSAGE - Immutable HTTP Message Values
=============================================================================

Requests, responses, URIs, headers and body streams as value objects.
Every "modification" returns a new object, so one message can be handed
through any number of processing steps without a step seeing another's
changes.

=============================================================================
PACKAGE STRUCTURE
=============================================================================

    httpmessage/
    ├── __init__.py        # This file - package exports
    ├── __main__.py        # CLI entry point (python -m httpmessage)
    ├── config.py          # MessageConfig dataclass
    ├── errors.py          # Exception hierarchy
    ├── uri.py             # Uri value (RFC 3986)
    ├── headers.py         # Case-insensitive HeaderMap
    ├── stream.py          # Stream over a byte resource
    ├── message.py         # MessageCore + shared message surface
    ├── request.py         # Request value
    ├── response.py        # Response value
    └── status_codes.py    # Status codes and reason phrases

=============================================================================
QUICK START
=============================================================================

    from httpmessage import Request, Response, Uri

    request = Request("http://example.com/users?page=2", "get")
    request.method                      # "GET"
    request.get_header_line("host")     # "example.com"
    request.get_request_target()        # "/users?page=2"

    moved = request.with_uri(Uri.parse("https://api.example.com/v2"))
    moved.get_header_line("Host")       # "api.example.com"
    request.get_header_line("Host")     # still "example.com"

    response = Response(201, {"Location": "/users/7"}, body='{"id": 7}')
    response.status_line                # "HTTP/1.1 201 Created"
    str(response.body)                  # '{"id": 7}'

=============================================================================
"""

__version__ = "1.0.0"

from .config import ACCEPTED_METHODS, MessageConfig, get_config, set_config
from .errors import (
    HTTPMessageError,
    InvalidArgumentError,
    InvalidHeaderNameError,
    InvalidHeaderValueError,
    MalformedUriError,
    StreamDetachedError,
    StreamError,
    StreamNotSeekableError,
    StreamUnreadableError,
    StreamUnwritableError,
)
from .headers import HeaderMap
from .message import MessageCore
from .request import Request
from .response import Response
from .status_codes import HTTPStatus, REASON_PHRASES
from .stream import Stream
from .uri import Uri

__all__ = [
    # Values
    "Uri",
    "HeaderMap",
    "Stream",
    "MessageCore",
    "Request",
    "Response",
    # Tables
    "HTTPStatus",
    "REASON_PHRASES",
    "ACCEPTED_METHODS",
    # Configuration
    "MessageConfig",
    "get_config",
    "set_config",
    # Errors
    "HTTPMessageError",
    "InvalidArgumentError",
    "MalformedUriError",
    "InvalidHeaderNameError",
    "InvalidHeaderValueError",
    "StreamError",
    "StreamUnreadableError",
    "StreamUnwritableError",
    "StreamNotSeekableError",
    "StreamDetachedError",
    "__version__",
]
