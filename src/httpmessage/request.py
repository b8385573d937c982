"""
=============================================================================
HTTP REQUEST VALUE
=============================================================================

An immutable HTTP request: method, URI, request target, headers, body,
plus the server-side context a handler sees (attributes, cookies, query
parameters, server parameters, uploaded files, parsed body).

=============================================================================
REQUEST ANATOMY
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                     HTTP REQUEST STRUCTURE                          │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │    GET /api/users?page=1 HTTP/1.1\r\n       ◄── request_line        │
    │    ─┬─ ────────┬──────── ───┬────                                   │
    │     │          │            │                                        │
    │   method  request target  protocol_version                          │
    │                                                                      │
    │    Host: example.com\r\n                    ◄── kept in sync with   │
    │    Accept: application/json\r\n                 uri.host            │
    │    \r\n                                                              │
    │    ...body...                                                        │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
REQUEST TARGET
=============================================================================

The request target is derived from the URI unless explicitly overridden:

    uri                                  get_request_target()
    ───────────────────────────────────  ────────────────────
    http://example.com/a?b=c             /a?b=c
    http://example.com                   /
    http://example.com//double           /double
    with_request_target("*")             *            (override wins)

=============================================================================
HOST SYNCHRONIZATION
=============================================================================

    with_uri(uri)                       Host ← uri host
    with_uri(uri, preserve_host=True)   Host kept, unless it is missing
                                        or empty, then Host ← uri host

A URI without a host never touches the Host header.

=============================================================================
"""

import copy
import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Optional, Union

from .config import get_config
from .errors import InvalidArgumentError
from .message import BodyInput, HeadersInput, MessageCore, MessageSurface
from .uri import Uri


logger = logging.getLogger(__name__)

WHITESPACE_PATTERN = re.compile(r"\s")

_EMPTY = MappingProxyType({})


def filter_method(method: Any) -> str:
    """
    Validate and uppercase a request method.

    Only methods in the configured accepted set pass (GET, HEAD, POST,
    PUT, OPTIONS, PATCH, DELETE plus MessageConfig.extra_methods).
    """
    if not isinstance(method, str) or method == "":
        raise InvalidArgumentError("Method must be a non-empty string", component="method")

    method = method.upper()
    if method not in get_config().accepted_methods:
        raise InvalidArgumentError(f'Unsupported HTTP method "{method}" provided', component="method")
    return method


def _to_uri(uri: Union[Uri, str, None]) -> Uri:
    if uri is None or uri == "":
        return Uri()
    if isinstance(uri, Uri):
        return uri
    return Uri.parse(uri)


def _host_header(uri: Uri) -> str:
    """
    Host header value for ``uri``.

    The host alone when the port is the scheme default, otherwise
    ``host:port`` (RFC 9110 section 7.2: Host = uri-host [ ":" port ]).
    The port is never dropped, unlike a host-only Host header.
    """
    if not uri.host:
        return ""
    if uri.port is not None:
        return f"{uri.host}:{uri.port}"
    return uri.host


def _frozen_mapping(value: Any, component: str) -> Mapping:
    if value is None:
        return _EMPTY
    if not isinstance(value, Mapping):
        raise InvalidArgumentError(
            f"{component} must be a mapping, got {type(value).__name__}", component=component
        )
    return MappingProxyType(dict(value))


@dataclass(frozen=True, init=False)
class Request(MessageSurface):
    """
    Represents an HTTP request as an immutable value.

    =========================================================================
    ATTRIBUTES EXPLAINED
    =========================================================================

        method:          Uppercased method token ("GET", "POST", ...)

        uri:             Parsed Uri of the request

        message:         MessageCore holding protocol version, headers
                         and body (see MessageSurface for accessors)

        request_target:  Explicit request-target override, or None to
                         derive it from the URI

        attributes:      Values attached by application code, e.g. route
                         parameters or an authenticated user

        cookie_params:   Raw cookie name → value pairs

        query_params:    Query parameters, as supplied by the caller

        server_params:   Server/environment values (read-only)

        uploaded_files:  Uploaded file descriptors, keyed by field name

        parsed_body:     Deserialized body, if a caller provided one

    All mapping attributes are read-only views. with_* methods return new
    Request objects.
    =========================================================================
    """

    method: str
    uri: Uri
    message: MessageCore
    request_target: Optional[str]
    attributes: Mapping[str, Any]
    cookie_params: Mapping[str, str]
    query_params: Mapping[str, Any]
    server_params: Mapping[str, Any]
    uploaded_files: Mapping[str, Any]
    parsed_body: Any

    __hash__ = None

    def __init__(
        self,
        uri: Union[Uri, str, None] = "",
        method: str = "GET",
        headers: HeadersInput = None,
        body: BodyInput = None,
        cookies: Optional[Mapping[str, str]] = None,
        protocol_version: Optional[str] = None,
        server_params: Optional[Mapping[str, Any]] = None,
    ):
        """
        Build a request.

        Args:
            uri: Uri value or raw URI string.
            method: Method token, any case.
            headers: HeaderMap, mapping of name → value(s), or pairs.
            body: Stream, str, bytes, file-like object or None.
            cookies: Raw cookie name → value pairs.
            protocol_version: Defaults to MessageConfig.protocol_version.
            server_params: Server/environment values.

        Raises:
            MalformedUriError: If ``uri`` is a string that does not parse.
            InvalidArgumentError: For a bad method or protocol version.
            InvalidHeaderNameError, InvalidHeaderValueError: For bad headers.
        """
        uri = _to_uri(uri)
        message = MessageCore(headers=headers, body=body, protocol_version=protocol_version or "")

        host = _host_header(uri)
        if host:
            message = message.with_header("Host", host)

        object.__setattr__(self, "method", filter_method(method))
        object.__setattr__(self, "uri", uri)
        object.__setattr__(self, "message", message)
        object.__setattr__(self, "request_target", None)
        object.__setattr__(self, "attributes", _EMPTY)
        object.__setattr__(self, "cookie_params", _frozen_mapping(cookies, "cookie_params"))
        object.__setattr__(self, "query_params", _EMPTY)
        object.__setattr__(self, "server_params", _frozen_mapping(server_params, "server_params"))
        object.__setattr__(self, "uploaded_files", _EMPTY)
        object.__setattr__(self, "parsed_body", None)

    # =========================================================================
    # METHOD
    # =========================================================================

    def with_method(self, method: str) -> "Request":
        return self._derive(method=filter_method(method))

    # =========================================================================
    # REQUEST TARGET
    # =========================================================================

    def get_request_target(self) -> str:
        """
        The request target for the request line.

        Returns the override when one was set; otherwise "/" + path
        (leading slashes collapsed) + "?query" when the query is non-empty.
        """
        if self.request_target:
            return self.request_target

        target = "/" + self.uri.path.lstrip("/")
        if self.uri.query:
            target += "?" + self.uri.query
        return target

    def with_request_target(self, request_target: str) -> "Request":
        """
        Override the request target (origin, absolute, authority or
        asterisk form).

        Raises:
            InvalidArgumentError: If the target contains whitespace or
                non-ASCII characters.
        """
        if not isinstance(request_target, str):
            raise InvalidArgumentError("Request target must be a string", component="request_target")
        if WHITESPACE_PATTERN.search(request_target):
            raise InvalidArgumentError(
                "Invalid request target provided; cannot contain whitespace",
                component="request_target",
            )
        if not request_target.isascii():
            raise InvalidArgumentError(
                f"Invalid request target {request_target!r}; must be ASCII, percent-encode the rest",
                component="request_target",
            )
        return self._derive(request_target=request_target)

    # =========================================================================
    # URI
    # =========================================================================

    def with_uri(self, uri: Union[Uri, str], preserve_host: bool = False) -> "Request":
        """
        Replace the URI, synchronizing the Host header.

        Args:
            uri: New Uri value or raw URI string.
            preserve_host: Keep an existing non-empty Host header instead
                           of overwriting it with the new URI's host.
        """
        uri = _to_uri(uri)
        message = self.message
        host = _host_header(uri)

        if host and (not preserve_host or not self.get_header_line("Host")):
            message = message.with_header("Host", host)
            logger.debug(f"Host header synchronized to {host!r}")

        return self._derive(uri=uri, message=message)

    # =========================================================================
    # SERVER CONTEXT
    # =========================================================================

    def get_attribute(self, name: str, default: Any = None) -> Any:
        return self.attributes.get(name, default)

    def with_attribute(self, name: str, value: Any) -> "Request":
        attributes = dict(self.attributes)
        attributes[name] = value
        return self._derive(attributes=MappingProxyType(attributes))

    def without_attribute(self, name: str) -> "Request":
        attributes = dict(self.attributes)
        attributes.pop(name, None)
        return self._derive(attributes=MappingProxyType(attributes))

    def with_cookie_params(self, cookies: Mapping[str, str]) -> "Request":
        return self._derive(cookie_params=_frozen_mapping(cookies, "cookie_params"))

    def with_query_params(self, query: Mapping[str, Any]) -> "Request":
        return self._derive(query_params=_frozen_mapping(query, "query_params"))

    def with_uploaded_files(self, uploaded_files: Mapping[str, Any]) -> "Request":
        return self._derive(uploaded_files=_frozen_mapping(uploaded_files, "uploaded_files"))

    def with_parsed_body(self, data: Any) -> "Request":
        """
        Attach a deserialized body.

        Accepts None, a mapping, a list/tuple or any other object.
        The value is deep-copied, so later changes to the caller's object
        do not show through.

        Scalars (str, bytes, numbers, bool) are rejected: a parsed body is
        a structure, not a value.
        """
        if isinstance(data, (str, bytes, bytearray, int, float, complex)):
            raise InvalidArgumentError(
                "Parsed body parameter must be object, mapping, sequence or None",
                component="parsed_body",
            )
        return self._derive(parsed_body=copy.deepcopy(data))

    # =========================================================================
    # SERIALIZATION
    # =========================================================================

    @property
    def request_line(self) -> str:
        """
        The HTTP request line.

        Format: METHOD SP REQUEST-TARGET SP HTTP-VERSION
        Example: "GET /api/users?page=1 HTTP/1.1"
        """
        return f"{self.method} {self.get_request_target()} HTTP/{self.protocol_version}"

    @property
    def start_line(self) -> str:
        return self.request_line
