"""
=============================================================================
STREAM
=============================================================================

Wraps one byte resource (an in-memory buffer, a file, or any object with
a read() method) behind a small capability-checked API.

=============================================================================
STREAM LIFECYCLE
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │   Stream(resource)                                                   │
    │        │                                                             │
    │        ▼                                                             │
    │   ┌──────────┐  read / write / seek / tell / eof / get_size         │
    │   │ ATTACHED │◄──────────────────────────────────────┐              │
    │   └────┬─────┘                                       │              │
    │        │                                             │              │
    │        ├── detach() ──► resource handed to caller ───┼──┐           │
    │        │                                             │  │           │
    │        └── close() ───► resource closed ─────────────┘  │           │
    │                                                         ▼           │
    │                                                   ┌──────────┐      │
    │                                                   │ DETACHED │      │
    │                                                   └──────────┘      │
    │                                  every I/O call raises               │
    │                                  StreamDetachedError                 │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

A detached stream can never be reattached.

=============================================================================
CAPABILITIES
=============================================================================

Capabilities are read from the resource once, at construction:

    is_readable   resource.readable(), or has a read() method
    is_writable   resource.writable(), or has a write() method
    is_seekable   resource.seekable()

For non-seekable sources the stream counts bytes itself, so tell()
still reports how far the cursor has moved.

=============================================================================
STRICT READS VS STRING COERCION
=============================================================================

    get_contents()   reads from the cursor to the end; raises on failure
    str(stream)      seeks to 0 and reads everything; returns "" on any
                     stream failure (unseekable, unreadable, detached)

str() is what serializers call to put a body on the wire. It never
raises. Use get_contents() where a failure must surface.

The cursor is shared mutable state: a Stream must not be read from two
threads at once.

=============================================================================
"""

import io
import logging
import os
import stat
from typing import Any, BinaryIO, Optional, Union

from .config import get_config
from .errors import (
    StreamDetachedError,
    StreamError,
    StreamNotSeekableError,
    StreamUnreadableError,
    StreamUnwritableError,
)


logger = logging.getLogger(__name__)


def _capability(resource: Any, method: str, fallback: str) -> bool:
    check = getattr(resource, method, None)
    if callable(check):
        try:
            return bool(check())
        except (OSError, ValueError):
            # Closed file objects raise here
            return False
    return callable(getattr(resource, fallback, None)) if fallback else False


class Stream:
    """
    A readable, writable and/or seekable byte stream.

    Example:
        stream = Stream()            # empty in-memory buffer
        stream.write(b"abc")
        stream.rewind()
        stream.read(3)               # b"abc"
        raw = stream.detach()        # io.BytesIO, stream now unusable
    """

    def __init__(self, resource: Optional[Union[BinaryIO, Any]] = None):
        if resource is None:
            resource = io.BytesIO()
        if not callable(getattr(resource, "read", None)) and not callable(getattr(resource, "write", None)):
            raise TypeError(f"Stream resource must have read() or write(), got {type(resource).__name__}")
        if isinstance(resource, io.TextIOBase):
            raise TypeError(f"Stream resource must be binary, got text resource {type(resource).__name__}")

        self._resource = resource
        self._readable = _capability(resource, "readable", "read")
        self._writable = _capability(resource, "writable", "write")
        self._seekable = _capability(resource, "seekable", "")
        self._position = 0       # only authoritative when not seekable
        self._at_eof = False

    # =========================================================================
    # ALTERNATE CONSTRUCTORS
    # =========================================================================

    @classmethod
    def empty(cls) -> "Stream":
        return cls(io.BytesIO())

    @classmethod
    def from_bytes(cls, data: bytes) -> "Stream":
        """In-memory stream holding ``data``, cursor at 0."""
        return cls(io.BytesIO(bytes(data)))

    @classmethod
    def from_string(cls, text: str, encoding: str = "utf-8") -> "Stream":
        return cls.from_bytes(text.encode(encoding))

    @classmethod
    def from_file(cls, path: Union[str, os.PathLike], mode: str = "rb") -> "Stream":
        """
        Open ``path`` and wrap the file object.

        Text modes are rejected; bodies are bytes.
        """
        if "b" not in mode:
            raise ValueError(f"Stream files must be opened in binary mode, got {mode!r}")
        try:
            return cls(open(path, mode))
        except OSError as e:
            raise StreamError(f"Unable to open {path}: {e}") from e

    # =========================================================================
    # CAPABILITIES
    # =========================================================================

    @property
    def is_readable(self) -> bool:
        return self._resource is not None and self._readable

    @property
    def is_writable(self) -> bool:
        return self._resource is not None and self._writable

    @property
    def is_seekable(self) -> bool:
        return self._resource is not None and self._seekable

    @property
    def is_detached(self) -> bool:
        return self._resource is None

    def _attached(self, action: str) -> Any:
        if self._resource is None:
            raise StreamDetachedError(f"Cannot {action}: stream is detached")
        return self._resource

    # =========================================================================
    # READING
    # =========================================================================

    def read(self, length: int = -1) -> bytes:
        """
        Read up to ``length`` bytes from the cursor.

        Fewer bytes come back only at end-of-stream. A negative length
        reads everything that is left.

        Raises:
            StreamUnreadableError: If the resource is not readable.
            StreamDetachedError: If the stream was detached or closed.
        """
        resource = self._attached("read")
        if not self._readable:
            raise StreamUnreadableError("Cannot read: stream is not readable")

        try:
            if length is None or length < 0:
                data = self._to_bytes(resource.read())
                self._at_eof = True
            else:
                # Raw sources may return short reads before the real end
                chunks = []
                remaining = length
                while remaining > 0:
                    chunk = self._to_bytes(resource.read(remaining))
                    if not chunk:
                        self._at_eof = True
                        break
                    chunks.append(chunk)
                    remaining -= len(chunk)
                data = b"".join(chunks)
        except (OSError, ValueError) as e:
            raise StreamUnreadableError(f"Read failed: {e}") from e

        self._position += len(data)
        return data

    def get_contents(self) -> bytes:
        """Read from the cursor to the end of the stream."""
        chunk_size = get_config().chunk_size
        chunks = []
        while True:
            chunk = self.read(chunk_size)
            chunks.append(chunk)
            if len(chunk) < chunk_size:
                break
        return b"".join(chunks)

    def _to_bytes(self, data: Optional[bytes]) -> bytes:
        if data is None:
            return b""  # non-blocking raw source with nothing ready
        if isinstance(data, str):
            raise StreamUnreadableError("resource returned str, streams carry bytes")
        return bytes(data)

    # =========================================================================
    # WRITING
    # =========================================================================

    def write(self, data: Union[bytes, bytearray, memoryview, str]) -> int:
        """
        Write ``data`` at the cursor and return the number of bytes written.

        Strings are encoded as UTF-8.
        """
        resource = self._attached("write")
        if not self._writable:
            raise StreamUnwritableError("Cannot write: stream is not writable")

        if isinstance(data, str):
            data = data.encode("utf-8")
        elif not isinstance(data, bytes):
            data = bytes(data)
        try:
            written = resource.write(data)
        except (OSError, ValueError) as e:
            raise StreamUnwritableError(f"Write failed: {e}") from e

        if written is None:
            written = len(data)
        self._position += written
        self._at_eof = False
        return written

    # =========================================================================
    # POSITIONING
    # =========================================================================

    def seek(self, offset: int, whence: int = io.SEEK_SET) -> None:
        """
        Move the cursor.

        Raises:
            StreamNotSeekableError: If the resource has no random access.
            StreamError: If the resource rejects the offset.
        """
        resource = self._attached("seek")
        if not self._seekable:
            raise StreamNotSeekableError("Cannot seek: stream is not seekable")

        try:
            resource.seek(offset, whence)
        except (OSError, ValueError) as e:
            raise StreamError(f"Unable to seek to offset {offset} (whence={whence}): {e}") from e
        self._at_eof = False

    def rewind(self) -> None:
        self.seek(0)

    def tell(self) -> int:
        """Current cursor position."""
        resource = self._attached("tell")
        if not self._seekable:
            return self._position
        try:
            return resource.tell()
        except (OSError, ValueError) as e:
            raise StreamError(f"Unable to determine stream position: {e}") from e

    def eof(self) -> bool:
        """
        True when the cursor is at the end of the stream.

        Sources of unknown size only report eof after a read came up short.
        """
        self._attached("check eof")
        size = self.get_size()
        if self._seekable and size is not None:
            return self.tell() >= size
        return self._at_eof

    def get_size(self) -> Optional[int]:
        """Size in bytes, or None when it cannot be known."""
        resource = self._attached("get size")

        if isinstance(resource, io.BytesIO):
            try:
                return resource.getbuffer().nbytes
            except ValueError:
                return None  # closed behind our back

        fileno = getattr(resource, "fileno", None)
        if callable(fileno):
            try:
                if callable(getattr(resource, "flush", None)) and self._writable:
                    resource.flush()
                info = os.fstat(fileno())
                if stat.S_ISREG(info.st_mode):
                    return info.st_size
                return None  # pipes and sockets have no size
            except (OSError, ValueError):
                pass  # not backed by a real file descriptor

        if self._seekable:
            try:
                current = resource.tell()
                size = resource.seek(0, io.SEEK_END)
                resource.seek(current)
                return size
            except (OSError, ValueError):
                return None
        return None

    # =========================================================================
    # LIFETIME
    # =========================================================================

    def detach(self) -> Optional[Any]:
        """
        Hand the underlying resource to the caller.

        The stream becomes permanently unusable. Returns None when the
        stream was already detached or closed.
        """
        resource = self._resource
        if resource is None:
            return None
        self._resource = None
        self._readable = self._writable = self._seekable = False
        logger.debug(f"Detached {type(resource).__name__} from stream {id(self):#x}")
        return resource

    def close(self) -> None:
        """Close the underlying resource. Safe to call more than once."""
        resource = self.detach()
        if resource is None:
            return
        close = getattr(resource, "close", None)
        if callable(close):
            close()
        logger.debug(f"Closed stream {id(self):#x}")

    def get_metadata(self, key: Optional[str] = None) -> Any:
        """
        Describe the resource.

        Returns a dict with mode, name, seekable, readable and writable,
        or just the entry for ``key`` (None for unknown keys). A detached
        stream has no metadata.
        """
        if self._resource is None:
            return None if key is not None else {}
        metadata = {
            "mode": getattr(self._resource, "mode", None),
            "name": getattr(self._resource, "name", None),
            "seekable": self._seekable,
            "readable": self._readable,
            "writable": self._writable,
        }
        return metadata if key is None else metadata.get(key)

    # =========================================================================
    # STRING COERCION
    # =========================================================================

    def to_bytes(self) -> bytes:
        """
        Best-effort coercion: the whole stream as bytes.

        Seeks to 0 first. Returns b"" instead of raising when the stream
        cannot be rewound or read; read() and get_contents() raise in the
        same situations.
        """
        try:
            self.seek(0)
            return self.get_contents()
        except StreamError as e:
            logger.debug(f"Coercion of stream {id(self):#x} failed: {e}")
            return b""

    def to_string(self) -> str:
        """Best-effort coercion decoded as UTF-8, see to_bytes()."""
        return self.to_bytes().decode("utf-8", errors="replace")

    def __str__(self) -> str:
        return self.to_string()

    # =========================================================================
    # CONTEXT MANAGER
    # =========================================================================

    def __enter__(self) -> "Stream":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False

    def __repr__(self) -> str:
        if self._resource is None:
            return "<Stream detached>"
        flags = "".join([
            "r" if self._readable else "-",
            "w" if self._writable else "-",
            "s" if self._seekable else "-",
        ])
        return f"<Stream {type(self._resource).__name__} {flags}>"
