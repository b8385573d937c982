"""
=============================================================================
MESSAGE CONFIGURATION
=============================================================================

Centralized configuration for the message value types.

The defaults reproduce plain HTTP/1.1 behaviour. They only need changing
when an application speaks another protocol version by default, accepts
extension methods, or streams large bodies.

=============================================================================
CONFIGURATION SOURCES
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    CONFIGURATION HIERARCHY                          │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   Priority (highest to lowest):                                     │
    │                                                                      │
    │   1. Explicit arguments                                             │
    │      └── Request(..., protocol_version="1.0")                       │
    │                                                                      │
    │   2. Process-wide config                                            │
    │      └── set_config(MessageConfig(extra_methods=("TRACE",)))        │
    │                                                                      │
    │   3. Environment variables                                          │
    │      └── HTTPMESSAGE_EXTRA_METHODS=TRACE,CONNECT                    │
    │                                                                      │
    │   4. Default values (in this dataclass)                             │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
"""

import os
import re
from dataclasses import dataclass
from typing import Optional


# =============================================================================
# ACCEPTED METHODS
# =============================================================================
#
# The closed set of request methods accepted out of the box.
# Applications that need CONNECT, TRACE or custom verbs add them through
# MessageConfig.extra_methods instead of editing this table.
#
ACCEPTED_METHODS = frozenset({
    "GET",
    "HEAD",
    "POST",
    "PUT",
    "OPTIONS",
    "PATCH",
    "DELETE",
})

PROTOCOL_VERSION_PATTERN = re.compile(r"^[0-9]+(?:\.[0-9]+)?\Z")
METHOD_TOKEN_PATTERN = re.compile(r"^[!#$%&'*+\-.^_`|~0-9A-Za-z]+\Z")

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class MessageConfig:
    """
    Configuration for message construction.

    Attributes:
        protocol_version: Protocol version given to new messages when the
                          caller does not pass one.
        extra_methods:    Methods accepted on top of ACCEPTED_METHODS.
        chunk_size:       Read size used when a stream is drained to the
                          end (string coercion, get_contents).
        log_level:        Level the CLI configures logging with.
    """

    protocol_version: str = "1.1"
    extra_methods: tuple[str, ...] = ()
    chunk_size: int = 8192
    log_level: str = "WARNING"

    @property
    def accepted_methods(self) -> frozenset[str]:
        """ACCEPTED_METHODS plus any configured extension methods."""
        return ACCEPTED_METHODS | {m.upper() for m in self.extra_methods}

    @classmethod
    def from_env(cls) -> "MessageConfig":
        """
        Create configuration from environment variables.

        =====================================================================
        ENVIRONMENT VARIABLES
        =====================================================================

        HTTPMESSAGE_PROTOCOL_VERSION  Default protocol version (1.1)
        HTTPMESSAGE_EXTRA_METHODS     Comma-separated extra methods
        HTTPMESSAGE_CHUNK_SIZE        Drain read size in bytes (8192)
        HTTPMESSAGE_LOG_LEVEL         Logging level (WARNING)

        =====================================================================
        """
        extra = os.getenv("HTTPMESSAGE_EXTRA_METHODS", "")
        return cls(
            protocol_version=os.getenv("HTTPMESSAGE_PROTOCOL_VERSION", "1.1"),
            extra_methods=tuple(m.strip() for m in extra.split(",") if m.strip()),
            chunk_size=int(os.getenv("HTTPMESSAGE_CHUNK_SIZE", "8192")),
            log_level=os.getenv("HTTPMESSAGE_LOG_LEVEL", "WARNING"),
        )

    def validate(self) -> None:
        """
        Validate configuration values.

        Fails fast with ValueError so a bad environment is reported when
        the config is installed, not on the first request built with it.
        """
        if not PROTOCOL_VERSION_PATTERN.match(self.protocol_version):
            raise ValueError(f"Invalid protocol_version: {self.protocol_version!r}")

        for method in self.extra_methods:
            if not METHOD_TOKEN_PATTERN.match(method):
                raise ValueError(f"Invalid extra method: {method!r}")

        if self.chunk_size < 1:
            raise ValueError("chunk_size must be >= 1")

        if self.log_level.upper() not in _LOG_LEVELS:
            raise ValueError(f"Invalid log_level: {self.log_level!r}")


# =============================================================================
# PROCESS-WIDE DEFAULT
# =============================================================================

_config: Optional[MessageConfig] = None


def get_config() -> MessageConfig:
    """Return the process-wide config, loading it from the environment once."""
    global _config
    if _config is None:
        config = MessageConfig.from_env()
        config.validate()
        _config = config
    return _config


def set_config(config: Optional[MessageConfig]) -> None:
    """
    Install a process-wide config.

    Passing None drops the installed config; the next get_config() call
    reloads it from the environment.
    """
    global _config
    if config is not None:
        config.validate()
    _config = config
