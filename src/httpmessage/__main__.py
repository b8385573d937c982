"""
=============================================================================
HTTPMESSAGE CLI ENTRY POINT
=============================================================================

Command-line access to the message values, handy for checking how a URI
parses or what a request looks like on the wire.

=============================================================================
USAGE
=============================================================================

    # Break a URI into its components
    python -m httpmessage uri "HTTP://User@Example.com:8080/a%20b?x=1#top"

    # Same, as JSON
    python -m httpmessage uri "https://example.com/" --json

    # Print a request in wire format
    python -m httpmessage request http://example.com/users -X post \\
        -H "Content-Type: application/json" -d '{"name": "Ada"}'

    # Watch Host synchronization and stream lifecycle events
    python -m httpmessage --log-level DEBUG request http://example.com/

=============================================================================
EXIT CODES
=============================================================================

    0   success
    1   the input was rejected (malformed URI, bad method, bad header...)
    2   bad command-line usage (argparse)

=============================================================================
"""

import argparse
import json
import logging
import sys
from typing import Optional

from . import __version__
from .config import get_config
from .errors import HTTPMessageError, InvalidHeaderNameError
from .request import Request
from .uri import Uri


logger = logging.getLogger(__name__)


def _setup_logging(level: Optional[str] = None) -> None:
    """Configure logging; falls back to MessageConfig.log_level."""
    level_name = (level or get_config().log_level).upper()
    numeric = getattr(logging, level_name, logging.WARNING)

    logging.basicConfig(
        level=numeric,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    logging.getLogger("httpmessage").setLevel(numeric)


def _parse_header(raw: str) -> tuple[str, str]:
    """Split a curl-style "Name: value" argument."""
    name, sep, value = raw.partition(":")
    if not sep:
        raise InvalidHeaderNameError(f'Header must look like "Name: value", got {raw!r}', component=raw)
    return name.strip(), value.strip()


# =============================================================================
# COMMANDS
# =============================================================================

def cmd_uri(args: argparse.Namespace) -> int:
    uri = Uri.parse(args.raw)
    components = {
        "scheme": uri.scheme,
        "user_info": uri.user_info,
        "host": uri.host,
        "port": uri.port,
        "path": uri.path,
        "query": uri.query,
        "fragment": uri.fragment,
        "authority": uri.authority,
        "uri": uri.to_string(),
    }

    if args.json:
        print(json.dumps(components, indent=2))
    else:
        for name, value in components.items():
            print(f"{name:<10} {'' if value is None else value}")
    return 0


def cmd_request(args: argparse.Namespace) -> int:
    headers = [_parse_header(h) for h in args.header]
    request = Request(
        args.url,
        args.method,
        headers=headers,
        body=args.data,
        protocol_version=args.http_version,
    )
    logger.debug(f"Built request {request.request_line!r}")

    sys.stdout.write(request.to_bytes().decode("latin-1"))
    if args.data:
        sys.stdout.write("\n")
    return 0


# =============================================================================
# ARGUMENT PARSING
# =============================================================================

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="httpmessage",
        description="Inspect URIs and HTTP requests built as immutable values",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  httpmessage uri "https://example.com:443/a?b=c"     # Components
  httpmessage uri "https://example.com/" --json        # As JSON
  httpmessage request http://example.com/ -X HEAD      # Wire format
        """
    )

    parser.add_argument(
        "--log-level", "-l",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Logging level (default: HTTPMESSAGE_LOG_LEVEL or WARNING)"
    )

    parser.add_argument(
        "--version", "-v",
        action="version",
        version=f"httpmessage {__version__}"
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    # ─────────────────────────────────────────────────────────────────────
    # uri
    # ─────────────────────────────────────────────────────────────────────

    uri_parser = subparsers.add_parser("uri", help="Parse a URI and print its components")
    uri_parser.add_argument("raw", help="URI to parse")
    uri_parser.add_argument("--json", action="store_true", help="Print components as JSON")
    uri_parser.set_defaults(handler=cmd_uri)

    # ─────────────────────────────────────────────────────────────────────
    # request
    # ─────────────────────────────────────────────────────────────────────

    request_parser = subparsers.add_parser("request", help="Build a request and print its wire form")
    request_parser.add_argument("url", help="Request URI")
    request_parser.add_argument(
        "--request", "-X",
        dest="method",
        default="GET",
        help="Request method (default: GET)"
    )
    request_parser.add_argument(
        "--header", "-H",
        action="append",
        default=[],
        help='Header as "Name: value" (repeatable)'
    )
    request_parser.add_argument("--data", "-d", default=None, help="Request body")
    request_parser.add_argument(
        "--http-version",
        default=None,
        help="Protocol version (default: HTTPMESSAGE_PROTOCOL_VERSION or 1.1)"
    )
    request_parser.set_defaults(handler=cmd_request)

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    """CLI entry point; returns the process exit code."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        _setup_logging(args.log_level)
        return args.handler(args)
    except HTTPMessageError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except ValueError as e:
        # Invalid HTTPMESSAGE_* environment, reported by MessageConfig.validate()
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1


# =============================================================================
# ENTRY POINT
# =============================================================================

if __name__ == "__main__":
    sys.exit(main())
