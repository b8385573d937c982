"""
Unit tests for the Request value.
"""

import pytest

from httpmessage.config import MessageConfig, set_config
from httpmessage.errors import InvalidArgumentError, MalformedUriError
from httpmessage.request import Request, filter_method
from httpmessage.uri import Uri


class TestRequestConstruction:
    """Tests for Request.__init__."""

    def test_defaults(self):
        """Test a request built with no arguments."""
        request = Request()

        assert request.method == "GET"
        assert request.uri == Uri()
        assert request.protocol_version == "1.1"
        assert request.get_request_target() == "/"
        assert not request.has_header("Host")

    def test_from_string_uri(self, sample_request: Request):
        """Test that a raw URI string is parsed."""
        assert sample_request.uri.host == "example.com"
        assert sample_request.uri.path == "/api/users"
        assert sample_request.get_header_line("User-Agent") == "pytest"

    def test_host_from_uri(self, sample_request: Request):
        """Test that Host is set from the URI."""
        assert sample_request.get_header_line("host") == "example.com"

    def test_host_includes_non_default_port(self):
        """Test Host with a non-default port."""
        assert Request("http://example.com:8080/").get_header_line("Host") == "example.com:8080"
        assert Request("http://example.com:80/").get_header_line("Host") == "example.com"

    def test_malformed_uri(self):
        """Test that a bad URI string fails construction."""
        with pytest.raises(MalformedUriError):
            Request("http://example.com:bad/")

    def test_body_and_cookies(self):
        """Test body coercion and cookie params."""
        request = Request(
            "http://example.com/login",
            "POST",
            body='{"user": "ada"}',
            cookies={"session": "abc123"},
        )

        assert str(request.body) == '{"user": "ada"}'
        assert request.cookie_params == {"session": "abc123"}

    def test_server_params_read_only(self):
        """Test that server params cannot be mutated."""
        request = Request(server_params={"REMOTE_ADDR": "127.0.0.1"})

        assert request.server_params["REMOTE_ADDR"] == "127.0.0.1"
        with pytest.raises(TypeError):
            request.server_params["REMOTE_ADDR"] = "10.0.0.1"


class TestRequestMethod:
    """Tests for method validation."""

    def test_method_uppercased(self):
        """Test "get" becomes "GET"."""
        assert Request("/", "get").method == "GET"
        assert Request("/").with_method("patch").method == "PATCH"

    @pytest.mark.parametrize("method", ["GET", "HEAD", "POST", "PUT", "OPTIONS", "PATCH", "DELETE"])
    def test_accepted_methods(self, method: str):
        """Test the accepted method table."""
        assert filter_method(method) == method

    @pytest.mark.parametrize("method", ["FOO", "", None, 1, "CONNECT", "TRACE"])
    def test_rejected_methods(self, method):
        """Test that unknown, empty and non-string methods are rejected."""
        with pytest.raises(InvalidArgumentError) as exc_info:
            Request("/", method)

        assert exc_info.value.component == "method"

    def test_extra_methods_from_config(self):
        """Test that configured extension methods are accepted."""
        set_config(MessageConfig(extra_methods=("TRACE", "purge")))

        assert Request("/", "trace").method == "TRACE"
        assert Request("/", "PURGE").method == "PURGE"

    def test_with_method_leaves_receiver(self, sample_request: Request):
        """Test that with_method returns a new value."""
        updated = sample_request.with_method("POST")

        assert updated.method == "POST"
        assert sample_request.method == "GET"


class TestRequestTarget:
    """Tests for request target derivation and override."""

    def test_path_and_query(self):
        """Test "/a?b=c" from the URI."""
        assert Request("http://example.com/a?b=c").get_request_target() == "/a?b=c"

    def test_no_path(self):
        """Test that an empty path gives "/"."""
        assert Request("http://example.com").get_request_target() == "/"

    def test_leading_slashes_collapsed(self):
        """Test that "//a" becomes "/a"."""
        uri = Uri(scheme="http", host="example.com", path="//a")
        assert Request(uri).get_request_target() == "/a"

    def test_override(self, sample_request: Request):
        """Test that an explicit target wins."""
        updated = sample_request.with_request_target("*")

        assert updated.get_request_target() == "*"
        assert sample_request.get_request_target() == "/api/users?page=1"

    @pytest.mark.parametrize("target", ["/a b", "/a\tb", "/a\nb", "/caf\u00e9", "/\u65e5", 42])
    def test_override_rejects_whitespace(self, sample_request: Request, target):
        """Test that whitespace, non-ASCII text and non-strings are rejected."""
        with pytest.raises(InvalidArgumentError) as exc_info:
            sample_request.with_request_target(target)

        assert exc_info.value.component == "request_target"


class TestRequestWithUri:
    """Tests for with_uri and Host synchronization."""

    def test_host_replaced(self):
        """Test that Host follows the new URI by default."""
        request = Request("http://old.com/")
        updated = request.with_uri(Uri.parse("http://new.com/"))

        assert updated.get_header_line("Host") == "new.com"
        assert request.get_header_line("Host") == "old.com"

    def test_host_carries_non_default_port(self):
        """Test that Host keeps the port of the new URI."""
        updated = Request("http://old.com/").with_uri("http://new.com:8080/")

        assert updated.get_header_line("Host") == "new.com:8080"
        assert updated.with_uri("https://new.com:443/").get_header_line("Host") == "new.com"

    def test_preserve_host(self):
        """Test that preserve_host keeps an existing Host."""
        request = Request("http://old.com/")
        updated = request.with_uri("http://new.com/", preserve_host=True)

        assert updated.get_header_line("Host") == "old.com"
        assert updated.uri.host == "new.com"

    def test_preserve_host_without_host_header(self):
        """Test that preserve_host still fills a missing Host."""
        request = Request("/path")
        updated = request.with_uri("http://new.com/", preserve_host=True)

        assert updated.get_header_line("Host") == "new.com"

    def test_preserve_host_with_empty_host_header(self):
        """Test that an empty Host counts as missing."""
        request = Request("/path", headers={"Host": ""})
        updated = request.with_uri("http://new.com/", preserve_host=True)

        assert updated.get_header_line("Host") == "new.com"

    def test_uri_without_host(self):
        """Test that a host-less URI leaves Host alone."""
        request = Request("http://old.com/")
        updated = request.with_uri("/relative")

        assert updated.get_header_line("Host") == "old.com"

    def test_host_position_kept(self):
        """Test that Host stays where it was in the header order."""
        request = Request("/", headers=[("Host", "old.com"), ("Accept", "*/*")])
        updated = request.with_uri("http://new.com/")

        assert updated.headers.names() == ["Host", "Accept"]


class TestRequestServerContext:
    """Tests for attributes and server-side parameters."""

    def test_attributes(self, sample_request: Request):
        """Test attribute set, get and removal."""
        with_user = sample_request.with_attribute("user", "ada")

        assert with_user.get_attribute("user") == "ada"
        assert sample_request.get_attribute("user") is None
        assert sample_request.get_attribute("user", "anonymous") == "anonymous"
        assert with_user.without_attribute("user").get_attribute("user") is None

    def test_without_missing_attribute(self, sample_request: Request):
        """Test removing an attribute that was never set."""
        assert sample_request.without_attribute("missing").attributes == {}

    def test_query_params(self, sample_request: Request):
        """Test that query params are supplied, not parsed implicitly."""
        assert sample_request.query_params == {}

        updated = sample_request.with_query_params({"page": "1"})
        assert updated.query_params == {"page": "1"}
        assert sample_request.query_params == {}

    def test_params_copied(self, sample_request: Request):
        """Test that caller dicts are copied."""
        cookies = {"session": "abc"}
        updated = sample_request.with_cookie_params(cookies)
        cookies["session"] = "changed"

        assert updated.cookie_params["session"] == "abc"

    def test_params_must_be_mappings(self, sample_request: Request):
        """Test that non-mapping params are rejected."""
        with pytest.raises(InvalidArgumentError):
            sample_request.with_uploaded_files(["file"])

    def test_uploaded_files(self, sample_request: Request):
        """Test uploaded file descriptors."""
        updated = sample_request.with_uploaded_files({"avatar": object()})
        assert "avatar" in updated.uploaded_files

    @pytest.mark.parametrize("data", [None, {"a": 1}, [1, 2], ("x",)])
    def test_parsed_body_accepted(self, sample_request: Request, data):
        """Test accepted parsed body shapes."""
        assert sample_request.with_parsed_body(data).parsed_body == data

    def test_parsed_body_object(self, sample_request: Request):
        """Test that an arbitrary object is accepted as a copy."""
        class Payload:
            def __init__(self):
                self.items = ["a"]

        payload = Payload()
        stored = sample_request.with_parsed_body(payload).parsed_body

        assert isinstance(stored, Payload)
        assert stored is not payload
        assert stored.items == ["a"]

    def test_parsed_body_not_shared_with_caller(self, sample_request: Request):
        """Test that mutating the caller's dict does not change the request."""
        data = {"a": 1, "tags": ["x"]}
        request = sample_request.with_parsed_body(data)

        data["a"] = 2
        data["tags"].append("y")

        assert request.parsed_body == {"a": 1, "tags": ["x"]}

    def test_parsed_body_not_shared_between_requests(self, sample_request: Request):
        """Test that two requests built from one dict hold separate copies."""
        data = {"a": 1}
        first = sample_request.with_parsed_body(data)
        second = sample_request.with_parsed_body(data)

        assert first.parsed_body is not second.parsed_body

    @pytest.mark.parametrize("data", ["text", b"bytes", 1, 1.5, True])
    def test_parsed_body_rejects_scalars(self, sample_request: Request, data):
        """Test that scalars are rejected."""
        with pytest.raises(InvalidArgumentError):
            sample_request.with_parsed_body(data)


class TestRequestSerialization:
    """Tests for request line and wire format."""

    def test_request_line(self):
        """Test request line formatting."""
        request = Request("http://example.com/a?b=c", "post", protocol_version="1.0")
        assert request.request_line == "POST /a?b=c HTTP/1.0"

    def test_to_bytes(self):
        """Test the full wire form."""
        request = Request(
            "http://example.com/users",
            "POST",
            headers={"Content-Type": "application/json"},
            body=b'{"name": "Ada"}',
        )

        assert request.to_bytes() == (
            b"POST /users HTTP/1.1\r\n"
            b"Content-Type: application/json\r\n"
            b"Host: example.com\r\n"
            b"\r\n"
            b'{"name": "Ada"}'
        )

    def test_to_bytes_non_ascii_path(self):
        """Test that a non-ASCII path goes on the wire percent-encoded."""
        request = Request("http://example.com/café")

        assert request.to_bytes().startswith(b"GET /caf%C3%A9 HTTP/1.1\r\n")
