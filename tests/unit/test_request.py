"""
Unit tests for HTTP request parsing.
"""

import pytest

from filegate.http.request import (
    HTTPRequest,
    ParseFailure,
    parse_request,
    parse_cookies,
    parse_form_data,
    MAX_FORM_PAIRS,
)


class TestParseRequest:
    """Tests for parse_request()."""

    def test_parse_simple_get(self):
        """Request line and headers of a minimal GET."""
        request = parse_request("GET / HTTP/1.1\r\nHost: x\r\n\r\n")

        assert isinstance(request, HTTPRequest)
        assert request.method == "GET"
        assert request.path == "/"
        assert request.version == "HTTP/1.1"
        assert request.get_header("Host") == "x"

    def test_parse_bytes_and_client_address(self, sample_get_request: bytes):
        """Bytes are accepted and the peer address is carried along."""
        request = parse_request(sample_get_request, ("127.0.0.1", 12345))

        assert request.client_address == ("127.0.0.1", 12345)
        assert request.get_header("user-agent") == "pytest"

    def test_path_kept_raw(self, sample_get_request: bytes):
        """path is the raw target; local_path is decoded and query-free."""
        request = parse_request(sample_get_request)

        assert request.path == "/docs/My%20Notes.txt?download=1"
        assert request.local_path == "/docs/My Notes.txt"
        assert request.query_params == {"download": ["1"]}

    def test_headers_case_insensitive(self):
        """Header names are normalized to lowercase."""
        request = parse_request("GET / HTTP/1.1\r\nContent-TYPE: text/plain\r\n\r\n")

        assert request.headers == {"content-type": "text/plain"}
        assert request.get_header("CONTENT-TYPE") == "text/plain"

    def test_duplicate_header_last_wins(self):
        """A repeated header keeps the last value."""
        request = parse_request("GET / HTTP/1.1\r\nX-A: 1\r\nx-a: 2\r\n\r\n")
        assert request.get_header("x-a") == "2"

    def test_header_without_colon_skipped(self):
        """Lines without a colon (or starting with one) are ignored."""
        request = parse_request("GET / HTTP/1.1\r\nnonsense\r\n: empty\r\nHost: x\r\n\r\n")
        assert request.headers == {"host": "x"}

    def test_header_whitespace_trimmed(self):
        request = parse_request("GET / HTTP/1.1\r\n  X-Padded  :   value   \r\n\r\n")
        assert request.get_header("x-padded") == "value"

    def test_headers_stop_at_blank_line(self):
        """Anything after the blank line is not a header."""
        request = parse_request("POST / HTTP/1.1\r\nHost: x\r\n\r\nFake: header")
        assert "fake" not in request.headers
        assert request.body == b""

    def test_cookie_header_parsed(self, sample_get_request: bytes):
        """A Cookie header fills the cookie map."""
        request = parse_request(sample_get_request)

        assert request.get_cookie("sessionId") == "abc123"
        assert request.get_cookie("THEME") == "dark"
        assert request.get_cookie("missing") is None

    def test_content_length(self):
        request = parse_request("POST / HTTP/1.1\r\nContent-Length: 42\r\n\r\n")
        assert request.content_length == 42

    def test_content_length_invalid(self):
        request = parse_request("POST / HTTP/1.1\r\nContent-Length: lots\r\n\r\n")
        assert request.content_length == 0


class TestParseFailures:
    """Inputs that must be rejected as values, never exceptions."""

    @pytest.mark.parametrize("raw", [
        "",
        "   \r\n  ",
        "BADLINE",
        "GET /\r\n\r\n",
        "GET / HTTP/1.1 extra\r\n\r\n",
        "GET  / HTTP/1.1\r\n\r\n",
    ])
    def test_malformed_request_line(self, raw: str):
        """Empty input and request lines without exactly three tokens fail."""
        assert isinstance(parse_request(raw), ParseFailure)

    def test_failure_has_reason(self):
        result = parse_request("BADLINE")
        assert isinstance(result, ParseFailure)
        assert result.reason

    def test_head_too_large(self):
        raw = "GET / HTTP/1.1\r\nX-Big: " + "a" * 9000 + "\r\n\r\n"
        assert isinstance(parse_request(raw), ParseFailure)

    def test_too_many_lines(self):
        headers = "".join(f"X-H{i}: v\r\n" for i in range(120))
        assert isinstance(parse_request("GET / HTTP/1.1\r\n" + headers + "\r\n"), ParseFailure)

    def test_path_too_long(self):
        raw = "GET /" + "a" * 2048 + " HTTP/1.1\r\n\r\n"
        assert isinstance(parse_request(raw), ParseFailure)

    def test_path_at_limit_accepted(self):
        raw = "GET /" + "a" * 2047 + " HTTP/1.1\r\n\r\n"
        assert isinstance(parse_request(raw), HTTPRequest)


class TestParseCookies:
    """Tests for parse_cookies()."""

    def test_multiple_cookies(self):
        assert parse_cookies("a=1; b=2;c=3") == {"a": "1", "b": "2", "c": "3"}

    def test_value_may_contain_equals(self):
        """Only the first '=' separates name and value."""
        assert parse_cookies("token=abc==") == {"token": "abc=="}

    def test_empty_value_allowed(self):
        assert parse_cookies("sessionId=") == {"sessionid": ""}

    def test_invalid_segments_dropped(self):
        """No '=', empty names and oversized entries are skipped."""
        cookies = parse_cookies(
            "novalue; =anon; " + "n" * 101 + "=x; big=" + "v" * 4097 + "; ok=1"
        )
        assert cookies == {"ok": "1"}


class TestParseFormData:
    """Tests for parse_form_data() and HTTPRequest.set_body()."""

    def test_simple_form(self):
        form = parse_form_data(b"username=admin&password=admin123")
        assert form == {"username": "admin", "password": "admin123"}

    def test_percent_and_plus_decoding(self):
        form = parse_form_data("name=John+Doe&note=a%26b%3Dc")
        assert form == {"name": "John Doe", "note": "a&b=c"}

    def test_keys_case_insensitive(self):
        assert parse_form_data("UserName=x") == {"username": "x"}

    def test_bad_pair_dropped_others_kept(self):
        """An undecodable pair is skipped without affecting the rest."""
        form = parse_form_data("bad=%ff%fe&good=yes")
        assert form == {"good": "yes"}

    def test_empty_key_and_missing_equals_dropped(self):
        assert parse_form_data("=x&flag&k=v") == {"k": "v"}

    def test_length_limits(self):
        form = parse_form_data("k" * 257 + "=1&v=" + "x" * 8193 + "&ok=1")
        assert form == {"ok": "1"}

    def test_pair_count_capped(self):
        """Pairs after the first MAX_FORM_PAIRS are ignored."""
        body = "&".join(f"k{i}=v" for i in range(MAX_FORM_PAIRS + 5))
        form = parse_form_data(body)

        assert len(form) == MAX_FORM_PAIRS
        assert f"k{MAX_FORM_PAIRS}" not in form

    def test_set_body_decodes_form(self):
        request = parse_request(
            "POST /login HTTP/1.1\r\n"
            "Content-Type: application/x-www-form-urlencoded; charset=UTF-8\r\n\r\n"
        )
        request.set_body(b"username=admin&password=admin123")

        assert request.get_form("username") == "admin"
        assert request.get_form("password") == "admin123"

    def test_set_body_ignores_other_content_types(self):
        request = parse_request("POST / HTTP/1.1\r\nContent-Type: application/json\r\n\r\n")
        request.set_body(b"username=admin")

        assert request.body == b"username=admin"
        assert request.form == {}
