"""
Unit tests for HTTP response building and serialization.
"""

import json

import pytest

from filegate.http.response import (
    HTTPResponse,
    ResponseBuilder,
    error_response,
    parse_response,
    redirect,
)
from filegate.http.status_codes import HTTPStatus


class TestHTTPStatus:
    """Tests for HTTPStatus enum."""

    def test_status_values(self):
        assert HTTPStatus.OK == 200
        assert HTTPStatus.FOUND == 302
        assert HTTPStatus.PAYLOAD_TOO_LARGE == 413

    def test_status_phrases(self):
        assert HTTPStatus.OK.phrase == "OK"
        assert HTTPStatus.NOT_FOUND.phrase == "Not Found"
        assert HTTPStatus.METHOD_NOT_ALLOWED.phrase == "Method Not Allowed"

    def test_status_categories(self):
        assert not HTTPStatus.FOUND.is_error
        assert HTTPStatus.NOT_FOUND.is_error
        assert not HTTPStatus.NOT_FOUND.is_server_error
        assert HTTPStatus.INTERNAL_SERVER_ERROR.is_server_error


class TestHTTPResponse:
    """Tests for HTTPResponse serialization."""

    def test_status_line(self):
        assert HTTPResponse(status=HTTPStatus.NOT_FOUND).status_line == "HTTP/1.1 404 Not Found"

    def test_reason_override(self):
        response = HTTPResponse(status=HTTPStatus.OK, reason="Fine")
        assert response.status_line == "HTTP/1.1 200 Fine"

    def test_to_bytes_adds_required_headers(self):
        """Content-Length and Connection: close are always written."""
        data = HTTPResponse(body=b"Hello").to_bytes()

        assert data.startswith(b"HTTP/1.1 200 OK\r\n")
        assert b"Content-Length: 5\r\n" in data
        assert b"Connection: close\r\n" in data
        assert b"Server: FileGate/1.0\r\n" in data
        assert b"Date: " in data
        assert data.endswith(b"\r\n\r\nHello")

    def test_content_length_matches_body(self):
        """A stale Content-Length set by a handler is corrected."""
        response = HTTPResponse(headers={"Content-Length": "999"}, body=b"abc")
        assert b"Content-Length: 3\r\n" in response.to_bytes()

    def test_each_cookie_on_its_own_line(self):
        response = HTTPResponse()
        response.set_cookie("a", "1", max_age=60)
        response.set_cookie("b", "2", max_age=0, http_only=False)

        data = response.to_bytes()

        assert b"Set-Cookie: a=1; Path=/; Max-Age=60; HttpOnly\r\n" in data
        assert b"Set-Cookie: b=2; Path=/; Max-Age=0\r\n" in data

    def test_set_cookie_header_in_dict_not_written(self):
        """Set-Cookie only comes from the cookie list."""
        response = HTTPResponse(headers={"Set-Cookie": "sneaky=1"})
        assert b"sneaky" not in response.to_bytes()

    def test_get_header_case_insensitive(self):
        response = HTTPResponse(headers={"Content-Type": "text/plain"})
        assert response.get_header("content-type") == "text/plain"
        assert response.get_header("missing") is None


class TestResponseBuilder:
    """Tests for ResponseBuilder fluent API."""

    def test_html(self):
        response = ResponseBuilder().html("<h1>Hi</h1>").build()

        assert response.status == HTTPStatus.OK
        assert response.headers["Content-Type"] == "text/html; charset=utf-8"
        assert response.body == b"<h1>Hi</h1>"

    def test_json_escapes_names(self):
        """Quotes and backslashes survive the JSON writer intact."""
        data = {"name": 'we"ird\\name.txt'}
        response = ResponseBuilder().json(data).build()

        assert response.headers["Content-Type"] == "application/json; charset=utf-8"
        assert json.loads(response.body) == data

    def test_redirect_with_cookie(self):
        response = (
            ResponseBuilder()
            .redirect("/")
            .cookie("sessionId", "tok", max_age=1800)
            .build()
        )

        assert response.status == HTTPStatus.FOUND
        assert response.headers["Location"] == "/"
        assert response.cookies == ["sessionId=tok; Path=/; Max-Age=1800; HttpOnly"]

    def test_status_with_reason(self):
        response = ResponseBuilder().status(HTTPStatus.NOT_FOUND, "Gone Fishing").build()
        assert response.status_message == "Gone Fishing"


class TestHelpers:
    """Tests for redirect() and error_response()."""

    def test_redirect(self):
        response = redirect("/login")
        assert response.status == HTTPStatus.FOUND
        assert response.headers["Location"] == "/login"
        assert response.cookies == []

    def test_error_response_default_message(self):
        response = error_response(HTTPStatus.NOT_FOUND)

        assert response.status == HTTPStatus.NOT_FOUND
        assert "text/html" in response.headers["Content-Type"]
        assert b"404 Not Found" in response.body

    def test_error_response_custom_message(self):
        response = error_response(HTTPStatus.PAYLOAD_TOO_LARGE, "File Too Large")

        assert response.status == HTTPStatus.PAYLOAD_TOO_LARGE
        assert b"File Too Large" in response.body

    def test_error_message_escaped(self):
        response = error_response(HTTPStatus.BAD_REQUEST, "<script>")
        assert b"<script>" not in response.body
        assert b"&lt;script&gt;" in response.body


class TestParseResponse:
    """Tests for the client-side parse_response()."""

    def test_round_trip(self):
        """Writing then parsing reproduces status, headers and body."""
        original = HTTPResponse(
            status=HTTPStatus.OK,
            headers={"A": "1", "B": "2"},
            body=b"X",
        )

        parsed = parse_response(original.to_bytes())

        assert parsed.status == original.status
        assert parsed.headers["A"] == "1"
        assert parsed.headers["B"] == "2"
        assert parsed.body == b"X"

    def test_round_trip_cookies_and_reason(self):
        original = HTTPResponse(status=HTTPStatus.FOUND, reason="Moved Along")
        original.set_cookie("a", "1")
        original.set_cookie("b", "2")

        parsed = parse_response(original.to_bytes())

        assert parsed.status == HTTPStatus.FOUND
        assert parsed.status_message == "Moved Along"
        assert parsed.cookies == original.cookies

    def test_body_cut_at_content_length(self):
        data = b"HTTP/1.1 200 OK\r\nContent-Length: 2\r\n\r\nabcdef"
        assert parse_response(data).body == b"ab"

    @pytest.mark.parametrize("data", [
        b"garbage",
        b"NOT A STATUS LINE\r\n\r\n",
    ])
    def test_invalid(self, data: bytes):
        with pytest.raises(ValueError):
            parse_response(data)
