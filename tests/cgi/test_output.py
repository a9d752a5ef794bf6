"""Tests for parsing and converting CGI script output.

Covers the three kinds of script response (document, client redirect
and local redirect) and the malformed outputs that must become a 500.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from py_cgi.cgi.output import (
    CgiResponseHeader,
    CgiScriptResponse,
    ClientRedirect,
    DocumentResult,
    LocalRedirect,
    classify,
    parse_cgi_output,
    to_http_response,
)
from py_cgi.errors import CgiError
from py_cgi.handlers.static import StaticHandler
from py_cgi.http.request import HttpRequest
from py_cgi.http.response import HttpResponse
from py_cgi.http.status import HttpStatus
from py_cgi.logging import Logger

STATUS_NOT_FOUND = 404
STATUS_CREATED = 201


class _Recorder:
    """A static-handler stand-in that records what it was asked."""

    def __init__(self, response: HttpResponse | None) -> None:
        self.response = response
        self.requests: list[HttpRequest] = []

    def handle(self, request: HttpRequest, peer: str | None) -> HttpResponse | None:
        self.requests.append(request)
        return self.response


class TestParseCgiOutput:
    """Verify the header/body split."""

    def test_simple_document(self) -> None:
        """'Content-Type: text/html' + blank line + body."""
        parsed = parse_cgi_output("Content-Type: text/html\n\nHello!")
        assert parsed == CgiScriptResponse(
            headers={CgiResponseHeader.CONTENT_TYPE: "text/html"}, body="Hello!"
        )

    def test_header_names_are_case_insensitive(self) -> None:
        """Any spelling of the three names is recognised."""
        parsed = parse_cgi_output("content-type: a\r\nLOCATION: /b\r\nstAtUs: 200\r\n\r\n")
        assert parsed.headers == {
            CgiResponseHeader.CONTENT_TYPE: "a",
            CgiResponseHeader.LOCATION: "/b",
            CgiResponseHeader.STATUS: "200",
        }

    def test_unknown_headers_are_dropped_and_logged(self) -> None:
        """Unrecognised header lines are not fatal."""
        logger = Logger()
        parsed = parse_cgi_output("X-Powered-By: sh\nContent-Type: text/plain\n\nok", logger=logger)
        assert parsed.headers == {CgiResponseHeader.CONTENT_TYPE: "text/plain"}
        assert any("X-Powered-By" in e.message for e in logger.filter(source="cgi"))

    def test_body_lines_are_joined_without_newlines(self) -> None:
        """The body loses its line breaks."""
        parsed = parse_cgi_output("Content-Type: text/plain\n\nline one\nline two\n")
        assert parsed.body == "line oneline two"

    def test_missing_blank_line_is_fatal(self) -> None:
        """Output that never ends its header block is malformed."""
        with pytest.raises(CgiError):
            parse_cgi_output("Content-Type: text/html\n")

    def test_empty_output_is_fatal(self) -> None:
        """A script that prints nothing is malformed."""
        with pytest.raises(CgiError):
            parse_cgi_output("")

    def test_header_line_without_colon_is_fatal(self) -> None:
        """A header line must contain a colon."""
        with pytest.raises(CgiError):
            parse_cgi_output("just some text\n\n")


class TestClassify:
    """Verify the choice between document and redirects."""

    def test_document_defaults_to_ok(self) -> None:
        """No Status means 200."""
        result = classify(parse_cgi_output("Content-Type: text/html\n\nHello!"))
        assert result == DocumentResult(status=HttpStatus.OK, content_type="text/html", body="Hello!")

    def test_document_with_status(self) -> None:
        """Status: 404 with a Content-Type gives a 404 document."""
        result = classify(parse_cgi_output("Status: 404 Not Found\nContent-Type: text/plain\n\n"))
        assert isinstance(result, DocumentResult)
        assert result.status == STATUS_NOT_FOUND

    def test_local_redirect(self) -> None:
        """A Location starting with '/' is a local redirect."""
        assert classify(parse_cgi_output("Location: /other\n\n")) == LocalRedirect(path="/other")

    def test_client_redirect(self) -> None:
        """Any other Location is a client redirect."""
        result = classify(parse_cgi_output("Location: https://example.com\n\n"))
        assert result == ClientRedirect(location="https://example.com")

    def test_location_wins_over_document_headers(self) -> None:
        """With a Location, Content-Type and Status are ignored."""
        output = "Status: oops\nLocation: /x\n\nbody"
        assert classify(parse_cgi_output(output)) == LocalRedirect(path="/x")

    def test_missing_content_type_is_fatal(self) -> None:
        """A document without Content-Type is malformed."""
        with pytest.raises(CgiError, match="Content-Type"):
            classify(parse_cgi_output("Status: 200\n\nHello"))

    @pytest.mark.parametrize("status", ["abc", "20", "1000", ""])
    def test_bad_status_is_fatal(self, status: str) -> None:
        """An unparseable Status is malformed."""
        with pytest.raises(CgiError, match="Status"):
            classify(parse_cgi_output(f"Status: {status}\nContent-Type: text/plain\n\n"))


class TestToHttpResponse:
    """Verify conversion of each kind into an HTTP response."""

    def test_document(self) -> None:
        """Documents keep their status, content type, and body."""
        result = DocumentResult(status=STATUS_CREATED, content_type="text/html", body="Hello!")
        response = to_http_response(result, _Recorder(None), None)
        assert response.status == STATUS_CREATED
        assert dict(response.headers) == {"content-type": "text/html"}
        assert response.body == "Hello!"

    def test_client_redirect(self) -> None:
        """Client redirects become a bodiless 302 with Location."""
        response = to_http_response(ClientRedirect("https://example.com"), _Recorder(None), None)
        assert response.status == HttpStatus.FOUND
        assert response.headers["Location"] == "https://example.com"
        assert response.body == ""

    def test_local_redirect_asks_static_handler_with_get(self) -> None:
        """Local redirects are re-issued as GET to the static handler."""
        answer = HttpResponse(body="other page")
        static = _Recorder(answer)
        response = to_http_response(LocalRedirect("/other?x=1"), static, "10.1.1.1")
        assert response is answer
        (request,) = static.requests
        assert request.method == "GET"
        assert request.path == "/other"
        assert request.query == "x=1"
        assert request.body == ""

    def test_local_redirect_without_answer_is_internal_error(self) -> None:
        """If the static handler declines, the client gets a 500."""
        response = to_http_response(LocalRedirect("/gone"), _Recorder(None), None)
        assert response.status == HttpStatus.INTERNAL_SERVER_ERROR

    def test_local_redirect_against_real_root(self, static_root: Path) -> None:
        """Location: /other serves the 'other' file from the static root."""
        response = to_http_response(LocalRedirect("/other"), StaticHandler(static_root), None)
        assert response.status == HttpStatus.OK
        assert response.body == "other page"
