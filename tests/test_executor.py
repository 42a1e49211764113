"""Tests for submitting built requests with httpx."""

import json
from urllib.parse import parse_qs

import httpx
import pytest

from oas_request.executor import Executor, RequestError
from oas_request.models import Request


class _Recorder:
    """httpx.MockTransport handler that keeps the last request."""

    def __init__(self, response: httpx.Response | None = None) -> None:
        self.request: httpx.Request | None = None
        self._response = response or httpx.Response(200, json={"ok": True})

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.request = request
        return self._response


class TestExecutorSubmit:
    def test_path_and_query_sent(self):
        """Test path and query reach the transport."""
        recorder = _Recorder()
        with Executor("http://api.test", transport=httpx.MockTransport(recorder)) as executor:
            response = executor.submit(Request(verb="get", path="/v1/pets?tags=a,b"))

        assert response.status_code == 200
        assert recorder.request.method == "GET"
        assert recorder.request.url.path == "/v1/pets"
        assert recorder.request.url.params["tags"] == "a,b"

    def test_form_payload_encoded(self):
        """Test dict payloads are form-encoded."""
        recorder = _Recorder()
        request = Request(
            verb="post",
            path="/pets",
            headers={"Content-Type": "application/x-www-form-urlencoded"},
            payload={"name": "Rex", "address_city": "Oslo"},
        )
        with Executor("http://api.test", transport=httpx.MockTransport(recorder)) as executor:
            executor.submit(request)

        body = parse_qs(recorder.request.content.decode())
        assert body == {"name": ["Rex"], "address_city": ["Oslo"]}

    def test_string_payload_sent_raw(self):
        """Test string payloads are sent as the raw body."""
        recorder = _Recorder()
        request = Request(
            verb="put",
            path="/pets/1",
            headers={"Content-Type": "application/json"},
            payload=json.dumps({"name": "Rex"}),
        )
        with Executor("http://api.test", transport=httpx.MockTransport(recorder)) as executor:
            executor.submit(request)

        assert recorder.request.headers["content-type"] == "application/json"
        assert json.loads(recorder.request.content) == {"name": "Rex"}

    def test_default_and_request_headers(self):
        """Test request headers override default headers."""
        recorder = _Recorder()
        executor = Executor(
            "http://api.test",
            headers={"User-Agent": "oas-request", "api_key": "default"},
            transport=httpx.MockTransport(recorder),
        )
        try:
            executor.submit(Request(verb="get", path="/pets", headers={"api_key": "override"}))
        finally:
            executor.close()

        assert recorder.request.headers["user-agent"] == "oas-request"
        assert recorder.request.headers["api_key"] == "override"

    def test_non_ascii_header_sanitized(self):
        """Test non-ASCII header values are replaced."""
        recorder = _Recorder()
        with Executor("http://api.test", transport=httpx.MockTransport(recorder)) as executor:
            executor.submit(Request(verb="get", path="/pets", headers={"X-Name": "café"}))
        assert recorder.request.headers["x-name"] == "caf?"

    def test_transport_error_wrapped(self):
        """Test transport errors become RequestError."""
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        with Executor("http://api.test", transport=httpx.MockTransport(handler)) as executor:
            with pytest.raises(RequestError, match="connection refused"):
                executor.submit(Request(verb="get", path="/pets"))

    def test_timeout_wrapped(self):
        """Test timeouts become RequestError."""
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("slow", request=request)

        with Executor("http://api.test", transport=httpx.MockTransport(handler)) as executor:
            with pytest.raises(RequestError, match="timed out"):
                executor.submit(Request(verb="get", path="/pets"))
