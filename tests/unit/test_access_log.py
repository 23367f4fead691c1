"""
Unit tests for access logging.
"""

import json
import logging

import pytest

from minihttp.access_log import AccessLogger, RequestLog
from minihttp.core.connection import Connection
from minihttp.http.request import parse_request
from minihttp.http.response import text


@pytest.fixture
def entry() -> RequestLog:
    return RequestLog(
        connection_id="a1b2c3d4",
        client_ip="127.0.0.1",
        method="GET",
        path="/echo/abc",
        user_agent="curl/8.4.0",
        status_code=200,
        content_length=3,
        duration_ms=0.41234,
        timestamp="2026-01-01T12:00:00+00:00",
    )


class TestRequestLog:
    """Tests for RequestLog formatting."""

    def test_to_text(self, entry):
        """Test the Apache-like text line."""
        assert entry.to_text() == (
            '127.0.0.1 - - [2026-01-01T12:00:00+00:00] "GET /echo/abc" 200 3 '
            '0.41ms "curl/8.4.0" [a1b2c3d4]'
        )

    def test_to_text_without_user_agent(self, entry):
        """Test a missing user agent is shown as "-"."""
        entry.user_agent = ""

        assert '"-"' in entry.to_text()

    def test_to_dict(self, entry):
        """Test the dict form rounds the duration."""
        data = entry.to_dict()

        assert data["path"] == "/echo/abc"
        assert data["status_code"] == 200
        assert data["duration_ms"] == 0.41


class TestAccessLogger:
    """Tests for AccessLogger output."""

    @pytest.fixture
    def exchange(self, fake_socket_factory):
        conn = Connection(socket=fake_socket_factory(), address=("192.0.2.1", 1234))
        request = parse_request(b"GET /echo/hi HTTP/1.1\r\nUser-Agent: t\r\n\r\n")
        return conn, request, text("hi")

    def _messages(self, caplog):
        return [r.getMessage() for r in caplog.records if r.name == "minihttp.access"]

    def test_text_format(self, exchange, caplog):
        """Test a text access line is emitted."""
        with caplog.at_level(logging.INFO, logger="minihttp.access"):
            AccessLogger().log(*exchange, started_at=1.0, finished_at=1.002)

        [message] = self._messages(caplog)
        assert message.startswith("192.0.2.1 - - [")
        assert '"GET /echo/hi" 200 2 2.00ms "t"' in message

    def test_json_format(self, exchange, caplog):
        """Test a JSON access line is emitted."""
        with caplog.at_level(logging.INFO, logger="minihttp.access"):
            AccessLogger(log_format="json").log(*exchange, started_at=1.0, finished_at=1.5)

        [message] = self._messages(caplog)
        data = json.loads(message)
        assert data["client_ip"] == "192.0.2.1"
        assert data["method"] == "GET"
        assert data["user_agent"] == "t"
        assert data["content_length"] == 2
        assert data["duration_ms"] == 500.0

    def test_disabled_level_logs_nothing(self, exchange, caplog):
        """Test nothing is built when the level is disabled."""
        with caplog.at_level(logging.WARNING, logger="minihttp.access"):
            AccessLogger().log(*exchange, started_at=1.0, finished_at=1.1)

        assert self._messages(caplog) == []
