"""
Unit tests for header line parsing.
"""

import pytest

from minihttp.errors import InvalidHeaderLine
from minihttp.http.headers import (
    HeaderName,
    parse_header_block,
    parse_header_line,
    split_header_line,
)


class TestHeaderName:
    """Tests for the HeaderName allowlist."""

    def test_lookup_canonical_names(self):
        """Test lookup of every canonical name."""
        assert HeaderName.lookup("User-Agent") is HeaderName.USER_AGENT
        assert HeaderName.lookup("Content-Type") is HeaderName.CONTENT_TYPE
        assert HeaderName.lookup("Content-Length") is HeaderName.CONTENT_LENGTH

    def test_lookup_is_case_sensitive(self):
        """Test other spellings are not recognized."""
        assert HeaderName.lookup("user-agent") is None
        assert HeaderName.lookup("USER-AGENT") is None

    def test_unknown_name(self):
        """Test an unknown name."""
        assert HeaderName.lookup("X-Custom") is None

    def test_members_work_as_dict_keys(self):
        """Test members as dict keys."""
        headers = {HeaderName.USER_AGENT: "a"}
        headers[HeaderName.lookup("User-Agent")] = "b"

        assert headers == {HeaderName.USER_AGENT: "b"}


class TestParseHeaderLine:
    """Tests for the per-line transform."""

    def test_recognized_header(self):
        """Test a recognized header line."""
        assert parse_header_line("User-Agent: curl/8.4.0") == (
            HeaderName.USER_AGENT, "curl/8.4.0"
        )

    def test_value_is_kept_verbatim(self):
        """Only the first ': ' splits; the rest belongs to the value."""
        assert parse_header_line("User-Agent: a: b ") == (HeaderName.USER_AGENT, "a: b ")

    def test_empty_value(self):
        """Test an empty value is kept."""
        assert parse_header_line("User-Agent: ") == (HeaderName.USER_AGENT, "")

    def test_unknown_header_is_skipped(self):
        """Test an unknown header is skipped."""
        assert parse_header_line("X-Custom: whatever") is None

    @pytest.mark.parametrize("line", [
        "User-Agent:curl",     # no space after colon
        "User-Agent curl",     # no colon
        "garbage",
        ": value",
    ])
    def test_malformed_line_is_skipped(self, line: str):
        """Test malformed lines are skipped."""
        assert parse_header_line(line) is None

    def test_split_raises_for_skippable_lines(self):
        """The strict transform raises; parse_header_line turns that into a skip."""
        with pytest.raises(InvalidHeaderLine):
            split_header_line("X-Custom: whatever")

        with pytest.raises(InvalidHeaderLine):
            split_header_line("no separator here")


class TestParseHeaderBlock:
    """Tests for whole-block parsing."""

    def test_unknown_lines_do_not_abort(self):
        """Test bad lines do not stop the block."""
        headers = parse_header_block([
            "Host: localhost",
            "X-Custom: whatever",
            "User-Agent: pytest",
            "broken line",
            "",
        ])

        assert dict(headers) == {HeaderName.USER_AGENT: "pytest"}

    def test_stops_at_blank_line(self):
        """Test nothing after the blank line is read."""
        headers = parse_header_block([
            "",
            "User-Agent: after-the-blank-line",
        ])

        assert len(headers) == 0

    def test_last_duplicate_wins(self):
        """Test a repeated header keeps its last value."""
        headers = parse_header_block([
            "User-Agent: first",
            "User-Agent: second",
        ])

        assert headers[HeaderName.USER_AGENT] == "second"

    def test_result_is_read_only(self):
        """Test the result can not be modified."""
        headers = parse_header_block(["User-Agent: pytest"])

        with pytest.raises(TypeError):
            headers[HeaderName.USER_AGENT] = "changed"
