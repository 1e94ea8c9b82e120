"""Tests for duration text parsing and formatting."""

import pytest

from coach_running.exceptions import ErrorCode, InvalidFormatError
from coach_running.metrics.race_time import format_duration, parse_duration


class TestParseDuration:
    """Tests for parse_duration."""

    @pytest.mark.parametrize(
        "text,expected",
        [
            ("4h", 4 * 3600),
            ("4h30", 4 * 3600 + 30 * 60),
            ("4h:08", 4 * 3600 + 8 * 60),
            ("3H45", 3 * 3600 + 45 * 60),
            ("58 min", 58 * 60),
            ("58min", 58 * 60),
            ("1:45:30", 3600 + 45 * 60 + 30),
            ("25:00", 1500),
            ("  22:30 ", 1350),
        ],
    )
    def test_supported_forms(self, text, expected):
        """Test every documented form."""
        assert parse_duration(text) == expected

    def test_hour_form_wins_over_colon_form(self):
        """Test "1h:30" is read as hours and minutes."""
        assert parse_duration("1h:30") == 5400

    @pytest.mark.parametrize("text", ["", "   ", "abc", "25", "1:2:3:4", "12:ab", "-5:00"])
    def test_rejects_unrecognized_text(self, text):
        """Test unparseable text raises InvalidFormatError carrying the text."""
        with pytest.raises(InvalidFormatError) as exc_info:
            parse_duration(text)

        assert exc_info.value.text == text
        assert exc_info.value.code == ErrorCode.INVALID_FORMAT
        assert exc_info.value.status_code == 400

    def test_none_is_rejected(self):
        with pytest.raises(InvalidFormatError):
            parse_duration(None)


class TestFormatDuration:
    """Tests for format_duration."""

    def test_under_one_hour(self):
        assert format_duration(1500) == "25:00"
        assert format_duration(59) == "00:59"

    def test_one_hour_or_more(self):
        assert format_duration(3600) == "1:00:00"
        assert format_duration(6330) == "1:45:30"

    def test_negative_is_rejected(self):
        with pytest.raises(ValueError):
            format_duration(-1)

    @pytest.mark.parametrize("seconds", [0, 1, 59, 60, 1500, 3599, 3600, 3661, 13500, 86399])
    def test_parse_reads_back_formatted_value(self, seconds):
        """Test formatting then parsing gives the original seconds."""
        assert parse_duration(format_duration(seconds)) == seconds
