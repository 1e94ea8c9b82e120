"""
Duration text parsing for questionnaire race times and session durations.

Supported forms, tried in this order (first match wins):
- Hour form: "4h", "4h30", "4h:08"
- Minutes only: "58 min", "58min"
- Colon form: "H:MM:SS" or "MM:SS"
"""

import re

from ..exceptions import InvalidFormatError


_HOUR_RE = re.compile(r"^(\d+)h:?(\d{0,2})")
_MINUTES_RE = re.compile(r"^(\d+)\s*min")


def parse_duration(text: str) -> int:
    """
    Parse free-form duration text into seconds.

    Args:
        text: Duration text, e.g. "25:00", "1:45:30", "3h45", "58 min"

    Returns:
        Duration in seconds

    Raises:
        InvalidFormatError: If the text matches none of the supported forms

    Example:
        >>> parse_duration("4h30")
        16200
        >>> parse_duration("25:00")
        1500
    """
    if text is None:
        raise InvalidFormatError("")

    t = text.strip().lower()
    if not t:
        raise InvalidFormatError(text)

    hour_match = _HOUR_RE.match(t)
    if hour_match:
        hours = int(hour_match.group(1))
        minutes = int(hour_match.group(2)) if hour_match.group(2) else 0
        return hours * 3600 + minutes * 60

    minutes_match = _MINUTES_RE.match(t)
    if minutes_match:
        return int(minutes_match.group(1)) * 60

    parts = t.split(":")
    if not all(part.strip().isdigit() for part in parts):
        raise InvalidFormatError(text)

    values = [int(part) for part in parts]
    if len(values) == 3:
        return values[0] * 3600 + values[1] * 60 + values[2]
    if len(values) == 2:
        return values[0] * 60 + values[1]

    raise InvalidFormatError(text)


def format_duration(seconds: int) -> str:
    """Format seconds as H:MM:SS (one hour or more) or MM:SS."""
    seconds = int(seconds)
    if seconds < 0:
        raise ValueError("Duration must not be negative")

    hours, remainder = divmod(seconds, 3600)
    minutes, secs = divmod(remainder, 60)
    if hours:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes:02d}:{secs:02d}"
