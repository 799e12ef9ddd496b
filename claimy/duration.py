import re

from claimy.claimy_error import ValidationError
from claimy.constants import DEFAULT_CLAIM_MINUTES, MAX_CLAIM_HOURS, MAX_CLAIM_MINUTES

_DURATION_PATTERN = re.compile(r"^([0-9]{1,2}):([0-9]{2})$")


def parse_duration(value: str | None) -> int:
    """Parse an ``H:MM`` / ``HH:MM`` duration into minutes.

    Args:
        value: The duration as typed by the user. None or blank means the default (2:30).

    Returns:
        int: Total minutes, never more than 150

    Raises:
        ValidationError: If the value is malformed or out of range. Values are never clamped.
    """
    if value is None or not value.strip():
        return DEFAULT_CLAIM_MINUTES
    match = _DURATION_PATTERN.match(value.strip())
    if not match:
        raise ValidationError(
            f"Invalid duration {value!r}: use the format HH:MM (maximum 2:30)"
        )
    hours = int(match.group(1))
    minutes = int(match.group(2))
    if hours > MAX_CLAIM_HOURS or minutes > 59:
        raise ValidationError(
            f"Invalid duration {value!r}: hours must be 0-2 and minutes 0-59"
        )
    total = hours * 60 + minutes
    if total > MAX_CLAIM_MINUTES:
        raise ValidationError(f"Invalid duration {value!r}: the maximum is 2:30")
    return total


def format_minutes(minutes: int) -> str:
    """Format minutes for display, e.g. 65 -> [01:05]"""
    minutes = max(0, minutes)
    return f"[{minutes // 60:02d}:{minutes % 60:02d}]"
