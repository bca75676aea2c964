"""Value-level validation functions shared by the validation engine and the
payload validation handler.

Validators are pure functions that raise ValueError on invalid input and
return the parsed or normalised value otherwise.
"""

import re
from collections.abc import Collection
from datetime import date, datetime, time
from typing import Any

EMAIL_PATTERN = re.compile(r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$")
PHONE_PATTERN = re.compile(r"^\+?[0-9\s().-]{7,20}$")

DEFAULT_ALLOWED_FILE_TYPES: frozenset[str] = frozenset(
    {"pdf", "jpg", "jpeg", "png", "doc", "docx", "csv", "txt"}
)


def is_empty_value(value: Any) -> bool:
    """None, blank strings and empty collections count as unanswered.

    ``False`` and ``0`` are answers.
    """
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ""
    if isinstance(value, (list, tuple, set, frozenset, dict)):
        return len(value) == 0
    return False


def validate_email(v: str) -> str:
    """Validate email format.

    Raises:
        ValueError: If email format is invalid.
    """
    if not isinstance(v, str) or not EMAIL_PATTERN.match(v):
        raise ValueError("Invalid email format")
    return v.lower()


def validate_phone(v: str) -> str:
    """Validate a loosely formatted phone number (7+ digits).

    Raises:
        ValueError: If the value does not look like a phone number.
    """
    if not isinstance(v, str) or not PHONE_PATTERN.match(v):
        raise ValueError("Invalid phone number format")
    if sum(ch.isdigit() for ch in v) < 7:
        raise ValueError("Invalid phone number format")
    return v


def parse_number(v: Any) -> float:
    """Parse an int, float or numeric string.

    Booleans are rejected even though they are ints in Python.

    Raises:
        ValueError: If the value is not numeric.
    """
    if isinstance(v, bool):
        raise ValueError("Boolean is not a number")
    if isinstance(v, (int, float)):
        return float(v)
    if isinstance(v, str) and v.strip():
        try:
            return float(v.strip())
        except ValueError:
            raise ValueError(f"Not a number: {v!r}") from None
    raise ValueError(f"Not a number: {v!r}")


def is_numeric(v: Any) -> bool:
    try:
        parse_number(v)
    except ValueError:
        return False
    return True


def parse_date(v: Any) -> date:
    """Parse a real calendar date from a date, datetime or ISO 8601 string.

    ``2024-02-30`` is rejected. Datetime strings keep only their date part.

    Raises:
        ValueError: If the value is not a valid date.
    """
    if isinstance(v, datetime):
        return v.date()
    if isinstance(v, date):
        return v
    if not isinstance(v, str) or not v.strip():
        raise ValueError(f"Not a date: {v!r}")
    text = v.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        if "T" in text or " " in text:
            return datetime.fromisoformat(text).date()
        return date.fromisoformat(text)
    except ValueError:
        raise ValueError(f"Not a valid date: {v!r}") from None


def parse_time(v: Any) -> time:
    """Parse an ISO time of day (``HH:MM`` or ``HH:MM:SS``).

    Raises:
        ValueError: If the value is not a valid time.
    """
    if isinstance(v, time):
        return v
    if not isinstance(v, str):
        raise ValueError(f"Not a time: {v!r}")
    try:
        return time.fromisoformat(v.strip())
    except ValueError:
        raise ValueError(f"Not a valid time: {v!r}") from None


def validate_file_extension(
    filename: str,
    allowed: Collection[str] | None = None,
) -> str:
    """Check a file name's extension against an allow-list (case-insensitive).

    Raises:
        ValueError: If the extension is missing or not allowed.
    """
    allowed_set = {ext.lower().lstrip(".") for ext in (allowed or DEFAULT_ALLOWED_FILE_TYPES)}
    if not isinstance(filename, str) or "." not in filename:
        raise ValueError("File has no extension")
    extension = filename.rsplit(".", 1)[1].lower()
    if extension not in allowed_set:
        raise ValueError(f"File type .{extension} is not allowed")
    return filename
