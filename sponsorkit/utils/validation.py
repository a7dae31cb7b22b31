"""
Module: sponsorkit/utils/validation.py
Unified comment style: module docstring + minimal inline notes.
"""
from __future__ import annotations
import math
import re
from datetime import date, datetime, timezone
from typing import Any

from sponsorkit.utils.errors import ValidationError

EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def normalize_email(email: str | None) -> str:
    return (email or "").strip().lower()


def is_valid_email_format(email: str | None) -> bool:
    return bool(EMAIL_RE.match(normalize_email(email)))


def clean_str(value: Any) -> str | None:
    """Trim strings; blank or non-string values become ``None``."""
    if value is None:
        return None
    if not isinstance(value, str):
        value = str(value)
    value = value.strip()
    return value or None


def require_str(payload: dict, key: str, message: str) -> str:
    value = clean_str(payload.get(key))
    if not value:
        raise ValidationError(message)
    return value


def parse_int(value: Any) -> int | None:
    """Lenient integer parse: anything unparseable is ``None``."""
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        return None


def parse_float(value: Any) -> float | None:
    if value is None or value == "" or isinstance(value, bool):
        return None
    try:
        number = float(str(value).strip())
    except (TypeError, ValueError):
        return None
    # nan and inf are not representable in JSON or Numeric columns
    return number if math.isfinite(number) else None


def parse_bool(value: Any) -> bool | None:
    if isinstance(value, bool):
        return value
    if value is None:
        return None
    v = str(value).strip().lower()
    if v in {"1", "true", "yes", "on"}:
        return True
    if v in {"0", "false", "no", "off"}:
        return False
    return None


def parse_date(value: Any) -> date | None:
    """Accept ``YYYY-MM-DD``, ISO-8601 datetimes and ``date``/``datetime``."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    raw = str(value).strip()
    try:
        return date.fromisoformat(raw[:10])
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(raw.replace("Z", "+00:00")).date()
    except ValueError:
        return None


def parse_datetime(value: Any) -> datetime | None:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        dt = value
    else:
        raw = str(value).strip()
        try:
            dt = datetime.fromisoformat(raw.replace("Z", "+00:00"))
        except ValueError:
            try:
                dt = datetime.fromisoformat(raw + "T00:00:00+00:00")
            except ValueError:
                return None
    return dt if dt.tzinfo else dt.replace(tzinfo=timezone.utc)


def check_email(email: Any) -> str | None:
    """Return the normalized email, ``None`` when blank; raise when malformed."""
    cleaned = clean_str(email)
    if not cleaned:
        return None
    if not is_valid_email_format(cleaned):
        raise ValidationError("Invalid email format")
    return normalize_email(cleaned)
