"""
Value normalization for spreadsheet-shaped import records.

Import sources mix spreadsheet serial numbers, ISO strings, locale strings
and native date objects. Every date is reduced to a calendar day pinned to
12:00 UTC, and rendered from its UTC components, so the day the uploader
typed never shifts with the server or client time zone.
"""

import math
import re
from datetime import date, datetime, time, timedelta, timezone
from typing import Any

from dateutil import parser as dt_parser

# Days between the spreadsheet epoch (1899-12-30) and the Unix epoch.
SPREADSHEET_EPOCH_OFFSET = 25569
UNIX_EPOCH = date(1970, 1, 1)
MIDDAY_UTC = time(12, 0, tzinfo=timezone.utc)

_NUMERIC_RE = re.compile(r"^-?\d+(\.\d+)?$")
_THOUSANDS_COMMA_RE = re.compile(r"^-?\d{1,3}(,\d{3})+$")
_THOUSANDS_DOT_RE = re.compile(r"^-?\d{1,3}(\.\d{3}){2,}$")
_LIST_SPLIT_RE = re.compile(r"[,;\n]")

TRUE_VALUES = {"true", "yes", "y", "si", "sì", "1", "x", "vero"}
FALSE_VALUES = {"false", "no", "n", "0", "falso"}


def _pin(day: date) -> datetime:
    return datetime.combine(day, MIDDAY_UTC)


def _from_serial(serial: float) -> datetime | None:
    if not math.isfinite(serial):
        return None
    try:
        return _pin(UNIX_EPOCH + timedelta(days=math.floor(serial - SPREADSHEET_EPOCH_OFFSET)))
    except OverflowError:
        return None


def parse_date(value: Any, dayfirst: bool = False) -> datetime | None:
    """
    Normalize a date-like value to midday UTC of its calendar day.

    Args:
        value: None, datetime, date, spreadsheet serial (int/float), or text
        dayfirst: Prefer DD/MM over MM/DD for ambiguous text

    Returns:
        Aware datetime at 12:00 UTC, or None when the value is absent or
        cannot be parsed
    """
    if value is None:
        return None

    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return _pin(value.date())

    if isinstance(value, date):
        return _pin(value)

    if isinstance(value, bool):
        return None

    if isinstance(value, (int, float)):
        return _from_serial(float(value))

    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        if _NUMERIC_RE.match(text):
            return _from_serial(float(text))
        try:
            parsed = dt_parser.parse(text, dayfirst=dayfirst)
        except (ValueError, OverflowError):
            return None
        return parse_date(parsed)

    return None


def format_date(value: Any, dayfirst: bool = False) -> str | None:
    """Render a date-like value as YYYY-MM-DD from its UTC components."""
    parsed = parse_date(value, dayfirst=dayfirst)
    if parsed is None:
        return None
    return f"{parsed.year:04d}-{parsed.month:02d}-{parsed.day:02d}"


def to_date(value: Any, dayfirst: bool = False) -> date | None:
    """Calendar day to persist for a date-like value."""
    parsed = parse_date(value, dayfirst=dayfirst)
    return parsed.date() if parsed else None


def clean_text(value: Any) -> str | None:
    """Trimmed string, or None for absent/blank values."""
    if value is None:
        return None
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    text = str(value).strip()
    return text or None


def normalize_key(value: Any) -> str:
    """Matching form of a natural key: trimmed, single-spaced, lowercase."""
    text = clean_text(value)
    if text is None:
        return ""
    return " ".join(text.lower().split())


def present_name(value: Any) -> str | None:
    """Display form for a newly created name: trimmed, first letter uppercase."""
    text = clean_text(value)
    if text is None:
        return None
    text = " ".join(text.split())
    return text[0].upper() + text[1:]


def to_number(value: Any, default: float | None = None) -> float | None:
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, (int, float)):
        return float(value) if math.isfinite(value) else default
    text = str(value).strip().replace("%", "").replace(" ", "")
    if not text:
        return default
    # The separator that comes last is the decimal one: "1.234,50", "1,234.50"
    if "," in text and "." in text:
        if text.rfind(",") > text.rfind("."):
            text = text.replace(".", "").replace(",", ".")
        else:
            text = text.replace(",", "")
    elif _THOUSANDS_COMMA_RE.match(text):
        text = text.replace(",", "")
    elif "," in text:
        text = text.replace(",", ".")
    elif _THOUSANDS_DOT_RE.match(text):
        text = text.replace(".", "")
    try:
        number = float(text)
    except ValueError:
        return default
    return number if math.isfinite(number) else default


def to_int(value: Any, default: int | None = None) -> int | None:
    number = to_number(value)
    if number is None:
        return default
    return int(round(number))


def to_bool(value: Any, default: bool = False) -> bool:
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    text = str(value).strip().lower()
    if text in TRUE_VALUES:
        return True
    if text in FALSE_VALUES:
        return False
    return default


def split_list(value: Any) -> list[str]:
    """Split a comma/semicolon separated cell into trimmed, non-empty items."""
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        items = [clean_text(v) for v in value]
    else:
        items = [clean_text(v) for v in _LIST_SPLIT_RE.split(str(value))]
    return [item for item in items if item]
