"""Normalization of raw column values into canonical output forms.

Dates become ``YYYY-MM-DD`` strings, times ``HH:MM:SS`` strings and numbers
locale-invariant ``float``/``int`` values. Unparseable input is an expected
outcome for this data: every function here returns ``None`` for it and logs
a warning instead of raising, so a bad field never aborts a request.
"""

import math
import re
from datetime import date, datetime, time, timezone
from decimal import Decimal
from typing import Any

import structlog

logger = structlog.get_logger()

MIN_YEAR = 1900
MAX_YEAR = 3000

_ISO_DATE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})")
_DMY_DATE = re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{4})$")
_MDY_DATE = re.compile(r"^(\d{1,2})-(\d{1,2})-(\d{4})$")
_TIME = re.compile(r"^(\d{1,2}):(\d{2})(?::(\d{2})(?:\.\d+)?)?$")
_PLAIN_NUMBER = re.compile(r"^[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?$")

# Last-resort formats for free-form strings, tried in order.
FALLBACK_DATE_FORMATS = (
    "%Y/%m/%d",
    "%d.%m.%Y",
    "%B %d, %Y",
    "%b %d, %Y",
    "%d %B %Y",
    "%d %b %Y",
    "%a, %d %b %Y %H:%M:%S GMT",
)


def build_iso_date(year: int, month: int, day: int) -> str | None:
    """Return ``YYYY-MM-DD`` for a real calendar day, else None.

    The triple is rebuilt as a UTC datetime and compared field by field, so
    day 31 of February is rejected instead of rolling into March.
    """
    if not (1 <= month <= 12 and 1 <= day <= 31 and MIN_YEAR <= year <= MAX_YEAR):
        return None
    try:
        built = datetime(year, month, day, tzinfo=timezone.utc)
    except ValueError:
        return None
    if (built.year, built.month, built.day) != (year, month, day):
        return None
    return built.date().isoformat()


def _date_from_datetime(value: datetime) -> str | None:
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc)
    return build_iso_date(value.year, value.month, value.day)


def _parse_fallback(text: str) -> str | None:
    for fmt in FALLBACK_DATE_FORMATS:
        try:
            parsed = datetime.strptime(text, fmt)
        except ValueError:
            continue
        return build_iso_date(parsed.year, parsed.month, parsed.day)
    return None


def normalize_date(value: Any) -> str | None:
    """Normalize a date-like value to ``YYYY-MM-DD``.

    Accepted inputs, tried in this order:

    - ``date``/``datetime`` objects (aware datetimes are read in UTC)
    - ISO strings, with or without a time part (``2023-03-15T10:00:00Z``)
    - ``DD/MM/YYYY``
    - ``MM-DD-YYYY``
    - a handful of free-form layouts (see ``FALLBACK_DATE_FORMATS``)

    The first pattern that matches structurally decides the result; a match
    that fails calendar validation yields None without trying the others.
    """
    if value is None:
        return None

    if isinstance(value, datetime):
        return _date_from_datetime(value)
    if isinstance(value, date):
        return build_iso_date(value.year, value.month, value.day)

    text = str(value).strip()
    if not text:
        return None

    match = _ISO_DATE.match(text)
    if match:
        y, m, d = match.groups()
        return _checked(build_iso_date(int(y), int(m), int(d)), value)

    match = _DMY_DATE.match(text)
    if match:
        d, m, y = match.groups()
        return _checked(build_iso_date(int(y), int(m), int(d)), value)

    match = _MDY_DATE.match(text)
    if match:
        m, d, y = match.groups()
        return _checked(build_iso_date(int(y), int(m), int(d)), value)

    return _checked(_parse_fallback(text), value)


def _checked(result: str | None, original: Any) -> str | None:
    if result is None:
        logger.warning("date_not_recognized", value=str(original))
    return result


def parse_locale_number(value: Any) -> float | int | None:
    """Parse a number written in either pt-BR or plain notation.

    When the text contains a comma, dots are thousands separators and the
    comma is the decimal mark (``"1.234,56"`` -> ``1234.56``). Otherwise
    the text is read as a plain decimal (``"1234.56"``).
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, Decimal):
        value = float(value)
    if isinstance(value, (int, float)):
        if isinstance(value, float) and not math.isfinite(value):
            return None
        return value

    text = str(value).strip()
    if not text:
        return None

    if "," in text:
        text = text.replace(".", "").replace(",", ".", 1)

    if not _PLAIN_NUMBER.match(text):
        logger.warning("number_not_recognized", value=str(value))
        return None
    number = float(text)
    if not math.isfinite(number):
        logger.warning("number_not_recognized", value=str(value))
        return None
    return number


def normalize_time(value: Any) -> str | None:
    """Normalize a time-of-day value to ``HH:MM:SS``."""
    if value is None:
        return None

    if isinstance(value, (time, datetime)):
        return value.strftime("%H:%M:%S")

    text = str(value).strip()
    if not text:
        return None

    match = _TIME.match(text)
    if match:
        hours, minutes, seconds = (int(part or 0) for part in match.groups())
        if hours < 24 and minutes < 60 and seconds < 60:
            return f"{hours:02d}:{minutes:02d}:{seconds:02d}"

    logger.warning("time_not_recognized", value=str(value))
    return None
