import re
from datetime import date, datetime, timezone
from typing import Optional, Union

import pandas as pd

from fatura2ofx.errors import ParseError


# Short Portuguese month names as printed on the statement, January first.
MONTH_ABBREVIATIONS: tuple[str, ...] = (
    "jan",
    "fev",
    "mar",
    "abr",
    "mai",
    "jun",
    "jul",
    "ago",
    "set",
    "out",
    "nov",
    "dez",
)

DATE_FORMATS: tuple[str, ...] = ("day_month", "full", "auto")

_FULL_DATE_RE = re.compile(r"^\s*(\d{1,2})\s*/\s*(\d{1,2})\s*/\s*(\d{2})\s*$")
_PARTIAL_DATE_RE = re.compile(r"^\s*(\d{1,2})\s*/\s*([^\s/]+)\s*$")


# ---------- statement dates ----------
def month_number(abbrev: str) -> int:
    """Map ``"jan"`` .. ``"dez"`` to 1..12.

    The lookup is case-sensitive. Unknown names raise :class:`ParseError`
    instead of yielding a month 0 that a date constructor would quietly roll
    back into December of the previous year.
    """
    try:
        return MONTH_ABBREVIATIONS.index(abbrev) + 1
    except ValueError:
        raise ParseError(f"Unknown month abbreviation: {abbrev!r}") from None


def _build_date(year: int, month: int, day: int, source: str) -> date:
    try:
        return date(year, month, day)
    except ValueError as exc:
        raise ParseError(f"Invalid date {source!r}: {exc}") from exc


def parse_due_date(text: Optional[str]) -> date:
    """Parse ``dd/mm/yy`` into a date in the 2000s (``"24/04/21"`` is 2021-04-24)."""
    match = _FULL_DATE_RE.match(text or "")
    if match is None:
        raise ParseError(f"Expected a dd/mm/yy date, got {text!r}")
    day, month, year = (int(part) for part in match.groups())
    return _build_date(2000 + year, month, day, text)


# Rows on the tbody layout print the same format as the due date.
parse_full_date = parse_due_date


def parse_partial_date(text: Optional[str], year: int) -> date:
    """Parse ``"<day> / <abbrev>"`` (e.g. ``"24 / abr"``) using the supplied *year*."""
    match = _PARTIAL_DATE_RE.match(text or "")
    if match is None:
        raise ParseError(f"Expected a '<day> / <month>' date, got {text!r}")
    day = int(match.group(1))
    month = month_number(match.group(2))
    return _build_date(year, month, day, text)


def parse_transaction_date(text: Optional[str], year: int, date_format: str = "auto") -> date:
    if date_format == "auto":
        date_format = "full" if _FULL_DATE_RE.match(text or "") else "day_month"

    if date_format == "full":
        return parse_full_date(text)
    if date_format == "day_month":
        return parse_partial_date(text, year)
    raise ValueError(f"Unsupported transaction date format: {date_format}")


# ---------- OFX helpers ----------
def to_utc_timestamp(value: Union[date, datetime, pd.Timestamp, None]) -> Optional[pd.Timestamp]:
    """Return a timezone-aware UTC ``Timestamp``; plain dates land on midnight."""

    if value is None:
        return None

    ts = pd.Timestamp(value)
    if pd.isna(ts):
        return None
    if ts.tzinfo is None:
        return ts.tz_localize(timezone.utc)
    return ts.tz_convert(timezone.utc)


def ofx_datetime(value: Union[date, datetime, pd.Timestamp, None]) -> Optional[str]:
    """Format a date-like value as ``YYYYMMDDHHMMSS.000[0:UTC]``; ``None`` passes through."""

    ts = to_utc_timestamp(value)
    if ts is None:
        return None
    return f"{ts.strftime('%Y%m%d%H%M%S')}.000[0:UTC]"


__all__ = [
    "DATE_FORMATS",
    "MONTH_ABBREVIATIONS",
    "month_number",
    "ofx_datetime",
    "parse_due_date",
    "parse_full_date",
    "parse_partial_date",
    "parse_transaction_date",
    "to_utc_timestamp",
]
