import re
from typing import Optional

import pandas as pd

from fatura2ofx.errors import ParseError


# Optional sign, digits with "." thousands separators, decimal comma, exactly two
# cents digits. No lookarounds: pyarrow string arrays match with RE2.
DECIMAL_COMMA_PATTERN = r"(-?[\d.]*\d,\d{2})(?:\D|$)"
_DECIMAL_COMMA_RE = re.compile(DECIMAL_COMMA_PATTERN)


# ---------- amounts ----------
def extract_decimal_comma_series(values: pd.Series) -> pd.Series:
    """Vectorized extraction of the first decimal-comma number in each cell.

    The match is returned in dot-decimal notation without thousands separators
    (``"R$ -10.823,97"`` becomes ``"-10823.97"``); cells without a match are
    ``<NA>``.
    """
    if values.empty:
        return pd.Series([], index=values.index, dtype="string")

    matched = values.astype("string").str.extract(DECIMAL_COMMA_PATTERN, expand=False)
    return (
        matched.astype("string")
        .str.replace(".", "", regex=False)
        .str.replace(",", ".", regex=False)
    )


def extract_decimal_comma(text: Optional[str]) -> Optional[str]:
    """Return the first decimal-comma number in *text* as a dot-decimal string.

    >>> extract_decimal_comma("58,14")
    '58.14'
    >>> extract_decimal_comma("R$ -10.823,97\\n10.823,97")
    '-10823.97'

    ``None`` when nothing in *text* looks like an amount.
    """
    val = extract_decimal_comma_series(pd.Series([text], dtype="object")).iloc[0]
    return None if pd.isna(val) else str(val)


def parse_amount(text: Optional[str]) -> float:
    extracted = extract_decimal_comma(text)
    if extracted is None:
        raise ParseError(f"No decimal-comma amount found in {text!r}")
    return float(extracted)


def has_amount(text: Optional[str]) -> bool:
    return text is not None and _DECIMAL_COMMA_RE.search(text) is not None


# ---------- descriptions ----------
def clean_memo(text: Optional[str]) -> str:
    """Trim surrounding whitespace, keeping the inner spacing untouched."""
    if text is None:
        return ""
    return text.strip()


def clean_description(s):
    if s is None or pd.isna(s):
        return ""
    return re.sub(r"\s+", " ", str(s).strip()).upper()


__all__ = [
    "DECIMAL_COMMA_PATTERN",
    "clean_description",
    "clean_memo",
    "extract_decimal_comma",
    "extract_decimal_comma_series",
    "has_amount",
    "parse_amount",
]
