from __future__ import annotations

import re
import warnings

import pandas as pd

"""Date token normalization to canonical ``YYYY-MM-DD``.

Resolution rule: generic parsing goes through ``pandas.to_datetime`` with
``dayfirst=False``, so ``1/9/2026`` is January 9th. When the first field cannot
be a month (``13/01/2026``) the underlying parser reads it as a day. Tokens the
parser rejects are only rebuilt when they already start with a four digit
year; anything else is handed back untouched for the caller to reject.
Only tokens shaped like three digit groups (optionally followed by an ISO
time part) reach the parser, so words such as ``today`` are never coerced.
"""

__all__ = [
    "CANONICAL_DATE_RE",
    "normalize_date",
    "is_canonical_date",
]

CANONICAL_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_SPLIT_RE = re.compile(r"[/\-]")
_FOUR_DIGITS = re.compile(r"\d{4}")
# 数字の日付形のみ汎用パーサへ ("today" / "now" / "Jan" / "5" は対象外)
_DATE_SHAPE = re.compile(r"\d{1,4}[/\-]\d{1,2}[/\-]\d{1,4}(?:T[0-9:.]+(?:Z|[+\-]\d{2}:?\d{2})?)?")


def is_canonical_date(value: str) -> bool:
    return bool(CANONICAL_DATE_RE.match(value))


def _generic_parse(token: str) -> str | None:
    with warnings.catch_warnings():
        # "Parsing dates in %d/%m/%Y format when dayfirst=False" 等は無視
        warnings.simplefilter("ignore", UserWarning)
        try:
            ts = pd.to_datetime(token, dayfirst=False)
        except (ValueError, TypeError, OverflowError):
            return None
    if pd.isna(ts):
        return None
    return f"{ts.year:04d}-{ts.month:02d}-{ts.day:02d}"


def normalize_date(value: str) -> str:
    """Best-effort conversion of a raw date token to ``YYYY-MM-DD``.

    A trailing time component (``"1/9/2026 6:41"``) is dropped first. When
    nothing can be resolved the date fragment is returned unchanged.
    """
    if not value:
        return ""

    date_part = value.strip().split(" ")[0].strip()
    if not date_part:
        return ""

    if _DATE_SHAPE.fullmatch(date_part):
        parsed = _generic_parse(date_part)
        if parsed is not None:
            return parsed

    parts = _SPLIT_RE.split(date_part)
    if len(parts) == 3:
        p1, p2, p3 = parts
        if _FOUR_DIGITS.fullmatch(p3) and _FOUR_DIGITS.fullmatch(p1):
            return f"{p1}-{p2.zfill(2)}-{p3.zfill(2)}"
        # M/D/YYYY vs D/M/YYYY: ambiguous, left for the validator to reject

    return date_part
