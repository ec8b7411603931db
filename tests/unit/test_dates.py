from __future__ import annotations

import pytest

import txn_import.csvfile.dates as dates
from txn_import.csvfile.dates import is_canonical_date, normalize_date


def test_month_first_with_time_component():
    assert normalize_date("1/9/2026 6:41") == "2026-01-09"


def test_canonical_date_unchanged():
    assert normalize_date("2026-03-05") == "2026-03-05"


def test_iso_datetime_is_truncated_to_date():
    assert normalize_date("2026-01-09T10:15:00") == "2026-01-09"


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("03/15/2026", "2026-03-15"),
        ("2026/3/5", "2026-03-05"),
        ("12/31/2025 23:59", "2025-12-31"),
    ],
)
def test_common_formats(raw, expected):
    assert normalize_date(raw) == expected


def test_empty_value():
    assert normalize_date("") == ""


def test_unresolvable_pattern_returned_unchanged():
    assert normalize_date("31/31/2026") == "31/31/2026"


def test_garbage_returned_unchanged():
    assert normalize_date("not-a-date") == "not-a-date"


def test_fallback_keeps_ambiguous_day_month_order(monkeypatch):
    monkeypatch.setattr(dates, "_generic_parse", lambda token: None)
    # M/D/YYYY か D/M/YYYY か決められない -> そのまま返す
    assert normalize_date("1/9/2026") == "1/9/2026"


def test_fallback_reassembles_year_first_token(monkeypatch):
    monkeypatch.setattr(dates, "_generic_parse", lambda token: None)
    assert normalize_date("2026-3-2026") == "2026-03-2026"


def test_fallback_drops_time_component(monkeypatch):
    monkeypatch.setattr(dates, "_generic_parse", lambda token: None)
    assert normalize_date("5/6/2026 10:00") == "5/6/2026"


@pytest.mark.parametrize(
    "value, ok",
    [("2026-01-09", True), ("2026-1-9", False), ("1/9/2026", False), ("", False)],
)
def test_is_canonical_date(value, ok):
    assert is_canonical_date(value) is ok


@pytest.mark.parametrize("word", ["today", "now", "Jan", "5", "tomorrow", "20260109", "2026"])
def test_words_and_bare_numbers_are_not_coerced(word):
    assert normalize_date(word) == word


def test_iso_timestamp_with_zone():
    assert normalize_date("2026-01-09T23:15:00.000Z") == "2026-01-09"
