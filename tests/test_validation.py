"""Tests for command-line input validation helpers."""

from datetime import timedelta

import pytest

from iex_intraday.security.validation import (
    SanitizationError,
    parse_resolution,
    sanitize_positive_int,
    sanitize_symbols,
)


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("1m", timedelta(minutes=1)),
        ("1h30m", timedelta(minutes=90)),
        ("1.5h", timedelta(minutes=90)),
        ("30s", timedelta(seconds=30)),
        ("1d", timedelta(days=1)),
        (" 2h ", timedelta(hours=2)),
    ],
)
def test_parse_resolution(raw: str, expected: timedelta) -> None:
    assert parse_resolution(raw) == expected


@pytest.mark.parametrize("raw", ["", "10x", "abc", "1h 30m", "h", "5", "0m"])
def test_parse_resolution_rejects_invalid(raw: str) -> None:
    with pytest.raises(SanitizationError) as info:
        parse_resolution(raw)
    assert info.value.context["field"] == "resolution"


def test_sanitize_symbols_normalises_and_deduplicates() -> None:
    assert sanitize_symbols(" aapl, MSFT,,aapl ") == ["AAPL", "MSFT"]


def test_sanitize_symbols_rejects_invalid_characters() -> None:
    with pytest.raises(SanitizationError):
        sanitize_symbols("AAPL,MS FT")


def test_sanitize_symbols_limits_count() -> None:
    with pytest.raises(SanitizationError):
        sanitize_symbols("A,B,C", max_symbols=2)


def test_sanitize_positive_int_bounds() -> None:
    assert sanitize_positive_int("3", field="days") == 3
    with pytest.raises(SanitizationError):
        sanitize_positive_int(0, field="days")
    with pytest.raises(SanitizationError):
        sanitize_positive_int(True, field="days")
