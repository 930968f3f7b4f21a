"""Query-string construction for IEX Cloud URLs."""

from __future__ import annotations

from datetime import date, datetime
from typing import Dict, Union
from urllib.parse import quote_plus

QueryValue = Union[str, bool, int, date]


def format_value(value: QueryValue) -> str:
    """Render ``value`` the way IEX Cloud expects it on the wire."""

    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, datetime):
        value = value.date()
    if isinstance(value, date):
        return value.strftime("%Y%m%d")
    return str(value)


class QueryArgs(Dict[str, QueryValue]):
    """Unique parameter names mapped to values.

    Serialisation is sorted by key; values are escaped one at a time and keys
    are emitted verbatim.
    """

    def encode(self) -> str:
        return "&".join(
            f"{key}={quote_plus(format_value(value))}" for key, value in sorted(self.items())
        )

    def __str__(self) -> str:
        return self.encode()


__all__ = ["QueryArgs", "QueryValue", "format_value"]
