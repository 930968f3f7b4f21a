"""Input validation helpers for values arriving from the command line."""

from __future__ import annotations

import re
from datetime import timedelta
from typing import Any, List

from iex_intraday.errors import ValidationError
from iex_intraday.models import Symbol

SYMBOL_PATTERN = re.compile(r"^[A-Z0-9.\-+=^#]{1,16}$")
RESOLUTION_PATTERN = re.compile(r"(\d+(?:\.\d*)?|\.\d+)([a-zA-Z])")

_UNIT_SECONDS = {
    "d": 24 * 60 * 60,
    "h": 60 * 60,
    "m": 60,
    "s": 1,
}


class SanitizationError(ValidationError):
    """Raised when user supplied data fails validation."""

    def __init__(self, message: str, *, field: str | None = None) -> None:
        super().__init__(message, context={"field": field} if field else None)


def sanitize_symbol(symbol: str) -> Symbol:
    normalized = symbol.strip().upper()
    if not normalized or not SYMBOL_PATTERN.fullmatch(normalized):
        raise SanitizationError("Symbol contains invalid characters.", field="symbol")
    return Symbol(normalized)


def sanitize_symbols(raw: str, *, max_symbols: int | None = None) -> List[Symbol]:
    """Split a comma-delimited list into unique, validated symbols."""

    symbols = [sanitize_symbol(part) for part in raw.split(",") if part.strip()]
    symbols = list(dict.fromkeys(symbols))
    if not symbols:
        raise SanitizationError("At least one symbol must be supplied.", field="symbols")
    if max_symbols is not None and len(symbols) > max_symbols:
        raise SanitizationError("Too many symbols supplied.", field="symbols")
    return symbols


def parse_resolution(raw: str) -> timedelta:
    """Parse a resolution such as ``1m``, ``1.5h`` or ``1h30m``.

    Components are summed; recognised units are ``d``, ``h``, ``m`` and ``s``.
    """

    text = raw.strip()
    if not text:
        raise SanitizationError("Resolution is empty.", field="resolution")
    total = 0.0
    position = 0
    for match in RESOLUTION_PATTERN.finditer(text):
        if match.start() != position:
            raise SanitizationError(
                f"Cannot scan resolution near {text[position:]!r}.", field="resolution"
            )
        value, unit = match.groups()
        if unit not in _UNIT_SECONDS:
            raise SanitizationError(f"Unit not recognized: {unit!r}.", field="resolution")
        total += float(value) * _UNIT_SECONDS[unit]
        position = match.end()
    if position != len(text):
        raise SanitizationError(
            f"Cannot scan resolution near {text[position:]!r}.", field="resolution"
        )
    if total <= 0:
        raise SanitizationError("Resolution must be positive.", field="resolution")
    return timedelta(seconds=total)


def sanitize_positive_int(
    value: Any,
    *,
    field: str,
    minimum: int = 1,
    maximum: int | None = None,
) -> int:
    """Return ``value`` as a bounded positive integer or raise ``SanitizationError``."""

    if isinstance(value, bool):
        raise SanitizationError("Boolean value is not allowed.", field=field)
    try:
        normalized = int(value)
    except (TypeError, ValueError):
        raise SanitizationError("Value must be an integer.", field=field) from None
    if normalized < minimum:
        raise SanitizationError(f"Value must be at least {minimum}.", field=field)
    if maximum is not None and normalized > maximum:
        raise SanitizationError(f"Value must not exceed {maximum}.", field=field)
    return normalized
