"""Validation of user supplied symbols and resolutions."""

from .validation import (
    RESOLUTION_PATTERN,
    SYMBOL_PATTERN,
    SanitizationError,
    parse_resolution,
    sanitize_positive_int,
    sanitize_symbol,
    sanitize_symbols,
)

__all__ = [
    "RESOLUTION_PATTERN",
    "SYMBOL_PATTERN",
    "SanitizationError",
    "parse_resolution",
    "sanitize_positive_int",
    "sanitize_symbol",
    "sanitize_symbols",
]
