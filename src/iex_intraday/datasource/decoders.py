"""Translate IEX Cloud response bodies into domain objects.

Every decoder either returns a complete result or raises
:class:`~iex_intraday.errors.DecodeError`; partial results are never returned.
"""

from __future__ import annotations

import csv
import io
import json
from datetime import date, datetime
from typing import Any, Dict, List, Sequence

from iex_intraday.errors import DecodeError, DecodeStage
from iex_intraday.logging import get_logger
from iex_intraday.models import Candle, Symbol

logger = get_logger(__name__, component="decoders")

SYMBOL_COLUMN = 0
TRADABLE_COLUMN = 2


def _text(body: bytes | str) -> str:
    if isinstance(body, str):
        return body.removeprefix("\ufeff")
    try:
        return body.decode("utf-8-sig")
    except UnicodeDecodeError as exc:
        raise DecodeError("body is not valid UTF-8", stage=DecodeStage.CSV, cause=exc) from exc


def decode_tickers_csv(body: bytes | str) -> List[Symbol]:
    """Return the tradable symbols listed in a ``format=csv`` symbols dump.

    The header row is skipped, column 0 holds the symbol and column 2 the
    tradable flag, which must equal the literal ``"true"``.
    """

    reader = csv.reader(io.StringIO(_text(body), newline=""), strict=True)
    symbols: List[Symbol] = []
    width: int | None = None
    try:
        for row in reader:
            if not row:
                continue
            if width is None:
                width = len(row)
                if width <= TRADABLE_COLUMN:
                    raise DecodeError(
                        f"header has {width} columns, need at least {TRADABLE_COLUMN + 1}",
                        stage=DecodeStage.CSV,
                        context={"line": reader.line_num},
                    )
                continue
            if len(row) != width:
                raise DecodeError(
                    f"record on line {reader.line_num}: wrong number of fields "
                    f"({len(row)} != {width})",
                    stage=DecodeStage.CSV,
                    context={"line": reader.line_num},
                )
            if row[TRADABLE_COLUMN] == "true":
                symbols.append(Symbol(row[SYMBOL_COLUMN]))
    except csv.Error as exc:
        raise DecodeError(
            f"line {reader.line_num}: {exc}",
            stage=DecodeStage.CSV,
            context={"line": reader.line_num},
            cause=exc,
        ) from exc
    return symbols


def _load_json(body: bytes | str) -> Any:
    try:
        return json.loads(body)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise DecodeError(str(exc), stage=DecodeStage.JSON, cause=exc) from exc


def _candles(items: Any, day: date | datetime, *, label: str) -> List[Candle]:
    if not isinstance(items, list):
        raise DecodeError(
            f"{label}: expected an array of candles, got {type(items).__name__}",
            stage=DecodeStage.SHAPE,
        )
    return [Candle.from_payload(item, day) for item in items]


def decode_intraday(body: bytes | str, day: date | datetime) -> List[Candle]:
    """Decode a single-symbol candle array, dropping non-trading intervals."""

    candles = _candles(_load_json(body), day, label="intraday-prices")
    return [candle for candle in candles if candle.traded]


def decode_batch(
    body: bytes | str,
    day: date | datetime,
    *,
    types: Sequence[str] = ("intraday-prices",),
) -> Dict[Symbol, List[Candle]]:
    """Decode a ``/market/batch`` response into per-symbol candle lists.

    Each value may be the candle array itself or an object holding it under
    one of ``types``. Zero-trade bars are kept on this path.
    """

    payload = _load_json(body)
    if not isinstance(payload, dict):
        raise DecodeError(
            f"expected an object keyed by symbol, got {type(payload).__name__}",
            stage=DecodeStage.SHAPE,
        )
    result: Dict[Symbol, List[Candle]] = {}
    idle = 0
    for key, value in payload.items():
        if isinstance(value, dict):
            found = [value[t] for t in types if t in value]
            if not found:
                raise DecodeError(
                    f"{key}: none of {list(types)} present",
                    stage=DecodeStage.SHAPE,
                    context={"symbol": key},
                )
            value = found[0]
        candles = _candles(value, day, label=key)
        idle += sum(1 for c in candles if not c.traded)
        result[Symbol(key)] = candles
    if idle:
        logger.debug(
            "batch response kept zero-trade candles",
            context={"count": idle, "symbols": len(result)},
        )
    return result


__all__ = ["decode_batch", "decode_intraday", "decode_tickers_csv"]
