"""Domain objects decoded from IEX Cloud payloads."""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Any, Iterable, Mapping, NewType

import pandas as pd

from .errors import DecodeError, DecodeStage

Symbol = NewType("Symbol", str)

_MINUTE_PATTERN = re.compile(r"([0-9]{1,2}):([0-9]{2})")

CANDLE_COLUMNS = [
    "minute",
    "high",
    "low",
    "open",
    "close",
    "average",
    "volume",
    "notional",
    "numberOfTrades",
]


def day_start(value: date | datetime) -> datetime:
    """Return midnight of the calendar day containing ``value``."""

    if isinstance(value, datetime):
        value = value.date()
    return datetime.combine(value, time.min)


def parse_minute(raw: Any) -> timedelta:
    """Translate the provider's ``HH:MM`` field into an offset from midnight."""

    if not isinstance(raw, str):
        raise DecodeError(f"minute must be a string, got {raw!r}", stage=DecodeStage.SHAPE)
    match = _MINUTE_PATTERN.fullmatch(raw)
    if match is None:
        raise DecodeError(f"minute is not HH:MM: {raw!r}", stage=DecodeStage.SHAPE)
    offset = timedelta(hours=int(match.group(1)), minutes=int(match.group(2)))
    if offset >= timedelta(days=1):
        raise DecodeError(f"minute out of range: {raw!r}", stage=DecodeStage.SHAPE)
    return offset


def _number(payload: Mapping[str, Any], key: str) -> float:
    value = payload.get(key)
    if value is None:
        return 0.0
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise DecodeError(f"{key} is not numeric: {value!r}", stage=DecodeStage.SHAPE)
    try:
        number = float(value)
    except OverflowError:
        number = math.inf
    if not math.isfinite(number):
        raise DecodeError(f"{key} is not finite: {value!r}", stage=DecodeStage.SHAPE)
    return number


def _integer(payload: Mapping[str, Any], key: str) -> int:
    value = payload.get(key)
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    return int(_number(payload, key))


@dataclass(frozen=True)
class Candle:
    """One OHLC bar for a fixed intraday bucket."""

    timestamp: datetime
    high: float
    low: float
    open: float
    close: float
    average: float
    notional: float
    volume: int
    number_of_trades: int

    @classmethod
    def from_payload(cls, payload: Any, day: date | datetime) -> "Candle":
        """Build a candle from one provider object, stamped onto ``day``.

        IEX reports only the time of day; missing or ``null`` numeric fields
        decode as zero.
        """

        if not isinstance(payload, Mapping):
            raise DecodeError(
                f"candle must be an object, got {type(payload).__name__}",
                stage=DecodeStage.SHAPE,
            )
        return cls(
            timestamp=day_start(day) + parse_minute(payload.get("minute")),
            high=_number(payload, "high"),
            low=_number(payload, "low"),
            open=_number(payload, "open"),
            close=_number(payload, "close"),
            average=_number(payload, "average"),
            notional=_number(payload, "notional"),
            volume=_integer(payload, "volume"),
            number_of_trades=_integer(payload, "numberOfTrades"),
        )

    @property
    def traded(self) -> bool:
        return self.number_of_trades != 0

    def to_row(self) -> list[str]:
        """Render the candle as a CSV row in :data:`CANDLE_COLUMNS` order."""

        fields: list[Any] = [
            self.timestamp.strftime("%H:%M"),
            self.high,
            self.low,
            self.open,
            self.close,
            self.average,
            self.volume,
            self.notional,
            self.number_of_trades,
        ]
        return [str(field) for field in fields]


def candles_to_frame(candles: Iterable[Candle]) -> pd.DataFrame:
    """Return ``candles`` as a DataFrame indexed by timestamp."""

    candles = list(candles)
    rows = [
        {
            "High": c.high,
            "Low": c.low,
            "Open": c.open,
            "Close": c.close,
            "Average": c.average,
            "Notional": c.notional,
            "Volume": c.volume,
            "Trades": c.number_of_trades,
        }
        for c in candles
    ]
    index = pd.DatetimeIndex([c.timestamp for c in candles], name="timestamp")
    columns = ["High", "Low", "Open", "Close", "Average", "Notional", "Volume", "Trades"]
    return pd.DataFrame(rows, index=index, columns=columns)


__all__ = [
    "CANDLE_COLUMNS",
    "Candle",
    "Symbol",
    "candles_to_frame",
    "day_start",
    "parse_minute",
]
