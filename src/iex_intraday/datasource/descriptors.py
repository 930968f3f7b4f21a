"""Concrete request descriptors for the IEX Cloud endpoints in use."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Dict, List, Sequence, Tuple
from urllib.parse import quote, quote_plus

from iex_intraday.config.settings import MAX_BATCH_SYMBOLS
from iex_intraday.errors import ContractViolation
from iex_intraday.models import Candle, Symbol

from .base import HTTPRequest
from .decoders import decode_batch, decode_intraday, decode_tickers_csv
from .query import QueryArgs

SYMBOLS_PATH = "/ref-data/iex/symbols/"
INTRADAY_ENDPOINT = "intraday-prices"


def resolution_minutes(resolution: timedelta) -> int:
    """Return the whole-minute chart interval for ``resolution`` (at least 1)."""

    minutes = math.ceil(resolution / timedelta(minutes=1))
    return max(1, minutes)


def truncate_day(value: date | datetime) -> date:
    if isinstance(value, datetime):
        return value.date()
    return value


def intraday_query(minutes: int, day: date) -> QueryArgs:
    """Fixed chart parameters shared by single and batch intraday requests."""

    return QueryArgs(
        chartIEXOnly=True,
        includeToday=True,
        chartInterval=minutes,
        exactDate=day,
    )


@dataclass(frozen=True)
class TickerListRequest:
    """``GET /ref-data/iex/symbols/?format=csv``"""

    token: str

    @property
    def op(self) -> str:
        return "list tradable IEX symbols"

    def build_request(self, base_url: str) -> HTTPRequest:
        url = f"{base_url}{SYMBOLS_PATH}?format=csv&token={quote_plus(self.token)}"
        return HTTPRequest("GET", url)

    def decode(self, body: bytes) -> List[Symbol]:
        return decode_tickers_csv(body)


@dataclass(frozen=True)
class IntradayRequest:
    """``GET /stock/{symbol}/intraday-prices`` for one day."""

    symbol: Symbol
    token: str
    resolution_minutes: int
    day: date
    query: QueryArgs = field(default_factory=QueryArgs)

    @classmethod
    def create(
        cls, symbol: str, token: str, resolution: timedelta, day: date | datetime
    ) -> "IntradayRequest":
        minutes = resolution_minutes(resolution)
        day = truncate_day(day)
        return cls(Symbol(symbol), token, minutes, day, intraday_query(minutes, day))

    @property
    def op(self) -> str:
        return f"hydrate intraday data for IEX:{self.symbol}"

    def build_request(self, base_url: str) -> HTTPRequest:
        query = QueryArgs(self.query, token=self.token)
        path = f"/stock/{quote(self.symbol, safe='')}/{INTRADAY_ENDPOINT}"
        return HTTPRequest("GET", f"{base_url}{path}?{query.encode()}")

    def decode(self, body: bytes) -> List[Candle]:
        return decode_intraday(body, self.day)


@dataclass(frozen=True)
class BatchIntradayRequest:
    """``GET /market/batch`` for up to 100 symbols at once."""

    symbols: Tuple[Symbol, ...]
    token: str
    resolution_minutes: int
    day: date
    query: QueryArgs = field(default_factory=QueryArgs)
    types: Tuple[str, ...] = (INTRADAY_ENDPOINT,)

    def __post_init__(self) -> None:
        if len(self.symbols) > MAX_BATCH_SYMBOLS:
            raise ContractViolation(
                f"batch too large: {len(self.symbols)} symbols (max {MAX_BATCH_SYMBOLS})"
            )

    @classmethod
    def create(
        cls,
        symbols: Sequence[str],
        token: str,
        resolution: timedelta,
        day: date | datetime,
        types: Sequence[str] = (INTRADAY_ENDPOINT,),
    ) -> "BatchIntradayRequest":
        minutes = resolution_minutes(resolution)
        day = truncate_day(day)
        return cls(
            tuple(Symbol(s) for s in symbols),
            token,
            minutes,
            day,
            intraday_query(minutes, day),
            tuple(dict.fromkeys(types)),
        )

    def __len__(self) -> int:
        return len(self.symbols)

    @property
    def op(self) -> str:
        return f"batch request intra-day quotes for {len(self)} symbols"

    def build_request(self, base_url: str) -> HTTPRequest:
        query = QueryArgs(
            self.query,
            token=self.token,
            symbols=",".join(self.symbols),
            types=",".join(self.types),
        )
        return HTTPRequest("GET", f"{base_url}/market/batch?{query.encode()}")

    def decode(self, body: bytes) -> Dict[Symbol, List[Candle]]:
        return decode_batch(body, self.day, types=self.types)


__all__ = [
    "BatchIntradayRequest",
    "IntradayRequest",
    "TickerListRequest",
    "intraday_query",
    "resolution_minutes",
    "truncate_day",
]
