"""Request descriptors and decoders for the IEX Cloud API."""

from .base import HTTPRequest, IEXRequest
from .decoders import decode_batch, decode_intraday, decode_tickers_csv
from .descriptors import (
    BatchIntradayRequest,
    IntradayRequest,
    TickerListRequest,
    resolution_minutes,
)
from .query import QueryArgs

__all__ = [
    "BatchIntradayRequest",
    "HTTPRequest",
    "IEXRequest",
    "IntradayRequest",
    "QueryArgs",
    "TickerListRequest",
    "decode_batch",
    "decode_intraday",
    "decode_tickers_csv",
    "resolution_minutes",
]
