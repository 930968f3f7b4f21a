"""Rate-limited client for IEX Cloud tickers and intraday candles."""

from .client import IEXClient
from .errors import (
    ConfigurationError,
    ContractViolation,
    DecodeError,
    IEXError,
    ProviderError,
    TransportError,
)
from .models import Candle, Symbol, candles_to_frame
from .transport import Executor, RateLimiter

__all__ = [
    "Candle",
    "ConfigurationError",
    "ContractViolation",
    "DecodeError",
    "Executor",
    "IEXClient",
    "IEXError",
    "ProviderError",
    "RateLimiter",
    "Symbol",
    "TransportError",
    "candles_to_frame",
]
