"""Public entry point for talking to IEX Cloud."""

from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Dict, Iterable, List, Optional, Sequence

import aiohttp

from iex_intraday.config.settings import MAX_BATCH_SYMBOLS, IEXSettings, get_settings
from iex_intraday.datasource.descriptors import (
    INTRADAY_ENDPOINT,
    BatchIntradayRequest,
    IntradayRequest,
    TickerListRequest,
)
from iex_intraday.errors import ConfigurationError
from iex_intraday.logging import get_logger
from iex_intraday.models import Candle, Symbol
from iex_intraday.transport.executor import Executor
from iex_intraday.transport.rate_limit import RateLimiter

logger = get_logger(__name__, component="client")


class IEXClient:
    """Token-authenticated IEX Cloud client.

    All requests issued by one client share its :class:`RateLimiter`; separate
    clients are throttled independently.
    """

    def __init__(
        self,
        token: str,
        *,
        executor: Executor | None = None,
        limiter: RateLimiter | None = None,
        session: aiohttp.ClientSession | None = None,
        settings: IEXSettings | None = None,
    ) -> None:
        if not token:
            raise ConfigurationError("An IEX Cloud token is required", context={"field": "token"})
        settings = settings or get_settings()
        self.token = token
        self.batch_size = settings.batch_size
        self.executor = executor or Executor(
            limiter or RateLimiter(settings.rate_limit_interval),
            settings.base_url,
            session=session,
            timeout=settings.request_timeout,
        )

    @classmethod
    def from_settings(
        cls, settings: IEXSettings | None = None, **kwargs: object
    ) -> "IEXClient":
        """Build a client whose token comes from ``IEX_CLOUD_SECRET``."""

        settings = settings or get_settings()
        if settings.cloud_secret is None:
            raise ConfigurationError(
                "Missing IEX Cloud secret",
                user_message="Set IEX_CLOUD_SECRET or pass a token explicitly.",
                context={"field": "cloud_secret"},
            )
        return cls(settings.cloud_secret.get_secret_value(), settings=settings, **kwargs)  # type: ignore[arg-type]

    async def __aenter__(self) -> "IEXClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self.executor.aclose()

    async def tickers(self, *, deadline: Optional[float] = None) -> List[Symbol]:
        """Return every symbol IEX currently flags as tradable."""

        return await self.executor.execute(TickerListRequest(self.token), deadline=deadline)

    async def intraday(
        self,
        symbol: str,
        resolution: timedelta,
        day: date | datetime,
        *,
        deadline: Optional[float] = None,
    ) -> List[Candle]:
        """Return traded candles for ``symbol`` on ``day``.

        Buckets without trades are omitted, so the list may be empty.
        """

        request = IntradayRequest.create(symbol, self.token, resolution, day)
        return await self.executor.execute(request, deadline=deadline)

    async def intraday_batch(
        self,
        symbols: Sequence[str],
        resolution: timedelta,
        day: date | datetime,
        *,
        types: Sequence[str] = (INTRADAY_ENDPOINT,),
        deadline: Optional[float] = None,
    ) -> Dict[Symbol, List[Candle]]:
        """Return candles for up to 100 ``symbols`` in one request.

        Unlike :meth:`intraday`, zero-trade candles are not removed.
        """

        request = BatchIntradayRequest.create(symbols, self.token, resolution, day, types)
        return await self.executor.execute(request, deadline=deadline)

    async def intraday_many(
        self,
        symbols: Iterable[str],
        resolution: timedelta,
        day: date | datetime,
        *,
        deadline: Optional[float] = None,
    ) -> Dict[Symbol, List[Candle]]:
        """Fetch any number of symbols by splitting them into batch requests."""

        unique = list(dict.fromkeys(symbols))
        size = min(self.batch_size, MAX_BATCH_SYMBOLS)
        chunks = [unique[i : i + size] for i in range(0, len(unique), size)]
        merged: Dict[Symbol, List[Candle]] = {}
        for idx, chunk in enumerate(chunks):
            logger.debug(
                "fetching batch chunk",
                context={"chunk": idx + 1, "chunks": len(chunks), "symbols": len(chunk)},
            )
            merged.update(
                await self.intraday_batch(chunk, resolution, day, deadline=deadline)
            )
        return merged


__all__ = ["IEXClient"]
