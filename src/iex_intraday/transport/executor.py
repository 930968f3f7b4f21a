"""Rate-limited execution of IEX Cloud request descriptors."""

from __future__ import annotations

import asyncio
import time
from typing import Optional, TypeVar

import aiohttp
from yarl import URL

from iex_intraday.datasource.base import IEXRequest
from iex_intraday.errors import IEXError, ProviderError, TransportError, wrap_error
from iex_intraday.logging import get_logger, log_exception, redact_url

from .rate_limit import RateLimiter

T = TypeVar("T")

logger = get_logger(__name__, component="executor")

ERROR_BODY_LIMIT = 512


def is_success(status: int) -> bool:
    return 200 <= status <= 299


class Executor:
    """Gate, issue, classify and decode one descriptor at a time.

    ``session`` may be shared with other code; when omitted the executor
    creates its own on first use and closes it in :meth:`aclose`.
    """

    def __init__(
        self,
        limiter: RateLimiter,
        base_url: str,
        *,
        session: aiohttp.ClientSession | None = None,
        timeout: float | None = None,
    ) -> None:
        self.limiter = limiter
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._session = session
        self._owns_session = session is None

    @property
    def session(self) -> aiohttp.ClientSession:
        if self._session is None:
            if self.timeout:
                self._session = aiohttp.ClientSession(
                    timeout=aiohttp.ClientTimeout(total=self.timeout)
                )
            else:
                self._session = aiohttp.ClientSession()
        return self._session

    async def aclose(self) -> None:
        """Close the HTTP session if this executor created it."""

        if self._owns_session and self._session is not None and not self._session.closed:
            await self._session.close()
        if self._owns_session:
            self._session = None

    async def execute(self, request: IEXRequest[T], *, deadline: Optional[float] = None) -> T:
        """Run ``request`` through the rate limiter and decode its response.

        ``deadline`` bounds the whole call, gate wait included; on expiry the
        call raises :class:`TransportError` and its result is discarded.
        """

        if deadline is None:
            return await self._execute(request)
        try:
            return await asyncio.wait_for(self._execute(request), timeout=deadline)
        except asyncio.TimeoutError as exc:
            error = TransportError(
                f"{request.op}: deadline of {deadline}s exceeded",
                context={"op": request.op, "deadline": deadline},
                cause=exc,
            )
            log_exception(logger.bind(op=request.op), error, event="request_deadline_exceeded")
            raise error from exc

    async def _execute(self, request: IEXRequest[T]) -> T:
        log = logger.bind(op=request.op)
        await self.limiter.ready()
        wire = request.build_request(self.base_url)
        log.debug("request started", context={"url": wire.url})
        started = time.perf_counter()
        try:
            async with self.session.request(wire.method, URL(wire.url, encoded=True)) as resp:
                status = resp.status
                if not is_success(status):
                    body = await self._error_body(resp)
                    error = ProviderError(request.op, status, resp.reason, body=body)
                    log_exception(log, error, event="provider_error")
                    raise error
                payload = await resp.read()
        except (aiohttp.ClientError, asyncio.TimeoutError, OSError) as exc:
            error = wrap_error(
                exc,
                TransportError,
                message=redact_url(f"{request.op}: {str(exc) or type(exc).__name__}"),
                context={"op": request.op},
            )
            log_exception(log, error, event="transport_error")
            raise error from exc

        try:
            result = request.decode(payload)
        except IEXError as error:
            error.add_context(op=request.op)
            log_exception(log, error, event="decode_error")
            raise
        log.info(
            "request completed",
            context={
                "status": status,
                "bytes": len(payload),
                "elapsed_s": round(time.perf_counter() - started, 4),
            },
        )
        return result

    @staticmethod
    async def _error_body(resp: aiohttp.ClientResponse) -> str | None:
        try:
            text = await resp.text(errors="replace")
        except (aiohttp.ClientError, asyncio.TimeoutError, OSError):
            return None
        return text[:ERROR_BODY_LIMIT] or None


__all__ = ["ERROR_BODY_LIMIT", "Executor", "is_success"]
