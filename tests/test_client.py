"""End-to-end tests of the public client against a fake HTTP session."""

from __future__ import annotations

import json
from datetime import date, datetime, timedelta
from urllib.parse import parse_qs, urlsplit

import pytest

from conftest import FakeResponse, FakeSession
from iex_intraday.client import IEXClient
from iex_intraday.config.settings import IEXSettings
from iex_intraday.errors import ConfigurationError, ContractViolation, ProviderError


def _candle(minute: str, trades: int) -> dict:
    return {
        "minute": minute,
        "high": 2.0,
        "low": 1.0,
        "open": 1.5,
        "close": 1.8,
        "average": 1.6,
        "notional": 160.0,
        "volume": 100,
        "numberOfTrades": trades,
    }


@pytest.mark.asyncio
async def test_tickers_returns_tradable_symbols(settings: IEXSettings) -> None:
    csv_body = "symbol,date,isEnabled\nAAA,2020-01-02,true\nBBB,2020-01-02,false\n"
    session = FakeSession(FakeResponse(200, csv_body))
    client = IEXClient("secret-token", session=session, settings=settings)  # type: ignore[arg-type]

    symbols = await client.tickers()

    assert symbols == ["AAA"]
    assert session.calls[0][1] == (
        "https://iex.test/stable/ref-data/iex/symbols/?format=csv&token=secret-token"
    )


@pytest.mark.asyncio
async def test_intraday_filters_and_stamps(settings: IEXSettings) -> None:
    body = json.dumps([_candle("09:30", 0), _candle("09:35", 5)])
    session = FakeSession(FakeResponse(200, body))
    client = IEXClient("tok", session=session, settings=settings)  # type: ignore[arg-type]

    candles = await client.intraday("AAPL", timedelta(minutes=5), datetime(2020, 1, 2, 12))

    assert [c.timestamp for c in candles] == [datetime(2020, 1, 2, 9, 35)]
    url = session.calls[0][1]
    assert urlsplit(url).path == "/stable/stock/AAPL/intraday-prices"
    assert parse_qs(urlsplit(url).query)["exactDate"] == ["20200102"]


@pytest.mark.asyncio
async def test_intraday_provider_error_carries_label(settings: IEXSettings) -> None:
    session = FakeSession(FakeResponse(404, b"Unknown symbol", reason="Not Found"))
    client = IEXClient("tok", session=session, settings=settings)  # type: ignore[arg-type]

    with pytest.raises(ProviderError) as info:
        await client.intraday("ZZZZ", timedelta(minutes=1), date(2020, 1, 2))

    assert "hydrate intraday data for IEX:ZZZZ" in str(info.value)
    assert "404 Not Found" in str(info.value)


@pytest.mark.asyncio
async def test_intraday_batch_keeps_zero_trade_candles(settings: IEXSettings) -> None:
    body = json.dumps({"AAPL": [_candle("09:30", 0)], "MSFT": [_candle("09:30", 3)]})
    session = FakeSession(FakeResponse(200, body))
    client = IEXClient("tok", session=session, settings=settings)  # type: ignore[arg-type]

    result = await client.intraday_batch(["AAPL", "MSFT"], timedelta(minutes=1), date(2020, 1, 2))

    assert [c.number_of_trades for c in result["AAPL"]] == [0]
    assert [c.number_of_trades for c in result["MSFT"]] == [3]


@pytest.mark.asyncio
async def test_intraday_batch_oversized_fails_before_network(settings: IEXSettings) -> None:
    session = FakeSession(FakeResponse(200, b"{}"))
    client = IEXClient("tok", session=session, settings=settings)  # type: ignore[arg-type]

    with pytest.raises(ContractViolation):
        await client.intraday_batch([f"S{i}" for i in range(101)], timedelta(minutes=1), date(2020, 1, 2))

    assert session.calls == []


@pytest.mark.asyncio
async def test_intraday_many_chunks_symbols(settings: IEXSettings) -> None:
    symbols = [f"S{i}" for i in range(250)]
    session = FakeSession(
        FakeResponse(200, json.dumps({s: [] for s in symbols[:100]})),
        FakeResponse(200, json.dumps({s: [] for s in symbols[100:200]})),
        FakeResponse(200, json.dumps({s: [] for s in symbols[200:]})),
    )
    client = IEXClient("tok", session=session, settings=settings)  # type: ignore[arg-type]

    result = await client.intraday_many(symbols, timedelta(minutes=1), date(2020, 1, 2))

    assert len(session.calls) == 3
    assert len(result) == 250
    sizes = [len(parse_qs(urlsplit(url).query)["symbols"][0].split(",")) for _, url in session.calls]
    assert sizes == [100, 100, 50]


@pytest.mark.asyncio
async def test_async_context_manager_closes_owned_executor(settings: IEXSettings) -> None:
    closed = []
    client = IEXClient("tok", settings=settings)

    async def fake_aclose() -> None:
        closed.append(True)

    client.executor.aclose = fake_aclose  # type: ignore[method-assign]
    async with client:
        pass

    assert closed == [True]


def test_clients_own_independent_limiters(settings: IEXSettings) -> None:
    first = IEXClient("a", settings=settings)
    second = IEXClient("b", settings=settings)

    assert first.executor.limiter is not second.executor.limiter


def test_empty_token_rejected(settings: IEXSettings) -> None:
    with pytest.raises(ConfigurationError):
        IEXClient("", settings=settings)


def test_from_settings_requires_secret() -> None:
    with pytest.raises(ConfigurationError) as info:
        IEXClient.from_settings(IEXSettings())

    assert "IEX_CLOUD_SECRET" in info.value.user_message


def test_from_settings_reads_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("IEX_CLOUD_SECRET", "sk_env")
    monkeypatch.setenv("IEX_RATE_LIMIT_INTERVAL", "0.5")

    client = IEXClient.from_settings(IEXSettings())

    assert client.token == "sk_env"
    assert client.executor.limiter.interval == 0.5
    assert client.executor.base_url == "https://cloud.iexapis.com/stable"
