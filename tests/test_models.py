from datetime import date, datetime, timedelta

import pytest

from iex_intraday.errors import DecodeError, DecodeStage
from iex_intraday.models import Candle, candles_to_frame, parse_minute


def _payload(**overrides):
    payload = {
        "minute": "09:31",
        "high": 10.5,
        "low": 10.0,
        "open": 10.1,
        "close": 10.4,
        "average": 10.25,
        "notional": 1025.0,
        "volume": 100,
        "numberOfTrades": 3,
    }
    payload.update(overrides)
    return payload


def test_candle_stamped_onto_requested_day() -> None:
    candle = Candle.from_payload(_payload(), date(2021, 6, 1))

    assert candle.timestamp == datetime(2021, 6, 1, 9, 31)
    assert candle.volume == 100
    assert candle.number_of_trades == 3
    assert candle.traded


def test_null_numeric_fields_decode_as_zero() -> None:
    candle = Candle.from_payload(
        _payload(high=None, low=None, average=None, numberOfTrades=0), datetime(2021, 6, 1, 13)
    )

    assert candle.high == 0.0
    assert candle.low == 0.0
    assert candle.average == 0.0
    assert not candle.traded
    assert candle.timestamp == datetime(2021, 6, 1, 9, 31)


@pytest.mark.parametrize("raw", [None, "0931", "9:xx", "24:00", 931, "99999999999:00", "0²:30"])
def test_parse_minute_rejects_malformed_values(raw) -> None:
    with pytest.raises(DecodeError) as info:
        parse_minute(raw)
    assert info.value.stage is DecodeStage.SHAPE


def test_parse_minute_offset() -> None:
    assert parse_minute("15:59") == timedelta(hours=15, minutes=59)


def test_non_numeric_field_is_shape_error() -> None:
    with pytest.raises(DecodeError):
        Candle.from_payload(_payload(high="ten"), date(2021, 6, 1))


def test_to_row_matches_column_order() -> None:
    candle = Candle.from_payload(_payload(), date(2021, 6, 1))

    assert candle.to_row() == ["09:31", "10.5", "10.0", "10.1", "10.4", "10.25", "100", "1025.0", "3"]


def test_candles_to_frame_indexes_by_timestamp() -> None:
    candles = [
        Candle.from_payload(_payload(minute="09:30"), date(2021, 6, 1)),
        Candle.from_payload(_payload(minute="09:31", close=11.0), date(2021, 6, 1)),
    ]

    frame = candles_to_frame(iter(candles))

    assert list(frame.index) == [datetime(2021, 6, 1, 9, 30), datetime(2021, 6, 1, 9, 31)]
    assert frame["Close"].tolist() == [10.4, 11.0]
    assert frame["Trades"].tolist() == [3, 3]


def test_candles_to_frame_empty() -> None:
    frame = candles_to_frame([])

    assert frame.empty
    assert "Close" in frame.columns
