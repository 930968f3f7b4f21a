"""Command line interface for the IEX Intraday package."""

from __future__ import annotations

import argparse
import asyncio
import csv
import sys
from datetime import date, timedelta
from typing import List, Optional, TextIO

from iex_intraday.client import IEXClient
from iex_intraday.config.day_policy import recent_days
from iex_intraday.config.settings import IEXSettings
from iex_intraday.errors import IEXError
from iex_intraday.logging import get_logger, log_exception
from iex_intraday.models import CANDLE_COLUMNS, Symbol
from iex_intraday.security.validation import (
    parse_resolution,
    sanitize_positive_int,
    sanitize_symbols,
)

DEFAULT_RESOLUTION = "1m"
DEFAULT_DAYS = 1
MAX_DAYS = 365

logger = get_logger(__name__, component="cli")


def build_parser() -> argparse.ArgumentParser:
    """Create the CLI argument parser."""

    parser = argparse.ArgumentParser(
        description="Fetch tradable symbols or intraday candles from IEX Cloud",
        allow_abbrev=False,
    )
    parser.add_argument(
        "--secret",
        default="",
        help="IEX Cloud secret (defaults to the IEX_CLOUD_SECRET environment variable)",
    )
    parser.add_argument(
        "--res",
        default=DEFAULT_RESOLUTION,
        help="Resolution of intraday data, e.g. 1.5h or 1h30m (default: 1m)",
    )
    parser.add_argument(
        "--syms",
        default="",
        help="Comma-delimited symbols; if omitted, print tradable symbols on stdout",
    )
    parser.add_argument(
        "--days",
        default=DEFAULT_DAYS,
        help="Number of most recent weekdays to retrieve",
    )
    parser.add_argument(
        "--end",
        type=date.fromisoformat,
        default=None,
        help="Most recent day to retrieve (YYYY-MM-DD, default: today)",
    )
    return parser


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    return build_parser().parse_args(argv)


def _resolve_secret(args: argparse.Namespace, settings: IEXSettings) -> str:
    if args.secret:
        return args.secret
    if settings.cloud_secret is not None:
        return settings.cloud_secret.get_secret_value()
    return ""


async def _print_tickers(client: IEXClient, out: TextIO) -> None:
    for symbol in await client.tickers():
        print(symbol, file=out)


async def _print_candles(
    client: IEXClient,
    symbols: List[Symbol],
    resolution: timedelta,
    days: List[date],
    out: TextIO,
) -> None:
    pairs = [(symbol, day) for symbol in symbols for day in days]
    results = await asyncio.gather(
        *(client.intraday(symbol, resolution, day) for symbol, day in pairs)
    )
    writer = csv.writer(out)
    writer.writerow(["symbol", "date", *CANDLE_COLUMNS])
    for (symbol, day), candles in zip(pairs, results):
        for candle in candles:
            writer.writerow([symbol, day.isoformat(), *candle.to_row()])


async def run(args: argparse.Namespace, client: IEXClient, out: TextIO) -> None:
    """Execute the command described by ``args`` against ``client``."""

    async with client:
        if not args.syms:
            await _print_tickers(client, out)
            return
        symbols = sanitize_symbols(args.syms)
        resolution = parse_resolution(args.res)
        count = sanitize_positive_int(args.days, field="days", maximum=MAX_DAYS)
        await _print_candles(client, symbols, resolution, recent_days(count, args.end), out)


def main(argv: Optional[List[str]] = None) -> int:
    """Entry point for the ``iex-intraday`` console script."""

    args = parse_args(argv)
    settings = IEXSettings()
    secret = _resolve_secret(args, settings)
    if not secret:
        print(
            "please provide an IEX cloud secret: either a --secret flag on the "
            "command-line or set environment variable IEX_CLOUD_SECRET=<YOURS>",
            file=sys.stderr,
        )
        return 1
    client = IEXClient(secret, settings=settings)
    try:
        asyncio.run(run(args, client, sys.stdout))
    except IEXError as error:
        log_exception(logger, error, event="cli_failed")
        print(f"error: {error.user_message}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
