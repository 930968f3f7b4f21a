"""Which calendar days to hydrate when several are requested."""

from __future__ import annotations

from datetime import date, timedelta
from typing import List

WEEKEND = {5, 6}


def recent_days(count: int, end: date | None = None) -> List[date]:
    """Return the last ``count`` weekdays up to and including ``end``.

    Parameters
    ----------
    count:
        Number of days to return; ``0`` yields an empty list.
    end:
        Most recent candidate day (defaults to :func:`date.today`).

    The result is ordered most recent first. Exchange holidays are not
    known here; the provider simply returns no candles for them.
    """

    if count < 0:
        raise ValueError("count must be non-negative")
    day = end or date.today()
    days: List[date] = []
    while len(days) < count:
        if day.weekday() not in WEEKEND:
            days.append(day)
        day -= timedelta(days=1)
    return days
