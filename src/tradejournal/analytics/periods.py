"""
Look-back windows for the performance view.

The journal offers four windows ending at "now": 7 days, 30 days, 90 days
and one calendar year. Unknown window names fall back to 30 days.
"""

from datetime import datetime, timedelta
from enum import Enum
from typing import List, Optional, Sequence, Union

from tradejournal.analytics.records import DateField, TradeRecord, to_naive_utc


class Period(str, Enum):
    DAYS_7 = "7d"
    DAYS_30 = "30d"
    DAYS_90 = "90d"
    YEAR_1 = "1y"


DEFAULT_PERIOD = Period.DAYS_30

_PERIOD_DAYS = {
    Period.DAYS_7: 7,
    Period.DAYS_30: 30,
    Period.DAYS_90: 90,
}


def parse_period(value: Optional[Union[str, Period]]) -> Period:
    """Parse a period name, falling back to 30d for empty or unknown values."""
    if isinstance(value, Period):
        return value
    try:
        return Period((value or "").strip().lower())
    except ValueError:
        return DEFAULT_PERIOD


def period_start(period: Union[str, Period], now: datetime) -> datetime:
    """Start of the window `period` that ends at `now`."""
    period = parse_period(period)
    if period is Period.YEAR_1:
        try:
            return now.replace(year=now.year - 1)
        except ValueError:
            # 29 February has no counterpart in the previous year
            return now.replace(year=now.year - 1, day=28)
    return now - timedelta(days=_PERIOD_DAYS[period])


def filter_trades_in_window(
    trades: Sequence[TradeRecord],
    start: datetime,
    end: datetime,
    date_field: DateField = DateField.EXIT,
) -> List[TradeRecord]:
    """
    Trades whose `date_field` lies in [start, end], input order preserved.

    Aware bounds are compared in UTC, like the record timestamps.
    """
    start, end = to_naive_utc(start), to_naive_utc(end)
    return [t for t in trades if start <= t.date_for(date_field) <= end]
