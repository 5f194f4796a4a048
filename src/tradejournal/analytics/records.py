"""
Input records consumed by the aggregation engine.

Trade and strategy rows arrive from the persistence layer as loosely shaped
mappings. They are validated into typed records here so the engine only ever
sees four fields per trade:

- net_pnl: realized P&L after fees (missing / non-numeric values become 0)
- entry_date / exit_date: the two bucketing keys, held as naive UTC
- strategy_label: strategy name, or None for unassigned trades

Everything else in the source mapping is ignored.
"""

import logging
import math
from datetime import date, datetime, time, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, Iterable, List, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from tradejournal.analytics.schemas import StrategyPerformance

logger = logging.getLogger(__name__)

NO_STRATEGY = "No Strategy"


class DateField(str, Enum):
    """Which trade timestamp drives ordering and calendar bucketing."""
    ENTRY = "entry"
    EXIT = "exit"


class StrategyCategory(str, Enum):
    """Strategy categories offered by the journal."""
    SCALPING = "scalping"
    DAY_TRADING = "day-trading"
    SWING_TRADING = "swing-trading"
    POSITION_TRADING = "position-trading"
    ALGORITHMIC = "algorithmic"
    OTHER = "other"


def coerce_pnl(value: Any) -> float:
    """
    Coerce a raw P&L value to float.

    None, booleans, unparsable strings, numbers outside float range, NaN and
    infinities all map to 0.0. This function never raises.
    Numeric strings ("12.5") parse to their value.
    """
    if value is None or isinstance(value, bool):
        return 0.0

    if isinstance(value, (int, float, Decimal, str)):
        try:
            number = float(value.strip() if isinstance(value, str) else value)
        except (ValueError, OverflowError, ArithmeticError):
            # "abc", ints beyond float range, signaling NaN decimals
            logger.debug(f"Coercing non-numeric net_pnl {value!r} to 0")
            return 0.0
    else:
        logger.debug(f"Coercing unsupported net_pnl type {type(value).__name__} to 0")
        return 0.0

    if not math.isfinite(number):
        logger.debug(f"Coercing non-finite net_pnl {value!r} to 0")
        return 0.0
    return number


def to_naive_utc(value: datetime) -> datetime:
    """
    Express a timestamp as a naive UTC datetime.

    Aware values are converted to UTC and stripped of their offset; naive values
    are returned unchanged. Records always hold naive timestamps so that
    ordering and window comparisons never mix the two kinds.
    """
    if value.tzinfo is not None and value.utcoffset() is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


class TradeRecord(BaseModel):
    """A closed trade as seen by the aggregation engine."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        frozen=True,
    )

    net_pnl: float = 0.0
    entry_date: datetime
    exit_date: datetime
    strategy_label: Optional[str] = None

    @field_validator("net_pnl", mode="before")
    @classmethod
    def _coerce_net_pnl(cls, v):
        return coerce_pnl(v)

    @field_validator("entry_date", "exit_date", mode="before")
    @classmethod
    def _date_only_is_midnight(cls, v):
        # Calendar dates ("2024-01-05" or date objects) become midnight datetimes
        if isinstance(v, date) and not isinstance(v, datetime):
            return datetime.combine(v, time.min)
        if isinstance(v, str) and len(v.strip()) == 10:
            return datetime.combine(date.fromisoformat(v.strip()), time.min)
        return v

    @field_validator("entry_date", "exit_date")
    @classmethod
    def _aware_is_naive_utc(cls, v: datetime) -> datetime:
        return to_naive_utc(v)

    @field_validator("strategy_label", mode="before")
    @classmethod
    def _blank_label_is_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v

    def date_for(self, field: DateField) -> datetime:
        """Return the timestamp selected by `field`."""
        return self.entry_date if DateField(field) is DateField.ENTRY else self.exit_date

    @property
    def strategy_name(self) -> str:
        """Strategy label with the "No Strategy" sentinel for unassigned trades."""
        return self.strategy_label if self.strategy_label is not None else NO_STRATEGY


class StrategyRecord(BaseModel):
    """A user-defined strategy and its last stored performance snapshot."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    name: str = Field(..., min_length=1, max_length=100)
    category: StrategyCategory = StrategyCategory.OTHER
    description: Optional[str] = Field(None, max_length=500)
    is_active: bool = True
    performance: StrategyPerformance = Field(default_factory=StrategyPerformance)

    @field_validator("name")
    @classmethod
    def _strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Strategy name must not be blank")
        return v


def to_trade_records(rows: Iterable[Union[TradeRecord, Mapping[str, Any]]]) -> List[TradeRecord]:
    """Validate a mixed iterable of mappings and records into TradeRecords."""
    return [
        row if isinstance(row, TradeRecord) else TradeRecord.model_validate(row)
        for row in rows
    ]
