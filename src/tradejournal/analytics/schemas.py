from datetime import datetime

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class AnalyticsModel(BaseModel):
    """Base for engine outputs: snake_case attributes, camelCase JSON."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )

    def to_json_dict(self) -> dict:
        """Serialize with camelCase keys, ready for a JSON response body."""
        return self.model_dump(by_alias=True, mode="json")


# =========================
# Engine outputs
# =========================

class SummaryStats(AnalyticsModel):
    total_trades: int = 0
    winning_trades: int = 0
    losing_trades: int = 0
    total_pnl: float = 0.0
    win_rate: float = 0.0
    total_wins: float = 0.0
    total_losses: float = 0.0
    profit_factor: float = 0.0
    average_win: float = 0.0
    average_loss: float = 0.0
    best_trade: float = 0.0
    worst_trade: float = 0.0


class EquityPoint(AnalyticsModel):
    date: datetime
    trade_pnl: float
    cumulative_pnl: float


class DailyEquityPoint(AnalyticsModel):
    date: str  # YYYY-MM-DD
    daily_pnl: float
    cumulative_pnl: float


class StrategyBucket(AnalyticsModel):
    name: str
    trade_count: int = 0
    total_pnl: float = 0.0
    wins: int = 0
    losses: int = 0
    win_rate: float = 0.0


class MonthBucket(AnalyticsModel):
    month: int  # 1 = January
    pnl: float = 0.0
    trades_count: int = 0
    win_rate: float = 0.0


class StrategyPerformance(AnalyticsModel):
    """Performance snapshot persisted on a strategy after recalculation."""
    total_trades: int = 0
    winning_trades: int = 0
    losing_trades: int = 0
    win_rate: float = 0.0
    total_pnl: float = 0.0
    average_win: float = 0.0
    average_loss: float = 0.0
    profit_factor: float = 0.0
    max_drawdown: float = 0.0
