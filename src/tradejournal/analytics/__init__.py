"""
Analytics Package

Stateless aggregation engine for the trade journal:
- Typed input records (TradeRecord, StrategyRecord)
- Summary statistics, equity curve, drawdown
- Daily / monthly / per-strategy breakdowns
- Look-back windows and per-trade P&L derivation

The journal store feeds records in and persists the outputs it needs.
"""

from tradejournal.analytics.records import (
    NO_STRATEGY,
    DateField,
    StrategyCategory,
    StrategyRecord,
    TradeRecord,
    coerce_pnl,
    to_trade_records,
)
from tradejournal.analytics.schemas import (
    DailyEquityPoint,
    EquityPoint,
    MonthBucket,
    StrategyBucket,
    StrategyPerformance,
    SummaryStats,
)
from tradejournal.analytics.engine import (
    compute_daily_equity_curve,
    compute_daily_pnl,
    compute_equity_curve,
    compute_max_drawdown,
    compute_monthly_performance,
    compute_performance_by_strategy,
    compute_strategy_performance,
    compute_summary_stats,
)
from tradejournal.analytics.periods import (
    Period,
    filter_trades_in_window,
    parse_period,
    period_start,
)
from tradejournal.analytics.pnl import TradePnL, TradeSide, calculate_trade_pnl

__all__ = [
    "NO_STRATEGY",
    "DateField",
    "StrategyCategory",
    "StrategyRecord",
    "TradeRecord",
    "coerce_pnl",
    "to_trade_records",
    "DailyEquityPoint",
    "EquityPoint",
    "MonthBucket",
    "StrategyBucket",
    "StrategyPerformance",
    "SummaryStats",
    "compute_daily_equity_curve",
    "compute_daily_pnl",
    "compute_equity_curve",
    "compute_max_drawdown",
    "compute_monthly_performance",
    "compute_performance_by_strategy",
    "compute_strategy_performance",
    "compute_summary_stats",
    "Period",
    "filter_trades_in_window",
    "parse_period",
    "period_start",
    "TradePnL",
    "TradeSide",
    "calculate_trade_pnl",
]
