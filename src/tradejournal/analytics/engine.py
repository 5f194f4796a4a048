"""
Aggregation engine for trade journal dashboards.

Pure functions over in-memory lists of TradeRecord:
- Summary statistics (win rate, profit factor, averages, best/worst trade)
- Equity curve (per trade) and daily cumulative P&L
- Daily, monthly and per-strategy breakdowns
- Maximum drawdown of the cumulative P&L walk

No function here holds state, performs I/O or mutates its input. Every
zero-denominator ratio resolves to 0, never NaN or infinity.

Functions that order or bucket trades take an explicit `date_field`;
the default is DateField.EXIT (close-based aggregation).
"""

from datetime import datetime
from typing import Dict, List, Sequence

from tradejournal.analytics.records import DateField, TradeRecord
from tradejournal.analytics.schemas import (
    DailyEquityPoint,
    EquityPoint,
    MonthBucket,
    StrategyBucket,
    StrategyPerformance,
    SummaryStats,
)


def _win_rate(wins: int, total: int) -> float:
    return wins / total * 100 if total > 0 else 0.0


def _calendar_day(value: datetime) -> str:
    """YYYY-MM-DD of a record timestamp (records hold naive UTC)."""
    return value.date().isoformat()


def _calendar_year_month(value: datetime):
    return value.year, value.month


def _sorted_by_date(trades: Sequence[TradeRecord], date_field: DateField) -> List[TradeRecord]:
    # sorted() is stable: equal-dated trades keep their input order
    return sorted(trades, key=lambda t: t.date_for(date_field))


# ==================
# Summary
# ==================

def compute_summary_stats(trades: Sequence[TradeRecord]) -> SummaryStats:
    """
    Compute headline statistics for a set of trades.

    Trades with net_pnl == 0 count toward total_trades but are neither
    winners nor losers. profit_factor is 0 when there are no losses,
    even if there are wins.
    """
    total_trades = len(trades)
    if total_trades == 0:
        return SummaryStats()

    winning_trades = 0
    losing_trades = 0
    total_pnl = 0.0
    total_wins = 0.0
    loss_sum = 0.0

    for trade in trades:
        pnl = trade.net_pnl
        total_pnl += pnl
        if pnl > 0:
            winning_trades += 1
            total_wins += pnl
        elif pnl < 0:
            losing_trades += 1
            loss_sum += pnl

    total_losses = abs(loss_sum)
    pnls = [t.net_pnl for t in trades]

    return SummaryStats(
        total_trades=total_trades,
        winning_trades=winning_trades,
        losing_trades=losing_trades,
        total_pnl=total_pnl,
        win_rate=_win_rate(winning_trades, total_trades),
        total_wins=total_wins,
        total_losses=total_losses,
        profit_factor=total_wins / total_losses if total_losses > 0 else 0.0,
        average_win=total_wins / winning_trades if winning_trades > 0 else 0.0,
        average_loss=total_losses / losing_trades if losing_trades > 0 else 0.0,
        best_trade=max(pnls),
        worst_trade=min(pnls),
    )


# ==================
# Equity / drawdown
# ==================

def compute_equity_curve(
    trades: Sequence[TradeRecord],
    date_field: DateField = DateField.EXIT,
) -> List[EquityPoint]:
    """Running P&L total, one point per trade, in ascending `date_field` order."""
    curve: List[EquityPoint] = []
    cumulative = 0.0

    for trade in _sorted_by_date(trades, date_field):
        cumulative += trade.net_pnl
        curve.append(
            EquityPoint(
                date=trade.date_for(date_field),
                trade_pnl=trade.net_pnl,
                cumulative_pnl=cumulative,
            )
        )

    return curve


def compute_max_drawdown(
    trades: Sequence[TradeRecord],
    date_field: DateField = DateField.EXIT,
) -> float:
    """
    Largest peak-to-trough decline of cumulative P&L.

    The peak starts at 0, so a series that opens with losses draws down
    from zero. Absolute P&L units, not a percentage of equity.
    """
    peak = 0.0
    running = 0.0
    max_drawdown = 0.0

    for trade in _sorted_by_date(trades, date_field):
        running += trade.net_pnl
        if running > peak:
            peak = running
        drawdown = peak - running
        if drawdown > max_drawdown:
            max_drawdown = drawdown

    return max_drawdown


# ==================
# Calendar buckets
# ==================

def compute_daily_pnl(
    trades: Sequence[TradeRecord],
    date_field: DateField = DateField.EXIT,
) -> Dict[str, float]:
    """
    Net P&L per calendar day, keyed "YYYY-MM-DD".

    Sparse: days without trades are absent. Keys come out in ascending order.
    """
    buckets: Dict[str, float] = {}
    for trade in trades:
        day = _calendar_day(trade.date_for(date_field))
        buckets[day] = buckets.get(day, 0.0) + trade.net_pnl

    return {day: buckets[day] for day in sorted(buckets)}


def compute_daily_equity_curve(
    trades: Sequence[TradeRecord],
    date_field: DateField = DateField.EXIT,
) -> List[DailyEquityPoint]:
    """Cumulative P&L at day granularity (sparse, like compute_daily_pnl)."""
    points: List[DailyEquityPoint] = []
    cumulative = 0.0

    for day, pnl in compute_daily_pnl(trades, date_field).items():
        cumulative += pnl
        points.append(DailyEquityPoint(date=day, daily_pnl=pnl, cumulative_pnl=cumulative))

    return points


def compute_monthly_performance(
    trades: Sequence[TradeRecord],
    year: int,
    date_field: DateField = DateField.EXIT,
) -> List[MonthBucket]:
    """
    Twelve month buckets (January first) for trades dated in `year`.

    Always dense: months without trades are present with zero values.
    """
    pnl = [0.0] * 12
    counts = [0] * 12
    wins = [0] * 12

    for trade in trades:
        trade_year, trade_month = _calendar_year_month(trade.date_for(date_field))
        if trade_year != year:
            continue
        idx = trade_month - 1
        pnl[idx] += trade.net_pnl
        counts[idx] += 1
        if trade.net_pnl > 0:
            wins[idx] += 1

    return [
        MonthBucket(
            month=idx + 1,
            pnl=pnl[idx],
            trades_count=counts[idx],
            win_rate=_win_rate(wins[idx], counts[idx]),
        )
        for idx in range(12)
    ]


# ==================
# Strategy breakdowns
# ==================

def compute_performance_by_strategy(trades: Sequence[TradeRecord]) -> List[StrategyBucket]:
    """
    Group trades by strategy label.

    Unlabelled trades fall under "No Strategy". Groups are returned in
    order of first appearance.
    """
    groups: Dict[str, StrategyBucket] = {}

    for trade in trades:
        name = trade.strategy_name
        bucket = groups.get(name)
        if bucket is None:
            bucket = groups[name] = StrategyBucket(name=name)

        bucket.trade_count += 1
        bucket.total_pnl += trade.net_pnl
        if trade.net_pnl > 0:
            bucket.wins += 1
        elif trade.net_pnl < 0:
            bucket.losses += 1

    for bucket in groups.values():
        bucket.win_rate = _win_rate(bucket.wins, bucket.trade_count)

    return list(groups.values())


def compute_strategy_performance(
    trades: Sequence[TradeRecord],
    date_field: DateField = DateField.EXIT,
) -> StrategyPerformance:
    """Performance snapshot for one strategy's trades."""
    stats = compute_summary_stats(trades)

    return StrategyPerformance(
        total_trades=stats.total_trades,
        winning_trades=stats.winning_trades,
        losing_trades=stats.losing_trades,
        win_rate=stats.win_rate,
        total_pnl=stats.total_pnl,
        average_win=stats.average_win,
        average_loss=stats.average_loss,
        profit_factor=stats.profit_factor,
        max_drawdown=compute_max_drawdown(trades, date_field),
    )
