"""
Journal Domain Service

Connects the journal store to the aggregation engine:
- records, edits and deletes strategies and trades (deriving trade P&L)
- turns stored rows into TradeRecords
- recomputes and stores strategy performance snapshots
- assembles dashboard views from engine outputs
"""

import logging
from typing import Any, Dict, List, Optional, Union
from datetime import datetime
from sqlalchemy.orm import Session

from tradejournal.config import settings
from tradejournal.analytics import engine as analytics
from tradejournal.analytics.periods import Period, filter_trades_in_window, parse_period, period_start
from tradejournal.analytics.pnl import TradeSide, calculate_trade_pnl
from tradejournal.analytics.records import DateField, StrategyCategory, StrategyRecord, TradeRecord
from tradejournal.analytics.schemas import StrategyPerformance
from tradejournal.journal.db import SessionLocal
from tradejournal.journal.models import JournalTrade, Strategy
from tradejournal.journal.repository import JournalRepository

logger = logging.getLogger(__name__)

# Columns callers may edit; pnl and pnl_percentage are always derived
_TRADE_FIELDS = frozenset({
    "instrument", "side", "entry_price", "exit_price", "quantity", "fees",
    "entry_date", "exit_date", "strategy_id", "notes",
})
_STRATEGY_FIELDS = frozenset({"name", "category", "description", "is_active"})


def trade_to_record(trade: JournalTrade) -> TradeRecord:
    """Map a stored trade to the engine's record shape."""
    return TradeRecord(
        net_pnl=trade.pnl,
        entry_date=trade.entry_date,
        exit_date=trade.exit_date,
        strategy_label=trade.strategy.name if trade.strategy else None,
    )


def trade_to_dict(trade: JournalTrade) -> Dict:
    """JSON-ready view of a stored trade with its strategy summary."""
    return {
        "id": trade.id,
        "instrument": trade.instrument,
        "side": trade.side,
        "entryPrice": trade.entry_price,
        "exitPrice": trade.exit_price,
        "quantity": trade.quantity,
        "fees": trade.fees,
        "pnl": trade.pnl,
        "pnlPercentage": trade.pnl_percentage,
        "entryDate": trade.entry_date.isoformat(),
        "exitDate": trade.exit_date.isoformat(),
        "strategy": {
            "id": trade.strategy.id,
            "name": trade.strategy.name,
            "category": trade.strategy.category,
        } if trade.strategy else None,
        "notes": trade.notes,
    }


def strategy_to_record(strategy: Strategy) -> StrategyRecord:
    """Map a stored strategy to its typed record, including the last snapshot."""
    return StrategyRecord(
        name=strategy.name,
        category=strategy.category,
        description=strategy.description,
        is_active=strategy.is_active,
        performance=StrategyPerformance.model_validate(strategy.performance or {}),
    )


class JournalService:
    """
    Journal Service - trade journal domain operations.

    Responsibilities:
    - Own DB session for the journal
    - Record, edit and delete strategies and trades (owner-checked)
    - Recompute-and-store strategy performance (the engine itself is stateless)
    - Build dashboard data from engine outputs
    """

    def __init__(self, db: Optional[Session] = None):
        self.db = db or SessionLocal()

    def _date_field(self, date_field: Optional[Union[str, DateField]]) -> DateField:
        return DateField(date_field) if date_field is not None else settings.default_date_field

    # ==================
    # Ownership
    # ==================

    def _owned_strategy(self, strategy_id: int, user_id: str) -> Strategy:
        strategy = JournalRepository.get_strategy(self.db, strategy_id)
        if not strategy or strategy.user_id != user_id:
            raise ValueError(f"Strategy {strategy_id} not found")
        return strategy

    def _owned_trade(self, trade_id: int, user_id: str) -> JournalTrade:
        trade = JournalRepository.get_trade(self.db, trade_id)
        if not trade or trade.user_id != user_id:
            raise ValueError(f"Trade {trade_id} not found")
        return trade

    # ==================
    # Writes
    # ==================

    def create_strategy(
        self,
        *,
        user_id: str,
        name: str,
        category: Union[str, StrategyCategory] = StrategyCategory.OTHER,
        description: Optional[str] = None,
    ) -> int:
        """
        Create a strategy.

        Returns:
            Strategy ID
        """
        record = StrategyRecord(name=name, category=category, description=description)

        strategy = JournalRepository.create_strategy(
            self.db,
            user_id=user_id,
            name=record.name,
            category=record.category.value,
            description=record.description,
        )
        JournalRepository.store_performance(
            self.db, strategy, record.performance.to_json_dict()
        )
        self.db.commit()

        logger.info(f"Created strategy {strategy.id} '{strategy.name}' for user {user_id}")
        return strategy.id

    def record_trade(
        self,
        *,
        user_id: str,
        instrument: str,
        side: Union[str, TradeSide],
        entry_price: float,
        exit_price: float,
        quantity: float,
        entry_date: datetime,
        exit_date: datetime,
        fees: float = 0.0,
        strategy_id: Optional[int] = None,
        notes: Optional[str] = None,
    ) -> int:
        """
        Record a closed trade. Net P&L is derived from prices, quantity and fees.

        Returns:
            Trade ID
        """
        if strategy_id is not None:
            self._owned_strategy(strategy_id, user_id)

        side = TradeSide(side)
        result = calculate_trade_pnl(side, entry_price, exit_price, quantity, fees)

        trade = JournalRepository.create_trade(
            self.db,
            user_id=user_id,
            instrument=instrument.strip(),
            side=side.value,
            entry_price=entry_price,
            exit_price=exit_price,
            quantity=quantity,
            fees=fees,
            pnl=result.pnl,
            pnl_percentage=result.pnl_percentage,
            entry_date=entry_date,
            exit_date=exit_date,
            strategy_id=strategy_id,
            notes=notes,
        )
        self.db.commit()

        logger.info(f"Recorded trade {trade.id}: {side.value} {quantity} {instrument} pnl={result.pnl:.2f}")
        return trade.id

    def update_trade(self, trade_id: int, *, user_id: str, **changes: Any) -> None:
        """
        Edit a recorded trade. Net P&L is derived again from the merged values.

        Accepted changes: instrument, side, entry_price, exit_price, quantity,
        fees, entry_date, exit_date, strategy_id (None unassigns), notes.
        Stored strategy snapshots are not touched; call
        recalculate_strategy_performance afterwards.

        Raises:
            ValueError: trade or strategy not found for this user, unknown field,
                or invalid prices / quantity / fees
        """
        unknown = set(changes) - _TRADE_FIELDS
        if unknown:
            raise ValueError(f"Cannot update trade fields: {', '.join(sorted(unknown))}")

        trade = self._owned_trade(trade_id, user_id)
        if changes.get("strategy_id") is not None:
            self._owned_strategy(changes["strategy_id"], user_id)

        merged = {name: getattr(trade, name) for name in _TRADE_FIELDS}
        merged.update(changes)
        side = TradeSide(merged["side"])
        result = calculate_trade_pnl(
            side, merged["entry_price"], merged["exit_price"], merged["quantity"], merged["fees"]
        )
        if "instrument" in changes:
            changes["instrument"] = changes["instrument"].strip()
        if "side" in changes:
            changes["side"] = side.value

        JournalRepository.update_trade(
            self.db, trade, pnl=result.pnl, pnl_percentage=result.pnl_percentage, **changes
        )
        self.db.commit()

        logger.info(f"Updated trade {trade_id} ({', '.join(sorted(changes))}) pnl={result.pnl:.2f}")

    def delete_trade(self, trade_id: int, *, user_id: str) -> None:
        """
        Delete a recorded trade.

        Raises:
            ValueError: trade not found for this user
        """
        trade = self._owned_trade(trade_id, user_id)
        JournalRepository.delete_trade(self.db, trade)
        self.db.commit()

        logger.info(f"Deleted trade {trade_id} for user {user_id}")

    def update_strategy(self, strategy_id: int, *, user_id: str, **changes: Any) -> StrategyRecord:
        """
        Edit a strategy's name, category, description or is_active flag.

        Raises:
            ValueError: strategy not found for this user, unknown field,
                or a value that fails StrategyRecord validation
        """
        unknown = set(changes) - _STRATEGY_FIELDS
        if unknown:
            raise ValueError(f"Cannot update strategy fields: {', '.join(sorted(unknown))}")

        strategy = self._owned_strategy(strategy_id, user_id)
        current = strategy_to_record(strategy)
        fields = {name: getattr(current, name) for name in _STRATEGY_FIELDS}
        fields.update(changes)
        record = StrategyRecord(**fields, performance=current.performance)

        JournalRepository.update_strategy(
            self.db,
            strategy,
            name=record.name,
            category=record.category.value,
            description=record.description,
            is_active=record.is_active,
        )
        self.db.commit()

        logger.info(f"Updated strategy {strategy_id} ({', '.join(sorted(changes))})")
        return record

    def delete_strategy(self, strategy_id: int, *, user_id: str) -> None:
        """
        Delete a strategy. Its trades stay in the journal without a strategy.

        Raises:
            ValueError: strategy not found for this user
        """
        strategy = self._owned_strategy(strategy_id, user_id)
        JournalRepository.delete_strategy(self.db, strategy)
        self.db.commit()

        logger.info(f"Deleted strategy {strategy_id} for user {user_id}")

    def recalculate_strategy_performance(
        self,
        strategy_id: int,
        date_field: Optional[Union[str, DateField]] = None,
    ) -> StrategyPerformance:
        """
        Recompute a strategy's performance from its trades and store the snapshot.

        Raises:
            ValueError: strategy does not exist
        """
        strategy = JournalRepository.get_strategy(self.db, strategy_id)
        if not strategy:
            raise ValueError(f"Strategy {strategy_id} not found")

        records = self.load_trade_records(strategy.user_id, strategy_id=strategy_id)
        performance = analytics.compute_strategy_performance(records, self._date_field(date_field))

        JournalRepository.store_performance(self.db, strategy, performance.to_json_dict())
        self.db.commit()

        logger.info(
            f"Recalculated strategy {strategy_id}: "
            f"{performance.total_trades} trades, pnl={performance.total_pnl:.2f}"
        )
        return performance

    # ==================
    # Reads
    # ==================

    def load_trade_records(
        self,
        user_id: str,
        *,
        strategy_id: Optional[int] = None,
    ) -> List[TradeRecord]:
        """A user's trades as engine records, oldest entry first."""
        trades = JournalRepository.list_trades(self.db, user_id=user_id, strategy_id=strategy_id)
        return [trade_to_record(t) for t in reversed(trades)]

    def get_strategy(self, strategy_id: int) -> StrategyRecord:
        """Get a strategy with its last stored performance snapshot."""
        strategy = JournalRepository.get_strategy(self.db, strategy_id)
        if not strategy:
            raise ValueError(f"Strategy {strategy_id} not found")
        return strategy_to_record(strategy)

    def get_overview(self, user_id: str) -> Dict:
        """Dashboard overview: summary stats, recent trades, strategies."""
        stats = analytics.compute_summary_stats(self.load_trade_records(user_id))

        recent = JournalRepository.list_trades(
            self.db, user_id=user_id, limit=settings.recent_trades_limit
        )
        strategies = JournalRepository.list_strategies(
            self.db, user_id=user_id, limit=settings.recent_strategies_limit
        )

        return {
            "overview": stats.to_json_dict(),
            "recentTrades": [trade_to_dict(t) for t in recent],
            "strategies": [
                {
                    "id": s.id,
                    **strategy_to_record(s).model_dump(by_alias=True, mode="json"),
                }
                for s in strategies
            ],
        }

    def list_strategy_trades(
        self,
        strategy_id: int,
        *,
        user_id: str,
        page: int = 1,
        limit: int = 50,
    ) -> List[Dict]:
        """
        One page of a strategy's trades, newest entry first.

        Raises:
            ValueError: strategy not found for this user, or page / limit below 1
        """
        if page < 1 or limit < 1:
            raise ValueError(f"page and limit must be positive, got page={page} limit={limit}")
        self._owned_strategy(strategy_id, user_id)

        trades = JournalRepository.list_trades(
            self.db,
            user_id=user_id,
            strategy_id=strategy_id,
            limit=limit,
            offset=(page - 1) * limit,
        )
        return [trade_to_dict(t) for t in trades]

    def get_equity_curve(
        self,
        user_id: str,
        date_field: Optional[Union[str, DateField]] = None,
    ) -> List[Dict]:
        """Per-trade equity curve."""
        records = self.load_trade_records(user_id)
        return [
            point.to_json_dict()
            for point in analytics.compute_equity_curve(records, self._date_field(date_field))
        ]

    def get_performance(
        self,
        user_id: str,
        period: Optional[Union[str, Period]] = None,
        now: Optional[datetime] = None,
        date_field: Optional[Union[str, DateField]] = None,
    ) -> Dict:
        """Daily and cumulative P&L within a look-back window ending at `now`."""
        period = parse_period(period) if period is not None else settings.default_period
        now = now or datetime.utcnow()
        field = self._date_field(date_field)

        window = filter_trades_in_window(
            self.load_trade_records(user_id), period_start(period, now), now, field
        )
        cumulative = analytics.compute_daily_equity_curve(window, field)

        return {
            "period": period.value,
            "dailyPnl": analytics.compute_daily_pnl(window, field),
            "cumulativeData": [point.to_json_dict() for point in cumulative],
            "totalPnl": cumulative[-1].cumulative_pnl if cumulative else 0.0,
        }

    def get_monthly_performance(
        self,
        user_id: str,
        year: int,
        date_field: Optional[Union[str, DateField]] = None,
    ) -> List[Dict]:
        """Twelve month buckets for `year`."""
        records = self.load_trade_records(user_id)
        return [
            bucket.to_json_dict()
            for bucket in analytics.compute_monthly_performance(records, year, self._date_field(date_field))
        ]

    def get_strategy_breakdown(self, user_id: str) -> List[Dict]:
        """P&L and win rate grouped by strategy label."""
        return [
            bucket.to_json_dict()
            for bucket in analytics.compute_performance_by_strategy(self.load_trade_records(user_id))
        ]

    def get_max_drawdown(
        self,
        user_id: str,
        date_field: Optional[Union[str, DateField]] = None,
    ) -> float:
        """Maximum drawdown of the user's cumulative P&L."""
        return analytics.compute_max_drawdown(
            self.load_trade_records(user_id), self._date_field(date_field)
        )

    # ==================
    # Housekeeping
    # ==================

    def close(self):
        """Close database session."""
        self.db.close()
