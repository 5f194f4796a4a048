"""
Journal Repository Layer

Data access operations for strategies and trades.
"""

from typing import Any, Dict, List, Optional
from datetime import datetime
from sqlalchemy.orm import Session, joinedload

from tradejournal.journal.models import JournalTrade, Strategy


class JournalRepository:
    """
    Journal Repository
    Handles all database operations for the journal store.
    """

    # ==================
    # Strategy Operations
    # ==================

    @staticmethod
    def create_strategy(
        db: Session,
        *,
        user_id: str,
        name: str,
        category: str = "other",
        description: Optional[str] = None,
        is_active: bool = True,
    ) -> Strategy:
        """Create a new strategy."""
        strategy = Strategy(
            user_id=user_id,
            name=name,
            category=category,
            description=description,
            is_active=is_active,
        )
        db.add(strategy)
        db.flush()
        return strategy

    @staticmethod
    def get_strategy(db: Session, strategy_id: int) -> Optional[Strategy]:
        """Retrieve a strategy by ID."""
        return db.get(Strategy, strategy_id)

    @staticmethod
    def list_strategies(
        db: Session,
        *,
        user_id: str,
        is_active: Optional[bool] = None,
        limit: Optional[int] = None,
    ) -> List[Strategy]:
        """List a user's strategies, newest first."""
        query = db.query(Strategy).filter(Strategy.user_id == user_id)

        if is_active is not None:
            query = query.filter(Strategy.is_active == is_active)

        query = query.order_by(Strategy.created_at.desc(), Strategy.id.desc())
        if limit:
            query = query.limit(limit)
        return query.all()

    @staticmethod
    def update_strategy(db: Session, strategy: Strategy, **fields: Any) -> Strategy:
        """Overwrite the given columns of a strategy."""
        for name, value in fields.items():
            setattr(strategy, name, value)
        db.flush()
        return strategy

    @staticmethod
    def delete_strategy(db: Session, strategy: Strategy) -> None:
        """Delete a strategy. Its trades are kept and become unassigned."""
        for trade in list(strategy.trades):
            trade.strategy = None
        db.delete(strategy)
        db.flush()

    @staticmethod
    def store_performance(
        db: Session,
        strategy: Strategy,
        performance: Dict[str, Any],
    ) -> Strategy:
        """Overwrite the stored performance snapshot of a strategy."""
        strategy.performance = performance
        strategy.performance_updated_at = datetime.utcnow()
        db.flush()
        return strategy

    # ==================
    # Trade Operations
    # ==================

    @staticmethod
    def create_trade(
        db: Session,
        *,
        user_id: str,
        instrument: str,
        side: str,
        entry_price: float,
        exit_price: float,
        quantity: float,
        entry_date: datetime,
        exit_date: datetime,
        pnl: float,
        pnl_percentage: float,
        fees: float = 0.0,
        strategy_id: Optional[int] = None,
        notes: Optional[str] = None,
    ) -> JournalTrade:
        """Create a journal trade with its derived P&L."""
        trade = JournalTrade(
            user_id=user_id,
            strategy_id=strategy_id,
            instrument=instrument,
            side=side,
            entry_price=entry_price,
            exit_price=exit_price,
            quantity=quantity,
            fees=fees,
            pnl=pnl,
            pnl_percentage=pnl_percentage,
            entry_date=entry_date,
            exit_date=exit_date,
            notes=notes,
        )
        db.add(trade)
        db.flush()
        return trade

    @staticmethod
    def get_trade(db: Session, trade_id: int) -> Optional[JournalTrade]:
        """Retrieve a trade by ID."""
        return db.get(JournalTrade, trade_id)

    @staticmethod
    def update_trade(db: Session, trade: JournalTrade, **fields: Any) -> JournalTrade:
        """Overwrite the given columns of a trade."""
        for name, value in fields.items():
            setattr(trade, name, value)
        db.flush()
        return trade

    @staticmethod
    def delete_trade(db: Session, trade: JournalTrade) -> None:
        """Delete a trade."""
        db.delete(trade)
        db.flush()

    @staticmethod
    def list_trades(
        db: Session,
        *,
        user_id: str,
        strategy_id: Optional[int] = None,
        instrument: Optional[str] = None,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> List[JournalTrade]:
        """
        List a user's trades, newest entry first.

        start_date / end_date filter on entry_date (inclusive);
        instrument is a case-insensitive substring match.
        """
        query = (
            db.query(JournalTrade)
            .options(joinedload(JournalTrade.strategy))
            .filter(JournalTrade.user_id == user_id)
        )

        if strategy_id is not None:
            query = query.filter(JournalTrade.strategy_id == strategy_id)
        if instrument:
            query = query.filter(JournalTrade.instrument.ilike(f"%{instrument}%"))
        if start_date:
            query = query.filter(JournalTrade.entry_date >= start_date)
        if end_date:
            query = query.filter(JournalTrade.entry_date <= end_date)

        query = query.order_by(JournalTrade.entry_date.desc(), JournalTrade.id.desc())
        if limit:
            query = query.limit(limit)
        if offset:
            query = query.offset(offset)
        return query.all()
