"""
Journal Data Models

The journal store owns:
1. Strategies (name, category, last performance snapshot)
2. Trades (instrument, prices, quantity, fees, derived P&L, dates)

The performance snapshot on a strategy is written only by
JournalService.recalculate_strategy_performance.
"""

from sqlalchemy import (
    Column, Integer, String, Float, DateTime, ForeignKey, Text, Boolean, JSON, Index
)
from sqlalchemy.orm import relationship
from datetime import datetime

from .db import Base


class Strategy(Base):
    """A user-defined trading strategy."""
    __tablename__ = "strategies"

    __table_args__ = (
        Index("ix_strategies_user_active", "user_id", "is_active"),
        Index("ix_strategies_user_category", "user_id", "category"),
    )

    id = Column(Integer, primary_key=True)
    user_id = Column(String, nullable=False)

    name = Column(String(100), nullable=False)
    description = Column(String(500), nullable=True)
    category = Column(String, nullable=False, default="other")
    is_active = Column(Boolean, nullable=False, default=True)

    # Last StrategyPerformance snapshot, camelCase keys
    performance = Column(JSON, nullable=True)
    performance_updated_at = Column(DateTime, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    trades = relationship("JournalTrade", back_populates="strategy")


class JournalTrade(Base):
    """A closed trade recorded in the journal."""
    __tablename__ = "journal_trades"

    __table_args__ = (
        Index("ix_journal_trades_user_entry", "user_id", "entry_date"),
        Index("ix_journal_trades_user_strategy", "user_id", "strategy_id"),
        Index("ix_journal_trades_user_instrument", "user_id", "instrument"),
    )

    id = Column(Integer, primary_key=True)
    user_id = Column(String, nullable=False)
    strategy_id = Column(Integer, ForeignKey("strategies.id"), nullable=True)

    instrument = Column(String, nullable=False)
    side = Column(String, nullable=False)  # long or short

    entry_price = Column(Float, nullable=False)
    exit_price = Column(Float, nullable=False)
    quantity = Column(Float, nullable=False)
    fees = Column(Float, nullable=False, default=0.0)

    # Derived from prices, quantity and fees
    pnl = Column(Float, nullable=False, default=0.0)
    pnl_percentage = Column(Float, nullable=False, default=0.0)

    entry_date = Column(DateTime, nullable=False)
    exit_date = Column(DateTime, nullable=False)

    notes = Column(Text, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    strategy = relationship("Strategy", back_populates="trades")
