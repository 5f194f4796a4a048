"""Pytest configuration and fixtures."""

import pytest
import sys
from datetime import datetime
from pathlib import Path

# Add src/ to path
project_root = Path(__file__).parent
sys.path.insert(0, str(project_root / "src"))

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from tradejournal.analytics.records import TradeRecord
# Import models to ensure they are registered with SQLAlchemy
from tradejournal.journal.models import JournalTrade, Strategy
from tradejournal.journal.db import Base


def make_trade(net_pnl, date, exit_date=None, strategy=None):
    """Build a TradeRecord; exit_date defaults to the entry date."""
    return TradeRecord(
        net_pnl=net_pnl,
        entry_date=date,
        exit_date=exit_date or date,
        strategy_label=strategy,
    )


@pytest.fixture
def trade_factory():
    """Factory for TradeRecords used across analytics tests."""
    return make_trade


@pytest.fixture
def sample_trades():
    """Two wins and one loss across January and February 2024."""
    return [
        make_trade(100, datetime(2024, 1, 5)),
        make_trade(-40, datetime(2024, 1, 10)),
        make_trade(60, datetime(2024, 2, 1)),
    ]


@pytest.fixture
def test_db():
    """Create in-memory SQLite database for testing."""
    engine = create_engine("sqlite:///:memory:")
    Base.metadata.create_all(engine)

    SessionLocal = sessionmaker(bind=engine)
    db = SessionLocal()

    yield db

    db.close()
    engine.dispose()
