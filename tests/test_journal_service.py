"""
Journal Service Tests

Recording trades and strategies, recompute-and-store of strategy
performance, and dashboard views built from the aggregation engine.
"""

import pytest
from datetime import datetime

from tradejournal.analytics import engine
from tradejournal.analytics.records import DateField, NO_STRATEGY, StrategyCategory
from tradejournal.config import settings
from tradejournal.journal.models import JournalTrade, Strategy
from tradejournal.journal.repository import JournalRepository
from tradejournal.journal.service import JournalService, trade_to_record


USER = "user-1"
OTHER_USER = "user-2"


# ==================
# Fixtures
# ==================

@pytest.fixture
def service(test_db):
    """Create journal service instance."""
    return JournalService(test_db)


@pytest.fixture
def breakout_id(service):
    return service.create_strategy(user_id=USER, name="Breakout", category="day-trading")


def record(service, *, pnl_target, entry, exit=None, strategy_id=None, user_id=USER, entry_price=100.0):
    """Record a long trade of quantity 1 whose net P&L equals pnl_target."""
    return service.record_trade(
        user_id=user_id,
        instrument="AAPL",
        side="long",
        entry_price=entry_price,
        exit_price=entry_price + pnl_target,
        quantity=1,
        entry_date=entry,
        exit_date=exit or entry,
        strategy_id=strategy_id,
    )


@pytest.fixture
def journal(service, breakout_id):
    """Three trades: two under Breakout, one without strategy."""
    record(service, pnl_target=100, entry=datetime(2024, 1, 5), strategy_id=breakout_id)
    record(service, pnl_target=-40, entry=datetime(2024, 1, 10))
    record(service, pnl_target=60, entry=datetime(2024, 2, 1), strategy_id=breakout_id)
    return service


# ==================
# Writes
# ==================

class TestRecording:
    """Test strategy creation and trade recording."""

    def test_create_strategy(self, service, test_db, breakout_id):
        strategy = JournalRepository.get_strategy(test_db, breakout_id)

        assert strategy.name == "Breakout"
        assert strategy.category == "day-trading"
        assert strategy.is_active is True
        assert strategy.performance["totalTrades"] == 0

    def test_create_strategy_rejects_unknown_category(self, service):
        with pytest.raises(ValueError):
            service.create_strategy(user_id=USER, name="X", category="arbitrage")

    def test_record_trade_derives_pnl(self, service, test_db):
        trade_id = service.record_trade(
            user_id=USER,
            instrument=" TSLA ",
            side="short",
            entry_price=200.0,
            exit_price=190.0,
            quantity=3,
            fees=6.0,
            entry_date=datetime(2024, 4, 1, 10),
            exit_date=datetime(2024, 4, 1, 15),
            notes="gap fade",
        )

        trade = JournalRepository.get_trade(test_db, trade_id)
        assert trade.instrument == "TSLA"
        assert trade.side == "short"
        assert trade.pnl == 24.0  # (200 - 190) * 3 - 6
        assert trade.pnl_percentage == pytest.approx(4.0)
        assert trade.notes == "gap fade"

    def test_record_trade_unknown_strategy(self, service):
        with pytest.raises(ValueError, match="Strategy 999 not found"):
            record(service, pnl_target=1, entry=datetime(2024, 1, 1), strategy_id=999)

    def test_record_trade_other_users_strategy(self, service, breakout_id):
        with pytest.raises(ValueError):
            record(service, pnl_target=1, entry=datetime(2024, 1, 1), strategy_id=breakout_id, user_id=OTHER_USER)

    def test_record_trade_negative_quantity(self, service):
        with pytest.raises(ValueError):
            service.record_trade(
                user_id=USER,
                instrument="AAPL",
                side="long",
                entry_price=10,
                exit_price=11,
                quantity=-1,
                entry_date=datetime(2024, 1, 1),
                exit_date=datetime(2024, 1, 1),
            )


def trade_id(db, pnl):
    return db.query(JournalTrade).filter(JournalTrade.pnl == pnl).one().id


# ==================
# Edits and Deletes
# ==================

class TestEditing:
    """Test editing and deleting trades and strategies."""

    def test_update_trade_derives_pnl_again(self, journal, test_db):
        tid = trade_id(test_db, 60)

        journal.update_trade(tid, user_id=USER, exit_price=50.0, notes="stopped out")

        trade = JournalRepository.get_trade(test_db, tid)
        assert trade.exit_price == 50.0
        assert trade.pnl == -50.0
        assert trade.pnl_percentage == pytest.approx(-50.0)
        assert trade.notes == "stopped out"

    def test_update_trade_side_and_instrument(self, journal, test_db):
        tid = trade_id(test_db, 60)

        journal.update_trade(tid, user_id=USER, side="short", instrument=" MSFT ")

        trade = JournalRepository.get_trade(test_db, tid)
        assert trade.side == "short"
        assert trade.instrument == "MSFT"
        assert trade.pnl == -60.0

    def test_edit_then_recalculate(self, journal, test_db, breakout_id):
        journal.recalculate_strategy_performance(breakout_id)
        journal.update_trade(trade_id(test_db, 60), user_id=USER, exit_price=50.0)

        # snapshots are only refreshed on request
        assert journal.get_strategy(breakout_id).performance.total_pnl == 160

        performance = journal.recalculate_strategy_performance(breakout_id)

        assert performance.total_pnl == 50
        assert performance.losing_trades == 1
        assert performance.profit_factor == 2
        assert performance.max_drawdown == 50

    def test_update_trade_unassigns_strategy(self, journal, test_db, breakout_id):
        journal.update_trade(trade_id(test_db, 60), user_id=USER, strategy_id=None)

        assert [r.net_pnl for r in journal.load_trade_records(USER, strategy_id=breakout_id)] == [100]

    def test_update_trade_assigns_strategy(self, journal, test_db, breakout_id):
        journal.update_trade(trade_id(test_db, -40), user_id=USER, strategy_id=breakout_id)

        assert len(journal.load_trade_records(USER, strategy_id=breakout_id)) == 3

    def test_update_trade_other_users_strategy(self, journal, test_db):
        foreign = journal.create_strategy(user_id=OTHER_USER, name="Theirs")

        with pytest.raises(ValueError, match=f"Strategy {foreign} not found"):
            journal.update_trade(trade_id(test_db, -40), user_id=USER, strategy_id=foreign)

    def test_update_trade_not_owned(self, journal, test_db):
        tid = trade_id(test_db, 100)

        with pytest.raises(ValueError, match=f"Trade {tid} not found"):
            journal.update_trade(tid, user_id=OTHER_USER, notes="x")

    def test_update_trade_unknown_id(self, service):
        with pytest.raises(ValueError, match="Trade 999 not found"):
            service.update_trade(999, user_id=USER, notes="x")

    def test_update_trade_rejects_derived_fields(self, journal, test_db):
        with pytest.raises(ValueError, match="pnl"):
            journal.update_trade(trade_id(test_db, 100), user_id=USER, pnl=5)

    def test_update_trade_invalid_price_leaves_trade(self, journal, test_db):
        tid = trade_id(test_db, 100)

        with pytest.raises(ValueError):
            journal.update_trade(tid, user_id=USER, exit_price=-1)

        assert JournalRepository.get_trade(test_db, tid).pnl == 100

    def test_delete_trade(self, journal, test_db):
        tid = trade_id(test_db, -40)

        journal.delete_trade(tid, user_id=USER)

        assert JournalRepository.get_trade(test_db, tid) is None
        assert [r.net_pnl for r in journal.load_trade_records(USER)] == [100, 60]

    def test_delete_trade_not_owned(self, journal, test_db):
        tid = trade_id(test_db, -40)

        with pytest.raises(ValueError, match=f"Trade {tid} not found"):
            journal.delete_trade(tid, user_id=OTHER_USER)
        assert JournalRepository.get_trade(test_db, tid) is not None

    def test_update_strategy(self, journal, breakout_id):
        record = journal.update_strategy(
            breakout_id, user_id=USER, name=" Momentum ", category="swing-trading", is_active=False
        )

        assert record.name == "Momentum"
        assert record.category is StrategyCategory.SWING_TRADING
        assert journal.get_strategy(breakout_id).is_active is False
        assert journal.load_trade_records(USER)[0].strategy_label == "Momentum"

    def test_update_strategy_clears_description(self, service):
        sid = service.create_strategy(user_id=USER, name="Gap", description="gap and go")

        service.update_strategy(sid, user_id=USER, description=None)

        assert service.get_strategy(sid).description is None

    def test_update_strategy_keeps_snapshot(self, journal, breakout_id):
        performance = journal.recalculate_strategy_performance(breakout_id)

        journal.update_strategy(breakout_id, user_id=USER, name="Momentum")

        assert journal.get_strategy(breakout_id).performance == performance

    @pytest.mark.parametrize("changes", [
        {"name": "   "},
        {"category": "arbitrage"},
        {"performance": {}},
    ])
    def test_update_strategy_invalid(self, service, breakout_id, changes):
        with pytest.raises(ValueError):
            service.update_strategy(breakout_id, user_id=USER, **changes)

        assert service.get_strategy(breakout_id).name == "Breakout"

    def test_update_strategy_not_owned(self, service, breakout_id):
        with pytest.raises(ValueError, match=f"Strategy {breakout_id} not found"):
            service.update_strategy(breakout_id, user_id=OTHER_USER, name="Mine")

    def test_delete_strategy_keeps_trades(self, journal, test_db, breakout_id):
        journal.delete_strategy(breakout_id, user_id=USER)

        assert JournalRepository.get_strategy(test_db, breakout_id) is None
        records = journal.load_trade_records(USER)
        assert [r.net_pnl for r in records] == [100, -40, 60]
        assert all(r.strategy_label is None for r in records)

    def test_delete_strategy_not_owned(self, service, breakout_id):
        with pytest.raises(ValueError, match=f"Strategy {breakout_id} not found"):
            service.delete_strategy(breakout_id, user_id=OTHER_USER)

    def test_list_strategy_trades(self, journal, breakout_id):
        trades = journal.list_strategy_trades(breakout_id, user_id=USER)

        assert [t["pnl"] for t in trades] == [60, 100]
        assert trades[0]["strategy"]["name"] == "Breakout"
        assert trades[0]["entryDate"] == "2024-02-01T00:00:00"

    def test_list_strategy_trades_pages(self, journal, breakout_id):
        second = journal.list_strategy_trades(breakout_id, user_id=USER, page=2, limit=1)

        assert [t["pnl"] for t in second] == [100]
        assert journal.list_strategy_trades(breakout_id, user_id=USER, page=3, limit=1) == []

    def test_list_strategy_trades_not_owned(self, journal, breakout_id):
        with pytest.raises(ValueError, match=f"Strategy {breakout_id} not found"):
            journal.list_strategy_trades(breakout_id, user_id=OTHER_USER)

    def test_list_strategy_trades_bad_page(self, journal, breakout_id):
        with pytest.raises(ValueError):
            journal.list_strategy_trades(breakout_id, user_id=USER, page=0)


# ==================
# Records
# ==================

class TestTradeRecords:
    """Test mapping stored trades to engine records."""

    def test_load_trade_records_oldest_first(self, journal):
        records = journal.load_trade_records(USER)

        assert [r.net_pnl for r in records] == [100, -40, 60]
        assert [r.strategy_label for r in records] == ["Breakout", None, "Breakout"]

    def test_load_trade_records_by_strategy(self, journal, breakout_id):
        records = journal.load_trade_records(USER, strategy_id=breakout_id)

        assert [r.net_pnl for r in records] == [100, 60]

    def test_records_scoped_to_user(self, journal):
        record(journal, pnl_target=999, entry=datetime(2024, 1, 1), user_id=OTHER_USER)

        assert len(journal.load_trade_records(USER)) == 3
        assert [r.net_pnl for r in journal.load_trade_records(OTHER_USER)] == [999]

    def test_trade_to_record(self, test_db, journal):
        trade = test_db.query(JournalTrade).filter(JournalTrade.pnl == -40).one()
        rec = trade_to_record(trade)

        assert rec.net_pnl == -40
        assert rec.strategy_name == NO_STRATEGY
        assert rec.exit_date == datetime(2024, 1, 10)


# ==================
# Recompute-and-store
# ==================

class TestRecalculateStrategyPerformance:
    """Test explicit recompute-and-store of strategy performance."""

    def test_snapshot_stored(self, journal, test_db, breakout_id):
        performance = journal.recalculate_strategy_performance(breakout_id)

        assert performance.total_trades == 2
        assert performance.winning_trades == 2
        assert performance.total_pnl == 160
        assert performance.win_rate == 100
        assert performance.profit_factor == 0
        assert performance.max_drawdown == 0

        strategy = test_db.get(Strategy, breakout_id)
        assert strategy.performance == performance.to_json_dict()
        assert strategy.performance_updated_at is not None

    def test_snapshot_equals_engine_output(self, journal, breakout_id):
        expected = engine.compute_strategy_performance(
            journal.load_trade_records(USER, strategy_id=breakout_id)
        )

        assert journal.recalculate_strategy_performance(breakout_id) == expected

    def test_recalculate_after_new_trade(self, journal, breakout_id):
        journal.recalculate_strategy_performance(breakout_id)
        record(journal, pnl_target=-200, entry=datetime(2024, 3, 1), strategy_id=breakout_id, entry_price=300.0)

        performance = journal.recalculate_strategy_performance(breakout_id)

        assert performance.total_trades == 3
        assert performance.losing_trades == 1
        assert performance.profit_factor == pytest.approx(160 / 200)
        assert performance.max_drawdown == 200
        assert journal.get_strategy(breakout_id).performance == performance

    def test_strategy_without_trades(self, service, breakout_id):
        performance = service.recalculate_strategy_performance(breakout_id)

        assert performance.total_trades == 0
        assert performance.max_drawdown == 0

    def test_unknown_strategy(self, service):
        with pytest.raises(ValueError, match="Strategy 42 not found"):
            service.recalculate_strategy_performance(42)


# ==================
# Dashboard Views
# ==================

class TestDashboardViews:
    """Test dashboard data assembled from engine outputs."""

    def test_overview(self, journal):
        data = journal.get_overview(USER)

        overview = data["overview"]
        assert overview["totalTrades"] == 3
        assert overview["totalPnl"] == 120
        assert overview["profitFactor"] == 4
        assert overview["winRate"] == pytest.approx(200 / 3)

        recent = data["recentTrades"]
        assert [t["pnl"] for t in recent] == [60, -40, 100]
        assert recent[0]["strategy"]["name"] == "Breakout"
        assert recent[1]["strategy"] is None

        assert data["strategies"][0]["name"] == "Breakout"
        assert data["strategies"][0]["category"] == "day-trading"

    def test_overview_empty_user(self, service):
        data = service.get_overview("nobody")

        assert data["overview"]["totalTrades"] == 0
        assert data["recentTrades"] == []
        assert data["strategies"] == []

    def test_equity_curve(self, journal):
        curve = journal.get_equity_curve(USER)

        assert [p["cumulativePnl"] for p in curve] == [100, 60, 120]
        assert curve[0]["tradePnl"] == 100

    def test_equity_curve_by_entry_date(self, service):
        record(service, pnl_target=10, entry=datetime(2024, 1, 1), exit=datetime(2024, 1, 20))
        record(service, pnl_target=-5, entry=datetime(2024, 1, 5), exit=datetime(2024, 1, 6))

        by_entry = service.get_equity_curve(USER, DateField.ENTRY)
        by_exit = service.get_equity_curve(USER, "exit")

        assert [p["tradePnl"] for p in by_entry] == [10, -5]
        assert [p["tradePnl"] for p in by_exit] == [-5, 10]

    def test_performance_window(self, journal):
        data = journal.get_performance(USER, period="30d", now=datetime(2024, 2, 5))

        assert data["period"] == "30d"
        assert data["dailyPnl"] == {"2024-01-10": -40, "2024-02-01": 60}
        assert [p["cumulativePnl"] for p in data["cumulativeData"]] == [-40, 20]
        assert data["totalPnl"] == 20

    def test_performance_unknown_period_falls_back(self, journal):
        data = journal.get_performance(USER, period="5y", now=datetime(2024, 2, 5))

        assert data["period"] == "30d"

    def test_performance_empty_window(self, journal):
        data = journal.get_performance(USER, period="7d", now=datetime(2030, 1, 1))

        assert data["dailyPnl"] == {}
        assert data["cumulativeData"] == []
        assert data["totalPnl"] == 0

    def test_monthly_performance(self, journal):
        months = journal.get_monthly_performance(USER, 2024)

        assert len(months) == 12
        assert months[0] == {"month": 1, "pnl": 60, "tradesCount": 2, "winRate": 50}
        assert months[1]["pnl"] == 60
        assert months[5]["tradesCount"] == 0

    def test_strategy_breakdown(self, journal):
        buckets = journal.get_strategy_breakdown(USER)

        assert [b["name"] for b in buckets] == ["Breakout", NO_STRATEGY]
        assert buckets[0]["tradeCount"] == 2
        assert buckets[0]["totalPnl"] == 160
        assert buckets[1]["losses"] == 1

    def test_max_drawdown(self, journal):
        assert journal.get_max_drawdown(USER) == 40

    def test_overview_limits(self, journal, monkeypatch):
        journal.create_strategy(user_id=USER, name="Scalp")
        journal.create_strategy(user_id=USER, name="Swing")
        monkeypatch.setattr(settings, "recent_trades_limit", 1)
        monkeypatch.setattr(settings, "recent_strategies_limit", 2)

        data = journal.get_overview(USER)

        assert [t["pnl"] for t in data["recentTrades"]] == [60]
        assert [s["name"] for s in data["strategies"]] == ["Swing", "Scalp"]
        assert data["overview"]["totalTrades"] == 3
