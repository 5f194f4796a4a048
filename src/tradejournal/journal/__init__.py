"""
Journal Store Package

Persistence collaborator of the aggregation engine:
- Strategy and trade storage (SQLAlchemy)
- Explicit recompute-and-store of strategy performance snapshots
- Dashboard views assembled from engine outputs
"""

from tradejournal.journal.service import JournalService
from tradejournal.journal.repository import JournalRepository
from tradejournal.journal.models import JournalTrade, Strategy

__all__ = [
    "JournalService",
    "JournalRepository",
    "JournalTrade",
    "Strategy",
]
