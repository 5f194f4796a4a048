"""
Per-trade P&L derivation.

A journal entry records prices, quantity and fees; the stored net P&L and
return percentage are derived from them:

    price_diff = exit - entry      (long)
    price_diff = entry - exit      (short)
    pnl        = price_diff * quantity - fees
    pnl_pct    = pnl / (entry_price * quantity) * 100
"""

from enum import Enum
from typing import NamedTuple, Union


class TradeSide(str, Enum):
    LONG = "long"
    SHORT = "short"


class TradePnL(NamedTuple):
    pnl: float
    pnl_percentage: float


def calculate_trade_pnl(
    side: Union[str, TradeSide],
    entry_price: float,
    exit_price: float,
    quantity: float,
    fees: float = 0.0,
) -> TradePnL:
    """
    Calculate net P&L and return percentage for a closed trade.

    Args:
        side: "long" or "short"
        entry_price: Entry price per unit (>= 0)
        exit_price: Exit price per unit (>= 0)
        quantity: Quantity traded (>= 0)
        fees: Total fees for the round trip (>= 0)

    Returns:
        TradePnL(pnl, pnl_percentage); pnl_percentage is 0 when cost basis is 0

    Raises:
        ValueError: unknown side or negative price / quantity / fees
    """
    side = TradeSide(side)
    for name, value in (
        ("entry_price", entry_price),
        ("exit_price", exit_price),
        ("quantity", quantity),
        ("fees", fees),
    ):
        if value < 0:
            raise ValueError(f"{name} must be non-negative, got {value}")

    if side is TradeSide.LONG:
        price_diff = exit_price - entry_price
    else:
        price_diff = entry_price - exit_price

    pnl = price_diff * quantity - fees
    cost_basis = entry_price * quantity
    pnl_percentage = (pnl / cost_basis * 100) if cost_basis != 0 else 0.0

    return TradePnL(pnl=pnl, pnl_percentage=pnl_percentage)
