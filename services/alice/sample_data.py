# Seeded trades served when live integration is not configured
from typing import List

from .models import CanonicalTrade, TradeSide

MASTER_ACCOUNT = "Master"

SAMPLE_TRADES: List[CanonicalTrade] = [
    CanonicalTrade(
        id="T-1001", timestamp="2024-07-22T09:15:12.000Z", account="Master",
        symbol="RELIANCE", type="Market", side=TradeSide.BUY,
        quantity=10, price=2950.50, status="Filled",
    ),
    CanonicalTrade(
        id="T-1002", timestamp="2024-07-22T09:15:14.000Z", account="Follower 1",
        symbol="RELIANCE", type="Market", side=TradeSide.BUY,
        quantity=5, price=2951.10, status="Filled",
    ),
    CanonicalTrade(
        id="T-1003", timestamp="2024-07-22T09:32:40.000Z", account="Master",
        symbol="TCS", type="Limit", side=TradeSide.SELL,
        quantity=5, price=3890.00, status="Filled",
    ),
    CanonicalTrade(
        id="T-1004", timestamp="2024-07-22T10:05:03.000Z", account="Master",
        symbol="INFY", type="Market", side=TradeSide.BUY,
        quantity=20, price=1612.25, status="Partial Fill",
    ),
    CanonicalTrade(
        id="T-1005", timestamp="2024-07-22T10:05:09.000Z", account="Follower 2",
        symbol="INFY", type="Market", side=TradeSide.BUY,
        quantity=10, price=1612.80, status="Filled",
    ),
    CanonicalTrade(
        id="T-1006", timestamp="2024-07-22T11:47:55.000Z", account="Master",
        symbol="HDFCBANK", type="Limit", side=TradeSide.BUY,
        quantity=15, price=1605.80, status="Pending",
    ),
    CanonicalTrade(
        id="T-1007", timestamp="2024-07-22T13:20:31.000Z", account="Master",
        symbol="NIFTY24JULFUT", type="Market", side=TradeSide.SELL,
        quantity=50, price=24510.00, status="Cancelled",
    ),
    CanonicalTrade(
        id="T-1008", timestamp="2024-07-22T13:20:36.000Z", account="Follower 1",
        symbol="NIFTY24JULFUT", type="Market", side=TradeSide.SELL,
        quantity=25, price=24508.50, status="Filled",
    ),
]


def master_sample_trades() -> List[CanonicalTrade]:
    """Sample trades for the master account, in seeded order."""
    return [trade for trade in SAMPLE_TRADES if trade.account == MASTER_ACCOUNT]
