# core/order_engine/__init__.py
"""
Order Engine - limit and stop-loss order matching for liquidity bins
"""
from .engine import OrderMatchingEngine
from .orders import (
    LimitOrder,
    LimitOrderStatus,
    OrderBookEntry,
    OrderSide,
    StopLossOrder,
    StopLossStatus,
)
from .store import OrderStore, PairOrderBook
from .bins import find_bin_for_price, get_bin_price

__all__ = [
    "OrderMatchingEngine",
    "LimitOrder",
    "LimitOrderStatus",
    "OrderBookEntry",
    "OrderSide",
    "StopLossOrder",
    "StopLossStatus",
    "OrderStore",
    "PairOrderBook",
    "find_bin_for_price",
    "get_bin_price",
]
