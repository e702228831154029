# core/order_engine/store.py
"""
Caller-owned storage for orders and per-pair order books
"""
import threading
from bisect import insort
from contextlib import contextmanager
from typing import Dict, Iterator, List, Optional

from .orders import LimitOrder, OrderBookEntry, OrderSide, StopLossOrder


class PairOrderBook:
    """Resting orders of one pair; bids descending, asks ascending by price"""

    def __init__(self, pair: str):
        self.pair = pair
        self.bids: List[OrderBookEntry] = []
        self.asks: List[OrderBookEntry] = []

    def add(self, order: LimitOrder):
        entry = OrderBookEntry(
            price=order.price,
            amount=order.amount,
            bin_id=order.bin_id,
            side=order.side
        )
        # Equal prices keep arrival order
        if order.side == OrderSide.BUY:
            insort(self.bids, entry, key=lambda e: -e.price)
        else:
            insort(self.asks, entry, key=lambda e: e.price)

    def remove(self, order: LimitOrder) -> bool:
        """Remove the first entry matching (price, amount, side).

        Orders sharing all three values cannot be told apart; whichever entry
        comes first is removed.
        """
        entries = self.bids if order.side == OrderSide.BUY else self.asks
        for index, entry in enumerate(entries):
            if entry.matches(order):
                del entries[index]
                return True
        return False

    @property
    def best_bid(self) -> Optional[OrderBookEntry]:
        return self.bids[0] if self.bids else None

    @property
    def best_ask(self) -> Optional[OrderBookEntry]:
        return self.asks[0] if self.asks else None


class OrderStore:
    """
    In-memory order storage injected into the matching engine.

    Writers on the same pair are serialized through that pair's lock; different
    pairs never contend. Stop-loss orders share one lock.
    """

    def __init__(self):
        self.limit_orders: Dict[str, LimitOrder] = {}
        self.stop_loss_orders: Dict[str, StopLossOrder] = {}
        self.order_books: Dict[str, PairOrderBook] = {}
        self._pair_locks: Dict[str, threading.RLock] = {}
        self._registry_lock = threading.Lock()
        self.stop_loss_lock = threading.RLock()

    @contextmanager
    def pair_lock(self, pair: str) -> Iterator[None]:
        with self._registry_lock:
            lock = self._pair_locks.setdefault(pair, threading.RLock())
        with lock:
            yield

    def get_book(self, pair: str) -> PairOrderBook:
        with self._registry_lock:
            if pair not in self.order_books:
                self.order_books[pair] = PairOrderBook(pair)
            return self.order_books[pair]

    def add_limit_order(self, order: LimitOrder):
        self.limit_orders[order.order_id] = order
        self.get_book(order.pair).add(order)

    def remove_from_book(self, order: LimitOrder) -> bool:
        return self.get_book(order.pair).remove(order)

    def get_limit_order(self, order_id: str) -> Optional[LimitOrder]:
        return self.limit_orders.get(order_id)

    def get_stop_loss_order(self, order_id: str) -> Optional[StopLossOrder]:
        return self.stop_loss_orders.get(order_id)

    def add_stop_loss_order(self, order: StopLossOrder):
        self.stop_loss_orders[order.order_id] = order

    def pending_pairs(self) -> List[str]:
        """Pairs with at least one pending limit order, in first-seen order"""
        pairs = []
        for order in list(self.limit_orders.values()):
            if order.is_pending and order.pair not in pairs:
                pairs.append(order.pair)
        return pairs
