# core/order_engine/engine.py
"""
Order matching engine - limit and stop-loss lifecycle against a price feed

The engine has no clock loop of its own: callers invoke evaluate_fills /
evaluate_stop_loss_triggers (or the check_* helpers that pull prices from the
market data provider) periodically.
"""
import uuid
from dataclasses import replace
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional, Any

from dlmm_lab.core.exceptions import (
    InvalidStateError,
    OrderNotFoundError,
    PairNotFoundError,
    PriceOutOfRangeError,
)
from dlmm_lab.core.logger import get_logger
from dlmm_lab.core.providers import MarketDataProvider
from .bins import find_bin_for_price
from .orders import (
    LimitOrder,
    LimitOrderStatus,
    OrderSide,
    StopLossOrder,
    StopLossStatus,
)
from .store import OrderStore

logger = get_logger(__name__)

PriceLookup = Callable[[str], Optional[float]]


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class OrderMatchingEngine:
    """
    Owns the lifecycle of limit and stop-loss orders.

    Limit:     pending -> filled | cancelled | expired
    Stop-loss: active  -> triggered | cancelled
    """

    def __init__(
        self,
        market_data: MarketDataProvider,
        store: Optional[OrderStore] = None,
        clock: Optional[Callable[[], datetime]] = None
    ):
        self.market_data = market_data
        self.store = store if store is not None else OrderStore()
        self.clock = clock or _utc_now

    # ------------------------------------------------------------------
    # Creation
    # ------------------------------------------------------------------

    def create_limit_order(
        self,
        pair: str,
        side: OrderSide,
        amount: float,
        price: float,
        owner: Optional[str] = None,
        expires_at: Optional[datetime] = None
    ) -> LimitOrder:
        """Place a pending limit order in the bin that holds `price`"""
        side = OrderSide(side)

        pair_info = self.market_data.get_pair_info(pair)
        if pair_info is None:
            raise PairNotFoundError(f"Pair not found: {pair}")

        bin_id = find_bin_for_price(pair_info, price)
        if bin_id is None:
            raise PriceOutOfRangeError(f"Price {price} out of range for current bins of {pair}")

        order = LimitOrder(
            order_id=self._generate_order_id(),
            pair=pair,
            side=side,
            amount=amount,
            price=price,
            bin_id=bin_id,
            created_at=self.clock(),
            owner=owner,
            expires_at=expires_at
        )

        with self.store.pair_lock(pair):
            self.store.add_limit_order(order)

        logger.info(f"Created {side.value} limit order {order.order_id} on {pair}: {amount} @ {price} (bin {bin_id})")
        return order

    def create_stop_loss_order(
        self,
        position: str,
        trigger_price: float,
        amount: float,
        owner: Optional[str] = None
    ) -> StopLossOrder:
        order = StopLossOrder(
            order_id=self._generate_order_id(),
            position=position,
            trigger_price=trigger_price,
            amount=amount,
            created_at=self.clock(),
            owner=owner
        )

        with self.store.stop_loss_lock:
            self.store.add_stop_loss_order(order)

        logger.info(f"Created stop-loss {order.order_id} for position {position} at {trigger_price}")
        return order

    # ------------------------------------------------------------------
    # Cancellation
    # ------------------------------------------------------------------

    def cancel_limit_order(self, order_id: str) -> LimitOrder:
        order = self.store.get_limit_order(order_id)
        if order is None:
            raise OrderNotFoundError(f"Order not found: {order_id}")

        with self.store.pair_lock(order.pair):
            if order.status != LimitOrderStatus.PENDING:
                raise InvalidStateError(
                    f"Order {order_id} cannot be cancelled (status: {order.status.value})"
                )
            order.status = LimitOrderStatus.CANCELLED
            self.store.remove_from_book(order)

        logger.info(f"Cancelled limit order {order_id}")
        return order

    def cancel_stop_loss_order(self, order_id: str) -> StopLossOrder:
        order = self.store.get_stop_loss_order(order_id)
        if order is None:
            raise OrderNotFoundError(f"Stop loss order not found: {order_id}")

        with self.store.stop_loss_lock:
            if order.status != StopLossStatus.ACTIVE:
                raise InvalidStateError(
                    f"Stop loss order {order_id} cannot be cancelled (status: {order.status.value})"
                )
            order.status = StopLossStatus.CANCELLED

        logger.info(f"Cancelled stop-loss {order_id}")
        return order

    # ------------------------------------------------------------------
    # Evaluation
    # ------------------------------------------------------------------

    def evaluate_fills(self, current_price: float, pair: Optional[str] = None) -> List[LimitOrder]:
        """
        Match pending limit orders against `current_price`.

        Expiry is checked first. A buy fills when the price is at or below its
        limit, a sell when at or above; fills happen at the observed price.
        When `pair` is given only that pair's orders are evaluated.
        Returns the orders whose state changed during this pass.
        """
        changed = []
        now = self.clock()

        for order in list(self.store.limit_orders.values()):
            if pair is not None and order.pair != pair:
                continue

            with self.store.pair_lock(order.pair):
                if order.status != LimitOrderStatus.PENDING:
                    continue

                if order.is_expired(now):
                    order.status = LimitOrderStatus.EXPIRED
                    self.store.remove_from_book(order)
                    changed.append(order)
                    logger.info(f"Limit order {order.order_id} expired")
                    continue

                if self._should_fill(order, current_price):
                    order.status = LimitOrderStatus.FILLED
                    order.filled_at = now
                    order.filled_amount = order.amount
                    order.filled_price = current_price
                    self.store.remove_from_book(order)
                    changed.append(order)
                    logger.info(
                        f"Filled {order.side.value} limit order {order.order_id} on {order.pair}: "
                        f"{order.amount} @ {current_price} (limit {order.price})"
                    )

        return changed

    def check_order_fills(self) -> List[LimitOrder]:
        """Evaluate every pair with pending orders against its current market price"""
        changed = []
        for pair in self.store.pending_pairs():
            market = self.market_data.get_market_data(pair)
            changed.extend(self.evaluate_fills(market.price, pair))
        return changed

    def evaluate_stop_loss_triggers(self, price_lookup: PriceLookup) -> List[StopLossOrder]:
        """
        Trigger active stop-losses whose position price is at or below the trigger.

        `price_lookup(position)` returns None for positions it cannot resolve;
        those orders stay active.
        """
        triggered = []
        now = self.clock()

        with self.store.stop_loss_lock:
            for order in list(self.store.stop_loss_orders.values()):
                if order.status != StopLossStatus.ACTIVE:
                    continue

                current_price = price_lookup(order.position)
                if current_price is None:
                    logger.warning(f"Position {order.position} not resolved for stop-loss {order.order_id}, skipping")
                    continue

                if current_price <= order.trigger_price:
                    order.status = StopLossStatus.TRIGGERED
                    order.triggered_at = now
                    order.triggered_price = current_price
                    triggered.append(order)
                    logger.info(
                        f"Stop-loss {order.order_id} triggered at {current_price} (trigger {order.trigger_price})"
                    )

        return triggered

    def position_price_lookup(self, owner: str) -> PriceLookup:
        """Price lookup resolving `owner`'s positions to their pair's market price"""
        positions = {p.position: p.pair for p in self.market_data.get_user_positions(owner)}

        def lookup(position: str) -> Optional[float]:
            pair = positions.get(position)
            if pair is None:
                return None
            return self.market_data.get_market_data(pair).price

        return lookup

    def check_stop_loss_triggers(self, owner: str) -> List[StopLossOrder]:
        """Evaluate stop-losses against `owner`'s current positions"""
        return self.evaluate_stop_loss_triggers(self.position_price_lookup(owner))

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_order_book(self, pair: str) -> Dict[str, List]:
        """Snapshot of resting orders; the first bid/ask is the best one"""
        if self.market_data.get_pair_info(pair) is None:
            raise PairNotFoundError(f"Pair not found: {pair}")

        with self.store.pair_lock(pair):
            book = self.store.get_book(pair)
            return {
                "bids": [replace(entry) for entry in book.bids],
                "asks": [replace(entry) for entry in book.asks],
            }

    def get_user_orders(self, owner: Optional[str] = None) -> Dict[str, List]:
        """Limit and stop-loss orders, filtered by owner when given"""
        limit_orders = [
            o for o in self.store.limit_orders.values()
            if owner is None or o.owner == owner
        ]
        stop_loss_orders = [
            o for o in self.store.stop_loss_orders.values()
            if owner is None or o.owner == owner
        ]
        return {"limit_orders": limit_orders, "stop_loss_orders": stop_loss_orders}

    def get_order_statistics(self, owner: Optional[str] = None) -> Dict[str, Any]:
        limit_orders = self.get_user_orders(owner)["limit_orders"]

        def count(status: LimitOrderStatus) -> int:
            return sum(1 for o in limit_orders if o.status == status)

        total_orders = len(limit_orders)
        filled_orders = count(LimitOrderStatus.FILLED)
        total_volume = sum(o.filled_amount or 0 for o in limit_orders if o.status == LimitOrderStatus.FILLED)

        return {
            "total_orders": total_orders,
            "pending_orders": count(LimitOrderStatus.PENDING),
            "filled_orders": filled_orders,
            "cancelled_orders": count(LimitOrderStatus.CANCELLED),
            "expired_orders": count(LimitOrderStatus.EXPIRED),
            "total_volume": total_volume,
            "success_rate": filled_orders / total_orders if total_orders > 0 else 0.0
        }

    # ------------------------------------------------------------------

    @staticmethod
    def _should_fill(order: LimitOrder, current_price: float) -> bool:
        if order.side == OrderSide.BUY:
            return current_price <= order.price
        return current_price >= order.price

    @staticmethod
    def _generate_order_id() -> str:
        return f"order_{uuid.uuid4().hex[:16]}"
