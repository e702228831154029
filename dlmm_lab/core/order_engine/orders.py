# core/order_engine/orders.py
"""
Limit and stop-loss order records
"""
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional


class OrderSide(Enum):
    BUY = "buy"
    SELL = "sell"


class LimitOrderStatus(Enum):
    PENDING = "pending"
    FILLED = "filled"
    CANCELLED = "cancelled"
    EXPIRED = "expired"


class StopLossStatus(Enum):
    ACTIVE = "active"
    TRIGGERED = "triggered"
    CANCELLED = "cancelled"


@dataclass
class LimitOrder:
    """A resting limit order placed into a single bin"""
    order_id: str
    pair: str
    side: OrderSide
    amount: float
    price: float
    bin_id: int
    created_at: datetime
    owner: Optional[str] = None
    status: LimitOrderStatus = LimitOrderStatus.PENDING
    expires_at: Optional[datetime] = None
    filled_at: Optional[datetime] = None
    filled_amount: Optional[float] = None
    filled_price: Optional[float] = None

    @property
    def is_pending(self) -> bool:
        return self.status == LimitOrderStatus.PENDING

    def is_expired(self, now: datetime) -> bool:
        return self.expires_at is not None and now > self.expires_at


@dataclass
class StopLossOrder:
    """Closes a position once its price falls to the trigger"""
    order_id: str
    position: str
    trigger_price: float
    amount: float
    created_at: datetime
    owner: Optional[str] = None
    status: StopLossStatus = StopLossStatus.ACTIVE
    triggered_at: Optional[datetime] = None
    triggered_price: Optional[float] = None

    @property
    def is_active(self) -> bool:
        return self.status == StopLossStatus.ACTIVE


@dataclass
class OrderBookEntry:
    price: float
    amount: float
    bin_id: int
    side: OrderSide

    def matches(self, order: LimitOrder) -> bool:
        return self.price == order.price and self.amount == order.amount and self.side == order.side
