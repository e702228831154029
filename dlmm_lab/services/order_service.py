# services/order_service.py
"""
Order service layer - validates order requests and drives the periodic
evaluation pass of the order matching engine
"""
from typing import Any, Dict, List, Optional, Union

from dlmm_lab.core.exceptions import DLMMError, handle_dlmm_error
from dlmm_lab.core.logger import get_logger
from dlmm_lab.core.order_engine import (
    LimitOrder,
    LimitOrderStatus,
    OrderMatchingEngine,
    OrderStore,
    StopLossOrder,
    StopLossStatus,
)
from dlmm_lab.core.providers import MarketDataProvider
from dlmm_lab.models.order_models import LimitOrderRequest, StopLossOrderRequest

logger = get_logger(__name__)


class OrderService:
    """
    Entry point for order operations.

    The service owns nothing but the engine; the order store is created here
    unless the caller injects one.
    """

    def __init__(
        self,
        market_data: MarketDataProvider,
        engine: Optional[OrderMatchingEngine] = None,
        store: Optional[OrderStore] = None
    ):
        self.market_data = market_data
        self.engine = engine or OrderMatchingEngine(market_data, store=store)

    def create_limit_order(self, request: Union[LimitOrderRequest, Dict[str, Any]]) -> LimitOrder:
        if not isinstance(request, LimitOrderRequest):
            request = LimitOrderRequest.model_validate(request)

        return self._call(
            self.engine.create_limit_order,
            request.pair,
            request.side,
            request.amount,
            request.price,
            owner=request.owner,
            expires_at=request.expires_at
        )

    def create_stop_loss_order(self, request: Union[StopLossOrderRequest, Dict[str, Any]]) -> StopLossOrder:
        if not isinstance(request, StopLossOrderRequest):
            request = StopLossOrderRequest.model_validate(request)

        return self._call(
            self.engine.create_stop_loss_order,
            request.position,
            request.trigger_price,
            request.amount,
            owner=request.owner
        )

    def cancel_limit_order(self, order_id: str) -> LimitOrder:
        return self._call(self.engine.cancel_limit_order, order_id)

    def cancel_stop_loss_order(self, order_id: str) -> StopLossOrder:
        return self._call(self.engine.cancel_stop_loss_order, order_id)

    def get_order_book(self, pair: str) -> Dict[str, List]:
        return self._call(self.engine.get_order_book, pair)

    def get_user_orders(self, owner: Optional[str] = None) -> Dict[str, List]:
        return self.engine.get_user_orders(owner)

    def get_order_statistics(self, owner: Optional[str] = None) -> Dict[str, Any]:
        return self.engine.get_order_statistics(owner)

    def run_evaluation_pass(self, owner: Optional[str] = None) -> Dict[str, List]:
        """
        One evaluation pass: limit fills and expiries against current market
        prices, then stop-loss triggers against position prices.

        Stop-losses are resolved through `owner`'s positions, or through the
        positions of every owner with an active stop-loss when no owner is given.
        """
        changed = self._call(self.engine.check_order_fills)

        if owner is not None:
            owners = [owner]
        else:
            owners = []
            for order in list(self.engine.store.stop_loss_orders.values()):
                if order.status == StopLossStatus.ACTIVE and order.owner is not None and order.owner not in owners:
                    owners.append(order.owner)

        triggered: List[StopLossOrder] = []
        if owners:
            lookups = [self.engine.position_price_lookup(o) for o in owners]

            def lookup(position: str) -> Optional[float]:
                for candidate in lookups:
                    price = candidate(position)
                    if price is not None:
                        return price
                return None

            triggered = self._call(self.engine.evaluate_stop_loss_triggers, lookup)

        result = {
            "filled": [o for o in changed if o.status == LimitOrderStatus.FILLED],
            "expired": [o for o in changed if o.status == LimitOrderStatus.EXPIRED],
            "triggered": triggered,
        }
        logger.info(
            f"Evaluation pass: {len(result['filled'])} filled, {len(result['expired'])} expired, "
            f"{len(triggered)} stop-losses triggered"
        )
        return result

    @staticmethod
    def _call(func, *args, **kwargs):
        try:
            return func(*args, **kwargs)
        except DLMMError:
            raise
        except Exception as e:
            logger.error(f"Order operation {func.__name__} failed: {e}")
            raise handle_dlmm_error(e) from e
