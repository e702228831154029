# core/simulation_engine/strategies.py
"""
Rebalance decision functions for the simulated liquidity strategies

Trailing windows are clamped at day 0, so momentum evaluates from day 5 and
mean reversion from day 10 rather than only after a full 20-day history.
"""
import statistics
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, List, Optional

from dlmm_lab.core.distribution_engine import (
    Distribution,
    MEAN_REVERSION_SHIFT_DIVISOR,
    SIMULATOR_MOMENTUM_SHIFT_DIVISOR,
    make_centered_distribution,
    make_mean_reversion_distribution,
    make_momentum_distribution,
    make_volatility_adjusted_distribution,
    normalize_distribution,
)
from dlmm_lab.models.simulation_models import SimulationParams

# Share of LP capital directionally exposed to the price move
LIQUIDITY_EXPOSURE: Dict[str, float] = {
    "passive": 0.8,
    "active": 0.9,
    "momentum": 0.85,
    "mean_reversion": 0.75,
}

VOLATILITY_THRESHOLDS: Dict[str, float] = {"low": 0.01, "medium": 0.02, "high": 0.03}

PASSIVE_WIDTHS: Dict[str, int] = {"low": 5, "medium": 7, "high": 9}
ACTIVE_WIDTHS: Dict[str, int] = {"low": 3, "medium": 5, "high": 7}
MOMENTUM_WIDTHS: Dict[str, int] = {"low": 3, "medium": 5, "high": 7}
MEAN_REVERSION_WIDTHS: Dict[str, int] = {"low": 5, "medium": 7, "high": 9}

REBALANCE_INTERVAL_DAYS = 7
MOMENTUM_SHORT_WINDOW = 5
MOMENTUM_LONG_WINDOW = 20
MOMENTUM_THRESHOLD = 0.02
MEAN_REVERSION_MIN_HISTORY = 10
MEAN_REVERSION_RECENT_WINDOW = 5
MEAN_REVERSION_LOOKBACK = 20
MEAN_REVERSION_THRESHOLD = 0.05


@dataclass
class RebalanceDecision:
    rebalance: bool
    reason: str
    new_distribution: Optional[Distribution] = None

    @classmethod
    def hold(cls, reason: str) -> "RebalanceDecision":
        return cls(rebalance=False, reason=reason)


class BaseRebalanceStrategy(ABC):
    """Base class for all rebalance decision functions"""

    name: str = ""

    @abstractmethod
    def decide(
        self,
        params: SimulationParams,
        current_price: float,
        price_change: float,
        portfolio_value: float,
        day_index: int,
        prices: List[float]
    ) -> RebalanceDecision:
        """Decide whether to re-place liquidity on `day_index`"""
        pass

    @property
    def liquidity_exposure(self) -> float:
        return LIQUIDITY_EXPOSURE[self.name]


class PassiveStrategy(BaseRebalanceStrategy):
    """Weekly rebalance into a centered distribution"""

    name = "passive"

    def decide(self, params, current_price, price_change, portfolio_value, day_index, prices):
        if day_index % REBALANCE_INTERVAL_DAYS == 0:
            return RebalanceDecision(
                rebalance=True,
                reason="Weekly rebalance",
                new_distribution=make_centered_distribution(PASSIVE_WIDTHS[params.risk_tolerance])
            )
        return RebalanceDecision.hold("No rebalance needed")


class ActiveStrategy(BaseRebalanceStrategy):
    """Rebalance whenever the daily move exceeds the risk tolerance's threshold"""

    name = "active"

    def decide(self, params, current_price, price_change, portfolio_value, day_index, prices):
        threshold = VOLATILITY_THRESHOLDS[params.risk_tolerance]

        if abs(price_change) > threshold:
            distribution = make_volatility_adjusted_distribution(
                ACTIVE_WIDTHS[params.risk_tolerance], abs(price_change)
            )
            return RebalanceDecision(
                rebalance=True,
                reason=f"High volatility detected: {price_change * 100:.2f}%",
                new_distribution=normalize_distribution(distribution)
            )
        return RebalanceDecision.hold("Volatility within threshold")


class MomentumStrategy(BaseRebalanceStrategy):
    """Follow a short-term trend that outpaces the long-term one"""

    name = "momentum"

    def decide(self, params, current_price, price_change, portfolio_value, day_index, prices):
        if day_index < MOMENTUM_SHORT_WINDOW:
            return RebalanceDecision.hold("Insufficient data")

        short_term = prices[day_index - MOMENTUM_SHORT_WINDOW:day_index]
        long_term = prices[max(0, day_index - MOMENTUM_LONG_WINDOW):day_index]

        short_term_return = (short_term[-1] - short_term[0]) / short_term[0]
        long_term_return = (long_term[-1] - long_term[0]) / long_term[0]

        if short_term_return > long_term_return and short_term_return > MOMENTUM_THRESHOLD:
            return RebalanceDecision(
                rebalance=True,
                reason=f"Momentum detected: {short_term_return * 100:.2f}%",
                new_distribution=make_momentum_distribution(
                    MOMENTUM_WIDTHS[params.risk_tolerance],
                    short_term_return,
                    shift_divisor=SIMULATOR_MOMENTUM_SHIFT_DIVISOR
                )
            )
        return RebalanceDecision.hold("No momentum signal")


class MeanReversionStrategy(BaseRebalanceStrategy):
    """Lean against a recent mean that drifted away from its history"""

    name = "mean_reversion"

    def decide(self, params, current_price, price_change, portfolio_value, day_index, prices):
        if day_index < MEAN_REVERSION_MIN_HISTORY:
            return RebalanceDecision.hold("Insufficient data")

        recent = prices[day_index - MEAN_REVERSION_RECENT_WINDOW:day_index]
        historical = prices[max(0, day_index - MEAN_REVERSION_LOOKBACK):day_index - MEAN_REVERSION_RECENT_WINDOW]

        recent_avg = statistics.mean(recent)
        historical_avg = statistics.mean(historical)
        deviation = (recent_avg - historical_avg) / historical_avg

        if abs(deviation) > MEAN_REVERSION_THRESHOLD:
            return RebalanceDecision(
                rebalance=True,
                reason=f"Mean reversion signal: {deviation * 100:.2f}% deviation",
                new_distribution=make_mean_reversion_distribution(
                    MEAN_REVERSION_WIDTHS[params.risk_tolerance],
                    deviation,
                    shift_divisor=MEAN_REVERSION_SHIFT_DIVISOR
                )
            )
        return RebalanceDecision.hold("No mean reversion signal")


STRATEGIES: Dict[str, BaseRebalanceStrategy] = {
    strategy.name: strategy
    for strategy in (PassiveStrategy(), ActiveStrategy(), MomentumStrategy(), MeanReversionStrategy())
}


def get_rebalance_strategy(strategy: str) -> BaseRebalanceStrategy:
    try:
        return STRATEGIES[strategy]
    except KeyError:
        raise ValueError(f"Unknown strategy: {strategy}") from None
