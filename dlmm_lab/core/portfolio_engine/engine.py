# core/portfolio_engine/engine.py
from dataclasses import dataclass, field
from typing import Any, Dict, List, Literal, Optional

from dlmm_lab.core.distribution_engine import (
    Distribution,
    make_centered_distribution,
    make_volatility_adjusted_distribution,
    normalize_distribution,
)
from dlmm_lab.core.logger import get_logger
from dlmm_lab.core.providers import MarketDataProvider
from dlmm_lab.models.market_models import PositionData
from .calculations import PortfolioCalculations

logger = get_logger(__name__)

HIGH_CONCENTRATION_RISK = 0.8
LOW_FEE_EFFICIENCY = 0.1
MIN_POSITION_VALUE = 100.0

BALANCED_WIDTH = 7
OPTIMIZED_WIDTH = 5
OPTIMIZED_DECAY = 0.25

PRIORITY_ORDER = {"high": 3, "medium": 2, "low": 1}


@dataclass
class RebalanceRecommendation:
    position: str
    action: Literal["increase", "decrease", "rebalance", "close"]
    reason: str
    priority: Literal["high", "medium", "low"]
    suggested_distribution: Optional[Distribution] = None


@dataclass
class PortfolioMetrics:
    total_value: float
    total_fees: float
    total_positions: int
    active_positions: int
    apy: float
    risk_score: float
    positions: List[Dict[str, Any]] = field(default_factory=list)


class PortfolioEngine:
    """
    Read-only analytics over an owner's liquidity positions.
    """

    def __init__(self, market_data: MarketDataProvider):
        self.market_data = market_data
        self.calculations = PortfolioCalculations()

    def get_position_analytics(self, position: PositionData) -> Dict[str, Any]:
        return {
            "position": position.position,
            "pair": position.pair,
            "total_value_usd": position.total_value_usd,
            "fees_earned": position.fees_earned,
            "fee_efficiency": self.calculations.calculate_fee_efficiency(position),
            "concentration_risk": self.calculations.calculate_concentration_risk(position),
        }

    def get_portfolio_metrics(self, owner: str) -> PortfolioMetrics:
        """
        Aggregate value, fees, APY and risk score over all positions of `owner`.
        """
        positions = self.market_data.get_user_positions(owner)

        total_value = sum(p.total_value_usd for p in positions)
        total_fees = sum(p.fees_earned for p in positions)

        return PortfolioMetrics(
            total_value=total_value,
            total_fees=total_fees,
            total_positions=len(positions),
            active_positions=sum(1 for p in positions if p.total_value_usd > 0),
            apy=self.calculations.calculate_apy(total_fees, total_value),
            risk_score=self.calculations.calculate_risk_score(positions),
            positions=[self.get_position_analytics(p) for p in positions]
        )

    def get_rebalance_recommendations(self, owner: str) -> List[RebalanceRecommendation]:
        """
        Recommendations for every position of `owner`, highest priority first.
        Recommendations of equal priority keep position order.
        """
        recommendations: List[RebalanceRecommendation] = []

        for position in self.market_data.get_user_positions(owner):
            concentration_risk = self.calculations.calculate_concentration_risk(position)
            fee_efficiency = self.calculations.calculate_fee_efficiency(position)

            if concentration_risk > HIGH_CONCENTRATION_RISK:
                recommendations.append(RebalanceRecommendation(
                    position=position.position,
                    action="rebalance",
                    reason="High concentration risk detected",
                    priority="high",
                    suggested_distribution=make_centered_distribution(BALANCED_WIDTH)
                ))

            if fee_efficiency < LOW_FEE_EFFICIENCY:
                recommendations.append(RebalanceRecommendation(
                    position=position.position,
                    action="rebalance",
                    reason="Low fee efficiency - consider rebalancing",
                    priority="medium",
                    suggested_distribution=normalize_distribution(
                        make_volatility_adjusted_distribution(OPTIMIZED_WIDTH, OPTIMIZED_DECAY)
                    )
                ))

            if position.total_value_usd < MIN_POSITION_VALUE:
                recommendations.append(RebalanceRecommendation(
                    position=position.position,
                    action="increase",
                    reason="Position value too small to be efficient",
                    priority="low"
                ))

        recommendations.sort(key=lambda r: PRIORITY_ORDER[r.priority], reverse=True)
        logger.info(f"Generated {len(recommendations)} rebalance recommendations for {owner}")
        return recommendations
