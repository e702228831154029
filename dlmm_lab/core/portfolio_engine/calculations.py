# core/portfolio_engine/calculations.py
from typing import List

from dlmm_lab.models.market_models import PositionData


class PortfolioCalculations:

    @staticmethod
    def calculate_concentration_risk(position: PositionData) -> float:
        """
        Share of a position's bins that are out of range (0-1, higher is riskier).
        A position without bins counts as fully concentrated.
        """
        total_bins = len(position.bins)
        if total_bins == 0:
            return 1.0

        active_bins = sum(1 for b in position.bins if b.active)
        return 1 - active_bins / total_bins

    @staticmethod
    def calculate_fee_efficiency(position: PositionData) -> float:
        """Fees earned per unit of position value."""
        if position.total_value_usd <= 0:
            return 0.0
        return position.fees_earned / position.total_value_usd

    @staticmethod
    def calculate_apy(total_fees: float, total_value: float) -> float:
        """Simple (non-compounded) fee APY, treating the fees as one day's earnings."""
        if total_fees <= 0 or total_value <= 0:
            return 0.0
        return total_fees / total_value * 365

    @staticmethod
    def calculate_risk_score(positions: List[PositionData]) -> float:
        """
        Portfolio risk score from 0 to 100 (lower is better), driven by the
        average concentration risk of the positions.
        """
        if not positions:
            return 0.0

        avg_concentration = sum(
            PortfolioCalculations.calculate_concentration_risk(p) for p in positions
        ) / len(positions)
        return min(100.0, avg_concentration * 50)
