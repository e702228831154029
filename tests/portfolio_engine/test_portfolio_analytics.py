# tests/portfolio_engine/test_portfolio_analytics.py
import pytest

from dlmm_lab.core.distribution_engine import make_centered_distribution
from dlmm_lab.core.portfolio_engine import PortfolioCalculations, PortfolioEngine
from dlmm_lab.models.market_models import BinPosition, PositionData


def make_position(name, value=1000.0, fees=200.0, active=3, inactive=0, owner="alice"):
    bins = [BinPosition(bin_id=i, active=True) for i in range(active)]
    bins += [BinPosition(bin_id=active + i, active=False) for i in range(inactive)]
    return PositionData(
        position=name,
        owner=owner,
        pair="SOL/USDC",
        total_value_usd=value,
        fees_earned=fees,
        bins=bins
    )


class TestPortfolioCalculations:
    """Test suite for position-level calculations"""

    def test_concentration_risk(self):
        """Test concentration risk is the share of inactive bins"""
        assert PortfolioCalculations.calculate_concentration_risk(make_position("p", active=1, inactive=3)) == 0.75
        assert PortfolioCalculations.calculate_concentration_risk(make_position("p", active=4)) == 0.0

    def test_concentration_risk_no_bins(self):
        """Test a position without bins is fully concentrated"""
        assert PortfolioCalculations.calculate_concentration_risk(make_position("p", active=0)) == 1.0

    def test_fee_efficiency(self):
        assert PortfolioCalculations.calculate_fee_efficiency(make_position("p", value=1000.0, fees=50.0)) == 0.05

    def test_fee_efficiency_zero_value(self):
        assert PortfolioCalculations.calculate_fee_efficiency(make_position("p", value=0.0, fees=5.0)) == 0.0

    def test_apy(self):
        assert PortfolioCalculations.calculate_apy(10.0, 1000.0) == pytest.approx(3.65)
        assert PortfolioCalculations.calculate_apy(0.0, 1000.0) == 0.0
        assert PortfolioCalculations.calculate_apy(10.0, 0.0) == 0.0

    def test_risk_score(self):
        """Test risk score is average concentration risk scaled to 0-100"""
        positions = [make_position("a", active=1, inactive=1), make_position("b", active=0)]
        assert PortfolioCalculations.calculate_risk_score(positions) == pytest.approx(37.5)
        assert PortfolioCalculations.calculate_risk_score([]) == 0.0


class TestPortfolioEngine:
    """Test suite for owner-level analytics"""

    def test_portfolio_metrics(self, market_data):
        market_data.add_position(make_position("a", value=1000.0, fees=10.0))
        market_data.add_position(make_position("b", value=0.0, fees=0.0))
        market_data.add_position(make_position("c", value=500.0, fees=5.0, owner="bob"))

        metrics = PortfolioEngine(market_data).get_portfolio_metrics("alice")

        assert metrics.total_value == 1000.0
        assert metrics.total_fees == 10.0
        assert metrics.total_positions == 2
        assert metrics.active_positions == 1
        assert metrics.apy == pytest.approx(3.65)
        assert [p["position"] for p in metrics.positions] == ["a", "b"]

    def test_no_positions(self, market_data):
        metrics = PortfolioEngine(market_data).get_portfolio_metrics("nobody")

        assert metrics.total_value == 0
        assert metrics.apy == 0.0
        assert metrics.risk_score == 0.0

    def test_recommendations_sorted_by_priority(self, market_data):
        """Test high priority first, then medium, then low"""
        # small: increase (low); concentrated: rebalance (high); inefficient: rebalance (medium)
        market_data.add_position(make_position("small", value=50.0, fees=40.0))
        market_data.add_position(make_position("concentrated", value=1000.0, fees=500.0, active=1, inactive=9))
        market_data.add_position(make_position("inefficient", value=1000.0, fees=10.0))

        recommendations = PortfolioEngine(market_data).get_rebalance_recommendations("alice")

        assert [(r.position, r.priority) for r in recommendations] == [
            ("concentrated", "high"),
            ("inefficient", "medium"),
            ("small", "low"),
        ]
        assert recommendations[0].suggested_distribution == make_centered_distribution(7)
        assert len(recommendations[1].suggested_distribution) == 5
        assert recommendations[2].action == "increase"
        assert recommendations[2].suggested_distribution is None

    def test_healthy_position(self, market_data):
        market_data.add_position(make_position("healthy", value=1000.0, fees=200.0))
        assert PortfolioEngine(market_data).get_rebalance_recommendations("alice") == []
