# tests/simulation_engine/test_metrics.py
"""
Tests for performance and risk metric calculations
"""
import math
from decimal import Decimal

import pytest

from dlmm_lab.core.exceptions import InsufficientDataError
from dlmm_lab.core.simulation_engine import PerformanceMetrics, RiskMetrics


class TestPerformanceMetrics:
    """Test return-side metrics"""

    def test_max_drawdown(self):
        """Test drawdown is measured from the running peak"""
        assert PerformanceMetrics.calculate_max_drawdown([100, 120, 80, 90]) == pytest.approx(1 / 3, abs=1e-4)

    def test_max_drawdown_monotonic(self):
        """Test a rising series has no drawdown"""
        assert PerformanceMetrics.calculate_max_drawdown([100, 101, 102, 110]) == 0.0

    def test_max_drawdown_decimals(self):
        values = [Decimal("10000"), Decimal("9000"), Decimal("9500")]
        assert PerformanceMetrics.calculate_max_drawdown(values) == pytest.approx(0.1)

    def test_sharpe_ratio(self):
        """Test Sharpe is mean over population standard deviation"""
        returns = [0.01, -0.01, 0.02]
        mean = sum(returns) / 3
        std = math.sqrt(sum((r - mean) ** 2 for r in returns) / 3)

        assert PerformanceMetrics.calculate_sharpe_ratio(returns) == pytest.approx(mean / std)

    def test_sharpe_ratio_flat_returns(self):
        """Test zero variance gives a Sharpe ratio of 0"""
        assert PerformanceMetrics.calculate_sharpe_ratio([0.0, 0.0, 0.0]) == 0.0

    def test_win_rate(self):
        """Test only strictly positive returns count as wins"""
        assert PerformanceMetrics.calculate_win_rate([0.01, -0.01, 0.0, 0.02]) == 0.5

    def test_empty_series_raise(self):
        with pytest.raises(InsufficientDataError):
            PerformanceMetrics.calculate_sharpe_ratio([])
        with pytest.raises(InsufficientDataError):
            PerformanceMetrics.calculate_max_drawdown([])
        with pytest.raises(InsufficientDataError):
            PerformanceMetrics.calculate_win_rate([])

    def test_final_metrics(self):
        """Test the combined calculation over a short run"""
        values = [Decimal("1000"), Decimal("1100"), Decimal("990")]
        returns = [0.1, -0.1]

        metrics = PerformanceMetrics().calculate_final_metrics(
            Decimal("1000"), values, returns, Decimal("10"), duration=365
        )

        assert metrics["final_value"] == Decimal("990")
        assert metrics["total_return"] == pytest.approx(-0.01)
        assert metrics["net_return"] == pytest.approx(-0.02)
        assert metrics["annualized_return"] == pytest.approx(-0.01)
        assert metrics["max_drawdown"] == pytest.approx(0.1)
        assert metrics["win_rate"] == 0.5


class TestRiskMetrics:
    """Test risk-side metrics"""

    def test_volatility(self):
        assert RiskMetrics.calculate_volatility([0.01, 0.01, 0.01]) == 0.0
        assert RiskMetrics.calculate_volatility([0.01, -0.01]) == pytest.approx(0.01)

    def test_downside_deviation(self):
        """Test downside deviation is the RMS of negative returns"""
        returns = [0.01, -0.03, -0.04]
        assert RiskMetrics.calculate_downside_deviation(returns) == pytest.approx(math.sqrt(0.00125))

    def test_sortino_without_losses(self):
        """Test no negative returns gives a Sortino ratio of 0"""
        downside = RiskMetrics.calculate_downside_deviation([0.01, 0.02])
        assert downside == 0.0
        assert RiskMetrics.calculate_sortino_ratio([0.01, 0.02], downside) == 0.0

    def test_calmar_without_drawdown(self):
        assert RiskMetrics.calculate_calmar_ratio([0.01, 0.02], 0.0) == 0.0
        assert RiskMetrics.calculate_calmar_ratio([0.01, 0.03], 0.1) == pytest.approx(0.2)

    def test_var_and_cvar(self):
        """Test VaR picks the 5% tail index and CVaR averages through it"""
        returns = [i / 100 for i in range(9, -11, -1)]  # 20 returns, unsorted input

        assert RiskMetrics.calculate_var(returns, 0.95) == pytest.approx(-0.09)
        assert RiskMetrics.calculate_cvar(returns, 0.95) == pytest.approx(-0.095)

    def test_var_short_series(self):
        """Test a short series uses its worst return"""
        assert RiskMetrics.calculate_var([0.02, -0.01, 0.03]) == -0.01
        assert RiskMetrics.calculate_cvar([0.02, -0.01, 0.03]) == -0.01

    def test_var_empty(self):
        with pytest.raises(InsufficientDataError):
            RiskMetrics.calculate_var([])

    def test_risk_metrics_keys(self):
        metrics = RiskMetrics().calculate_risk_metrics([0.01, -0.02, 0.03], [100, 101, 98.98, 101.95])
        assert set(metrics) == {"volatility", "calmar_ratio", "sortino_ratio", "var_95", "cvar_95"}

    def test_risk_metrics_empty(self):
        with pytest.raises(InsufficientDataError):
            RiskMetrics().calculate_risk_metrics([], [100])
