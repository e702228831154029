# core/simulation_engine/metrics.py
"""
Performance and risk metrics calculation for strategy simulations

All statistics are population statistics over daily returns: no annualisation
and no risk-free rate.
"""
import math
import statistics
from decimal import Decimal
from typing import Dict, List, Sequence, Union, Any

from dlmm_lab.core.exceptions import InsufficientDataError

Number = Union[float, int, Decimal]


def _require(values: Sequence, what: str):
    if not values:
        raise InsufficientDataError(f"Cannot compute {what} on an empty series")


class PerformanceMetrics:
    """
    Return-side metrics of a completed simulation
    """

    def calculate_final_metrics(
        self,
        initial_capital: Decimal,
        portfolio_values: List[Decimal],
        daily_returns: List[float],
        total_fees: Decimal,
        duration: int
    ) -> Dict[str, Any]:
        """Calculate return, drawdown, Sharpe and win rate over a finished run"""
        _require(daily_returns, "performance metrics")

        final_value = portfolio_values[-1]
        total_return = float((final_value - initial_capital) / initial_capital)
        net_return = total_return - float(total_fees / initial_capital)

        return {
            "final_value": final_value,
            "total_return": total_return,
            "annualized_return": self._annualize_return(total_return, duration),
            "net_return": net_return,
            "max_drawdown": self.calculate_max_drawdown(portfolio_values),
            "sharpe_ratio": self.calculate_sharpe_ratio(daily_returns),
            "win_rate": self.calculate_win_rate(daily_returns),
        }

    @staticmethod
    def calculate_max_drawdown(values: Sequence[Number]) -> float:
        """Largest peak-to-trough decline, as a fraction of the running peak"""
        _require(values, "max drawdown")

        values = [float(v) for v in values]
        peak = values[0]
        max_drawdown = 0.0

        for value in values:
            if value > peak:
                peak = value
            if peak > 0:
                max_drawdown = max(max_drawdown, (peak - value) / peak)

        return max_drawdown

    @staticmethod
    def calculate_sharpe_ratio(returns: Sequence[float]) -> float:
        """Mean over population standard deviation; 0 when returns do not vary"""
        _require(returns, "Sharpe ratio")

        std_dev = statistics.pstdev(returns)
        if std_dev == 0:
            return 0.0
        return statistics.mean(returns) / std_dev

    @staticmethod
    def calculate_win_rate(returns: Sequence[float]) -> float:
        _require(returns, "win rate")
        return sum(1 for r in returns if r > 0) / len(returns)

    @staticmethod
    def _annualize_return(total_return: float, duration: int) -> float:
        return (1 + total_return) ** (365 / duration) - 1


class RiskMetrics:
    """
    Risk-side metrics of a completed simulation
    """

    def calculate_risk_metrics(
        self,
        daily_returns: List[float],
        portfolio_values: List[Number]
    ) -> Dict[str, float]:
        """Volatility, Calmar, Sortino, VaR95 and CVaR95"""
        _require(daily_returns, "risk metrics")

        max_drawdown = PerformanceMetrics.calculate_max_drawdown(portfolio_values)
        downside_deviation = self.calculate_downside_deviation(daily_returns)

        return {
            "volatility": self.calculate_volatility(daily_returns),
            "calmar_ratio": self.calculate_calmar_ratio(daily_returns, max_drawdown),
            "sortino_ratio": self.calculate_sortino_ratio(daily_returns, downside_deviation),
            "var_95": self.calculate_var(daily_returns, 0.95),
            "cvar_95": self.calculate_cvar(daily_returns, 0.95),
        }

    @staticmethod
    def calculate_volatility(returns: Sequence[float]) -> float:
        _require(returns, "volatility")
        return statistics.pstdev(returns)

    @staticmethod
    def calculate_downside_deviation(returns: Sequence[float]) -> float:
        """Root mean square of the negative returns; 0 when there are none"""
        negative_returns = [r for r in returns if r < 0]
        if not negative_returns:
            return 0.0
        return math.sqrt(sum(r ** 2 for r in negative_returns) / len(negative_returns))

    @staticmethod
    def calculate_sortino_ratio(returns: Sequence[float], downside_deviation: float) -> float:
        _require(returns, "Sortino ratio")
        if downside_deviation == 0:
            return 0.0
        return statistics.mean(returns) / downside_deviation

    @staticmethod
    def calculate_calmar_ratio(returns: Sequence[float], max_drawdown: float) -> float:
        """Mean daily return over max drawdown; 0 without drawdown"""
        _require(returns, "Calmar ratio")
        if max_drawdown == 0:
            return 0.0
        return statistics.mean(returns) / max_drawdown

    @staticmethod
    def _tail_index(count: int, confidence: float) -> int:
        tail = round(1 - confidence, 10)
        return min(math.floor(count * tail), count - 1)

    @classmethod
    def calculate_var(cls, returns: Sequence[float], confidence: float = 0.95) -> float:
        """Historical Value at Risk: the return at the lower-tail index of the sorted series"""
        _require(returns, "VaR")
        sorted_returns = sorted(returns)
        index = cls._tail_index(len(sorted_returns), confidence)
        return sorted_returns[index]

    @classmethod
    def calculate_cvar(cls, returns: Sequence[float], confidence: float = 0.95) -> float:
        """Mean of every return at or below the VaR index"""
        _require(returns, "CVaR")
        sorted_returns = sorted(returns)
        index = cls._tail_index(len(sorted_returns), confidence)
        return statistics.mean(sorted_returns[:index + 1])
