# core/simulation_engine/comparator.py
"""
Backtest comparator - runs several strategy simulations over one period and ranks them
"""
import contextvars
import math
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, List, Optional, Sequence

from dlmm_lab.core.exceptions import InsufficientDataError
from dlmm_lab.core.logger import get_logger
from dlmm_lab.core.settings import settings
from dlmm_lab.models.simulation_models import BacktestParams, SimulationParams
from .engine import SimulationResult, StrategySimulator
from .metrics import PerformanceMetrics, RiskMetrics

logger = get_logger(__name__)


@dataclass
class StrategyComparison:
    best_strategy: str
    worst_strategy: str
    risk_adjusted_winner: str


@dataclass
class BacktestResult:
    """Per-strategy results keyed `strategy_{index}_{tag}` in input order"""
    strategies: Dict[str, SimulationResult]
    comparison: StrategyComparison
    benchmark: Optional[SimulationResult] = None


class BacktestComparator:
    """
    Runs each configured simulation independently, then the optional
    buy-and-hold benchmark, then ranks the strategies.

    Simulations share no mutable state, so with `max_workers > 1` they run in
    a thread pool.
    """

    def __init__(self, simulator: Optional[StrategySimulator] = None, max_workers: Optional[int] = None):
        self.simulator = simulator or StrategySimulator()
        self.max_workers = max_workers if max_workers is not None else settings.BACKTEST_MAX_WORKERS

    def run_backtest(self, params: BacktestParams) -> BacktestResult:
        keys = [f"strategy_{i}_{sim.strategy}" for i, sim in enumerate(params.strategies)]
        logger.info(f"Running backtest of {len(keys)} strategies from {params.start_date} to {params.end_date}")

        if self.max_workers > 1 and len(params.strategies) > 1:
            with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
                futures = [
                    executor.submit(contextvars.copy_context().run, self._run_one, sim, params)
                    for sim in params.strategies
                ]
                # Workers inherit the caller's run id; results keep input order
                outcomes = [future.result() for future in futures]
        else:
            outcomes = [self._run_one(sim, params) for sim in params.strategies]

        results = dict(zip(keys, outcomes))

        benchmark = None
        if params.benchmark:
            benchmark = self.run_benchmark(params)

        comparison = self.compare_strategies(results)
        logger.info(
            f"Backtest ranking: best={comparison.best_strategy}, worst={comparison.worst_strategy}, "
            f"risk-adjusted={comparison.risk_adjusted_winner}"
        )

        return BacktestResult(strategies=results, comparison=comparison, benchmark=benchmark)

    def _run_one(self, sim: SimulationParams, params: BacktestParams) -> SimulationResult:
        return self.simulator.run_simulation(sim, prices=params.prices, start_date=params.start_date)

    def run_benchmark(self, params: BacktestParams) -> SimulationResult:
        """
        Buy-and-hold benchmark as a closed form.

        Portfolio values are a straight line from the start capital to
        `start * (1 + total_return)`; the return comes from the shared price
        path when one is given.
        """
        duration = max(1, math.ceil((params.end_date - params.start_date).total_seconds() / 86400))

        if params.prices:
            total_return = params.prices[-1] / params.prices[0] - 1
        else:
            total_return = settings.BENCHMARK_TOTAL_RETURN

        start_value = Decimal(str(settings.BENCHMARK_INITIAL_CAPITAL))
        step_return = Decimal(str(total_return))
        portfolio_values = [
            start_value * (1 + step_return * i / duration)
            for i in range(duration + 1)
        ]
        daily_returns = [
            float((portfolio_values[i] - portfolio_values[i - 1]) / portfolio_values[i - 1])
            for i in range(1, len(portfolio_values))
        ]

        final_metrics = PerformanceMetrics().calculate_final_metrics(
            start_value, portfolio_values, daily_returns, Decimal("0"), duration
        )
        risk_metrics = RiskMetrics().calculate_risk_metrics(daily_returns, portfolio_values)
        logger.debug(f"Benchmark {params.benchmark}: {duration} days, return {final_metrics['total_return']:.4%}")

        return SimulationResult(
            params=None,
            final_value=final_metrics["final_value"],
            total_return=final_metrics["total_return"],
            annualized_return=final_metrics["annualized_return"],
            max_drawdown=final_metrics["max_drawdown"],
            sharpe_ratio=final_metrics["sharpe_ratio"],
            win_rate=final_metrics["win_rate"],
            total_fees=Decimal("0"),
            net_return=final_metrics["net_return"],
            daily_returns=daily_returns,
            portfolio_values=portfolio_values,
            rebalance_events=[],
            metrics=risk_metrics
        )

    @staticmethod
    def compare_strategies(results: Dict[str, SimulationResult]) -> StrategyComparison:
        """Best/worst by total return and winner by Sharpe ratio; the earlier key wins ties"""
        keys: Sequence[str] = list(results)
        if not keys:
            raise InsufficientDataError("No strategy results to compare")

        best = worst = winner = keys[0]
        for key in keys[1:]:
            result = results[key]
            if result.total_return > results[best].total_return:
                best = key
            if result.total_return < results[worst].total_return:
                worst = key
            if result.sharpe_ratio > results[winner].sharpe_ratio:
                winner = key

        return StrategyComparison(best_strategy=best, worst_strategy=worst, risk_adjusted_winner=winner)


def rank_by_total_return(results: Dict[str, SimulationResult]) -> List[str]:
    """Keys ordered from highest to lowest total return (stable)"""
    return sorted(results, key=lambda k: results[k].total_return, reverse=True)
