# core/simulation_engine/engine.py
"""
Strategy simulator - day-by-day portfolio simulation of a liquidity strategy
"""
from dataclasses import dataclass, field
from datetime import datetime, timezone, timedelta
from decimal import Decimal
from typing import Any, Callable, Dict, List, Literal, Optional, Sequence

from dlmm_lab.core.distribution_engine import Distribution, calculate_concentration
from dlmm_lab.core.exceptions import InsufficientDataError, PriceOutOfRangeError
from dlmm_lab.core.logger import get_logger
from dlmm_lab.core.settings import settings
from dlmm_lab.models.simulation_models import SimulationParams
from .metrics import PerformanceMetrics, RiskMetrics
from .price_feed import generate_price_series
from .strategies import get_rebalance_strategy

logger = get_logger(__name__)

RebalanceActionType = Literal["rebalance", "add_liquidity", "remove_liquidity"]


@dataclass
class RebalanceEvent:
    """One re-placement of liquidity during a simulation"""
    timestamp: datetime
    action: RebalanceActionType
    amount: Decimal
    price: float
    reason: str
    fees: Decimal = Decimal("0")
    distribution: Optional[Distribution] = None
    concentration: Optional[float] = None


@dataclass
class SimulationResult:
    """Results of a completed simulation"""
    params: Optional[SimulationParams]

    # Summary metrics
    final_value: Decimal
    total_return: float
    annualized_return: float
    max_drawdown: float
    sharpe_ratio: float
    win_rate: float
    total_fees: Decimal
    net_return: float

    # Performance data
    daily_returns: List[float]
    portfolio_values: List[Decimal]
    rebalance_events: List[RebalanceEvent] = field(default_factory=list)

    # Risk metrics: volatility, calmar_ratio, sortino_ratio, var_95, cvar_95
    metrics: Dict[str, float] = field(default_factory=dict)


class StrategySimulator:
    """
    Runs one strategy over a daily price path.

    Each day the strategy either rebalances (paying the rebalance fee instead of
    taking that day's market move) or keeps its liquidity, in which case the
    portfolio moves with the price, scaled by the strategy's liquidity exposure.
    """

    def __init__(self, clock: Optional[Callable[[], datetime]] = None):
        self.clock = clock or (lambda: datetime.now(timezone.utc))
        self.performance_tracker = PerformanceMetrics()
        self.risk_tracker = RiskMetrics()

    def run_simulation(
        self,
        params: SimulationParams,
        prices: Optional[Sequence[float]] = None,
        start_date: Optional[datetime] = None
    ) -> SimulationResult:
        """
        Execute the complete simulation.

        `prices` defaults to a synthetic path of `params.duration` days; a
        supplied path must cover the duration and is truncated to it.
        """
        strategy = get_rebalance_strategy(params.strategy)

        if prices is None:
            price_data = generate_price_series(params.duration)
        else:
            if len(prices) < params.duration:
                raise InsufficientDataError(
                    f"Price path covers {len(prices)} days, simulation needs {params.duration}"
                )
            price_data = [float(p) for p in prices[:params.duration]]
            if any(p <= 0 for p in price_data):
                raise PriceOutOfRangeError("Price path contains non-positive prices")

        if len(price_data) < 2:
            raise InsufficientDataError(
                f"Simulation needs at least two days of prices (got {len(price_data)})"
            )

        if start_date is None:
            start_date = self.clock() - timedelta(days=params.duration)

        logger.info(
            f"Starting {params.strategy} simulation on {params.pair}: {params.duration} days, "
            f"capital {params.initial_capital}, risk {params.risk_tolerance}"
        )

        initial_capital = Decimal(params.initial_capital)
        fee_rate = Decimal(str(settings.REBALANCE_FEE_RATE))
        exposure = Decimal(str(strategy.liquidity_exposure))

        portfolio_value = initial_capital
        total_fees = Decimal("0")
        daily_returns: List[float] = []
        portfolio_values: List[Decimal] = [portfolio_value]
        rebalance_events: List[RebalanceEvent] = []

        for i in range(1, len(price_data)):
            current_price = price_data[i]
            previous_price = price_data[i - 1]
            price_change = (current_price - previous_price) / previous_price

            decision = strategy.decide(
                params, current_price, price_change, float(portfolio_value), i, price_data
            )

            if decision.rebalance:
                # The fee replaces the day's market move
                fees = portfolio_value * fee_rate
                amount = portfolio_value
                portfolio_value = portfolio_value - fees
                total_fees += fees

                concentration = None
                if decision.new_distribution:
                    concentration = calculate_concentration(decision.new_distribution)

                rebalance_events.append(RebalanceEvent(
                    timestamp=start_date + timedelta(days=i),
                    action="rebalance",
                    amount=amount,
                    price=current_price,
                    reason=decision.reason,
                    fees=fees,
                    distribution=decision.new_distribution,
                    concentration=concentration
                ))
                logger.debug(f"Day {i}: rebalance at {current_price:.4f} ({decision.reason}), fee {fees:.2f}")
            else:
                portfolio_value = portfolio_value * (1 + Decimal(str(price_change)) * exposure)

            previous_value = portfolio_values[-1]
            daily_returns.append(float((portfolio_value - previous_value) / previous_value))
            portfolio_values.append(portfolio_value)

        final_metrics = self.performance_tracker.calculate_final_metrics(
            initial_capital, portfolio_values, daily_returns, total_fees, params.duration
        )
        risk_metrics = self.risk_tracker.calculate_risk_metrics(daily_returns, portfolio_values)

        logger.info(
            f"Finished {params.strategy} simulation: return {final_metrics['total_return']:.4%}, "
            f"{len(rebalance_events)} rebalances, fees {total_fees:.2f}"
        )

        return SimulationResult(
            params=params,
            final_value=final_metrics["final_value"],
            total_return=final_metrics["total_return"],
            annualized_return=final_metrics["annualized_return"],
            max_drawdown=final_metrics["max_drawdown"],
            sharpe_ratio=final_metrics["sharpe_ratio"],
            win_rate=final_metrics["win_rate"],
            total_fees=total_fees,
            net_return=final_metrics["net_return"],
            daily_returns=daily_returns,
            portfolio_values=portfolio_values,
            rebalance_events=rebalance_events,
            metrics=risk_metrics
        )

    def get_summary(self, result: SimulationResult) -> Dict[str, Any]:
        """Flat summary of a result for reporting"""
        return {
            "strategy": result.params.strategy if result.params else None,
            "final_value": result.final_value,
            "total_return": result.total_return,
            "annualized_return": result.annualized_return,
            "net_return": result.net_return,
            "max_drawdown": result.max_drawdown,
            "sharpe_ratio": result.sharpe_ratio,
            "win_rate": result.win_rate,
            "total_fees": result.total_fees,
            "rebalance_count": len(result.rebalance_events),
            **result.metrics
        }
