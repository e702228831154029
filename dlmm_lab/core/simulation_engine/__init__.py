# core/simulation_engine/__init__.py
"""
Simulation Engine - day-by-day liquidity strategy simulation and backtest comparison

Rebalance decisions come from the strategies module, target distributions from the
distribution engine, and performance statistics from the metrics module.
"""
from .engine import StrategySimulator, SimulationResult, RebalanceEvent
from .comparator import BacktestComparator, BacktestResult, StrategyComparison, rank_by_total_return
from .strategies import (
    BaseRebalanceStrategy,
    RebalanceDecision,
    PassiveStrategy,
    ActiveStrategy,
    MomentumStrategy,
    MeanReversionStrategy,
    get_rebalance_strategy,
    LIQUIDITY_EXPOSURE,
)
from .metrics import PerformanceMetrics, RiskMetrics
from .price_feed import generate_price_series, constant_price_series, price_series_from_frame

__all__ = [
    "StrategySimulator",
    "SimulationResult",
    "RebalanceEvent",
    "BacktestComparator",
    "BacktestResult",
    "StrategyComparison",
    "rank_by_total_return",
    "BaseRebalanceStrategy",
    "RebalanceDecision",
    "PassiveStrategy",
    "ActiveStrategy",
    "MomentumStrategy",
    "MeanReversionStrategy",
    "get_rebalance_strategy",
    "LIQUIDITY_EXPOSURE",
    "PerformanceMetrics",
    "RiskMetrics",
    "generate_price_series",
    "constant_price_series",
    "price_series_from_frame",
]
