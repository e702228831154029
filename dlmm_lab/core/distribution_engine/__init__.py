# core/distribution_engine/__init__.py
"""
Distribution Engine - basis-point weighted liquidity distributions across bins

Generators build distributions for each placement strategy; the analyzer scores
them (concentration, skewness) for validation and risk read-outs.
"""
from .generators import (
    TOTAL_WEIGHT,
    MOMENTUM_SHIFT_DIVISOR,
    SIMULATOR_MOMENTUM_SHIFT_DIVISOR,
    MEAN_REVERSION_SHIFT_DIVISOR,
    BinAllocation,
    Distribution,
    make_centered_distribution,
    make_single_sided_base_distribution,
    make_single_sided_quote_distribution,
    make_momentum_distribution,
    make_mean_reversion_distribution,
    make_volatility_adjusted_distribution,
    make_conservative_distribution,
    make_aggressive_distribution,
    shift_distribution,
    generate_distribution,
    validate_distribution,
    normalize_distribution,
)
from .analyzer import (
    DistributionMetrics,
    calculate_total_weight,
    calculate_active_bins,
    calculate_concentration,
    calculate_skewness,
    get_distribution_metrics,
)

__all__ = [
    "TOTAL_WEIGHT",
    "MOMENTUM_SHIFT_DIVISOR",
    "SIMULATOR_MOMENTUM_SHIFT_DIVISOR",
    "MEAN_REVERSION_SHIFT_DIVISOR",
    "BinAllocation",
    "Distribution",
    "make_centered_distribution",
    "make_single_sided_base_distribution",
    "make_single_sided_quote_distribution",
    "make_momentum_distribution",
    "make_mean_reversion_distribution",
    "make_volatility_adjusted_distribution",
    "make_conservative_distribution",
    "make_aggressive_distribution",
    "shift_distribution",
    "generate_distribution",
    "validate_distribution",
    "normalize_distribution",
    "DistributionMetrics",
    "calculate_total_weight",
    "calculate_active_bins",
    "calculate_concentration",
    "calculate_skewness",
    "get_distribution_metrics",
]
