# core/distribution_engine/analyzer.py
"""
Aggregate statistics over a liquidity distribution
"""
import math
from dataclasses import dataclass

from dlmm_lab.core.exceptions import UndefinedStatisticError
from .generators import Distribution, TOTAL_WEIGHT


@dataclass
class DistributionMetrics:
    """Risk read-out of a distribution"""
    total_weight: int
    active_bins: int
    concentration: float  # Herfindahl index, higher = more concentrated
    skewness: float


def calculate_total_weight(distribution: Distribution) -> int:
    return sum(b.total for b in distribution)


def calculate_active_bins(distribution: Distribution) -> int:
    return sum(1 for b in distribution if b.total > 0)


def calculate_concentration(distribution: Distribution) -> float:
    """Herfindahl index of bin weights against TOTAL_WEIGHT"""
    return sum((b.total / TOTAL_WEIGHT) ** 2 for b in distribution)


def calculate_skewness(distribution: Distribution) -> float:
    """Weighted third standardized moment of the bin ids (population form).

    Raises UndefinedStatisticError when there is no weight or all weight sits
    in a single bin.
    """
    total = calculate_total_weight(distribution)
    if total == 0:
        raise UndefinedStatisticError("Skewness undefined: distribution has no weight")

    mean = sum(b.relative_bin_id * b.total for b in distribution) / total
    variance = sum((b.relative_bin_id - mean) ** 2 * b.total for b in distribution) / total
    if variance == 0:
        raise UndefinedStatisticError("Skewness undefined: weighted variance is zero")

    std_dev = math.sqrt(variance)
    return sum(((b.relative_bin_id - mean) / std_dev) ** 3 * b.total for b in distribution) / total


def get_distribution_metrics(distribution: Distribution) -> DistributionMetrics:
    """Total weight, active bins, concentration and skewness of a distribution"""
    return DistributionMetrics(
        total_weight=calculate_total_weight(distribution),
        active_bins=calculate_active_bins(distribution),
        concentration=calculate_concentration(distribution),
        skewness=calculate_skewness(distribution),
    )
