# core/distribution_engine/generators.py
"""
Liquidity distribution generators

A distribution assigns integer basis-point weight to bins relative to the active
bin (id 0). Bins below the active bin hold base-asset weight, bins above it hold
quote-asset weight. Every generator except the volatility-adjusted one returns
weights summing exactly to TOTAL_WEIGHT.
"""
import math
from dataclasses import dataclass
from typing import List

TOTAL_WEIGHT = 10000  # basis points

# Momentum shift divisors. The standalone helper and the simulator's momentum
# generator historically disagree; both values are kept.
MOMENTUM_SHIFT_DIVISOR = 4
SIMULATOR_MOMENTUM_SHIFT_DIVISOR = 3
MEAN_REVERSION_SHIFT_DIVISOR = 4

CONSERVATIVE_MAX_WIDTH = 5
AGGRESSIVE_MAX_WIDTH = 15


@dataclass
class BinAllocation:
    """Weight placed in one bin, relative to the active bin"""
    relative_bin_id: int
    weight_base_units: int = 0
    weight_quote_units: int = 0

    @property
    def total(self) -> int:
        return self.weight_base_units + self.weight_quote_units

    def to_dict(self) -> dict:
        return {
            "relative_bin_id": self.relative_bin_id,
            "weight_base_units": self.weight_base_units,
            "weight_quote_units": self.weight_quote_units,
        }


Distribution = List[BinAllocation]


def _coerce_width(width) -> int:
    return max(1, int(width))


def _sign(value: float) -> int:
    if value > 0:
        return 1
    if value < 0:
        return -1
    return 0


def _total(distribution: Distribution) -> int:
    return sum(b.weight_base_units + b.weight_quote_units for b in distribution)


def make_centered_distribution(width: int) -> Distribution:
    """Symmetric distribution around the active bin.

    The remainder of TOTAL_WEIGHT / width goes to bin 0, split between both
    sides with the larger half on the quote side.
    """
    w = _coerce_width(width)
    half = w // 2
    per = TOTAL_WEIGHT // w

    bins = []
    for i in range(-half, half + 1):
        bins.append(BinAllocation(
            relative_bin_id=i,
            weight_base_units=per if i < 0 else 0,
            weight_quote_units=per if i > 0 else 0,
        ))

    remainder = TOTAL_WEIGHT - _total(bins)
    center = bins[half]
    center.weight_base_units += remainder // 2
    center.weight_quote_units += remainder - remainder // 2
    return bins


def _make_single_sided(width: int, base_side: bool) -> Distribution:
    w = _coerce_width(width)
    per = TOTAL_WEIGHT // w
    remainder = TOTAL_WEIGHT - per * w

    bins = []
    for offset in range(1, w + 1):
        weight = per + (remainder if offset == 1 else 0)
        if base_side:
            bins.append(BinAllocation(-offset, weight_base_units=weight))
        else:
            bins.append(BinAllocation(offset, weight_quote_units=weight))

    bins.sort(key=lambda b: b.relative_bin_id)
    return bins


def make_single_sided_base_distribution(width: int) -> Distribution:
    """`width` bins below the active bin, remainder in the bin closest to center"""
    return _make_single_sided(width, base_side=True)


def make_single_sided_quote_distribution(width: int) -> Distribution:
    """`width` bins above the active bin, remainder in the bin closest to center"""
    return _make_single_sided(width, base_side=False)


def shift_distribution(distribution: Distribution, shift: int) -> Distribution:
    """Move every bin by `shift` ids, keeping weights."""
    return [
        BinAllocation(b.relative_bin_id + shift, b.weight_base_units, b.weight_quote_units)
        for b in distribution
    ]


def make_momentum_distribution(
    width: int,
    momentum: float,
    shift_divisor: int = MOMENTUM_SHIFT_DIVISOR
) -> Distribution:
    """Centered distribution shifted toward the trend"""
    w = _coerce_width(width)
    shift = _sign(momentum) * (w // shift_divisor)
    return shift_distribution(make_centered_distribution(w), shift)


def make_mean_reversion_distribution(
    width: int,
    deviation: float,
    shift_divisor: int = MEAN_REVERSION_SHIFT_DIVISOR
) -> Distribution:
    """Centered distribution shifted against the deviation"""
    w = _coerce_width(width)
    shift = -_sign(deviation) * (w // shift_divisor)
    return shift_distribution(make_centered_distribution(w), shift)


def make_volatility_adjusted_distribution(width: int, volatility: float) -> Distribution:
    """Gaussian-like decay from center, thinned out as volatility rises.

    Weights are floored and NOT re-balanced to TOTAL_WEIGHT; run the result
    through normalize_distribution when a fixed sum is required.
    """
    w = _coerce_width(width)
    half = w // 2
    per = TOTAL_WEIGHT // w
    adjusted_per = math.floor(per * (1 - min(volatility, 0.5)))

    bins = []
    for i in range(-half, half + 1):
        weight = math.floor(adjusted_per * math.exp(-abs(i) * volatility * 2))
        bins.append(BinAllocation(
            relative_bin_id=i,
            weight_base_units=weight if i < 0 else 0,
            weight_quote_units=weight if i > 0 else 0,
        ))
    return bins


def make_conservative_distribution(width: int) -> Distribution:
    """Centered distribution limited to 5 bins"""
    return make_centered_distribution(min(_coerce_width(width), CONSERVATIVE_MAX_WIDTH))


def make_aggressive_distribution(width: int) -> Distribution:
    """Centered distribution allowed up to 15 bins"""
    return make_centered_distribution(min(_coerce_width(width), AGGRESSIVE_MAX_WIDTH))


def generate_distribution(strategy: str, width: int, signal: float = 0.0) -> Distribution:
    """Build a distribution from a strategy tag.

    `signal` is the momentum, deviation or volatility input for the strategies
    that take one and is ignored by the others.
    """
    if strategy == "centered":
        return make_centered_distribution(width)
    elif strategy == "base":
        return make_single_sided_base_distribution(width)
    elif strategy == "quote":
        return make_single_sided_quote_distribution(width)
    elif strategy == "momentum":
        return make_momentum_distribution(width, signal)
    elif strategy == "mean_reversion":
        return make_mean_reversion_distribution(width, signal)
    elif strategy == "volatility_adjusted":
        return make_volatility_adjusted_distribution(width, signal)
    elif strategy == "conservative":
        return make_conservative_distribution(width)
    elif strategy == "aggressive":
        return make_aggressive_distribution(width)
    raise ValueError(f"Unknown distribution strategy: {strategy}")


def validate_distribution(distribution: Distribution) -> bool:
    """True iff the weights sum exactly to TOTAL_WEIGHT"""
    return _total(distribution) == TOTAL_WEIGHT


def normalize_distribution(distribution: Distribution) -> Distribution:
    """Rescale weights toward TOTAL_WEIGHT, flooring each side of each bin.

    Flooring drift is left in place, so the result may fall short of
    TOTAL_WEIGHT by up to one unit per weighted side.
    """
    total = _total(distribution)
    if total == 0:
        return list(distribution)

    return [
        BinAllocation(
            relative_bin_id=b.relative_bin_id,
            weight_base_units=b.weight_base_units * TOTAL_WEIGHT // total,
            weight_quote_units=b.weight_quote_units * TOTAL_WEIGHT // total,
        )
        for b in distribution
    ]
