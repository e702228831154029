# core/simulation_engine/price_feed.py
"""
Daily price paths for simulations: synthetic random walks or historical closes
"""
import random
from typing import List, Optional

import pandas as pd

from dlmm_lab.core.exceptions import InsufficientDataError
from dlmm_lab.core.settings import settings


def generate_price_series(
    days: int,
    start_price: Optional[float] = None,
    volatility: Optional[float] = None,
    drift: Optional[float] = None,
    seed: Optional[int] = None
) -> List[float]:
    """
    Synthetic daily closes: each day moves by a uniform draw in
    [-volatility/2, +volatility/2] plus a constant drift.
    """
    start_price = settings.SYNTHETIC_START_PRICE if start_price is None else start_price
    volatility = settings.SYNTHETIC_DAILY_VOLATILITY if volatility is None else volatility
    drift = settings.SYNTHETIC_DAILY_DRIFT if drift is None else drift
    rng = random.Random(seed)

    prices = [start_price]
    current_price = start_price
    for _ in range(1, days):
        change = (rng.random() - 0.5) * volatility + drift
        current_price *= (1 + change)
        prices.append(current_price)

    return prices


def constant_price_series(days: int, price: float = 100.0) -> List[float]:
    """Zero-volatility path"""
    return [price] * max(days, 0)


def price_series_from_frame(df: pd.DataFrame, column: str = "close") -> List[float]:
    """Extract a chronological close series from OHLCV data.

    Accepts lower- or title-case column names and a date index or `date` column.
    """
    if df is None or df.empty:
        raise InsufficientDataError("Price history is empty")

    if column not in df.columns:
        candidates = [c for c in df.columns if str(c).lower() == column.lower()]
        if not candidates:
            raise ValueError(f"Column '{column}' not found in price history")
        column = candidates[0]

    if "date" in df.columns:
        df = df.sort_values("date")
    elif isinstance(df.index, pd.DatetimeIndex):
        df = df.sort_index()

    series = pd.to_numeric(df[column], errors="coerce").dropna()
    series = series[series > 0]
    if len(series) < 2:
        raise InsufficientDataError("Price history needs at least two positive prices")

    return [float(p) for p in series.tolist()]
