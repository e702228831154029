# services/market_data_service.py
"""
Market data service layer - in-process provider of pair metadata, quotes and positions,
plus loading of historical price paths from CSV files
"""
import threading
from pathlib import Path
from typing import Dict, List, Optional, Union

import pandas as pd

from dlmm_lab.core.exceptions import PairNotFoundError
from dlmm_lab.core.logger import get_logger
from dlmm_lab.core.providers import MarketDataProvider
from dlmm_lab.core.settings import settings
from dlmm_lab.core.simulation_engine import price_series_from_frame
from dlmm_lab.models.market_models import MarketData, PairInfo, PositionData

logger = get_logger(__name__)


class InMemoryMarketDataService(MarketDataProvider):
    """
    Market data provider backed by process memory.

    Used by tests, offline simulations and anything that feeds quotes in from
    outside (a bot, a replayed feed) instead of querying a chain client.
    """

    def __init__(self):
        self._pairs: Dict[str, PairInfo] = {}
        self._market: Dict[str, MarketData] = {}
        self._positions: Dict[str, PositionData] = {}
        self._lock = threading.Lock()

    def register_pair(
        self,
        pair: str,
        active_price: Optional[float] = None,
        bin_step: Optional[float] = None,
        max_bin_offset: Optional[int] = None,
        base_mint: str = "",
        quote_mint: str = ""
    ) -> PairInfo:
        """Register a pair on the default bin grid; the market price starts at the active price"""
        info = PairInfo(
            pair=pair,
            base_mint=base_mint,
            quote_mint=quote_mint,
            active_price=active_price if active_price is not None else settings.BIN_BASE_PRICE,
            bin_step=bin_step if bin_step is not None else settings.BIN_STEP,
            max_bin_offset=max_bin_offset if max_bin_offset is not None else settings.MAX_BIN_OFFSET
        )
        with self._lock:
            self._pairs[pair] = info
            self._market.setdefault(pair, MarketData(price=info.active_price))

        logger.info(f"Registered pair {pair}: active price {info.active_price}, bin step {info.bin_step}")
        return info

    def set_price(self, pair: str, price: float, volume_24h: Optional[float] = None) -> MarketData:
        with self._lock:
            if pair not in self._pairs:
                raise PairNotFoundError(f"Pair not found: {pair}")
            current = self._market[pair]
            updated = current.model_copy(update={
                "price": price,
                "volume_24h": current.volume_24h if volume_24h is None else volume_24h
            })
            self._market[pair] = updated
        return updated

    def add_position(self, position: PositionData):
        with self._lock:
            self._positions[position.position] = position

    def remove_position(self, position: str) -> bool:
        with self._lock:
            return self._positions.pop(position, None) is not None

    # MarketDataProvider

    def get_pair_info(self, pair: str) -> Optional[PairInfo]:
        return self._pairs.get(pair)

    def get_market_data(self, pair: str) -> MarketData:
        market = self._market.get(pair)
        if market is None:
            raise PairNotFoundError(f"Pair not found: {pair}")
        return market

    def get_user_positions(self, owner: str) -> List[PositionData]:
        return [p for p in list(self._positions.values()) if p.owner == owner]


def load_price_history(path: Union[str, Path], column: str = "close") -> List[float]:
    """
    Read daily closes from a CSV file (OHLCV layout, optional `date` column)
    into a chronological price list for the simulator.
    """
    df = pd.read_csv(path)
    df.columns = [str(c).strip().lower() for c in df.columns]
    if "date" in df.columns:
        df["date"] = pd.to_datetime(df["date"])

    prices = price_series_from_frame(df, column.lower())
    logger.info(f"Loaded {len(prices)} prices from {path}")
    return prices
