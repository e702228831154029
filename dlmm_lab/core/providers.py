# core/providers.py
"""
Interface of the external market data collaborator

Engines receive an implementation through dependency injection and never talk
to chain clients directly. Calls are synchronous and read-only.
"""
from abc import ABC, abstractmethod
from typing import List, Optional

from dlmm_lab.models.market_models import MarketData, PairInfo, PositionData


class MarketDataProvider(ABC):
    """Supplies pair metadata, price quotes and position balances"""

    @abstractmethod
    def get_pair_info(self, pair: str) -> Optional[PairInfo]:
        """Pair metadata, or None when the pair is unknown"""
        pass

    @abstractmethod
    def get_market_data(self, pair: str) -> MarketData:
        """Current quote for a pair"""
        pass

    @abstractmethod
    def get_user_positions(self, owner: str) -> List[PositionData]:
        """All liquidity positions held by `owner`"""
        pass
