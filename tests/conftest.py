# tests/conftest.py
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

# Resolve the repository root and add it to sys.path
ROOT_DIR = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT_DIR))

from dlmm_lab.core.order_engine import OrderMatchingEngine, OrderStore
from dlmm_lab.services.market_data_service import InMemoryMarketDataService


class FixedClock:
    """Manually advanced clock for deterministic expiry and timestamps"""

    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs):
        self.now = self.now + timedelta(**kwargs)


@pytest.fixture
def clock():
    return FixedClock(datetime(2024, 1, 1, tzinfo=timezone.utc))


@pytest.fixture
def market_data():
    """Provider with SOL/USDC on a 1% bin grid anchored at 100"""
    service = InMemoryMarketDataService()
    service.register_pair("SOL/USDC", active_price=100.0, bin_step=0.01, max_bin_offset=500)
    return service


@pytest.fixture
def order_engine(market_data, clock):
    return OrderMatchingEngine(market_data, store=OrderStore(), clock=clock)
