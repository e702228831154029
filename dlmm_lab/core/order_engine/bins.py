# core/order_engine/bins.py
"""
Price to bin mapping for a pair's geometric bin grid
"""
import math
from typing import Optional

from dlmm_lab.models.market_models import PairInfo


def find_bin_for_price(pair_info: PairInfo, price: float) -> Optional[int]:
    """Bin id relative to the active bin whose price is closest to `price`.

    Bin k is priced at active_price * (1 + bin_step) ** k. Returns None when the
    price is not positive or lies beyond the pair's quoted bin range.
    """
    if price <= 0:
        return None

    offset = round(math.log(price / pair_info.active_price) / math.log(1 + pair_info.bin_step))
    if abs(offset) > pair_info.max_bin_offset:
        return None
    return offset


def get_bin_price(pair_info: PairInfo, bin_id: int) -> float:
    return pair_info.active_price * (1 + pair_info.bin_step) ** bin_id
