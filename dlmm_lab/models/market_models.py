# models/market_models.py - Collaborator data models
"""
Pydantic models for data supplied by the external market data provider:
pair metadata, market quotes and user positions.
"""
# Standard library imports
from typing import List

# Third-party imports
from pydantic import BaseModel, Field


class PairInfo(BaseModel):
    """Pair metadata and the bin grid used to map prices to bins"""
    pair: str = Field(..., min_length=1, description="Pair identifier (e.g., 'SOL/USDC')")
    base_mint: str = Field("", description="Base token mint")
    quote_mint: str = Field("", description="Quote token mint")
    active_price: float = Field(100.0, gt=0, description="Price of the active bin (relative id 0)")
    bin_step: float = Field(0.01, gt=0, description="Relative price step between adjacent bins")
    max_bin_offset: int = Field(500, ge=0, description="Furthest bin offset quoted by the pair")


class MarketData(BaseModel):
    price: float = Field(..., ge=0)
    volume_24h: float = Field(0.0, ge=0)
    liquidity: float = Field(0.0, ge=0)
    fee_rate: float = Field(0.003, ge=0)


class BinPosition(BaseModel):
    bin_id: int
    price: float = 0.0
    liquidity: float = 0.0
    fee_rate: float = 0.0
    active: bool = False


class PositionData(BaseModel):
    """A liquidity position held by an owner"""
    position: str = Field(..., description="Opaque position handle")
    owner: str = Field(..., description="Opaque owner handle")
    pair: str
    total_value_usd: float = Field(0.0, ge=0)
    fees_earned: float = Field(0.0, ge=0)
    bins: List[BinPosition] = Field(default_factory=list)
