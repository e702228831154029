# models/order_models.py - Order request models
from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field


class LimitOrderRequest(BaseModel):
    pair: str = Field(..., min_length=1, description="Trading pair identifier")
    side: Literal["buy", "sell"] = Field(..., description="Order side")
    amount: float = Field(..., gt=0, description="Order amount")
    price: float = Field(..., gt=0, description="Limit price")
    owner: Optional[str] = Field(None, description="Opaque owner handle")
    expires_at: Optional[datetime] = Field(None, description="Expiry time")


class StopLossOrderRequest(BaseModel):
    position: str = Field(..., min_length=1, description="Opaque position handle")
    trigger_price: float = Field(..., gt=0, description="Trigger price")
    amount: float = Field(..., gt=0, description="Amount to close")
    owner: Optional[str] = Field(None, description="Opaque owner handle")
