# models/simulation_models.py
"""
Pydantic models for simulation and backtest requests
"""
from datetime import datetime
from decimal import Decimal
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


StrategyType = Literal["passive", "active", "momentum", "mean_reversion"]
RiskToleranceType = Literal["low", "medium", "high"]
BenchmarkType = Literal["buy_hold"]


class SimulationParams(BaseModel):
    """Parameters of one strategy simulation run (immutable)"""
    model_config = ConfigDict(frozen=True)

    initial_capital: Decimal = Field(..., gt=0, description="Starting portfolio value")
    strategy: StrategyType = Field(..., description="Rebalancing strategy")
    duration: int = Field(..., ge=1, description="Simulation length in days")
    rebalance_frequency: float = Field(24, gt=0, description="Rebalance check frequency in hours")
    risk_tolerance: RiskToleranceType = Field("medium", description="Risk tolerance")
    pair: str = Field("SOL/USDC", min_length=1, description="Trading pair identifier")


class BacktestParams(BaseModel):
    """Several simulations compared over the same period"""
    model_config = ConfigDict(frozen=True)

    start_date: datetime = Field(..., description="Backtest start date")
    end_date: datetime = Field(..., description="Backtest end date")
    strategies: List[SimulationParams] = Field(..., min_length=1, description="Strategy configurations to compare")
    benchmark: Optional[BenchmarkType] = Field(None, description="Optional benchmark")
    prices: Optional[List[float]] = Field(None, description="Shared price path for every strategy")

    @field_validator("end_date")
    @classmethod
    def validate_end_date(cls, v, info):
        start_date = info.data.get("start_date")
        if start_date and v <= start_date:
            raise ValueError("End date must be after start date")
        return v

    @field_validator("prices")
    @classmethod
    def validate_prices(cls, v):
        if v is not None:
            if len(v) < 2:
                raise ValueError("A price path needs at least two prices")
            if any(p <= 0 for p in v):
                raise ValueError("Prices must be positive")
        return v
