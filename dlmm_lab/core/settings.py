# core/settings.py
from pathlib import Path

from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    # Logging
    LOG_DIR: str = "logs"
    LOG_LEVEL: str = "INFO"

    # Simulation
    REBALANCE_FEE_RATE: float = 0.003
    SYNTHETIC_START_PRICE: float = 100.0
    SYNTHETIC_DAILY_VOLATILITY: float = 0.02
    SYNTHETIC_DAILY_DRIFT: float = 0.0001

    # Benchmark (buy & hold)
    BENCHMARK_INITIAL_CAPITAL: float = 10000.0
    BENCHMARK_TOTAL_RETURN: float = 0.10

    # Bin mapping
    BIN_BASE_PRICE: float = 100.0
    BIN_STEP: float = 0.01
    MAX_BIN_OFFSET: int = 500

    # Backtests
    BACKTEST_MAX_WORKERS: int = 1

    class Config:
        env_file = Path(__file__).resolve().parent.parent.parent / ".env"
        case_sensitive = True
        extra = "allow"

settings = Settings()
