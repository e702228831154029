# core/portfolio_engine/__init__.py
from .engine import PortfolioEngine, PortfolioMetrics, RebalanceRecommendation
from .calculations import PortfolioCalculations

__all__ = ["PortfolioEngine", "PortfolioMetrics", "RebalanceRecommendation", "PortfolioCalculations"]
