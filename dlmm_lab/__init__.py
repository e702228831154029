# __init__.py
"""
DLMM Strategy Lab - liquidity-bin distributions, limit/stop-loss order matching
and strategy simulation for a concentrated-liquidity market maker.
"""
__version__ = "0.1.0"
