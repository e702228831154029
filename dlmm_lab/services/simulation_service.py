# services/simulation_service.py
"""
Simulation service layer - validates requests, tags each run with a run id for
log correlation and delegates to the simulation engine
"""
import uuid
from datetime import datetime
from typing import Any, Dict, Optional, Sequence, Union

from dlmm_lab.core.exceptions import DLMMError, handle_dlmm_error
from dlmm_lab.core.logger import get_logger, run_id_ctx_var
from dlmm_lab.core.simulation_engine import (
    BacktestComparator,
    BacktestResult,
    SimulationResult,
    StrategySimulator,
)
from dlmm_lab.models.simulation_models import BacktestParams, SimulationParams

logger = get_logger(__name__)


def _new_run_id(kind: str) -> str:
    return f"{kind}_{uuid.uuid4().hex[:12]}"


def run_simulation(
    params: Union[SimulationParams, Dict[str, Any]],
    prices: Optional[Sequence[float]] = None,
    start_date: Optional[datetime] = None,
    simulator: Optional[StrategySimulator] = None
) -> SimulationResult:
    """
    Run one strategy simulation.

    Invalid parameters raise pydantic's ValidationError; engine errors surface
    as DLMMError subclasses; anything else is wrapped as UNKNOWN_ERROR.
    """
    if not isinstance(params, SimulationParams):
        params = SimulationParams.model_validate(params)

    simulator = simulator or StrategySimulator()
    token = run_id_ctx_var.set(_new_run_id("sim"))
    try:
        return simulator.run_simulation(params, prices=prices, start_date=start_date)
    except DLMMError:
        raise
    except Exception as e:
        logger.error(f"Simulation failed: {e}")
        raise handle_dlmm_error(e) from e
    finally:
        run_id_ctx_var.reset(token)


def run_backtest(
    params: Union[BacktestParams, Dict[str, Any]],
    comparator: Optional[BacktestComparator] = None
) -> BacktestResult:
    """Run every configured strategy over the same period and rank them."""
    if not isinstance(params, BacktestParams):
        params = BacktestParams.model_validate(params)

    comparator = comparator or BacktestComparator()
    token = run_id_ctx_var.set(_new_run_id("backtest"))
    try:
        return comparator.run_backtest(params)
    except DLMMError:
        raise
    except Exception as e:
        logger.error(f"Backtest failed: {e}")
        raise handle_dlmm_error(e) from e
    finally:
        run_id_ctx_var.reset(token)


def get_simulation_summary(result: SimulationResult) -> Dict[str, Any]:
    return StrategySimulator().get_summary(result)
