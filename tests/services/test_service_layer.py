# tests/services/test_service_layer.py
"""
Tests for the service layer: market data, simulations and orders
"""
from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest
from pydantic import ValidationError

from dlmm_lab.core.exceptions import DLMMError, PairNotFoundError
from dlmm_lab.core.logger import run_id_ctx_var
from dlmm_lab.core.order_engine import LimitOrderStatus, OrderMatchingEngine, StopLossStatus
from dlmm_lab.core.simulation_engine import StrategySimulator, constant_price_series
from dlmm_lab.models.market_models import PositionData
from dlmm_lab.services import simulation_service
from dlmm_lab.services.market_data_service import InMemoryMarketDataService, load_price_history
from dlmm_lab.services.order_service import OrderService

START = datetime(2024, 1, 1, tzinfo=timezone.utc)


class TestInMemoryMarketDataService:
    """Test the in-process market data provider"""

    def test_register_pair_defaults(self):
        service = InMemoryMarketDataService()
        info = service.register_pair("SOL/USDC")

        assert info.active_price == 100.0
        assert info.bin_step == 0.01
        assert info.max_bin_offset == 500
        assert service.get_market_data("SOL/USDC").price == 100.0

    def test_unknown_pair(self):
        service = InMemoryMarketDataService()

        assert service.get_pair_info("SOL/USDC") is None
        with pytest.raises(PairNotFoundError):
            service.get_market_data("SOL/USDC")
        with pytest.raises(PairNotFoundError):
            service.set_price("SOL/USDC", 1.0)

    def test_set_price_keeps_other_fields(self, market_data):
        market_data.set_price("SOL/USDC", 105.0, volume_24h=1000.0)
        market_data.set_price("SOL/USDC", 106.0)

        quote = market_data.get_market_data("SOL/USDC")
        assert quote.price == 106.0
        assert quote.volume_24h == 1000.0

    def test_positions_by_owner(self, market_data):
        market_data.add_position(PositionData(position="p1", owner="alice", pair="SOL/USDC"))
        market_data.add_position(PositionData(position="p2", owner="bob", pair="SOL/USDC"))

        assert [p.position for p in market_data.get_user_positions("alice")] == ["p1"]
        assert market_data.remove_position("p1") is True
        assert market_data.get_user_positions("alice") == []

    def test_load_price_history(self, tmp_path):
        """Test CSV closes are read in date order"""
        path = tmp_path / "sol.csv"
        path.write_text(
            "Date,Open,High,Low,Close,Volume\n"
            "2024-01-03,1,1,1,103.5,10\n"
            "2024-01-01,1,1,1,101.0,10\n"
            "2024-01-02,1,1,1,102.25,10\n"
        )

        assert load_price_history(path) == [101.0, 102.25, 103.5]


class TestSimulationService:
    """Test simulation service entry points"""

    def test_run_simulation_from_dict(self):
        result = simulation_service.run_simulation(
            {"initial_capital": "10000", "strategy": "passive", "duration": 30},
            prices=constant_price_series(30),
            start_date=START
        )

        assert len(result.rebalance_events) == 4
        assert result.params.initial_capital == Decimal("10000")

    def test_invalid_params(self):
        with pytest.raises(ValidationError):
            simulation_service.run_simulation({"initial_capital": "0", "strategy": "passive", "duration": 30})
        with pytest.raises(ValidationError):
            simulation_service.run_simulation({"initial_capital": "100", "strategy": "grid", "duration": 30})

    def test_engine_errors_pass_through(self):
        with pytest.raises(DLMMError) as exc_info:
            simulation_service.run_simulation({"initial_capital": "100", "strategy": "passive", "duration": 1})
        assert exc_info.value.code == "INSUFFICIENT_DATA"

    def test_foreign_errors_wrapped(self):
        """Test unexpected failures surface as UNKNOWN_ERROR"""
        class BrokenSimulator(StrategySimulator):
            def run_simulation(self, params, prices=None, start_date=None):
                raise RuntimeError("boom")

        with pytest.raises(DLMMError) as exc_info:
            simulation_service.run_simulation(
                {"initial_capital": "100", "strategy": "passive", "duration": 5},
                simulator=BrokenSimulator()
            )

        assert exc_info.value.code == "UNKNOWN_ERROR"
        assert isinstance(exc_info.value.original_error, RuntimeError)

    def test_run_id_set_during_run(self):
        """Test a run id is visible inside the run and cleared afterwards"""
        seen = []

        class RecordingSimulator(StrategySimulator):
            def run_simulation(self, params, prices=None, start_date=None):
                seen.append(run_id_ctx_var.get())
                return super().run_simulation(params, prices, start_date)

        simulation_service.run_simulation(
            {"initial_capital": "100", "strategy": "passive", "duration": 10},
            simulator=RecordingSimulator()
        )

        assert seen[0].startswith("sim_")
        assert run_id_ctx_var.get() is None

    def test_run_backtest_from_dict(self):
        result = simulation_service.run_backtest({
            "start_date": START,
            "end_date": START + timedelta(days=20),
            "strategies": [
                {"initial_capital": "1000", "strategy": "passive", "duration": 20},
                {"initial_capital": "1000", "strategy": "momentum", "duration": 20},
            ],
            "benchmark": "buy_hold",
            "prices": constant_price_series(20),
        })

        assert list(result.strategies) == ["strategy_0_passive", "strategy_1_momentum"]
        # Momentum holds on a flat path, so it beats passive's fees
        assert result.comparison.best_strategy == "strategy_1_momentum"
        assert result.comparison.worst_strategy == "strategy_0_passive"
        assert result.benchmark.total_return == pytest.approx(0.0)

    def test_summary(self):
        result = simulation_service.run_simulation(
            {"initial_capital": "100", "strategy": "passive", "duration": 8},
            prices=constant_price_series(8)
        )
        assert simulation_service.get_simulation_summary(result)["rebalance_count"] == 1


class TestOrderService:
    """Test order service validation and evaluation passes"""

    @pytest.fixture
    def service(self, market_data, clock):
        return OrderService(market_data, engine=OrderMatchingEngine(market_data, clock=clock))

    def test_create_from_dict(self, service):
        order = service.create_limit_order({"pair": "SOL/USDC", "side": "buy", "amount": 1.5, "price": 99.0})

        assert order.status == LimitOrderStatus.PENDING
        assert order.bin_id == -1
        assert len(service.get_order_book("SOL/USDC")["bids"]) == 1

    def test_invalid_request(self, service):
        with pytest.raises(ValidationError):
            service.create_limit_order({"pair": "SOL/USDC", "side": "hold", "amount": 1.0, "price": 99.0})
        with pytest.raises(ValidationError):
            service.create_limit_order({"pair": "SOL/USDC", "side": "buy", "amount": 0, "price": 99.0})

    def test_engine_error_kinds_preserved(self, service):
        with pytest.raises(PairNotFoundError):
            service.create_limit_order({"pair": "BONK/USDC", "side": "buy", "amount": 1.0, "price": 1.0})

    def test_evaluation_pass(self, service, market_data, clock):
        """Test one pass fills, expires and triggers against current data"""
        market_data.add_position(PositionData(position="pos-1", owner="alice", pair="SOL/USDC"))

        fill = service.create_limit_order({"pair": "SOL/USDC", "side": "buy", "amount": 1.0, "price": 99.0})
        expire = service.create_limit_order({
            "pair": "SOL/USDC", "side": "sell", "amount": 1.0, "price": 120.0,
            "expires_at": clock.now + timedelta(minutes=1)
        })
        stop = service.create_stop_loss_order({
            "position": "pos-1", "trigger_price": 98.0, "amount": 1.0, "owner": "alice"
        })

        clock.advance(minutes=5)
        market_data.set_price("SOL/USDC", 97.0)
        result = service.run_evaluation_pass()

        assert result["filled"] == [fill]
        assert result["expired"] == [expire]
        assert result["triggered"] == [stop]
        assert stop.status == StopLossStatus.TRIGGERED

    def test_evaluation_pass_for_owner(self, service, market_data):
        market_data.add_position(PositionData(position="pos-a", owner="alice", pair="SOL/USDC"))
        market_data.add_position(PositionData(position="pos-b", owner="bob", pair="SOL/USDC"))
        alice_stop = service.create_stop_loss_order({"position": "pos-a", "trigger_price": 99.0, "amount": 1.0, "owner": "alice"})
        bob_stop = service.create_stop_loss_order({"position": "pos-b", "trigger_price": 99.0, "amount": 1.0, "owner": "bob"})

        market_data.set_price("SOL/USDC", 95.0)
        result = service.run_evaluation_pass(owner="alice")

        assert result["triggered"] == [alice_stop]
        assert bob_stop.status == StopLossStatus.ACTIVE

    def test_cancel_and_statistics(self, service):
        order = service.create_limit_order({"pair": "SOL/USDC", "side": "sell", "amount": 2.0, "price": 101.0, "owner": "alice"})
        service.cancel_limit_order(order.order_id)

        stats = service.get_order_statistics("alice")
        assert stats["cancelled_orders"] == 1
        assert service.get_user_orders("alice")["limit_orders"] == [order]
