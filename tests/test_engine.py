from __future__ import annotations

import asyncio

from core.config_loader import SimulationSettings
from core.engine import SimulationEngine
from core.errors import ErrorKind
from core.scheduler import Scheduler


def fast_settings(**overrides) -> SimulationSettings:
    params = dict(seed=42, tick_interval_seconds=0.01, backtest_delay_seconds=0.02)
    params.update(overrides)
    return SimulationSettings(**params)


def test_engine_builds_catalog_and_ledger():
    engine = SimulationEngine(fast_settings())
    assert [a.symbol for a in engine.ledger.assets()] == ["RELIANCE", "TCS", "HDFCBANK", "INFY"]
    assert engine.ledger.cash == 100_000.0
    assert not engine.running


def test_tracker_catalog():
    engine = SimulationEngine(fast_settings(catalog="tracker", tick_mode="relative"))
    assert len(engine.ledger.assets()) == 5
    assert engine.add_position("1", 3).ok
    assert engine.ledger.cash == 100_000.0


def test_tracker_remove_then_add_again():
    engine = SimulationEngine(fast_settings(catalog="tracker", tick_mode="relative"))
    assert engine.add_position("1", 5).ok
    assert engine.remove_position("1").ok
    assert [a.id for a in engine.ledger.assets()] == ["1", "2", "3", "4", "5"]

    res = engine.add_position("1", 3)
    assert res.ok
    assert res.value.quantity_held == 3
    assert engine.analyze("1").ok


def test_same_seed_same_catalog():
    a = SimulationEngine(fast_settings())
    b = SimulationEngine(fast_settings())
    assert [x.prices for x in a.ledger.assets()] == [x.prices for x in b.ledger.assets()]


def test_tick_moves_prices_and_keeps_positions():
    engine = SimulationEngine(fast_settings())
    engine.execute_trade("1", "buy", 2)
    before = engine.ledger.get("1")
    engine.tick()
    after = engine.ledger.get("1")
    assert engine.ticks == 1
    assert after.prices[-1] == after.current_price
    assert len(after.price_history) == len(before.price_history)
    assert after.quantity_held == 2
    assert after.avg_buy_price == before.avg_buy_price


def test_backtest_requires_positions():
    engine = SimulationEngine(fast_settings())
    res = engine.run_backtest()
    assert res.error is ErrorKind.EMPTY_PORTFOLIO


def test_backtest_locks_portfolio_until_done():
    engine = SimulationEngine(fast_settings())

    async def scenario():
        assert engine.execute_trade("1", "buy", 5).ok
        job = engine.run_backtest().unwrap()
        assert engine.backtest_running

        blocked = [
            engine.execute_trade("1", "buy", 1),
            engine.add_position("2"),
            engine.update_shares("1", 3),
            engine.remove_position("1"),
            engine.run_backtest(),
        ]
        results = await job
        await asyncio.sleep(0)
        after = engine.execute_trade("1", "sell", 1)
        return blocked, results, after

    blocked, results, after = asyncio.run(scenario())
    assert all(r.error is ErrorKind.BACKTEST_RUNNING for r in blocked)
    assert len(results) == 3
    assert engine.last_results == results
    assert after.ok
    assert engine.ledger.get("1").quantity_held == 4


def test_start_and_stop_ticks():
    scheduler = Scheduler()
    engine = SimulationEngine(fast_settings(), scheduler=scheduler)

    async def scenario():
        handle = engine.start()
        assert engine.start() is handle
        await asyncio.sleep(0.05)
        engine.stop()
        engine.stop()
        await handle.wait_closed()
        return handle

    handle = asyncio.run(scenario())
    assert engine.ticks >= 1
    assert not handle.active
    assert not engine.running
    assert scheduler.active_handles() == []


def test_analyze_and_toggle_metrics():
    engine = SimulationEngine(fast_settings())
    dash = engine.analyze("1").unwrap()
    assert {"summary", "ma5", "ma10", "volatility", "rsi", "patterns"} <= set(dash)

    engine.toggle_metric("rsi")
    assert "rsi" not in engine.analyze("1").unwrap()
    assert engine.analyze("nope").error is ErrorKind.UNKNOWN_ASSET


def test_snapshot():
    engine = SimulationEngine(fast_settings())
    engine.execute_trade("2", "buy", 1)
    snap = engine.snapshot()
    assert set(snap["positions"]) == {"2"}
    assert snap["transactions"] == 1
    assert snap["backtest_running"] is False
