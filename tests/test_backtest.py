from __future__ import annotations

import asyncio
from datetime import datetime, timezone

import pytest

from core.sim_engine import BacktestJob, run_backtest, submit_backtest
from core.types import Asset
from data.generator import make_rng
from strategies import get_strategy

NOW = datetime(2024, 1, 31, tzinfo=timezone.utc)


def held_asset(change_abs: float = 5.0) -> Asset:
    return Asset(
        id="1",
        name="Test",
        symbol="TST",
        current_price=100.0,
        change_abs=change_abs,
        quantity_held=10,
        avg_buy_price=90.0,
    )


def test_empty_portfolio_returns_empty_list():
    assert run_backtest([], rng=make_rng(1)) == []
    not_held = held_asset().with_changes(quantity_held=0)
    assert run_backtest([not_held], rng=make_rng(1)) == []


def test_one_result_per_strategy_in_order(rng):
    results = run_backtest([held_asset()], days=30, rng=rng, now=NOW)
    assert [r.strategy_name for r in results] == [
        "Moving Average Crossover",
        "Momentum Strategy",
        "Mean Reversion",
    ]
    for r in results:
        assert r.trade_count == 30
        assert 0.0 <= r.win_rate_pct <= 100.0
        assert len(r.value_history) == 30


def test_deterministic_rules_with_positive_change(rng):
    asset = held_asset(change_abs=5.0)
    momentum, reversion = run_backtest(
        [asset], ["momentum", "mean_reversion"], days=30, rng=rng, now=NOW
    )
    # +1.5% * 100 * 10 shares per day
    assert momentum.profit == pytest.approx(450.0)
    assert momentum.win_rate_pct == 100.0
    # -0.5% * 100 * 10 shares per day
    assert reversion.profit == pytest.approx(-150.0)
    assert reversion.win_rate_pct == 0.0

    curve = [p.portfolio_value for p in momentum.value_history]
    assert curve[0] == pytest.approx(1_000.0 + 15.0)
    assert curve[-1] == pytest.approx(1_000.0 + 450.0)
    assert momentum.value_history[-1].timestamp < NOW


def test_same_seed_same_results():
    a = run_backtest([held_asset()], ["moving_avg"], rng=make_rng(9), now=NOW)
    b = run_backtest([held_asset()], ["moving_avg"], rng=make_rng(9), now=NOW)
    assert a == b


def test_unknown_strategy_raises(rng):
    with pytest.raises(KeyError):
        run_backtest([held_asset()], ["does_not_exist"], rng=rng)


def test_accepts_strategy_specs(rng):
    spec = get_strategy("momentum")
    (result,) = run_backtest([held_asset()], [spec], days=5, rng=rng)
    assert result.strategy_name == "Momentum Strategy"
    assert result.trade_count == 5


def test_submit_backtest_completes_and_notifies():
    seen: list[BacktestJob] = []

    async def scenario():
        job = submit_backtest(
            [held_asset()], days=10, rng=make_rng(3), delay=0.01, on_complete=seen.append
        )
        assert job.running
        results = await job
        await asyncio.sleep(0)
        return job, results

    job, results = asyncio.run(scenario())
    assert job.done() and not job.running
    assert len(results) == 3
    assert seen == [job]
    assert job.result() == results


def test_on_complete_after_done_fires_immediately():
    async def scenario():
        job = submit_backtest([held_asset()], days=2, rng=make_rng(3), delay=0)
        await job
        calls = []
        job.on_complete(calls.append)
        job.on_complete(calls.append)
        return calls

    calls = asyncio.run(scenario())
    assert len(calls) == 1


def test_cancel_backtest():
    async def scenario():
        job = submit_backtest([held_asset()], rng=make_rng(3), delay=10)
        await asyncio.sleep(0)
        assert job.cancel()
        with pytest.raises(asyncio.CancelledError):
            await job
        return job

    job = asyncio.run(scenario())
    assert job.cancelled()


def test_submit_snapshots_positions():
    async def scenario():
        assets = [held_asset()]
        job = submit_backtest(assets, ["momentum"], days=1, rng=make_rng(3), delay=0.01)
        assets.clear()
        return await job

    (result,) = asyncio.run(scenario())
    assert result.trade_count == 1


def test_two_assets_count_trades_per_asset_and_weight_by_shares(rng):
    big = held_asset(change_abs=5.0)
    small = Asset(
        id="2",
        name="Small",
        symbol="SML",
        current_price=50.0,
        change_abs=2.0,
        quantity_held=4,
        avg_buy_price=45.0,
    )
    momentum, reversion = run_backtest(
        [big, small], ["momentum", "mean_reversion"], days=30, rng=rng, now=NOW
    )

    assert momentum.trade_count == 2 * 30
    assert reversion.trade_count == 2 * 30
    # per day: 1.5 * 10 + 0.75 * 4 = 18
    assert momentum.profit == pytest.approx(540.0)
    assert momentum.win_rate_pct == 100.0
    # per day: -0.5 * 10 - 0.25 * 4 = -6
    assert reversion.profit == pytest.approx(-180.0)
    assert reversion.win_rate_pct == 0.0

    curve = [p.portfolio_value for p in momentum.value_history]
    assert len(curve) == 30
    assert curve[0] == pytest.approx(1_200.0 + 18.0)
    assert curve[-1] == pytest.approx(1_200.0 + 540.0)


def test_win_rate_mixes_assets(rng):
    up = held_asset(change_abs=5.0)
    down = held_asset(change_abs=-5.0).with_changes(id="2", quantity_held=2)
    (result,) = run_backtest([up, down], ["momentum"], days=10, rng=rng, now=NOW)
    assert result.trade_count == 20
    assert result.win_rate_pct == 50.0
    # per day: 1.5 * 10 - 1.0 * 2 = 13
    assert result.profit == pytest.approx(130.0)
